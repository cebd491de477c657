"""Report Generation - Rolling averages, streaks, projections and weekly data.

All functions are pure: same input always produces same output, no side effects.
"""

from datetime import date, timedelta
from typing import Mapping

from .calculations import (
    get_accumulated_deficit,
    get_calorie_target,
    get_calories_remaining,
    get_day_deficit,
    get_day_type,
    get_days_remaining,
    get_projected_fat_loss,
)
from .defaults import (
    ADHERENCE_TOLERANCE_KCAL,
    KCAL_PER_KG_FAT,
    PROJECTION_BAND,
    STREAK_LOOKBACK_DAYS,
)
from .macros import get_total_macros, get_total_meal_calories, has_meals
from .models import (
    DayLog,
    ProjectedOutcome,
    RollingAverage,
    RUN_TYPES,
    SeriesPoint,
    UserProfile,
    WeekDay,
    WeeklySummary,
)


def _trailing_dates(today: date, days: int) -> list[date]:
    """`today` and the `days - 1` days before it, newest first."""
    return [today - timedelta(days=i) for i in range(days)]


def get_rolling_average(
    profile: UserProfile,
    logs: Mapping[date, DayLog],
    window_days: int = 7,
    today: date | None = None,
) -> RollingAverage:
    """Average intake, protein and deficit over the trailing window.

    Only days with at least one meal are averaged, so the denominator is the
    number of logged days, not the window size.

    Args:
        profile: User profile for deficit calculation
        logs: All day logs keyed by date
        window_days: Window length in calendar days, including today
        today: Reference date (defaults to today)

    Returns:
        RollingAverage, all zeros if no day in the window was logged
    """
    if today is None:
        today = date.today()

    logged = [d for d in _trailing_dates(today, window_days) if has_meals(logs.get(d))]
    if not logged:
        return RollingAverage()

    count = len(logged)
    return RollingAverage(
        avg_calories=sum(get_total_meal_calories(logs[d]) for d in logged) / count,
        avg_protein=sum(get_total_macros(logs[d]).protein for d in logged) / count,
        avg_deficit=sum(get_day_deficit(profile, logs[d], d) for d in logged) / count,
    )


def get_training_streak(logs: Mapping[date, DayLog], today: date | None = None) -> int:
    """Consecutive days with training, counting back from today.

    Today may still be empty without breaking the streak; any earlier day
    without training ends it.
    """
    if today is None:
        today = date.today()

    streak = 0
    for i, day in enumerate(_trailing_dates(today, STREAK_LOOKBACK_DAYS)):
        log = logs.get(day)
        if log is not None and log.training:
            streak += 1
        elif i > 0:
            break
    return streak


def get_adherence_streak(
    profile: UserProfile,
    logs: Mapping[date, DayLog],
    today: date | None = None,
) -> int:
    """Consecutive on-budget days, counting back from yesterday.

    Today is excluded since it is still in progress. A day qualifies when it
    has meals and is no more than the tolerance over its target.
    """
    if today is None:
        today = date.today()

    streak = 0
    for i in range(1, STREAK_LOOKBACK_DAYS + 1):
        day = today - timedelta(days=i)
        log = logs.get(day)
        if not has_meals(log):
            break
        if get_calories_remaining(profile, log, day) < -ADHERENCE_TOLERANCE_KCAL:
            break
        streak += 1
    return streak


def get_projected_outcome(
    profile: UserProfile,
    logs: Mapping[date, DayLog],
    today: date | None = None,
) -> ProjectedOutcome:
    """Project total fat loss at the goal date.

    Fat already lost (from the accumulated deficit since the start date) is
    added unscaled to each bound. The forward part, the 7-day average deficit
    times the days remaining, carries a +/-15% band. With a surplus average
    the band inverts, so low > high is possible.
    """
    if today is None:
        today = date.today()

    avg_deficit = get_rolling_average(profile, logs, 7, today).avg_deficit
    days_left = get_days_remaining(profile.goal_date, today)
    already_lost = get_projected_fat_loss(
        get_accumulated_deficit(profile, logs, profile.start_date, today, today)
    )
    projected_extra = avg_deficit * days_left / KCAL_PER_KG_FAT

    return ProjectedOutcome(
        low=already_lost + projected_extra * (1 - PROJECTION_BAND),
        mid=already_lost + projected_extra,
        high=already_lost + projected_extra * (1 + PROJECTION_BAND),
    )


def get_week_start(today: date, weeks_back: int = 0) -> date:
    """Monday of the week `weeks_back` weeks before the one containing today."""
    return today - timedelta(days=today.weekday(), weeks=weeks_back)


def get_weekly_data(
    profile: UserProfile,
    logs: Mapping[date, DayLog],
    weeks_back: int = 0,
    today: date | None = None,
) -> list[WeekDay]:
    """One record per day of a Monday-start week.

    Args:
        profile: User profile for targets and deficits
        logs: All day logs keyed by date
        weeks_back: 0 for the current week, 1 for last week, ...
        today: Reference date (defaults to today)

    Returns:
        Seven WeekDay records, Monday first
    """
    if today is None:
        today = date.today()

    week_start = get_week_start(today, weeks_back)
    days = []
    for offset in range(7):
        day = week_start + timedelta(days=offset)
        log = logs.get(day)
        logged = has_meals(log)
        days.append(
            WeekDay(
                log_date=day,
                label=day.strftime("%a"),
                calories=get_total_meal_calories(log),
                target=get_calorie_target(profile, get_day_type(log, day)),
                protein=get_total_macros(log).protein,
                deficit=get_day_deficit(profile, log, day) if logged else None,
                has_log=logged,
                training=list(log.training) if log is not None else [],
            )
        )
    return days


def get_weekly_summary(week: list[WeekDay]) -> WeeklySummary:
    """Count logged days, training and run minutes over a week of records."""
    return WeeklySummary(
        days_logged=sum(1 for d in week if d.has_log),
        training_days=sum(1 for d in week if d.training),
        training_sessions=sum(len(d.training) for d in week),
        run_minutes=sum(
            t.duration_min for d in week for t in d.training if t.type in RUN_TYPES
        ),
    )


def get_cumulative_deficit_series(
    profile: UserProfile,
    logs: Mapping[date, DayLog],
    days: int = 30,
    today: date | None = None,
) -> list[SeriesPoint]:
    """Running total of day deficits over the trailing window, oldest first."""
    if today is None:
        today = date.today()

    points = []
    cumulative = 0.0
    for day in reversed(_trailing_dates(today, days)):
        log = logs.get(day)
        if has_meals(log):
            cumulative += get_day_deficit(profile, log, day)
        points.append(SeriesPoint(log_date=day, value=round(cumulative)))
    return points


def get_weight_trend(
    logs: Mapping[date, DayLog],
    days: int = 30,
    today: date | None = None,
) -> list[SeriesPoint]:
    """Logged body weights in the trailing window, oldest first."""
    if today is None:
        today = date.today()

    points = []
    for day in reversed(_trailing_dates(today, days)):
        log = logs.get(day)
        if log is not None and log.metrics.weight_kg:
            points.append(SeriesPoint(log_date=day, value=log.metrics.weight_kg))
    return points


def should_suggest_adjustment(
    profile: UserProfile,
    logs: Mapping[date, DayLog],
    today: date | None = None,
) -> bool:
    """True when two weeks of history show almost no deficit.

    Requires at least 14 stored logs and a 14-day average deficit under 100 kcal.
    """
    avg_deficit = get_rolling_average(profile, logs, 14, today).avg_deficit
    return avg_deficit < 100 and len(logs) >= 14
