"""Calculation Engine - Day classification, targets and deficits.

All functions are pure: same input always produces same output, no side effects.
Functions that depend on "now" take an optional `today` which defaults to
date.today(), so callers and tests can fix the clock.
"""

from datetime import date, timedelta
from typing import Mapping, Optional

from .defaults import KCAL_PER_KG_FAT, TDEE_MULTIPLIERS, WEEKLY_SCHEDULE
from .macros import get_exercise_calories, get_total_meal_calories, has_meals
from .models import DayLog, DayType, TrainingType, UserProfile


def get_scheduled_training(log_date: date) -> tuple[TrainingType, ...]:
    """Training the weekly schedule expects on a date."""
    # date.weekday() is Monday=0; the schedule table is Sunday=0
    weekday = (log_date.weekday() + 1) % 7
    return WEEKLY_SCHEDULE.get(weekday, (TrainingType.REST,))


def get_day_type(log: Optional[DayLog], log_date: date) -> DayType:
    """Classify a day as hybrid, running, pilates or rest.

    A manual override on the log always wins. Otherwise the scheduled training
    for that weekday is combined with whatever was actually logged, and the
    first match in priority order Hybrid > Run > Pilates decides.

    Args:
        log: The day's log, or None if nothing was logged
        log_date: The calendar date being classified

    Returns:
        The resolved DayType
    """
    if log is not None and log.metrics.day_type_override is not None:
        return log.metrics.day_type_override

    scheduled = get_scheduled_training(log_date)
    logged = [t.type for t in log.training] if log is not None else []
    all_types = set(scheduled) | set(logged)

    if TrainingType.HYBRID in all_types:
        return DayType.HYBRID
    if TrainingType.RUN_Z2 in all_types or TrainingType.RUN in all_types:
        return DayType.RUNNING
    if TrainingType.PILATES in all_types:
        return DayType.PILATES
    return DayType.REST


def get_calorie_target(profile: UserProfile, day_type: DayType) -> int:
    """Look up the profile's kcal target for a day type."""
    return getattr(profile.calorie_targets, day_type.value)


def get_calories_remaining(profile: UserProfile, log: Optional[DayLog], log_date: date) -> int:
    """Budget left against the fixed target. Negative if over budget.

    Exercise burn is added back only when the profile counts exercise calories.
    """
    target = get_calorie_target(profile, get_day_type(log, log_date))
    eaten = get_total_meal_calories(log)
    exercise = get_exercise_calories(log) if profile.count_exercise_calories else 0
    return target - eaten + exercise


def get_day_deficit(
    profile: UserProfile,
    log: Optional[DayLog],
    log_date: date,
    multipliers: Mapping[DayType, float] = TDEE_MULTIPLIERS,
) -> float:
    """Estimate the day's true energy deficit against expenditure.

    TDEE is maintenance scaled by the day type's multiplier. When exercise is
    not added back to the budget it is subtracted from intake here instead.

    Args:
        profile: User profile with maintenance TDEE and exercise policy
        log: The day's log, or None
        log_date: The calendar date
        multipliers: TDEE multiplier per day type

    Returns:
        kcal deficit; positive means fat loss, negative a surplus
    """
    day_type = get_day_type(log, log_date)
    tdee = profile.maintenance_tdee * multipliers[day_type]
    eaten = get_total_meal_calories(log)
    exercise = get_exercise_calories(log)
    net_calories = eaten - (0 if profile.count_exercise_calories else exercise)
    return tdee - net_calories


def get_accumulated_deficit(
    profile: UserProfile,
    logs: Mapping[date, DayLog],
    from_date: date,
    to_date: date,
    today: date | None = None,
) -> float:
    """Sum day deficits over an inclusive date range.

    Days after `today` are never counted. Days without meals are skipped
    entirely rather than contributing a computed value. A reversed range
    yields 0.
    """
    if today is None:
        today = date.today()
    if from_date > to_date:
        return 0

    total = 0.0
    current = from_date
    while current <= to_date:
        if current > today:
            break
        log = logs.get(current)
        if has_meals(log):
            total += get_day_deficit(profile, log, current)
        current += timedelta(days=1)
    return total


def get_projected_fat_loss(accumulated_kcal: float, kcal_per_kg: float = KCAL_PER_KG_FAT) -> float:
    """Convert a kcal deficit to kg of fat."""
    return accumulated_kcal / kcal_per_kg


def get_days_remaining(goal_date: date, today: date | None = None) -> int:
    """Whole days until the goal date. Negative once the goal date has passed."""
    if today is None:
        today = date.today()
    return (goal_date - today).days


def get_days_elapsed(start_date: date, today: date | None = None) -> int:
    """Whole days since the start date, never negative."""
    if today is None:
        today = date.today()
    return max(0, (today - start_date).days)
