"""MCP Server - Tool definitions for the cut tracker.

Defines the tools an assistant can invoke to log meals, training and metrics
and to read the dashboard and insights computed by the core engine.
"""

import logging
from datetime import date
from typing import Any

from mcp.server.fastmcp import FastMCP
from mcp.server.transport_security import TransportSecuritySettings
from pydantic import ValidationError

from ..core.calculations import (
    get_accumulated_deficit,
    get_calorie_target,
    get_calories_remaining,
    get_day_deficit,
    get_day_type,
    get_days_elapsed,
    get_days_remaining,
    get_projected_fat_loss,
    get_scheduled_training,
)
from ..core.macros import (
    get_calories_from_macros,
    get_exercise_calories,
    get_macro_targets,
    get_total_macros,
    get_total_meal_calories,
    has_meals,
)
from ..core.models import (
    DayLog,
    DayType,
    FoodItem,
    Macros,
    MealEntry,
    MealTemplate,
    TemplateItem,
    TrainingEntry,
    TrainingType,
    UserProfile,
)
from ..core.reports import (
    get_adherence_streak,
    get_cumulative_deficit_series,
    get_projected_outcome,
    get_rolling_average,
    get_training_streak,
    get_weekly_data,
    get_weekly_summary,
    get_weight_trend,
    should_suggest_adjustment,
)
from .json_store import JsonFileRepository, StoreConfig
from .store import AppStore, EntryNotFoundError
from .transfer import export_csv, export_json


logger = logging.getLogger(__name__)

transport_security = TransportSecuritySettings(
    enable_dns_rebinding_protection=True,
    allowed_hosts=["localhost:*", "127.0.0.1:*"],
)

mcp = FastMCP(
    "cuttracker",
    instructions="""Cut Tracker - Personal fat-loss tracking assistant.

Use these tools to log meals, training sessions and daily metrics, and to
report calorie targets, deficits, streaks and projected fat loss.

After logging a meal or training, show the updated day summary.
Dates are YYYY-MM-DD; omit the date to use today.""",
    stateless_http=True,
    transport_security=transport_security,
)

_store: AppStore | None = None


def get_store() -> AppStore:
    """Get or create the application store."""
    global _store
    if _store is None:
        _store = AppStore(JsonFileRepository(StoreConfig()))
        _store.load()
    return _store


def set_store(store: AppStore | None) -> None:
    """Replace the module store (used by the app factory and tests)."""
    global _store
    _store = store


def _parse_date(date_str: str | None) -> date:
    if date_str is None:
        return date.today()
    return date.fromisoformat(date_str)


INVALID_DATE = {"error": "Invalid date format. Use YYYY-MM-DD."}
INVALID_TRAINING_TYPE = {
    "error": "Invalid training type. Must be one of: "
    + ", ".join(t.value for t in TrainingType)
    + "."
}


def day_summary(profile: UserProfile, log: DayLog) -> dict[str, Any]:
    """Target, intake and deficit figures for one day."""
    day = log.log_date
    day_type = get_day_type(log, day)
    target = get_calorie_target(profile, day_type)
    return {
        "date": day.isoformat(),
        "day_type": day_type.value,
        "target": target,
        "eaten": get_total_meal_calories(log),
        "exercise": get_exercise_calories(log),
        "remaining": get_calories_remaining(profile, log, day),
        "deficit": round(get_day_deficit(profile, log, day)) if has_meals(log) else None,
        "macros": get_total_macros(log).model_dump(),
        "macro_targets": get_macro_targets(target, profile.protein_target_g).model_dump(),
    }


# ==================== Profile Tools ====================


@mcp.tool()
def get_profile() -> dict:
    """Retrieve the user's profile, goals and calorie targets."""
    return get_store().profile.model_dump(mode="json")


@mcp.tool()
def update_profile(
    maintenance_tdee: int | None = None,
    protein_target_g: int | None = None,
    goal_fat_loss_kg: float | None = None,
    start_date: str | None = None,
    goal_date: str | None = None,
    hybrid_target: int | None = None,
    running_target: int | None = None,
    pilates_target: int | None = None,
    rest_target: int | None = None,
    count_exercise_calories: bool | None = None,
) -> dict:
    """Update profile settings. Only provided fields change.

    Args:
        maintenance_tdee: Baseline daily energy expenditure in kcal
        protein_target_g: Daily protein target in grams
        goal_fat_loss_kg: Total fat loss goal in kg
        start_date: Cut start date (YYYY-MM-DD)
        goal_date: Cut end date (YYYY-MM-DD)
        hybrid_target: kcal target on hybrid days
        running_target: kcal target on running days
        pilates_target: kcal target on pilates days
        rest_target: kcal target on rest days
        count_exercise_calories: Add exercise burn back to the daily budget

    Returns:
        The saved profile
    """
    store = get_store()
    data = store.profile.model_dump()

    for key, value in {
        "maintenance_tdee": maintenance_tdee,
        "protein_target_g": protein_target_g,
        "goal_fat_loss_kg": goal_fat_loss_kg,
        "start_date": start_date,
        "goal_date": goal_date,
        "count_exercise_calories": count_exercise_calories,
    }.items():
        if value is not None:
            data[key] = value

    for day_type, value in {
        DayType.HYBRID: hybrid_target,
        DayType.RUNNING: running_target,
        DayType.PILATES: pilates_target,
        DayType.REST: rest_target,
    }.items():
        if value is not None:
            data["calorie_targets"][day_type.value] = value

    try:
        profile = UserProfile.model_validate(data)
    except ValidationError as e:
        return {"error": f"Invalid profile: {e.error_count()} field(s) rejected."}

    saved = store.update_profile(profile)
    if saved is None:
        return {"error": "Failed to save profile. Please try again."}
    return saved.model_dump(mode="json")


# ==================== Logging Tools ====================


@mcp.tool()
def log_meal(
    name: str,
    calories: int | None = None,
    protein: float = 0,
    carbs: float = 0,
    fat: float = 0,
    time: str | None = None,
    date_str: str | None = None,
) -> dict:
    """Add a meal to a day's log.

    If calories are omitted they are estimated from the macros.

    Args:
        name: Name of the meal (e.g., "Chicken and rice")
        calories: Total calories, or None to derive from macros
        protein: Protein in grams
        carbs: Carbohydrates in grams
        fat: Fat in grams
        time: Time eaten as HH:MM (defaults to 12:00)
        date_str: Date in YYYY-MM-DD format (defaults to today)

    Returns:
        The created entry and updated day summary
    """
    try:
        log_date = _parse_date(date_str)
    except ValueError:
        return INVALID_DATE

    store = get_store()
    try:
        macros = Macros(protein=protein, carbs=carbs, fat=fat)
        meal = MealEntry(
            name=name,
            calories=calories if calories is not None else get_calories_from_macros(macros),
            macros=macros,
            **({"time": time} if time else {}),
        )
    except ValidationError as e:
        return {"error": f"Invalid meal: {e.error_count()} field(s) rejected."}

    log = store.add_meal(log_date, meal)
    if log is None:
        return {"error": "Failed to log meal. Please try again."}

    return {
        "entry": meal.model_dump(mode="json"),
        "day_summary": day_summary(store.profile, log),
    }


@mcp.tool()
def log_template(template_id: str, time: str | None = None, date_str: str | None = None) -> dict:
    """Log a saved meal template (e.g., the fixed breakfast) as one meal.

    Args:
        template_id: ID of the meal template
        time: Time eaten as HH:MM
        date_str: Date in YYYY-MM-DD format (defaults to today)

    Returns:
        The created entry and updated day summary
    """
    try:
        log_date = _parse_date(date_str)
    except ValueError:
        return INVALID_DATE

    store = get_store()
    template = next((t for t in store.templates if t.id == template_id), None)
    if template is None:
        return {"error": f"Template not found: {template_id}"}

    try:
        meal = MealEntry(
            name=template.name,
            calories=sum(i.calories for i in template.items),
            macros=Macros(
                protein=sum(i.macros.protein for i in template.items),
                carbs=sum(i.macros.carbs for i in template.items),
                fat=sum(i.macros.fat for i in template.items),
            ),
            **({"time": time} if time else {}),
        )
    except ValidationError as e:
        return {"error": f"Invalid meal: {e.error_count()} field(s) rejected."}

    log = store.add_meal(log_date, meal)
    if log is None:
        return {"error": "Failed to log meal. Please try again."}
    return {
        "entry": meal.model_dump(mode="json"),
        "day_summary": day_summary(store.profile, log),
    }


@mcp.tool()
def update_meal(
    meal_id: str,
    name: str | None = None,
    calories: int | None = None,
    protein: float | None = None,
    carbs: float | None = None,
    fat: float | None = None,
    time: str | None = None,
    date_str: str | None = None,
) -> dict:
    """Update an existing meal. Only provided fields are updated.

    Args:
        meal_id: The ID of the meal to update
        name: New name (optional)
        calories: New calorie count (optional)
        protein: New protein value (optional)
        carbs: New carbs value (optional)
        fat: New fat value (optional)
        time: New time as HH:MM (optional)
        date_str: Date of the meal (defaults to today)

    Returns:
        Updated entry and new day summary
    """
    try:
        log_date = _parse_date(date_str)
    except ValueError:
        return INVALID_DATE

    store = get_store()
    existing = next((m for m in store.get_day_log(log_date).meals if m.id == meal_id), None)
    if existing is None:
        return {"error": "Meal not found."}

    data = existing.model_dump()
    for key, value in {"name": name, "calories": calories, "time": time}.items():
        if value is not None:
            data[key] = value
    for key, value in {"protein": protein, "carbs": carbs, "fat": fat}.items():
        if value is not None:
            data["macros"][key] = value

    try:
        meal = MealEntry.model_validate(data)
    except ValidationError as e:
        return {"error": f"Invalid meal: {e.error_count()} field(s) rejected."}

    log = store.update_meal(log_date, meal)
    if log is None:
        return {"error": "Failed to update meal. Please try again."}
    return {
        "entry": meal.model_dump(mode="json"),
        "day_summary": day_summary(store.profile, log),
    }


@mcp.tool()
def delete_meal(meal_id: str, date_str: str | None = None) -> dict:
    """Delete a meal from a day's log.

    Args:
        meal_id: The ID of the meal to delete
        date_str: Date of the meal (defaults to today)

    Returns:
        Confirmation and updated day summary
    """
    try:
        log_date = _parse_date(date_str)
    except ValueError:
        return INVALID_DATE

    store = get_store()
    try:
        log = store.delete_meal(log_date, meal_id)
    except EntryNotFoundError:
        return {"error": "Meal not found."}
    if log is None:
        return {"error": "Failed to delete meal. Please try again."}
    return {
        "success": True,
        "meals_remaining": len(log.meals),
        "day_summary": day_summary(store.profile, log),
    }


@mcp.tool()
def log_training(
    training_type: str,
    duration_min: int,
    distance_km: float | None = None,
    rpe: int | None = None,
    calories_burned: int | None = None,
    date_str: str | None = None,
) -> dict:
    """Add a training session to a day's log.

    Args:
        training_type: One of Hybrid, Pilates, Run Z2, Run, Strength, Walk, Rest
        duration_min: Duration in minutes
        distance_km: Distance covered (optional)
        rpe: Rate of perceived exertion 1-10 (optional)
        calories_burned: Estimated burn in kcal (optional)
        date_str: Date in YYYY-MM-DD format (defaults to today)

    Returns:
        The created entry and updated day summary
    """
    try:
        log_date = _parse_date(date_str)
    except ValueError:
        return INVALID_DATE

    try:
        kind = TrainingType(training_type)
    except ValueError:
        return INVALID_TRAINING_TYPE

    try:
        training = TrainingEntry(
            type=kind,
            duration_min=duration_min,
            distance_km=distance_km,
            rpe=rpe,
            calories_burned=calories_burned,
        )
    except ValidationError as e:
        return {"error": f"Invalid training: {e.error_count()} field(s) rejected."}

    store = get_store()
    log = store.add_training(log_date, training)
    if log is None:
        return {"error": "Failed to log training. Please try again."}
    return {
        "entry": training.model_dump(mode="json"),
        "day_summary": day_summary(store.profile, log),
    }


@mcp.tool()
def update_training(
    training_id: str,
    training_type: str | None = None,
    duration_min: int | None = None,
    distance_km: float | None = None,
    rpe: int | None = None,
    calories_burned: int | None = None,
    date_str: str | None = None,
) -> dict:
    """Update an existing training session. Only provided fields are updated.

    Args:
        training_id: The ID of the session to update
        training_type: New type (optional)
        duration_min: New duration in minutes (optional)
        distance_km: New distance (optional)
        rpe: New rate of perceived exertion 1-10 (optional)
        calories_burned: New burn estimate in kcal (optional)
        date_str: Date of the session (defaults to today)

    Returns:
        Updated entry and new day summary
    """
    try:
        log_date = _parse_date(date_str)
    except ValueError:
        return INVALID_DATE

    store = get_store()
    existing = next((t for t in store.get_day_log(log_date).training if t.id == training_id), None)
    if existing is None:
        return {"error": "Training not found."}

    data = existing.model_dump()
    if training_type is not None:
        try:
            data["type"] = TrainingType(training_type)
        except ValueError:
            return INVALID_TRAINING_TYPE
    for key, value in {
        "duration_min": duration_min,
        "distance_km": distance_km,
        "rpe": rpe,
        "calories_burned": calories_burned,
    }.items():
        if value is not None:
            data[key] = value

    try:
        training = TrainingEntry.model_validate(data)
    except ValidationError as e:
        return {"error": f"Invalid training: {e.error_count()} field(s) rejected."}

    log = store.update_training(log_date, training)
    if log is None:
        return {"error": "Failed to update training. Please try again."}
    return {
        "entry": training.model_dump(mode="json"),
        "day_summary": day_summary(store.profile, log),
    }


@mcp.tool()
def delete_training(training_id: str, date_str: str | None = None) -> dict:
    """Delete a training session from a day's log."""
    try:
        log_date = _parse_date(date_str)
    except ValueError:
        return INVALID_DATE

    store = get_store()
    try:
        log = store.delete_training(log_date, training_id)
    except EntryNotFoundError:
        return {"error": "Training not found."}
    if log is None:
        return {"error": "Failed to delete training. Please try again."}
    return {"success": True, "day_summary": day_summary(store.profile, log)}


@mcp.tool()
def update_metrics(
    date_str: str | None = None,
    weight_kg: float | None = None,
    steps: int | None = None,
    water_liters: float | None = None,
    sleep_hours: float | None = None,
    mood: int | None = None,
    tags: list[str] | None = None,
    day_type_override: str | None = None,
) -> dict:
    """Record daily metrics. Only provided fields change.

    Args:
        date_str: Date in YYYY-MM-DD format (defaults to today)
        weight_kg: Morning body weight
        steps: Step count
        water_liters: Water intake
        sleep_hours: Hours slept
        mood: Mood 1-5
        tags: Free-form tags for the day
        day_type_override: Force hybrid, running, pilates or rest

    Returns:
        The day's metrics and updated day summary
    """
    try:
        log_date = _parse_date(date_str)
    except ValueError:
        return INVALID_DATE

    updates = {
        key: value
        for key, value in {
            "weight_kg": weight_kg,
            "steps": steps,
            "water_liters": water_liters,
            "sleep_hours": sleep_hours,
            "mood": mood,
            "tags": tags,
            "day_type_override": day_type_override,
        }.items()
        if value is not None
    }
    if not updates:
        return {"error": "No updates provided."}

    store = get_store()
    try:
        log = store.update_metrics(log_date, **updates)
    except ValidationError as e:
        return {"error": f"Invalid metrics: {e.error_count()} field(s) rejected."}
    if log is None:
        return {"error": "Failed to save metrics. Please try again."}
    return {
        "metrics": log.metrics.model_dump(mode="json"),
        "day_summary": day_summary(store.profile, log),
    }


# ==================== Query Tools ====================


@mcp.tool()
def get_day(date_str: str | None = None) -> dict:
    """Get a day's meals, training, metrics and summary.

    Args:
        date_str: Date in YYYY-MM-DD format (defaults to today)
    """
    try:
        log_date = _parse_date(date_str)
    except ValueError:
        return INVALID_DATE

    store = get_store()
    log = store.get_day_log(log_date)
    return {
        "log": log.model_dump(mode="json"),
        "summary": day_summary(store.profile, log),
    }


@mcp.tool()
def get_dashboard() -> dict:
    """Today's budget plus progress, streaks and the projected outcome."""
    store = get_store()
    profile = store.profile
    logs = store.logs
    today = date.today()
    log = store.get_day_log(today)

    accumulated = get_accumulated_deficit(profile, logs, profile.start_date, today, today)
    week = get_weekly_data(profile, logs, 0, today)
    scheduled = get_scheduled_training(today)

    return {
        "today": day_summary(profile, log),
        "scheduled_training": [t.value for t in scheduled],
        "accumulated_deficit": round(accumulated),
        "fat_lost_kg": round(get_projected_fat_loss(accumulated), 2),
        "goal_fat_loss_kg": profile.goal_fat_loss_kg,
        "days_elapsed": get_days_elapsed(profile.start_date, today),
        "days_remaining": get_days_remaining(profile.goal_date, today),
        "projected_outcome": get_projected_outcome(profile, logs, today).model_dump(),
        "rolling_7d": get_rolling_average(profile, logs, 7, today).model_dump(),
        "training_streak": get_training_streak(logs, today),
        "adherence_streak": get_adherence_streak(profile, logs, today),
        "week": get_weekly_summary(week).model_dump(),
    }


@mcp.tool()
def get_insights(weeks_back: int = 0) -> dict:
    """Weekly breakdown, 30-day trends and averages.

    Args:
        weeks_back: 0 for the current week, 1 for last week, ...
    """
    store = get_store()
    profile = store.profile
    logs = store.logs
    today = date.today()

    week = get_weekly_data(profile, logs, weeks_back, today)
    accumulated = get_accumulated_deficit(profile, logs, profile.start_date, today, today)

    return {
        "week": [d.model_dump(mode="json") for d in week],
        "week_summary": get_weekly_summary(week).model_dump(),
        "accumulated_deficit": round(accumulated),
        "fat_lost_kg": round(get_projected_fat_loss(accumulated), 2),
        "rolling_7d": get_rolling_average(profile, logs, 7, today).model_dump(),
        "rolling_14d": get_rolling_average(profile, logs, 14, today).model_dump(),
        "cumulative_deficit_30d": [
            p.model_dump(mode="json") for p in get_cumulative_deficit_series(profile, logs, 30, today)
        ],
        "weight_trend_30d": [p.model_dump(mode="json") for p in get_weight_trend(logs, 30, today)],
        "suggest_adjustment": should_suggest_adjustment(profile, logs, today),
    }


# ==================== Library Tools ====================


@mcp.tool()
def search_foods(query: str) -> list[dict]:
    """Search the food library by name.

    Args:
        query: Search term to match against food names

    Returns:
        Matching foods with per-serving values
    """
    return [f.model_dump(mode="json") for f in get_store().search_foods(query)]


@mcp.tool()
def add_food(
    name: str,
    serving_grams: float,
    protein: float,
    carbs: float,
    fat: float,
    calories: int | None = None,
    category: str | None = None,
) -> dict:
    """Add a food to the library.

    Args:
        name: Name of the food
        serving_grams: Serving size in grams
        protein: Protein per serving in grams
        carbs: Carbs per serving in grams
        fat: Fat per serving in grams
        calories: Calories per serving, or None to derive from macros
        category: Optional grouping (Protein, Carbs, ...)
    """
    try:
        macros = Macros(protein=protein, carbs=carbs, fat=fat)
        food = FoodItem(
            name=name,
            serving_grams=serving_grams,
            calories=calories if calories is not None else get_calories_from_macros(macros),
            macros=macros,
            category=category,
        )
    except ValidationError as e:
        return {"error": f"Invalid food: {e.error_count()} field(s) rejected."}

    if get_store().add_food(food) is None:
        return {"error": "Failed to add food. Please try again."}
    return food.model_dump(mode="json")


@mcp.tool()
def update_food(
    food_id: str,
    name: str | None = None,
    serving_grams: float | None = None,
    calories: int | None = None,
    protein: float | None = None,
    carbs: float | None = None,
    fat: float | None = None,
    category: str | None = None,
) -> dict:
    """Update a library food. Only provided fields are updated."""
    store = get_store()
    existing = next((f for f in store.foods if f.id == food_id), None)
    if existing is None:
        return {"error": "Food not found."}

    data = existing.model_dump()
    for key, value in {
        "name": name,
        "serving_grams": serving_grams,
        "calories": calories,
        "category": category,
    }.items():
        if value is not None:
            data[key] = value
    for key, value in {"protein": protein, "carbs": carbs, "fat": fat}.items():
        if value is not None:
            data["macros"][key] = value

    try:
        food = FoodItem.model_validate(data)
    except ValidationError as e:
        return {"error": f"Invalid food: {e.error_count()} field(s) rejected."}

    try:
        saved = store.update_food(food)
    except EntryNotFoundError:
        return {"error": "Food not found."}
    if saved is None:
        return {"error": "Failed to update food. Please try again."}
    return saved.model_dump(mode="json")


@mcp.tool()
def remove_food(food_id: str) -> dict:
    """Remove a food from the library."""
    try:
        removed = get_store().remove_food(food_id)
    except EntryNotFoundError:
        return {"error": "Food not found."}
    if not removed:
        return {"error": "Failed to remove food. Please try again."}
    return {"success": True}


def _template_item(food: FoodItem, grams: float) -> TemplateItem:
    factor = grams / food.serving_grams
    return TemplateItem(
        food_item_id=food.id,
        name=food.name,
        grams=grams,
        calories=round(food.calories * factor),
        macros=Macros(
            protein=round(food.macros.protein * factor, 1),
            carbs=round(food.macros.carbs * factor, 1),
            fat=round(food.macros.fat * factor, 1),
        ),
    )


@mcp.tool()
def add_template(name: str, food_ids: list[str], grams: list[float] | None = None) -> dict:
    """Save a meal template built from library foods.

    Args:
        name: Name of the template (e.g., "Post-run shake")
        food_ids: Library food IDs, in order
        grams: Amount of each food in grams (defaults to one serving each)

    Returns:
        The saved template
    """
    if grams is not None and len(grams) != len(food_ids):
        return {"error": "grams must have one value per food."}

    foods = {f.id: f for f in get_store().foods}
    missing = [food_id for food_id in food_ids if food_id not in foods]
    if missing:
        return {"error": f"Food not found: {', '.join(missing)}"}

    amounts = grams if grams is not None else [foods[food_id].serving_grams for food_id in food_ids]
    try:
        template = MealTemplate(
            name=name,
            items=[_template_item(foods[food_id], g) for food_id, g in zip(food_ids, amounts)],
        )
    except ValidationError as e:
        return {"error": f"Invalid template: {e.error_count()} field(s) rejected."}

    if get_store().add_template(template) is None:
        return {"error": "Failed to save template. Please try again."}
    return template.model_dump(mode="json")


# ==================== Data Tools ====================


@mcp.tool()
def export_data() -> dict:
    """Export all data as JSON and CSV text."""
    state = get_store().state
    return {"json": export_json(state), "csv": export_csv(state)}


@mcp.tool()
def reset_data(confirm: bool = False) -> dict:
    """Erase all logs and restore the default profile and library.

    Args:
        confirm: Must be true to actually reset
    """
    if not confirm:
        return {"error": "Pass confirm=true to erase all data."}
    if get_store().reset() is None:
        return {"error": "Failed to reset data. Please try again."}
    return {"success": True}
