"""Macro Calculations - Pure functions for intake and exercise math.

All functions are pure: same input always produces same output, no side effects.
A missing log (None) is treated as an empty day.
"""

from typing import Optional

from .models import DayLog, Macros, MacroTargets


def get_total_meal_calories(log: Optional[DayLog]) -> int:
    """Sum of calories over the day's meals."""
    if log is None:
        return 0
    return sum(m.calories for m in log.meals)


def get_total_macros(log: Optional[DayLog]) -> Macros:
    """Component-wise sum of the day's meal macros.

    Args:
        log: The day's log, or None for an unlogged day

    Returns:
        Macros totals (all zero for an empty day)
    """
    if log is None:
        return Macros()
    return Macros(
        protein=sum(m.macros.protein for m in log.meals),
        carbs=sum(m.macros.carbs for m in log.meals),
        fat=sum(m.macros.fat for m in log.meals),
    )


def get_exercise_calories(log: Optional[DayLog]) -> int:
    """Sum of calories burned in training. Entries without a value count as 0."""
    if log is None:
        return 0
    return sum(t.calories_burned or 0 for t in log.training)


def has_meals(log: Optional[DayLog]) -> bool:
    """A day counts as logged only once it has at least one meal."""
    return log is not None and len(log.meals) > 0


def get_calories_from_macros(macros: Macros) -> int:
    """Calculate calories from macronutrients.

    Uses standard conversion: 4 cal/g protein, 4 cal/g carbs, 9 cal/g fat.

    Args:
        macros: Grams of protein, carbs and fat

    Returns:
        Estimated calories (rounded to nearest integer)
    """
    return round(macros.protein * 4 + macros.carbs * 4 + macros.fat * 9)


def get_macro_targets(calorie_target: int, protein_target_g: int) -> MacroTargets:
    """Split a day's calorie target into gram targets.

    Carbs take 40% and fat 25% of the calories; protein comes from the profile.
    """
    return MacroTargets(
        calories=calorie_target,
        protein=protein_target_g,
        carbs=round(calorie_target * 0.4 / 4),
        fat=round(calorie_target * 0.25 / 9),
    )
