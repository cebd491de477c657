"""Engine constants and seed data.

The weekly schedule and the physiological constants are configuration, not
user data. Functions that use the constants accept overrides.
"""

from datetime import date

from .models import (
    CalorieTargets,
    DayType,
    FoodItem,
    Macros,
    MealTemplate,
    TemplateItem,
    TrainingType,
    UserProfile,
)


# kcal per kg of fat mass, applied uniformly
KCAL_PER_KG_FAT = 7700

# Fraction of maintenance TDEE burned on each day type
TDEE_MULTIPLIERS: dict[DayType, float] = {
    DayType.HYBRID: 1.0,
    DayType.RUNNING: 1.0,
    DayType.PILATES: 0.97,
    DayType.REST: 0.90,
}

# Over-budget tolerance for a day to count toward the adherence streak
ADHERENCE_TOLERANCE_KCAL = 100

STREAK_LOOKBACK_DAYS = 60

# Uncertainty band applied to the forward-projected part of the outcome
PROJECTION_BAND = 0.15

# Weekday (0=Sunday .. 6=Saturday) -> expected training
WEEKLY_SCHEDULE: dict[int, tuple[TrainingType, ...]] = {
    0: (TrainingType.REST,),
    1: (TrainingType.HYBRID,),
    2: (TrainingType.PILATES, TrainingType.RUN_Z2),
    3: (TrainingType.HYBRID,),
    4: (TrainingType.RUN_Z2,),
    5: (TrainingType.HYBRID, TrainingType.RUN_Z2),
    6: (TrainingType.WALK,),
}


def _item(name: str, grams: float, calories: int, protein: float, carbs: float, fat: float) -> TemplateItem:
    return TemplateItem(
        name=name,
        grams=grams,
        calories=calories,
        macros=Macros(protein=protein, carbs=carbs, fat=fat),
    )


def breakfast_template() -> MealTemplate:
    """The fixed breakfast shipped with a fresh installation."""
    return MealTemplate(
        id="breakfast-fixed",
        name="Fixed Breakfast",
        items=[
            _item("Chia seeds", 16, 77, 2.6, 5.3, 4.9),
            _item("Whey protein (1 scoop)", 30, 120, 24, 3, 1.5),
            _item("Skim milk", 60, 21, 2.1, 3.0, 0.1),
            _item("Banana", 30, 27, 0.4, 6.9, 0.1),
            _item("Blueberries", 20, 11, 0.1, 2.7, 0.1),
            _item("Apple", 40, 21, 0.1, 5.5, 0.1),
            _item("Granola", 15, 67, 1.5, 10.5, 2.1),
        ],
    )


def default_profile() -> UserProfile:
    """Profile used on first run and after a reset."""
    return UserProfile(
        name="",
        age=28,
        height_cm=169,
        weight_kg=60.0,
        start_date=date(2026, 2, 25),
        goal_date=date(2026, 4, 13),
        goal_fat_loss_kg=2.0,
        protein_target_g=120,
        calorie_targets=CalorieTargets(hybrid=1900, running=1800, pilates=1800, rest=1700),
        maintenance_tdee=2150,
        count_exercise_calories=False,
        breakfast_template=breakfast_template(),
    )


_SEED_FOODS = [
    ("f1", "Chicken breast (cooked)", 100, 165, 31, 0, 3.6, "Protein"),
    ("f2", "Salmon fillet", 100, 208, 20, 0, 13, "Protein"),
    ("f3", "Eggs (1 large)", 50, 72, 6.3, 0.4, 5, "Protein"),
    ("f4", "Greek yogurt (0% fat)", 100, 59, 10, 3.6, 0.4, "Protein"),
    ("f5", "Cottage cheese", 100, 98, 11, 3.4, 4.3, "Protein"),
    ("f6", "White rice (cooked)", 100, 130, 2.7, 28, 0.3, "Carbs"),
    ("f7", "Oats (dry)", 40, 154, 5.4, 27, 2.8, "Carbs"),
    ("f8", "Sweet potato (baked)", 100, 90, 2, 21, 0.1, "Carbs"),
    ("f9", "Pasta (cooked)", 100, 157, 5.8, 31, 0.9, "Carbs"),
    ("f10", "Avocado", 50, 80, 1, 4.3, 7.3, "Fats"),
    ("f11", "Olive oil (1 tbsp)", 14, 119, 0, 0, 13.5, "Fats"),
    ("f12", "Almonds", 30, 174, 6, 5.4, 15, "Fats"),
    ("f13", "Banana (medium)", 120, 107, 1.3, 27, 0.4, "Fruit"),
    ("f14", "Apple (medium)", 150, 78, 0.4, 21, 0.3, "Fruit"),
    ("f15", "Broccoli", 100, 34, 2.8, 7, 0.4, "Veg"),
    ("f16", "Spinach", 100, 23, 2.9, 3.6, 0.4, "Veg"),
    ("f17", "Whey protein (1 scoop)", 30, 120, 24, 3, 1.5, "Protein"),
    ("f18", "Protein bar", 60, 220, 20, 24, 7, "Protein"),
    ("f19", "Skim milk (100ml)", 100, 35, 3.5, 5, 0.1, "Dairy"),
    ("f20", "Sourdough bread (1 slice)", 50, 120, 4, 24, 1, "Carbs"),
]


def seed_foods() -> list[FoodItem]:
    """Starter food library."""
    return [
        FoodItem(
            id=food_id,
            name=name,
            serving_grams=grams,
            calories=calories,
            macros=Macros(protein=protein, carbs=carbs, fat=fat),
            category=category,
        )
        for food_id, name, grams, calories, protein, carbs, fat, category in _SEED_FOODS
    ]
