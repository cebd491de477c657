"""Core Data Models - Pydantic models for type safety.

All models are value objects with no behavior beyond validation.
The calculation engine only reads them; the store owns mutation.
"""

from datetime import date as DateType
from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field
import uuid


def _new_id() -> str:
    return str(uuid.uuid4())


class DayType(str, Enum):
    """Classification of a calendar day, driving which calorie target applies."""

    HYBRID = "hybrid"
    RUNNING = "running"
    PILATES = "pilates"
    REST = "rest"


class TrainingType(str, Enum):
    """Training session labels shared by the weekly schedule and the log."""

    HYBRID = "Hybrid"
    PILATES = "Pilates"
    RUN_Z2 = "Run Z2"
    RUN = "Run"
    STRENGTH = "Strength"
    WALK = "Walk"
    REST = "Rest"


RUN_TYPES = frozenset({TrainingType.RUN, TrainingType.RUN_Z2})


class Macros(BaseModel):
    """Macronutrients in grams."""

    protein: float = Field(default=0, ge=0)
    carbs: float = Field(default=0, ge=0)
    fat: float = Field(default=0, ge=0)


class MealEntry(BaseModel):
    """A single meal logged by the user."""

    id: str = Field(default_factory=_new_id)
    time: str = Field(default="12:00", pattern=r"^([01]\d|2[0-3]):[0-5]\d$", description="HH:MM")
    name: str = Field(min_length=1)
    calories: int = Field(ge=0, description="Total calories")
    macros: Macros = Field(default_factory=Macros)
    notes: Optional[str] = None


class TrainingEntry(BaseModel):
    """A training session."""

    id: str = Field(default_factory=_new_id)
    type: TrainingType
    duration_min: int = Field(ge=0)
    distance_km: Optional[float] = Field(default=None, ge=0)
    rpe: Optional[int] = Field(default=None, ge=1, le=10, description="Rate of perceived exertion")
    calories_burned: Optional[int] = Field(default=None, ge=0)
    notes: Optional[str] = None


class DayMetrics(BaseModel):
    """Body and lifestyle metrics for one day. Every field is optional."""

    weight_kg: Optional[float] = Field(default=None, gt=0)
    steps: Optional[int] = Field(default=None, ge=0)
    water_liters: Optional[float] = Field(default=None, ge=0)
    sleep_hours: Optional[float] = Field(default=None, ge=0, le=24)
    notes: Optional[str] = None
    tags: list[str] = Field(default_factory=list)
    mood: Optional[int] = Field(default=None, ge=1, le=5)
    day_type_override: Optional[DayType] = Field(
        default=None, description="Manual day type, wins over the schedule"
    )


class DayLog(BaseModel):
    """Everything logged for one calendar date."""

    log_date: DateType = Field(description="Date of this log (YYYY-MM-DD)")
    meals: list[MealEntry] = Field(default_factory=list)
    training: list[TrainingEntry] = Field(default_factory=list)
    metrics: DayMetrics = Field(default_factory=DayMetrics)


class CalorieTargets(BaseModel):
    """Daily kcal target per day type."""

    hybrid: int = Field(ge=0)
    running: int = Field(ge=0)
    pilates: int = Field(ge=0)
    rest: int = Field(ge=0)


class TemplateItem(BaseModel):
    food_item_id: Optional[str] = None
    name: str = Field(min_length=1)
    grams: float = Field(ge=0)
    calories: int = Field(ge=0)
    macros: Macros = Field(default_factory=Macros)


class MealTemplate(BaseModel):
    """A saved combination of foods used to pre-fill a meal."""

    id: str = Field(default_factory=_new_id)
    name: str = Field(min_length=1)
    items: list[TemplateItem] = Field(default_factory=list)


class FoodItem(BaseModel):
    """A food in the user's library, per serving."""

    id: str = Field(default_factory=_new_id)
    name: str = Field(min_length=1, description="Name of the food (used for searching)")
    serving_grams: float = Field(gt=0)
    calories: int = Field(ge=0, description="Calories per serving")
    macros: Macros = Field(default_factory=Macros)
    category: Optional[str] = None


class UserProfile(BaseModel):
    """The single user's goals and calculation settings.

    Identity fields (name, age, height, weight) are informational only.
    """

    name: str = ""
    age: int = Field(default=30, ge=0)
    height_cm: float = Field(default=170, gt=0)
    weight_kg: float = Field(default=70, gt=0)
    start_date: DateType
    goal_date: DateType
    goal_fat_loss_kg: float = Field(ge=0)
    protein_target_g: int = Field(ge=0)
    calorie_targets: CalorieTargets
    maintenance_tdee: int = Field(ge=0, description="Baseline total daily energy expenditure")
    count_exercise_calories: bool = Field(
        default=False, description="Add logged exercise burn back to the daily budget"
    )
    breakfast_template: Optional[MealTemplate] = None


class AppState(BaseModel):
    """The entire persisted state of an installation."""

    profile: UserProfile
    logs: dict[DateType, DayLog] = Field(default_factory=dict)
    foods: list[FoodItem] = Field(default_factory=list)
    templates: list[MealTemplate] = Field(default_factory=list)


# ==================== Engine Outputs ====================


class RollingAverage(BaseModel):
    """Means over the logged days of a trailing window."""

    avg_calories: float = 0
    avg_protein: float = 0
    avg_deficit: float = 0


class ProjectedOutcome(BaseModel):
    """Projected total fat loss in kg at the goal date."""

    low: float
    mid: float
    high: float


class MacroTargets(BaseModel):
    calories: int
    protein: int
    carbs: int
    fat: int


class WeekDay(BaseModel):
    """One day of a weekly report."""

    log_date: DateType
    label: str = Field(description="Weekday abbreviation, e.g. Mon")
    calories: int
    target: int
    protein: float
    deficit: Optional[float] = Field(description="None if the day has no meals")
    has_log: bool
    training: list[TrainingEntry]


class WeeklySummary(BaseModel):
    """Aggregates over one week of WeekDay records."""

    days_logged: int
    training_days: int
    training_sessions: int
    run_minutes: int


class SeriesPoint(BaseModel):
    """A dated value for trend charts."""

    log_date: DateType
    value: float
