"""Unit tests for data models - validation and defaults."""

import pytest
from datetime import date
from pydantic import ValidationError

from cuttracker.core.models import (
    AppState,
    CalorieTargets,
    DayLog,
    DayMetrics,
    DayType,
    FoodItem,
    Macros,
    MealEntry,
    TrainingEntry,
    TrainingType,
    UserProfile,
)


def _profile(**overrides) -> UserProfile:
    data = dict(
        start_date=date(2026, 2, 25),
        goal_date=date(2026, 4, 13),
        goal_fat_loss_kg=2.0,
        protein_target_g=120,
        calorie_targets=CalorieTargets(hybrid=1900, running=1800, pilates=1800, rest=1700),
        maintenance_tdee=2150,
    )
    data.update(overrides)
    return UserProfile(**data)


class TestUserProfile:
    """Tests for UserProfile model."""

    def test_valid_profile(self):
        """Valid profile is created with defaults."""
        profile = _profile()
        assert profile.maintenance_tdee == 2150
        assert profile.count_exercise_calories is False
        assert profile.breakfast_template is None

    def test_dates_parsed_from_strings(self):
        """ISO date strings are accepted."""
        profile = _profile(start_date="2026-02-25", goal_date="2026-04-13")
        assert profile.start_date == date(2026, 2, 25)
        assert profile.goal_date == date(2026, 4, 13)

    def test_negative_target_rejected(self):
        """Negative calorie targets are rejected."""
        with pytest.raises(ValidationError):
            CalorieTargets(hybrid=-1, running=1800, pilates=1800, rest=1700)


class TestMealEntry:
    """Tests for MealEntry model."""

    def test_valid_entry(self):
        """Valid entry gets an id, a default time and zero macros."""
        meal = MealEntry(name="Oats", calories=300)
        assert meal.id is not None
        assert meal.time == "12:00"
        assert meal.macros == Macros()

    def test_bad_time_rejected(self):
        """Time must be HH:MM."""
        with pytest.raises(ValidationError):
            MealEntry(name="Oats", calories=300, time="25:00")

    def test_negative_calories_rejected(self):
        """Negative calories are rejected."""
        with pytest.raises(ValidationError):
            MealEntry(name="Oats", calories=-1)

    def test_empty_name_rejected(self):
        """Empty name is rejected."""
        with pytest.raises(ValidationError):
            MealEntry(name="", calories=100)


class TestTrainingEntry:
    """Tests for TrainingEntry model."""

    def test_type_from_label(self):
        """Training type parses from its display label."""
        entry = TrainingEntry(type="Run Z2", duration_min=45)
        assert entry.type is TrainingType.RUN_Z2
        assert entry.calories_burned is None

    def test_unknown_type_rejected(self):
        """Free-text training types are rejected."""
        with pytest.raises(ValidationError):
            TrainingEntry(type="Jogging", duration_min=30)

    def test_rpe_range(self):
        """RPE must be within 1-10."""
        with pytest.raises(ValidationError):
            TrainingEntry(type="Run", duration_min=30, rpe=11)


class TestDayLog:
    """Tests for DayLog model."""

    def test_empty_log(self):
        """Empty log is valid."""
        log = DayLog(log_date=date(2026, 3, 2))
        assert log.meals == []
        assert log.training == []
        assert log.metrics == DayMetrics()

    def test_override_and_mood(self):
        """Override parses to DayType; mood is bounded."""
        metrics = DayMetrics(day_type_override="pilates", mood=3)
        assert metrics.day_type_override is DayType.PILATES
        with pytest.raises(ValidationError):
            DayMetrics(mood=6)


class TestAppState:
    """Tests for AppState model."""

    def test_logs_keyed_by_date_round_trip(self):
        """Date keys survive a JSON round trip."""
        state = AppState(
            profile=_profile(),
            logs={date(2026, 3, 2): DayLog(log_date=date(2026, 3, 2))},
            foods=[FoodItem(name="Rice", serving_grams=100, calories=130)],
        )
        restored = AppState.model_validate_json(state.model_dump_json())
        assert list(restored.logs) == [date(2026, 3, 2)]
        assert restored.foods[0].name == "Rice"
