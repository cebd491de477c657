"""Tests for the application store."""

import pytest
from datetime import date
from pydantic import ValidationError

from cuttracker.core.defaults import default_profile
from cuttracker.core.models import DayType, FoodItem, MealEntry, MealTemplate, TrainingEntry
from cuttracker.shell.json_store import JsonFileRepository, StoreConfig
from cuttracker.shell.store import AppStore, EntryNotFoundError, fresh_state


DAY = date(2026, 3, 2)


class TestLoad:
    """Tests for AppStore.load."""

    def test_first_run_seeds_defaults(self, repository):
        """Nothing stored: defaults are created and persisted."""
        state = AppStore(repository).load()
        assert state.profile.maintenance_tdee == 2150
        assert len(state.foods) == 20
        assert [t.id for t in state.templates] == ["breakfast-fixed"]
        assert repository.saves == 1

    def test_existing_state_loaded(self, repository):
        stored = fresh_state()
        stored.profile.maintenance_tdee = 2300
        repository.state = stored
        assert AppStore(repository).load().profile.maintenance_tdee == 2300

    def test_breakfast_template_restored(self, repository):
        stored = fresh_state()
        stored.profile.breakfast_template = None
        repository.state = stored
        assert AppStore(repository).load().profile.breakfast_template is not None

    def test_unreadable_state_not_overwritten(self, repository):
        """Defaults are used in memory but never saved over unreadable data."""
        repository.unreadable = True
        state = AppStore(repository).load()
        assert state.profile.maintenance_tdee == 2150
        assert repository.saves == 0
        assert repository.state is None

    def test_invalid_state_file_left_intact(self, tmp_path):
        """A file that fails validation keeps its content after load."""
        path = tmp_path / "state.json"
        content = '{"profile": {"start_date": "2026-02-25"}, "logs": {}}'
        path.write_text(content, encoding="utf-8")

        AppStore(JsonFileRepository(StoreConfig(path=path))).load()

        assert path.read_text(encoding="utf-8") == content


class TestAccessors:
    """Accessors return copies, never the internal state."""

    def test_missing_day_is_empty_and_not_stored(self, store):
        log = store.get_day_log(DAY)
        assert log.log_date == DAY
        assert log.meals == []
        assert DAY not in store.logs

    def test_profile_copy(self, store):
        profile = store.profile
        profile.maintenance_tdee = 1
        assert store.profile.maintenance_tdee == 2150

    def test_logs_copy(self, store):
        store.add_meal(DAY, MealEntry(name="Oats", calories=300))
        logs = store.logs
        logs[DAY].meals.clear()
        assert len(store.get_day_log(DAY).meals) == 1


class TestMeals:
    """Tests for meal writes."""

    def test_add_meal_creates_day(self, store, repository):
        """The first write to a date materialises its log."""
        log = store.add_meal(DAY, MealEntry(name="Oats", calories=300))
        assert [m.name for m in log.meals] == ["Oats"]
        assert DAY in repository.state.logs

    def test_added_meal_is_not_aliased(self, store):
        meal = MealEntry(name="Oats", calories=300)
        store.add_meal(DAY, meal)
        meal.calories = 9999
        assert store.get_day_log(DAY).meals[0].calories == 300

    def test_update_meal(self, store):
        meal = MealEntry(name="Oats", calories=300)
        store.add_meal(DAY, meal)
        log = store.update_meal(DAY, meal.model_copy(update={"calories": 350}))
        assert log.meals[0].calories == 350

    def test_update_unknown_meal(self, store):
        with pytest.raises(EntryNotFoundError):
            store.update_meal(DAY, MealEntry(name="Ghost", calories=1))

    def test_delete_meal(self, store):
        meal = MealEntry(name="Oats", calories=300)
        store.add_meal(DAY, meal)
        log = store.delete_meal(DAY, meal.id)
        assert log.meals == []
        with pytest.raises(EntryNotFoundError):
            store.delete_meal(DAY, meal.id)

    def test_failed_save_keeps_previous_state(self, store, repository):
        """A write that cannot be persisted is not applied."""
        repository.fail_saves = True
        assert store.add_meal(DAY, MealEntry(name="Oats", calories=300)) is None
        assert store.get_day_log(DAY).meals == []


class TestTrainingAndMetrics:
    """Tests for training and metric writes."""

    def test_training_round(self, store):
        entry = TrainingEntry(type="Run Z2", duration_min=40)
        assert len(store.add_training(DAY, entry).training) == 1

        updated = store.update_training(DAY, entry.model_copy(update={"duration_min": 45}))
        assert updated.training[0].duration_min == 45

        assert store.delete_training(DAY, entry.id).training == []

    def test_update_metrics_merges(self, store):
        """Only the given fields change."""
        store.update_metrics(DAY, weight_kg=60.4, steps=8000)
        log = store.update_metrics(DAY, day_type_override="rest")
        assert log.metrics.weight_kg == 60.4
        assert log.metrics.steps == 8000
        assert log.metrics.day_type_override is DayType.REST

    def test_update_metrics_validates(self, store):
        with pytest.raises(ValidationError):
            store.update_metrics(DAY, mood=9)


class TestLibraryAndState:
    """Tests for foods, templates, profile, import and reset."""

    def test_foods(self, store):
        food = FoodItem(name="Tofu", serving_grams=100, calories=76)
        store.add_food(food)
        assert [f.name for f in store.search_foods("tofu")] == ["Tofu"]

        store.update_food(food.model_copy(update={"calories": 80}))
        assert store.search_foods("TOFU")[0].calories == 80

        assert store.remove_food(food.id) is True
        assert store.search_foods("tofu") == []

    def test_add_template(self, store):
        store.add_template(MealTemplate(name="Post-run shake"))
        assert [t.name for t in store.templates] == ["Fixed Breakfast", "Post-run shake"]

    def test_update_profile(self, store, repository):
        profile = default_profile()
        profile.count_exercise_calories = True
        store.update_profile(profile)
        assert store.profile.count_exercise_calories is True
        assert repository.state.profile.count_exercise_calories is True

    def test_replace_state_and_reset(self, store):
        new_state = fresh_state()
        new_state.foods = []
        assert store.replace_state(new_state) is True
        assert store.foods == []

        state = store.reset()
        assert len(state.foods) == 20
        assert store.logs == {}

    def test_failed_reset_keeps_previous_state(self, store, repository):
        """Reset only takes effect once the fresh state is persisted."""
        store.add_meal(DAY, MealEntry(name="Oats", calories=300))

        repository.fail_clears = True
        assert store.reset() is None
        assert DAY in store.logs
        assert DAY in repository.state.logs

        repository.fail_clears = False
        repository.fail_saves = True
        assert store.reset() is None
        assert DAY in store.logs
