"""App Store - The explicitly owned, in-memory application state.

Accessors return deep copies so callers never alias internal state. Writes
are serialized with a lock, applied to a copy, persisted through the
repository, and only then swapped in.
"""

import logging
import threading
from datetime import date
from typing import Any, Callable, Protocol

from ..core.defaults import breakfast_template, default_profile, seed_foods
from ..core.models import (
    AppState,
    DayLog,
    DayMetrics,
    FoodItem,
    MealEntry,
    MealTemplate,
    TrainingEntry,
    UserProfile,
)


logger = logging.getLogger(__name__)


class StateRepository(Protocol):
    """Persistence interface for the whole application state."""

    def load_state(self) -> AppState | None:
        """Return the stored state, or None if nothing is stored.

        Raises:
            StateLoadError: If stored state exists but cannot be read
        """

    def save_state(self, state: AppState) -> bool:
        """Persist the state. Returns True on success."""

    def clear(self) -> bool:
        """Remove the stored state. Returns True on success."""


class EntryNotFoundError(KeyError):
    """Raised when updating or deleting an entry id that does not exist."""


class StateLoadError(Exception):
    """Raised when stored state exists but cannot be parsed or validated."""


def fresh_state() -> AppState:
    """State of a brand-new installation."""
    return AppState(
        profile=default_profile(),
        logs={},
        foods=seed_foods(),
        templates=[breakfast_template()],
    )


def _replace_by_id(items: list, item: Any, kind: str) -> None:
    for i, existing in enumerate(items):
        if existing.id == item.id:
            items[i] = item.model_copy(deep=True)
            return
    raise EntryNotFoundError(f"{kind} not found: {item.id}")


def _remove_by_id(items: list, item_id: str, kind: str) -> None:
    for i, existing in enumerate(items):
        if existing.id == item_id:
            del items[i]
            return
    raise EntryNotFoundError(f"{kind} not found: {item_id}")


class AppStore:
    """Single owner of the profile, day logs, food library and templates."""

    def __init__(self, repository: StateRepository) -> None:
        self._repository = repository
        self._lock = threading.Lock()
        self._state = fresh_state()

    def load(self) -> AppState:
        """Load stored state, seeding defaults on first run.

        Unreadable stored state is left on disk untouched; defaults are used
        in memory only.
        """
        with self._lock:
            try:
                stored = self._repository.load_state()
            except StateLoadError as e:
                logger.error("Stored state unreadable, using defaults without saving: %s", e)
                stored = fresh_state()
            else:
                if stored is None:
                    logger.info("No stored state found, seeding defaults")
                    stored = fresh_state()
                    self._repository.save_state(stored)
            if stored.profile.breakfast_template is None:
                stored.profile.breakfast_template = breakfast_template()
            self._state = stored
            return stored.model_copy(deep=True)

    # ==================== Read Accessors ====================

    @property
    def state(self) -> AppState:
        return self._state.model_copy(deep=True)

    @property
    def profile(self) -> UserProfile:
        return self._state.profile.model_copy(deep=True)

    @property
    def logs(self) -> dict[date, DayLog]:
        return {d: log.model_copy(deep=True) for d, log in self._state.logs.items()}

    @property
    def foods(self) -> list[FoodItem]:
        return [f.model_copy(deep=True) for f in self._state.foods]

    @property
    def templates(self) -> list[MealTemplate]:
        return [t.model_copy(deep=True) for t in self._state.templates]

    def get_day_log(self, log_date: date) -> DayLog:
        """The log for a date, or an empty (unsaved) log if none exists."""
        log = self._state.logs.get(log_date)
        if log is None:
            return DayLog(log_date=log_date)
        return log.model_copy(deep=True)

    def search_foods(self, query: str) -> list[FoodItem]:
        """Case-insensitive substring match on food names."""
        query_lower = query.lower()
        return [f for f in self.foods if query_lower in f.name.lower()]

    # ==================== Writes ====================

    def _commit(self, state: AppState) -> bool:
        if not self._repository.save_state(state):
            logger.error("State not persisted; keeping previous state")
            return False
        self._state = state
        return True

    def _update_state(self, change: Callable[[AppState], None]) -> AppState | None:
        with self._lock:
            state = self._state.model_copy(deep=True)
            change(state)
            if not self._commit(state):
                return None
            return state.model_copy(deep=True)

    def _update_day(self, log_date: date, change: Callable[[DayLog], None]) -> DayLog | None:
        def apply(state: AppState) -> None:
            log = state.logs.get(log_date)
            if log is None:
                log = DayLog(log_date=log_date)
            change(log)
            state.logs[log_date] = log

        state = self._update_state(apply)
        return state.logs[log_date] if state is not None else None

    def update_profile(self, profile: UserProfile) -> UserProfile | None:
        """Replace the profile wholesale (settings save)."""
        logger.info("Saving profile")

        def apply(state: AppState) -> None:
            state.profile = profile.model_copy(deep=True)

        state = self._update_state(apply)
        return state.profile if state is not None else None

    def add_meal(self, log_date: date, meal: MealEntry) -> DayLog | None:
        logger.info("Adding meal on %s: %s", log_date, meal.name)
        return self._update_day(log_date, lambda log: log.meals.append(meal.model_copy(deep=True)))

    def update_meal(self, log_date: date, meal: MealEntry) -> DayLog | None:
        """Replace the meal with the same id.

        Raises:
            EntryNotFoundError: If no meal with that id exists on the date
        """
        return self._update_day(log_date, lambda log: _replace_by_id(log.meals, meal, "Meal"))

    def delete_meal(self, log_date: date, meal_id: str) -> DayLog | None:
        return self._update_day(log_date, lambda log: _remove_by_id(log.meals, meal_id, "Meal"))

    def add_training(self, log_date: date, training: TrainingEntry) -> DayLog | None:
        logger.info("Adding training on %s: %s", log_date, training.type.value)
        return self._update_day(log_date, lambda log: log.training.append(training.model_copy(deep=True)))

    def update_training(self, log_date: date, training: TrainingEntry) -> DayLog | None:
        return self._update_day(
            log_date, lambda log: _replace_by_id(log.training, training, "Training")
        )

    def delete_training(self, log_date: date, training_id: str) -> DayLog | None:
        return self._update_day(
            log_date, lambda log: _remove_by_id(log.training, training_id, "Training")
        )

    def update_metrics(self, log_date: date, **updates: Any) -> DayLog | None:
        """Merge the given metric fields into the day's metrics.

        Raises:
            pydantic.ValidationError: If a merged value is invalid
        """

        def apply(log: DayLog) -> None:
            merged = log.metrics.model_dump()
            merged.update(updates)
            log.metrics = DayMetrics.model_validate(merged)

        return self._update_day(log_date, apply)

    def add_food(self, food: FoodItem) -> FoodItem | None:
        logger.info("Adding food to library: %s", food.name)
        state = self._update_state(lambda s: s.foods.append(food.model_copy(deep=True)))
        return food if state is not None else None

    def update_food(self, food: FoodItem) -> FoodItem | None:
        state = self._update_state(lambda s: _replace_by_id(s.foods, food, "Food"))
        return food if state is not None else None

    def remove_food(self, food_id: str) -> bool:
        return self._update_state(lambda s: _remove_by_id(s.foods, food_id, "Food")) is not None

    def add_template(self, template: MealTemplate) -> MealTemplate | None:
        logger.info("Adding meal template: %s", template.name)
        state = self._update_state(lambda s: s.templates.append(template.model_copy(deep=True)))
        return template if state is not None else None

    def replace_state(self, new_state: AppState) -> bool:
        """Swap in a whole new state, as produced by an import."""
        logger.info("Replacing state (%d logs)", len(new_state.logs))
        with self._lock:
            return self._commit(new_state.model_copy(deep=True))

    def reset(self) -> AppState | None:
        """Discard everything and return to a fresh installation.

        Returns:
            The fresh state, or None if it could not be persisted
        """
        logger.warning("Resetting all data")
        with self._lock:
            if not self._repository.clear():
                logger.error("Stored state not cleared; keeping previous state")
                return None
            state = fresh_state()
            if not self._commit(state):
                return None
            return state.model_copy(deep=True)
