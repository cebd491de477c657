"""Shared fixtures."""

from datetime import date

import pytest

from cuttracker.core.defaults import default_profile
from cuttracker.core.models import AppState, DayLog, Macros, MealEntry, TrainingEntry, UserProfile
from cuttracker.shell.store import AppStore, StateLoadError


@pytest.fixture
def profile() -> UserProfile:
    """Default profile: TDEE 2150, targets 1900/1800/1800/1700, exercise not counted."""
    return default_profile()


@pytest.fixture
def make_log():
    """Build a DayLog from meal calories and training types."""

    def _make(
        log_date: date,
        meals: list[int] = (),
        training: list[str] = (),
        burned: int | None = None,
        protein: float = 0,
        **metrics,
    ) -> DayLog:
        return DayLog(
            log_date=log_date,
            meals=[
                MealEntry(name=f"Meal {i}", calories=kcal, macros=Macros(protein=protein))
                for i, kcal in enumerate(meals)
            ],
            training=[
                TrainingEntry(type=t, duration_min=30, calories_burned=burned) for t in training
            ],
            metrics=metrics,
        )

    return _make


class InMemoryRepository:
    """In-memory repository for tests."""

    def __init__(self, state: AppState | None = None) -> None:
        self.state = state
        self.saves = 0
        self.fail_saves = False
        self.fail_clears = False
        self.unreadable = False

    def load_state(self) -> AppState | None:
        if self.unreadable:
            raise StateLoadError("unreadable")
        return self.state.model_copy(deep=True) if self.state is not None else None

    def save_state(self, state: AppState) -> bool:
        if self.fail_saves:
            return False
        self.saves += 1
        self.state = state.model_copy(deep=True)
        return True

    def clear(self) -> bool:
        if self.fail_clears:
            return False
        self.state = None
        return True


@pytest.fixture
def repository() -> InMemoryRepository:
    return InMemoryRepository()


@pytest.fixture
def store(repository) -> AppStore:
    app_store = AppStore(repository)
    app_store.load()
    return app_store
