"""JSON File Repository - Local persistence for the whole application state.

This module handles all disk I/O for the tracker.
All I/O is contained here; business logic is in the core module.
"""

import logging
import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path

from pydantic import ValidationError

from ..core.models import AppState
from .store import StateLoadError


logger = logging.getLogger(__name__)


def _default_path() -> Path:
    return Path(os.environ.get("CUTTRACKER_DATA_PATH", "cuttracker.json"))


@dataclass
class StoreConfig:
    """Configuration for the JSON file repository.

    Attributes:
        path: Location of the state file (CUTTRACKER_DATA_PATH by default)
    """

    path: Path = field(default_factory=_default_path)


class JsonFileRepository:
    """Persists the entire AppState as a single JSON document.

    Document structure:
        {
            "profile": { start_date, goal_date, calorie_targets, ... },
            "logs": { "YYYY-MM-DD": { log_date, meals, training, metrics } },
            "foods": [...],
            "templates": [...]
        }
    """

    def __init__(self, config: StoreConfig | None = None) -> None:
        self.config = config or StoreConfig()

    @property
    def path(self) -> Path:
        return Path(self.config.path)

    def load_state(self) -> AppState | None:
        """Read the stored state.

        Returns:
            AppState if a valid file exists, None if there is no file

        Raises:
            StateLoadError: If the file exists but cannot be read or validated
        """
        logger.debug("Loading state from %s", self.path)
        if not self.path.exists():
            return None
        try:
            return AppState.model_validate_json(self.path.read_text(encoding="utf-8"))
        except (OSError, ValidationError) as e:
            logger.error("Failed to load state: %s", str(e))
            raise StateLoadError(f"Could not read state file {self.path}") from e

    def save_state(self, state: AppState) -> bool:
        """Write the state atomically (temp file + replace).

        Args:
            state: The state to persist

        Returns:
            True if successful
        """
        logger.debug("Saving state to %s (%d logs)", self.path, len(state.logs))
        tmp_name = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w", encoding="utf-8", dir=self.path.parent, suffix=".tmp", delete=False
            ) as tmp:
                tmp_name = tmp.name
                tmp.write(state.model_dump_json(indent=2))
            os.replace(tmp_name, self.path)
            return True
        except OSError as e:
            logger.error("Failed to save state: %s", str(e))
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            return False

    def clear(self) -> bool:
        """Delete the state file if present.

        Returns:
            True if successful
        """
        logger.info("Clearing stored state at %s", self.path)
        try:
            self.path.unlink(missing_ok=True)
            return True
        except OSError as e:
            logger.error("Failed to clear state: %s", str(e))
            return False
