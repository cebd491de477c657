"""Export / Import - JSON round-trip of the whole state and a flat CSV export.

Validation of imported files happens here, never in the calculation engine.
"""

import csv
import io
import logging

from pydantic import ValidationError

from ..core.models import AppState, DayLog, DayMetrics


logger = logging.getLogger(__name__)

CSV_HEADER = ["Date", "Meal", "Calories", "Protein", "Carbs", "Fat", "Training", "Steps", "Weight"]


class ImportFormatError(ValueError):
    """Raised when an import file is not valid tracker JSON."""


def export_json(state: AppState) -> str:
    """Serialize {profile, logs, foods, templates} as indented JSON."""
    return state.model_dump_json(indent=2)


def import_json(raw: str | bytes) -> AppState:
    """Parse an exported JSON document back into an AppState.

    Logs are re-keyed by their own log_date.

    Args:
        raw: JSON text as produced by export_json

    Returns:
        The parsed state

    Raises:
        ImportFormatError: If the text is not JSON or does not match the schema
    """
    try:
        state = AppState.model_validate_json(raw)
    except ValidationError as e:
        logger.warning("Rejected import: %d validation errors", e.error_count())
        raise ImportFormatError(
            "Could not import data. Please check the file format and try again."
        ) from e

    state.logs = {log.log_date: log for log in state.logs.values()}
    logger.info("Imported state with %d logs and %d foods", len(state.logs), len(state.foods))
    return state


def _num(value: float | int | None) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _training_summary(log: DayLog) -> str:
    return "; ".join(f"{t.type.value} {t.duration_min}min" for t in log.training)


def _has_other_activity(log: DayLog) -> bool:
    return bool(log.training) or log.metrics != DayMetrics()


def export_csv(state: AppState) -> str:
    """Flatten the logs to one row per meal, oldest date first.

    Days without meals but with training or metrics get one placeholder row
    with the meal columns left blank. Days with nothing at all are omitted.
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_HEADER)

    for log_date, log in sorted(state.logs.items()):
        training = _training_summary(log)
        steps = _num(log.metrics.steps)
        weight = _num(log.metrics.weight_kg)

        if not log.meals and _has_other_activity(log):
            writer.writerow([log_date.isoformat(), "", "", "", "", "", training, steps, weight])

        for meal in log.meals:
            writer.writerow([
                log_date.isoformat(),
                meal.name,
                meal.calories,
                _num(meal.macros.protein),
                _num(meal.macros.carbs),
                _num(meal.macros.fat),
                training,
                steps,
                weight,
            ])

    return buffer.getvalue()
