"""Tests for JSON import/export and CSV export."""

import json

import pytest
from datetime import date

from cuttracker.core.models import DayLog, DayMetrics, Macros, MealEntry, TrainingEntry
from cuttracker.shell.store import fresh_state
from cuttracker.shell.transfer import (
    ImportFormatError,
    export_csv,
    export_json,
    import_json,
)


def _state_with_logs():
    state = fresh_state()
    state.logs = {
        date(2026, 3, 3): DayLog(
            log_date=date(2026, 3, 3),
            meals=[
                MealEntry(name="Oats, banana", calories=300, macros=Macros(protein=10, carbs=50, fat=5.5)),
                MealEntry(name="Chicken", calories=500, macros=Macros(protein=45, carbs=40, fat=12)),
            ],
            training=[TrainingEntry(type="Run Z2", duration_min=40)],
            metrics=DayMetrics(steps=9000, weight_kg=60.2),
        ),
        date(2026, 3, 2): DayLog(
            log_date=date(2026, 3, 2),
            training=[TrainingEntry(type="Hybrid", duration_min=60)],
        ),
        date(2026, 3, 4): DayLog(log_date=date(2026, 3, 4)),
    }
    return state


class TestJsonRoundTrip:
    """Tests for export_json and import_json."""

    def test_export_shape(self):
        """The export holds profile, logs, foods and templates."""
        data = json.loads(export_json(_state_with_logs()))
        assert set(data) == {"profile", "logs", "foods", "templates"}
        assert "2026-03-03" in data["logs"]
        assert data["profile"]["start_date"] == "2026-02-25"

    def test_import_restores_state(self):
        state = _state_with_logs()
        restored = import_json(export_json(state))
        assert restored == state

    def test_import_rekeys_logs_by_date(self):
        """A log stored under the wrong date key lands on its own date."""
        data = json.loads(export_json(_state_with_logs()))
        data["logs"] = {"2026-03-09": data["logs"]["2026-03-03"]}
        restored = import_json(json.dumps(data))
        assert list(restored.logs) == [date(2026, 3, 3)]

    def test_invalid_log_key_rejected(self):
        data = json.loads(export_json(_state_with_logs()))
        data["logs"] = {"yesterday": data["logs"]["2026-03-03"]}
        with pytest.raises(ImportFormatError):
            import_json(json.dumps(data))

    def test_malformed_json(self):
        """Malformed JSON fails with an actionable message."""
        with pytest.raises(ImportFormatError, match="check the file format"):
            import_json("{ not json")

    def test_wrong_structure(self):
        with pytest.raises(ImportFormatError):
            import_json(json.dumps({"logs": []}))


class TestExportCsv:
    """Tests for export_csv."""

    def test_rows(self):
        """One row per meal, a placeholder for training-only days, empty days omitted."""
        lines = export_csv(_state_with_logs()).splitlines()
        assert lines == [
            "Date,Meal,Calories,Protein,Carbs,Fat,Training,Steps,Weight",
            "2026-03-02,,,,,,Hybrid 60min,,",
            '2026-03-03,"Oats, banana",300,10,50,5.5,Run Z2 40min,9000,60.2',
            "2026-03-03,Chicken,500,45,40,12,Run Z2 40min,9000,60.2",
        ]

    def test_metrics_only_day_gets_placeholder(self):
        state = fresh_state()
        state.logs = {
            date(2026, 3, 5): DayLog(log_date=date(2026, 3, 5), metrics=DayMetrics(weight_kg=59.8)),
        }
        lines = export_csv(state).splitlines()
        assert lines[1] == "2026-03-05,,,,,,,,59.8"

    def test_empty_state(self):
        assert export_csv(fresh_state()) == "Date,Meal,Calories,Protein,Carbs,Fat,Training,Steps,Weight\n"

    def test_macros_keep_full_precision(self):
        """Fractional values are written as-is, whole values without a decimal point."""
        state = fresh_state()
        state.logs = {
            date(2026, 3, 5): DayLog(
                log_date=date(2026, 3, 5),
                meals=[
                    MealEntry(
                        name="Shake",
                        calories=1234567,
                        macros=Macros(protein=123.4567, carbs=20.0, fat=0.125),
                    )
                ],
            ),
        }
        lines = export_csv(state).splitlines()
        assert lines[1] == "2026-03-05,Shake,1234567,123.4567,20,0.125,,,"
