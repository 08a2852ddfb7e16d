# =============================================================================
# tests/unit/test_models.py
# Unit Tests for inventory records and pending operations
# =============================================================================

import pytest

from aed_core.inventory.models import (
    AedRecord,
    LogEntry,
    OperationType,
    PendingOperation,
    add_months,
    utc_now_iso,
)


class TestAddMonths:
    """Calendar month arithmetic for expiry dates"""

    def test_whole_years(self):
        assert add_months("2024-01-15T00:00:00Z", 60) == "2029-01-15T00:00:00Z"

    def test_month_end_is_clamped(self):
        assert add_months("2025-01-31T00:00:00Z", 1) == "2025-02-28T00:00:00Z"
        assert add_months("2024-01-31T00:00:00Z", 1) == "2024-02-29T00:00:00Z"

    def test_date_only_input(self):
        assert add_months("2023-06-01", 24) == "2025-06-01T00:00:00Z"

    @pytest.mark.parametrize("install, months", [
        (None, 12),
        ("", 12),
        ("2024-01-01", None),
        ("garbage", 12),
        ("2024-01-01", "twelve"),
    ])
    def test_missing_or_bad_input(self, install, months):
        assert add_months(install, months) is None


class TestAedRecord:
    """Column mapping and expiry calculation"""

    def test_from_dict_ignores_unknown_columns(self):
        record = AedRecord.from_dict({"Title": "CU-AED-001", "Floor": "2", "Bogus": 1})

        assert record.title == "CU-AED-001"
        assert record.floor == "2"

    def test_to_dict_excludes_derived_by_default(self):
        record = AedRecord(title="CU-AED-001", calculated_status="Operational", needs_service=False)

        assert "CalculatedStatus" not in record.to_dict()
        assert record.to_dict(include_derived=True)["CalculatedStatus"] == "Operational"

    def test_merged_applies_column_changes(self):
        record = AedRecord(title="CU-AED-001", notes="old", floor="1")
        merged = record.merged({"Notes": "new"})

        assert merged.notes == "new"
        assert merged.floor == "1"
        assert record.notes == "old"

    def test_with_calculated_expiry_fills_missing(self):
        record = AedRecord(
            title="CU-AED-001",
            battery_install_date="2024-03-01T00:00:00Z",
            battery_lifespan_months=48,
            pads_install_date="2024-03-01T00:00:00Z",
            pads_lifespan_months=24,
        ).with_calculated_expiry()

        assert record.battery_expiry_date == "2028-03-01T00:00:00Z"
        assert record.pads_expiry_date == "2026-03-01T00:00:00Z"

    def test_with_calculated_expiry_keeps_existing_unless_forced(self):
        record = AedRecord(
            title="CU-AED-001",
            battery_install_date="2024-03-01T00:00:00Z",
            battery_lifespan_months=48,
            battery_expiry_date="2030-01-01T00:00:00Z",
        )

        assert record.with_calculated_expiry().battery_expiry_date == "2030-01-01T00:00:00Z"
        assert record.with_calculated_expiry(force=True).battery_expiry_date == "2028-03-01T00:00:00Z"


class TestPendingOperation:
    """Queue entry serialization"""

    def test_to_dict_shape(self):
        operation = PendingOperation(OperationType.ADD_LOG, {"AedLinkTitle": "CU-AED-001"})
        data = operation.to_dict()

        assert set(data) == {"id", "type", "payload", "timestamp"}
        assert data["type"] == "ADD_LOG"
        assert data["timestamp"].endswith("Z")

    def test_from_dict_restores_operation(self):
        operation = PendingOperation(OperationType.UPDATE_AED, {"Title": "CU-AED-002"})
        restored = PendingOperation.from_dict(operation.to_dict())

        assert restored.id == operation.id
        assert restored.operation_type is OperationType.UPDATE_AED
        assert restored.payload == {"Title": "CU-AED-002"}

    def test_unknown_type_is_rejected(self):
        with pytest.raises(ValueError):
            PendingOperation.from_dict({"id": "x", "type": "DELETE_AED", "payload": {}})

    def test_ids_are_unique(self):
        ids = {PendingOperation(OperationType.ADD_AED, {}).id for _ in range(100)}
        assert len(ids) == 100


def test_log_entry_round_trip_uses_column_names():
    entry = LogEntry.from_dict({
        "logId": 3,
        "AedLinkTitle": "CU-AED-001",
        "SubmissionType": "Monthly Check",
    })

    assert entry.log_id == 3
    assert entry.to_dict()["AedLinkTitle"] == "CU-AED-001"


def test_utc_now_iso_has_z_suffix():
    assert utc_now_iso().endswith("Z")
