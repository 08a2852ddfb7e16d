# =============================================================================
# tests/unit/test_status_engine.py
# Unit Tests for AED status derivation
# =============================================================================

from datetime import datetime, timezone

import pytest

from aed_core.inventory.models import AedRecord
from aed_core.inventory.status import (
    AedStatus,
    days_since_expiry,
    derive_status,
    enrich,
    is_expired,
    is_urgent,
    list_issues,
)

NOW = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)
PAST = "2024-01-01T00:00:00Z"
FUTURE = "2027-01-01T00:00:00Z"


def make_aed(battery=FUTURE, pads=FUTURE, check="Pass"):
    return AedRecord(
        title="CU-AED-001",
        battery_expiry_date=battery,
        pads_expiry_date=pads,
        last_check_status=check,
    )


class TestDeriveStatus:
    """Status labels for every issue combination"""

    @pytest.mark.parametrize("battery, pads, check, expected", [
        (FUTURE, FUTURE, "Pass", AedStatus.OPERATIONAL),
        (PAST, FUTURE, "Pass", AedStatus.BATTERY_SERVICE),
        (FUTURE, PAST, "Pass", AedStatus.PADS_REPLACEMENT),
        (FUTURE, FUTURE, "Fail - Needs Attention", AedStatus.ATTENTION),
        (PAST, PAST, "Pass", AedStatus.BATTERY_AND_PADS),
        (PAST, PAST, "Fail - Needs Attention", AedStatus.BATTERY_AND_PADS),
        (PAST, FUTURE, "Fail - Needs Attention", AedStatus.MULTIPLE_ISSUES),
        (FUTURE, PAST, "Fail - Needs Attention", AedStatus.MULTIPLE_ISSUES),
    ])
    def test_status_table(self, battery, pads, check, expected):
        result = derive_status(make_aed(battery, pads, check), now=NOW)

        assert result.status == expected
        assert result.needs_service == (expected != AedStatus.OPERATIONAL)

    def test_minor_issues_pass_is_not_a_failure(self):
        result = derive_status(make_aed(check="Pass - Minor Issues"), now=NOW)
        assert result.status == AedStatus.OPERATIONAL

    def test_fail_match_is_case_sensitive(self):
        result = derive_status(make_aed(check="failed"), now=NOW)
        assert result.status == AedStatus.OPERATIONAL

    def test_expiry_exactly_now_is_not_expired(self):
        """Expiry fires strictly after the expiry instant"""
        at_now = "2025-06-01T12:00:00Z"
        assert not is_expired(at_now, NOW)
        assert is_expired(at_now, datetime(2025, 6, 1, 12, 0, 1, tzinfo=timezone.utc))

    def test_missing_expiry_counts_as_expired(self):
        result = derive_status(make_aed(battery=None), now=NOW)
        assert result.status == AedStatus.BATTERY_SERVICE

    def test_unparsable_expiry_counts_as_expired(self):
        result = derive_status(make_aed(pads="not a date"), now=NOW)
        assert result.status == AedStatus.PADS_REPLACEMENT

    def test_naive_dates_are_treated_as_utc(self):
        assert is_expired("2025-06-01T11:59:00", NOW)
        assert not is_expired("2025-06-01T12:01:00", NOW)


class TestDerivationProperties:
    """Properties over a randomized inventory"""

    def test_needs_service_matches_status(self, random_aed_records, fixed_now):
        for row in random_aed_records:
            result = derive_status(AedRecord.from_dict(row), now=fixed_now)
            assert result.needs_service == (result.status != AedStatus.OPERATIONAL)

    def test_derivation_is_deterministic(self, random_aed_records, fixed_now):
        for row in random_aed_records:
            record = AedRecord.from_dict(row)
            assert derive_status(record, fixed_now) == derive_status(record, fixed_now)

    def test_status_ignores_unrelated_fields(self, random_aed_records, fixed_now):
        for row in random_aed_records[:50]:
            record = AedRecord.from_dict(row)
            relabeled = AedRecord.from_dict({**row, "BuildingName": "Elsewhere", "Notes": "x"})
            assert derive_status(record, fixed_now) == derive_status(relabeled, fixed_now)


class TestHelpers:
    """Issue listing, urgency and enrichment"""

    def test_list_issues_order(self):
        issues = list_issues(make_aed(PAST, PAST, "Fail - Needs Attention"), now=NOW)
        assert issues == ["Battery Expired", "Pads Expired", "Failed Check"]

    def test_is_urgent_needs_two_issues(self):
        assert not is_urgent(make_aed(battery=PAST), now=NOW)
        assert is_urgent(make_aed(battery=PAST, check="Fail - Needs Attention"), now=NOW)

    def test_days_since_expiry_rounds_up(self):
        assert days_since_expiry("2025-05-31T00:00:00Z", NOW) == 2
        assert days_since_expiry("2025-06-01T00:00:00Z", NOW) == 1

    def test_days_since_expiry_zero_when_valid_or_unknown(self):
        assert days_since_expiry(FUTURE, NOW) == 0
        assert days_since_expiry(None, NOW) == 0

    def test_enrich_returns_copy_with_status(self):
        record = make_aed(battery=PAST)
        enriched = enrich(record, now=NOW)

        assert enriched.calculated_status == "Needs: Battery Service"
        assert enriched.needs_service is True
        assert record.calculated_status is None
