# =============================================================================
# aed_core/inventory/status.py
# Operational status derivation for AED records
# =============================================================================
"""
Status Engine - derives an AED's readiness from its stored attributes.

The derived status is a read-time classification. It is recomputed every time
a record leaves the data layer and is never written back to any store.

Rules:
    battery expired  -> now is past CalculatedBatteryExpiryDate
    pads expired     -> now is past CalculatedPadsExpiryDate
    failed check     -> LastMonthlyCheckStatus contains "Fail"

    no issue         -> Operational
    one issue        -> label naming that issue
    two or more      -> "Needs: Battery & Pads" when both expiries fired,
                        otherwise "Needs: Multiple Issues"
"""

from __future__ import annotations
import math
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional, Union

import pandas as pd

from aed_core.inventory.models import AedRecord


class AedStatus(str, Enum):
    """Operational status labels shown to inspectors."""
    OPERATIONAL = "Operational"
    BATTERY_SERVICE = "Needs: Battery Service"
    PADS_REPLACEMENT = "Needs: Pads Replacement"
    ATTENTION = "Needs: Attention"
    BATTERY_AND_PADS = "Needs: Battery & Pads"
    MULTIPLE_ISSUES = "Needs: Multiple Issues"


ISSUE_BATTERY_EXPIRED = "Battery Expired"
ISSUE_PADS_EXPIRED = "Pads Expired"
ISSUE_FAILED_CHECK = "Failed Check"

_SINGLE_ISSUE_STATUS = {
    ISSUE_BATTERY_EXPIRED: AedStatus.BATTERY_SERVICE,
    ISSUE_PADS_EXPIRED: AedStatus.PADS_REPLACEMENT,
    ISSUE_FAILED_CHECK: AedStatus.ATTENTION,
}


@dataclass(frozen=True)
class StatusResult:
    """Outcome of a status derivation."""
    status: AedStatus
    needs_service: bool


def _to_utc(value: Union[str, datetime, pd.Timestamp, None]) -> Optional[pd.Timestamp]:
    """Parse a date into a UTC timestamp; None if missing or unparsable."""
    if value is None or value == "":
        return None
    try:
        ts = pd.Timestamp(value)
    except (ValueError, TypeError):
        return None
    if pd.isna(ts):
        return None
    if ts.tzinfo is None:
        return ts.tz_localize("UTC")
    return ts.tz_convert("UTC")


def resolve_now(now: Optional[datetime]) -> pd.Timestamp:
    return _to_utc(now) if now is not None else pd.Timestamp(datetime.now(timezone.utc))


def is_expired(expiry_date: Union[str, datetime, None], now: Optional[datetime] = None) -> bool:
    """
    True when ``now`` is past the expiry date.

    A missing or unparsable expiry date counts as expired: an AED whose
    battery or pads cannot be dated must be looked at.
    """
    expiry = _to_utc(expiry_date)
    if expiry is None:
        return True
    return resolve_now(now) > expiry


def list_issues(record: AedRecord, now: Optional[datetime] = None) -> List[str]:
    """Active issues for a record, in a fixed order."""
    now_ts = resolve_now(now)
    issues = []
    if is_expired(record.battery_expiry_date, now_ts):
        issues.append(ISSUE_BATTERY_EXPIRED)
    if is_expired(record.pads_expiry_date, now_ts):
        issues.append(ISSUE_PADS_EXPIRED)
    if "Fail" in (record.last_check_status or ""):
        issues.append(ISSUE_FAILED_CHECK)
    return issues


def derive_status(record: AedRecord, now: Optional[datetime] = None) -> StatusResult:
    """
    Derive the operational status of an AED.

    Args:
        record: The AED to classify
        now: Reference time (defaults to the current UTC time)

    Returns:
        StatusResult with the status label and the service-needed flag
    """
    issues = list_issues(record, now)

    if not issues:
        status = AedStatus.OPERATIONAL
    elif len(issues) == 1:
        status = _SINGLE_ISSUE_STATUS[issues[0]]
    elif ISSUE_BATTERY_EXPIRED in issues and ISSUE_PADS_EXPIRED in issues:
        status = AedStatus.BATTERY_AND_PADS
    else:
        status = AedStatus.MULTIPLE_ISSUES

    return StatusResult(status=status, needs_service=status != AedStatus.OPERATIONAL)


def enrich(record: AedRecord, now: Optional[datetime] = None) -> AedRecord:
    """Copy of ``record`` carrying freshly derived status fields."""
    result = derive_status(record, now)
    return replace(
        record,
        calculated_status=result.status.value,
        needs_service=result.needs_service,
    )


def is_urgent(record: AedRecord, now: Optional[datetime] = None) -> bool:
    """Two or more simultaneous issues."""
    return len(list_issues(record, now)) > 1


def days_since_expiry(expiry_date: Union[str, datetime, None], now: Optional[datetime] = None) -> int:
    """
    Whole days (rounded up) since the expiry date; 0 if not yet expired
    or if the date is unknown.
    """
    expiry = _to_utc(expiry_date)
    if expiry is None:
        return 0
    elapsed = (resolve_now(now) - expiry).total_seconds()
    if elapsed <= 0:
        return 0
    return math.ceil(elapsed / 86400)
