# =============================================================================
# aed_core/inventory/models.py
# AED inventory records, inspection log entries and pending operations
# =============================================================================
"""
Data classes for the inventory and its submission log.

Records are stored and exchanged with the SharePoint-style column names the
campus lists use (``Title``, ``BuildingName``, ``AedLinkTitle``, ...). The
``FIELD_MAP`` tables translate between those names and attribute names.
"""

from __future__ import annotations
import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Mapping, Optional

import pandas as pd


def utc_now_iso() -> str:
    """Current UTC time as an ISO-8601 string with a ``Z`` suffix."""
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def add_months(install_date: Optional[str], months: Optional[int]) -> Optional[str]:
    """
    Add calendar months to an ISO date string.

    Returns None when either input is missing or the date cannot be parsed.
    """
    if not install_date or months is None:
        return None
    try:
        start = pd.Timestamp(install_date)
        months = int(months)
    except (ValueError, TypeError):
        return None
    if pd.isna(start):
        return None
    expiry = start + pd.DateOffset(months=months)
    if expiry.tzinfo is None:
        expiry = expiry.tz_localize("UTC")
    return expiry.tz_convert("UTC").strftime("%Y-%m-%dT%H:%M:%SZ")


# =============================================================================
# AED RECORD
# =============================================================================

AED_FIELD_MAP = {
    "id": "id",
    "title": "Title",
    "building_name": "BuildingName",
    "building_code": "BuildingCode",
    "floor": "Floor",
    "location_description": "SpecificLocationDescription",
    "latitude": "Latitude",
    "longitude": "Longitude",
    "is_publicly_accessible": "IsPubliclyAccessible",
    "photo_of_location": "PhotoOfLocation",
    "manufacturer": "Manufacturer",
    "model": "Model",
    "serial_number": "SerialNumber",
    "battery_install_date": "BatteryInstallDate",
    "battery_lifespan_months": "BatteryLifespanMonths",
    "battery_expiry_date": "CalculatedBatteryExpiryDate",
    "pads_install_date": "PadsInstallDate",
    "pads_lifespan_months": "PadsLifespanMonths",
    "pads_type": "PadsType",
    "pads_expiry_date": "CalculatedPadsExpiryDate",
    "last_check_date": "LastMonthlyCheckDate",
    "last_check_by": "LastMonthlyCheckBy",
    "last_check_status": "LastMonthlyCheckStatus",
    "last_check_notes": "LastMonthlyCheckNotes",
    "notes": "Notes",
    "created": "Created",
    "modified": "Modified",
}

# Computed on read, never written to any store
AED_DERIVED_FIELDS = {
    "calculated_status": "CalculatedStatus",
    "needs_service": "NeedsService",
}

_AED_COLUMN_TO_ATTR = {column: attr for attr, column in AED_FIELD_MAP.items()}


@dataclass
class AedRecord:
    """One defibrillator and everything known about its readiness."""
    title: str
    id: Optional[int] = None
    building_name: str = ""
    building_code: str = ""
    floor: str = ""
    location_description: str = ""
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    is_publicly_accessible: bool = False
    photo_of_location: Optional[str] = None
    manufacturer: str = ""
    model: str = ""
    serial_number: str = ""
    battery_install_date: Optional[str] = None
    battery_lifespan_months: Optional[int] = None
    battery_expiry_date: Optional[str] = None
    pads_install_date: Optional[str] = None
    pads_lifespan_months: Optional[int] = None
    pads_type: str = ""
    pads_expiry_date: Optional[str] = None
    last_check_date: Optional[str] = None
    last_check_by: str = ""
    last_check_status: str = ""
    last_check_notes: str = ""
    notes: str = ""
    created: Optional[str] = None
    modified: Optional[str] = None
    calculated_status: Optional[str] = None
    needs_service: Optional[bool] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> AedRecord:
        """Build a record from column-named data; unknown columns are ignored."""
        kwargs = {}
        for column, value in data.items():
            attr = _AED_COLUMN_TO_ATTR.get(column)
            if attr is not None:
                kwargs[attr] = value
        if "title" not in kwargs:
            kwargs["title"] = ""
        return cls(**kwargs)

    def to_dict(self, include_derived: bool = False) -> Dict[str, Any]:
        """Column-named dict; derived status fields only on request."""
        data = {column: getattr(self, attr) for attr, column in AED_FIELD_MAP.items()}
        if include_derived:
            for attr, column in AED_DERIVED_FIELDS.items():
                data[column] = getattr(self, attr)
        return data

    def merged(self, changes: Mapping[str, Any]) -> AedRecord:
        """Copy of this record with column-named ``changes`` applied."""
        updates = {
            _AED_COLUMN_TO_ATTR[column]: value
            for column, value in changes.items()
            if column in _AED_COLUMN_TO_ATTR
        }
        return replace(self, **updates)

    def without_derived(self) -> AedRecord:
        return replace(self, calculated_status=None, needs_service=None)

    def with_calculated_expiry(self, force: bool = False) -> AedRecord:
        """
        Fill in battery/pads expiry dates from install date + lifespan.

        Existing expiry dates are kept unless ``force`` is set.
        """
        battery = self.battery_expiry_date
        pads = self.pads_expiry_date
        if force or not battery:
            battery = add_months(self.battery_install_date, self.battery_lifespan_months) or battery
        if force or not pads:
            pads = add_months(self.pads_install_date, self.pads_lifespan_months) or pads
        return replace(self, battery_expiry_date=battery, pads_expiry_date=pads)


# =============================================================================
# LOG ENTRY
# =============================================================================

LOG_FIELD_MAP = {
    "log_id": "logId",
    "title": "Title",
    "aed_link_title": "AedLinkTitle",
    "submission_timestamp": "SubmissionTimestamp",
    "submitted_by": "SubmittedBy",
    "submission_type": "SubmissionType",
    "summary_of_action": "SummaryOfAction",
    "app_version": "AppVersion",
    "created": "Created",
    "modified": "Modified",
}

_LOG_COLUMN_TO_ATTR = {column: attr for attr, column in LOG_FIELD_MAP.items()}


@dataclass
class LogEntry:
    """A submission logged against an AED, such as a monthly check."""
    aed_link_title: str
    log_id: Optional[int] = None
    title: str = ""
    submission_timestamp: Optional[str] = None
    submitted_by: str = ""
    submission_type: str = ""
    summary_of_action: str = ""
    app_version: Optional[str] = None
    created: Optional[str] = None
    modified: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> LogEntry:
        kwargs = {
            _LOG_COLUMN_TO_ATTR[column]: value
            for column, value in data.items()
            if column in _LOG_COLUMN_TO_ATTR
        }
        if "aed_link_title" not in kwargs:
            kwargs["aed_link_title"] = ""
        return cls(**kwargs)

    def to_dict(self) -> Dict[str, Any]:
        return {column: getattr(self, attr) for attr, column in LOG_FIELD_MAP.items()}


# =============================================================================
# PENDING OPERATION
# =============================================================================

class OperationType(str, Enum):
    """Mutations that can be queued while offline."""
    ADD_AED = "ADD_AED"
    UPDATE_AED = "UPDATE_AED"
    ADD_LOG = "ADD_LOG"


@dataclass
class PendingOperation:
    """A mutation made while offline, waiting to be replayed."""
    operation_type: OperationType
    payload: Dict[str, Any]
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    created_at: str = field(default_factory=utc_now_iso)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": self.operation_type.value,
            "payload": self.payload,
            "timestamp": self.created_at,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> PendingOperation:
        return cls(
            operation_type=OperationType(data["type"]),
            payload=dict(data.get("payload") or {}),
            id=data["id"],
            created_at=data.get("timestamp") or utc_now_iso(),
        )
