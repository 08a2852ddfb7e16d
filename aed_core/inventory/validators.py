"""Validation rules for AED records and monthly check submissions."""

import math
from typing import Any, Dict, Mapping


REQUIRED_AED_FIELDS = {
    "Title": "Title is required",
    "BuildingName": "Building name is required",
    "Floor": "Floor is required",
    "SpecificLocationDescription": "Specific location is required",
    "Manufacturer": "Manufacturer is required",
    "Model": "Model is required",
    "SerialNumber": "Serial number is required",
}

CHECK_STATUSES = ("Pass", "Pass - Minor Issues", "Fail - Needs Attention")

MIN_LIFESPAN_MONTHS = 1
MAX_LIFESPAN_MONTHS = 120


def _is_blank(value: Any) -> bool:
    return value is None or str(value).strip() == ""


def _as_float(value: Any):
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _as_int(value: Any):
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def validate_aed(data: Mapping[str, Any]) -> Dict[str, str]:
    """
    Validate an AED payload keyed by column name.

    Returns a dict of column -> message; empty when the payload is valid.
    """
    errors: Dict[str, str] = {}

    for column, message in REQUIRED_AED_FIELDS.items():
        if _is_blank(data.get(column)):
            errors[column] = message

    lat = _as_float(data.get("Latitude"))
    if lat is None or math.isnan(lat) or not -90 <= lat <= 90:
        errors["Latitude"] = "Valid latitude (-90 to 90) is required"

    lng = _as_float(data.get("Longitude"))
    if lng is None or math.isnan(lng) or not -180 <= lng <= 180:
        errors["Longitude"] = "Valid longitude (-180 to 180) is required"

    for column, label in (("BatteryLifespanMonths", "Battery"), ("PadsLifespanMonths", "Pads")):
        months = _as_int(data.get(column))
        if months is None or not MIN_LIFESPAN_MONTHS <= months <= MAX_LIFESPAN_MONTHS:
            errors[column] = (
                f"{label} lifespan must be {MIN_LIFESPAN_MONTHS}-{MAX_LIFESPAN_MONTHS} months"
            )

    return errors


def validate_monthly_check(data: Mapping[str, Any]) -> Dict[str, str]:
    """Validate a monthly check form: inspector and notes are required."""
    errors: Dict[str, str] = {}
    if "checkStatus" in data and data["checkStatus"] not in CHECK_STATUSES:
        errors["checkStatus"] = "Select a check status"
    if _is_blank(data.get("checkedBy")):
        errors["checkedBy"] = "Checked by field is required"
    if _is_blank(data.get("checkNotes")):
        errors["checkNotes"] = "Check notes are required"
    return errors
