# =============================================================================
# aed_core/inventory/__init__.py
# Inventory domain: records, status derivation, validation
# =============================================================================

from aed_core.inventory.models import (
    AedRecord,
    LogEntry,
    OperationType,
    PendingOperation,
    add_months,
    utc_now_iso,
)

from aed_core.inventory.status import (
    AedStatus,
    StatusResult,
    derive_status,
    enrich,
    list_issues,
    is_expired,
    is_urgent,
    days_since_expiry,
)

from aed_core.inventory.validators import (
    CHECK_STATUSES,
    validate_aed,
    validate_monthly_check,
)

__all__ = [
    # Models
    "AedRecord",
    "LogEntry",
    "OperationType",
    "PendingOperation",
    "add_months",
    "utc_now_iso",
    # Status Engine
    "AedStatus",
    "StatusResult",
    "derive_status",
    "enrich",
    "list_issues",
    "is_expired",
    "is_urgent",
    "days_since_expiry",
    # Validation
    "CHECK_STATUSES",
    "validate_aed",
    "validate_monthly_check",
]
