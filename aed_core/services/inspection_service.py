# =============================================================================
# aed_core/services/inspection_service.py
# Inspection Service - Monthly checks and check history
# =============================================================================

from __future__ import annotations
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Optional

from .base_service import BaseService, ServiceResult
from aed_core.errors import NotFoundError, ValidationError
from aed_core.inventory.validators import validate_monthly_check

if TYPE_CHECKING:
    from aed_core.offline.data_service import AedDataService

MONTHLY_CHECK = "Monthly Check"


def monthly_check_title(aed_title: str, when: datetime) -> str:
    """Log entry title, e.g. ``CU-AED-001 - Monthly Check - 05/01/2025``."""
    return f"{aed_title} - {MONTHLY_CHECK} - {when.strftime('%m/%d/%Y')}"


def _iso(when: datetime) -> str:
    if when.tzinfo is None:
        when = when.replace(tzinfo=timezone.utc)
    return when.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


class InspectionService(BaseService):
    """
    Service for inspector workflows.

    Handles:
    - Logging a monthly check (updates the AED and appends to the log)
    - Check history for one AED

    Usage:
        service = InspectionService()
        result = await service.record_monthly_check(
            "CU-AED-001", "Derek Haase", "Pass", "Green light flashing."
        )
        if result.success:
            print(result.data["aed"].calculated_status)
    """

    def __init__(self, data_service: Optional[AedDataService] = None):
        super().__init__()
        self._data_service = data_service

    @property
    def data_service(self) -> AedDataService:
        if self._data_service is None:
            from aed_core.offline.data_service import get_data_service
            self._data_service = get_data_service()
        return self._data_service

    async def record_monthly_check(
        self,
        title: str,
        checked_by: str,
        status: str,
        notes: str,
        now: Optional[datetime] = None,
    ) -> ServiceResult:
        """
        Record a monthly check against an AED.

        Works offline: both the log entry and the AED update are queued.

        Not atomic. The log entry is written first, so if the AED update
        then fails the check is still on record (with the AED showing its
        previous check) and the result is a failure carrying the error.

        Args:
            title: Title of the inspected AED
            checked_by: Inspector name
            status: One of the check statuses ("Pass", "Pass - Minor Issues",
                "Fail - Needs Attention")
            notes: What the inspector saw or did
            now: Check time (defaults to the current UTC time)

        Returns:
            ServiceResult whose data holds the updated ``aed`` and the new
            ``log_entry``
        """
        async def _record():
            errors = validate_monthly_check({
                "checkedBy": checked_by,
                "checkStatus": status,
                "checkNotes": notes,
            })
            if errors:
                raise ValidationError("Monthly check is incomplete", errors=errors)

            aed = await self.data_service.get_aed_by_title(title)
            if aed is None:
                raise NotFoundError("AED not found", title=title)

            checked_at = now or datetime.now(timezone.utc)
            timestamp = _iso(checked_at)

            entry = await self.data_service.create_log_entry({
                "Title": monthly_check_title(aed.title, checked_at),
                "AedLinkTitle": aed.title,
                "SubmissionTimestamp": timestamp,
                "SubmittedBy": checked_by,
                "SubmissionType": MONTHLY_CHECK,
                "SummaryOfAction": notes,
            })
            updated = await self.data_service.update_aed({
                "Title": aed.title,
                "LastMonthlyCheckDate": timestamp,
                "LastMonthlyCheckBy": checked_by,
                "LastMonthlyCheckStatus": status,
                "LastMonthlyCheckNotes": notes,
            })
            return {"aed": updated, "log_entry": entry}

        return await self.safe_execute_async(f"Recording monthly check for {title}", _record)

    async def get_check_history(self, title: str) -> ServiceResult:
        """Log entries for one AED, newest first."""
        async def _history():
            entries = await self.data_service.get_log_entries_for_aed(title)
            return sorted(
                entries,
                key=lambda entry: entry.submission_timestamp or "",
                reverse=True,
            )

        return await self.safe_execute_async(f"Loading check history for {title}", _history)
