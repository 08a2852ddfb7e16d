"""
KPI Service - Calculate readiness KPIs for the AED inventory.

Aggregates the inventory and the submission log into the numbers shown on
the dashboard, and orders the service list so the worst units come first.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Dict, List, Optional

import numpy as np
import pandas as pd

from aed_core.inventory.models import AedRecord, LogEntry
from aed_core.inventory.status import AedStatus, enrich, is_expired, list_issues, resolve_now
from .base_service import BaseService

if TYPE_CHECKING:
    from aed_core.offline.data_service import AedDataService

RECENT_CHECK_DAYS = 30

# =============================================================================
# DATA CLASSES
# =============================================================================

@dataclass
class DashboardKPIs:
    """Container for the dashboard readiness metrics."""

    total_aeds: int = 0
    operational: int = 0
    service_required: int = 0
    battery_expired: int = 0
    pads_expired: int = 0
    recent_checks: int = 0               # Log entries created in the last 30 days

    # Count per status label, every label present
    status_breakdown: Dict[str, int] = field(default_factory=dict)

    @property
    def operational_pct(self) -> float:
        if not self.total_aeds:
            return 0.0
        return round(100.0 * self.operational / self.total_aeds, 1)


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

def inventory_frame(aeds: List[AedRecord], now: Optional[datetime] = None) -> pd.DataFrame:
    """
    One row per AED with status, expiry flags and issue counts.

    Expiry columns are parsed to UTC timestamps (NaT when missing).
    """
    now_ts = resolve_now(now)
    columns = [
        "Title", "CalculatedStatus", "NeedsService",
        "battery_expired", "pads_expired", "issue_count",
        "battery_expiry", "pads_expiry",
    ]
    if not aeds:
        return pd.DataFrame(columns=columns)

    rows = []
    for aed in aeds:
        rows.append({
            "Title": aed.title,
            "CalculatedStatus": aed.calculated_status,
            "NeedsService": bool(aed.needs_service),
            "battery_expired": is_expired(aed.battery_expiry_date, now_ts),
            "pads_expired": is_expired(aed.pads_expiry_date, now_ts),
            "issue_count": len(list_issues(aed, now_ts)),
            "battery_expiry": aed.battery_expiry_date,
            "pads_expiry": aed.pads_expiry_date,
        })

    df = pd.DataFrame(rows, columns=columns)
    df["battery_expiry"] = pd.to_datetime(df["battery_expiry"], utc=True, errors="coerce")
    df["pads_expiry"] = pd.to_datetime(df["pads_expiry"], utc=True, errors="coerce")
    return df


def count_recent_checks(
    entries: List[LogEntry],
    now: Optional[datetime] = None,
    days: int = RECENT_CHECK_DAYS,
) -> int:
    """Log entries whose Created stamp falls within the last ``days`` days."""
    if not entries:
        return 0
    created = pd.to_datetime(
        pd.Series([entry.created for entry in entries]),
        utc=True,
        errors="coerce",
    )
    cutoff = resolve_now(now) - pd.Timedelta(days=days)
    return int((created > cutoff).sum())


class KpiService(BaseService):
    """
    Service for dashboard metrics.

    Usage:
        service = KpiService()
        kpis = await service.compute_dashboard()
        queue = await service.service_queue()
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

    async def compute_dashboard(self, now: Optional[datetime] = None) -> DashboardKPIs:
        """
        Compute the dashboard KPIs.

        Args:
            now: Reference time (defaults to the current UTC time)
        """
        with self.log_operation("Computing dashboard KPIs"):
            aeds = [enrich(aed, now) for aed in await self.data_service.get_all_aeds()]
            entries = await self.data_service.get_all_log_entries()

            kpis = DashboardKPIs()
            df = inventory_frame(aeds, now)
            kpis.total_aeds = len(df)
            kpis.status_breakdown = {status.value: 0 for status in AedStatus}

            if not df.empty:
                kpis.operational = int((df["CalculatedStatus"] == AedStatus.OPERATIONAL.value).sum())
                kpis.service_required = int(df["NeedsService"].sum())
                kpis.battery_expired = int(df["battery_expired"].sum())
                kpis.pads_expired = int(df["pads_expired"].sum())
                for label, count in df["CalculatedStatus"].value_counts().items():
                    kpis.status_breakdown[label] = int(count)

            kpis.recent_checks = count_recent_checks(entries, now)
            return kpis

    async def service_queue(self, now: Optional[datetime] = None) -> List[AedRecord]:
        """
        Service-due AEDs, most urgent first.

        Order: more simultaneous issues first, then the earliest expiry
        (battery or pads) first. Units with an undated expiry lead their
        group.
        """
        enriched = [enrich(aed, now) for aed in await self.data_service.get_all_aeds()]
        aeds = [aed for aed in enriched if aed.needs_service]
        if not aeds:
            return []

        df = inventory_frame(aeds, now)
        df["position"] = np.arange(len(df))
        expiries = df[["battery_expiry", "pads_expiry"]].apply(lambda s: s.dt.tz_localize(None))
        df["earliest_expiry"] = expiries.min(axis=1, skipna=False)
        df = df.sort_values(
            ["issue_count", "earliest_expiry", "position"],
            ascending=[False, True, True],
            na_position="first",
            kind="mergesort",
        )
        return [aeds[i] for i in df["position"]]
