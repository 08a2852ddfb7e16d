# =============================================================================
# aed_core/offline/sync_coordinator.py
# Replays offline mutations and refreshes the offline baseline
# =============================================================================
"""
SyncCoordinator - reconciles the pending-operation queue with the remote store.

Startup (``initialize``):
    online  -> drain the queue, then pull inventory + log from the remote
               store and persist them as the new offline baseline
    offline -> report degraded mode, leave persisted data untouched

On demand (``force_sync``):
    drain the queue through the data service's online path, refresh the
    baseline, and report whether every queued item applied
"""

from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Dict, Optional
import logging

import pandas as pd

from aed_core.inventory.models import PendingOperation, utc_now_iso
from aed_core.logging import LogContext
from aed_core.offline.connection_manager import ConnectionManager
from aed_core.offline.local_database import LocalDatabase, StorageKeys
from aed_core.offline.pending_queue import DrainReport, PendingOperationQueue
from aed_core.offline.remote_store import RemoteRepository

logger = logging.getLogger(__name__)


@dataclass
class SyncState:
    """Current sync state."""
    is_syncing: bool = False
    last_attempt: Optional[datetime] = None
    last_report: Optional[DrainReport] = None
    total_synced: int = 0
    total_failed: int = 0


class SyncCoordinator:
    """
    Drains offline mutations into the remote store.

    Usage:
        coordinator = SyncCoordinator(connection, local_db, queue, repo, apply_fn)
        result = await coordinator.initialize()
        ok = await coordinator.force_sync()
    """

    def __init__(
        self,
        connection_manager: ConnectionManager,
        local_db: LocalDatabase,
        queue: PendingOperationQueue,
        repository: RemoteRepository,
        apply_fn: Callable[[PendingOperation], Awaitable[Any]],
    ):
        """
        Args:
            connection_manager: Online/offline decision
            local_db: Offline store receiving the baseline
            queue: Pending operations to replay
            repository: Remote store the baseline is pulled from
            apply_fn: Applies one operation through the online path
        """
        self._connection = connection_manager
        self._local_db = local_db
        self._queue = queue
        self._repository = repository
        self._apply_fn = apply_fn
        self._state = SyncState()

    @property
    def state(self) -> SyncState:
        return self._state

    @property
    def is_syncing(self) -> bool:
        return self._state.is_syncing

    async def initialize(self) -> Dict[str, Any]:
        """
        Bring the offline copy up to date at startup.

        Returns:
            {"success": bool, "message": str}
        """
        self._connection.check_connection()
        if not self._connection.is_online:
            logger.warning("Starting offline; using previously saved data")
            return {
                "success": False,
                "message": "Offline mode: using previously saved data",
            }

        with LogContext(logger, "Initializing offline data"):
            report = await self._drain()
            pulled = await self.refresh_baseline(
                record_sync=report is not None and report.all_applied
            )

        if pulled is None:
            return {
                "success": False,
                "message": "Connected, but the offline copy could not be refreshed",
            }

        message = f"Offline data ready: {pulled['aeds']} AEDs, {pulled['logs']} log entries"
        if report is not None and report.total:
            message += f"; synced {len(report.applied)} of {report.total} pending changes"
        return {"success": True, "message": message}

    async def force_sync(self) -> bool:
        """
        Replay pending operations now.

        Returns:
            True if online and every queued operation applied
        """
        self._connection.check_connection()
        if not self._connection.is_online:
            logger.info("Cannot sync: offline")
            return False

        report = await self._drain()
        if report is None:
            return False

        await self.refresh_baseline(record_sync=report.all_applied)
        return report.all_applied

    async def _drain(self) -> Optional[DrainReport]:
        """Replay the queue once; None if a replay is already running."""
        if self._state.is_syncing:
            logger.info("Sync already in progress")
            return None

        self._state.is_syncing = True
        self._state.last_attempt = datetime.now(timezone.utc)
        try:
            report = await self._queue.drain_and_replay(self._apply_fn)
        finally:
            self._state.is_syncing = False

        self._state.last_report = report
        self._state.total_synced += len(report.applied)
        self._state.total_failed += len(report.failed)
        return report

    async def refresh_baseline(self, record_sync: bool = True) -> Optional[Dict[str, int]]:
        """
        Pull both collections from the remote store and persist them locally.

        Returns:
            Counts of pulled records, or None when the pull failed
        """
        try:
            inventory = await self._repository.get_all_aeds()
            log = await self._repository.get_all_log_entries()
        except Exception as e:
            logger.error(f"Could not pull from remote store: {e}")
            return None

        stored = await self._local_db.store(StorageKeys.INVENTORY, inventory)
        stored = await self._local_db.store(StorageKeys.SUBMISSION_LOG, log) and stored
        if stored and record_sync:
            await self._local_db.store(StorageKeys.LAST_SYNC, utc_now_iso())

        return {"aeds": len(inventory), "logs": len(log)}

    async def last_sync(self) -> Optional[datetime]:
        """Time of the last successful sync, if any."""
        raw = await self._local_db.load(StorageKeys.LAST_SYNC, None)
        if not raw:
            return None
        try:
            return pd.Timestamp(raw).to_pydatetime()
        except (ValueError, TypeError):
            logger.warning(f"Ignoring unreadable last sync timestamp {raw!r}")
            return None

    async def get_sync_status(self) -> Dict[str, Any]:
        """Read-only status probe."""
        return {
            "pending_changes": await self._queue.count(),
            "last_sync": await self.last_sync(),
            "is_online": self._connection.is_online,
        }

    def get_status_display(self) -> Dict[str, Any]:
        """Sync state for UI display."""
        report = self._state.last_report
        return {
            "is_syncing": self._state.is_syncing,
            "last_attempt": self._state.last_attempt.isoformat() if self._state.last_attempt else None,
            "last_applied": len(report.applied) if report else 0,
            "last_failed": len(report.failed) if report else 0,
            "total_synced": self._state.total_synced,
            "total_failed": self._state.total_failed,
        }
