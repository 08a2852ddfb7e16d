# =============================================================================
# aed_core/offline/pending_queue.py
# Durable FIFO of mutations made while offline
# =============================================================================
"""
PendingOperationQueue - ordered list of not-yet-synced mutations.

The queue lives under a single key of the local store and is re-read and
re-written on every change, so it survives restarts.

Replay semantics:
- operations are replayed in enqueue order
- a failing operation is wrapped in SyncItemError, logged, and skipped
- the replayed batch is removed from the queue in full once the loop
  finishes; items are not removed one by one, and failed items are
  reported, not retained
"""

from __future__ import annotations
import asyncio
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List
import logging

from aed_core.errors import SyncItemError
from aed_core.inventory.models import OperationType, PendingOperation
from aed_core.offline.local_database import LocalDatabase, StorageKeys

logger = logging.getLogger(__name__)


@dataclass
class DrainReport:
    """Outcome of one replay pass over the queue."""
    applied: List[PendingOperation] = field(default_factory=list)
    failed: List[SyncItemError] = field(default_factory=list)
    cleared: bool = False

    @property
    def total(self) -> int:
        return len(self.applied) + len(self.failed)

    @property
    def all_applied(self) -> bool:
        return not self.failed


class PendingOperationQueue:
    """FIFO of PendingOperation persisted in the local store."""

    def __init__(self, local_db: LocalDatabase):
        self._local_db = local_db
        # Serializes read-modify-write of the stored list
        self._lock = asyncio.Lock()

    async def _load_raw(self) -> List[Dict[str, Any]]:
        raw = await self._local_db.load(StorageKeys.PENDING_OPERATIONS, [])
        if not isinstance(raw, list):
            logger.warning("Pending operation queue is not a list, ignoring it")
            return []
        return raw

    async def pending(self) -> List[PendingOperation]:
        """All queued operations, oldest first."""
        operations = []
        for item in await self._load_raw():
            try:
                operations.append(PendingOperation.from_dict(item))
            except (KeyError, ValueError, TypeError) as e:
                logger.error(f"Skipping malformed pending operation {item!r}: {e}")
        return operations

    async def count(self) -> int:
        return len(await self._load_raw())

    async def enqueue(
        self,
        operation_type: OperationType,
        payload: Dict[str, Any],
    ) -> PendingOperation:
        """
        Append a mutation and persist the queue immediately.

        Args:
            operation_type: Kind of mutation
            payload: The original, column-named mutation payload

        Returns:
            The queued operation with its correlation id and timestamp
        """
        operation = PendingOperation(operation_type=operation_type, payload=dict(payload))
        async with self._lock:
            queue = await self._load_raw()
            queue.append(operation.to_dict())
            stored = await self._local_db.store(StorageKeys.PENDING_OPERATIONS, queue)
        if not stored:
            logger.error(f"Pending operation {operation.id} could not be persisted")
        else:
            logger.info(
                f"Queued {operation.operation_type.value} ({operation.id}); "
                f"{len(queue)} pending"
            )
        return operation

    async def clear(self) -> bool:
        async with self._lock:
            return await self._local_db.store(StorageKeys.PENDING_OPERATIONS, [])

    async def drain_and_replay(
        self,
        apply_fn: Callable[[PendingOperation], Awaitable[Any]],
    ) -> DrainReport:
        """
        Replay every queued operation through ``apply_fn``, oldest first.

        Args:
            apply_fn: Coroutine function applying one operation remotely

        Returns:
            DrainReport listing applied and failed operations
        """
        report = DrainReport()
        operations = await self.pending()
        if not operations:
            return report

        logger.info(f"Replaying {len(operations)} pending operations")

        for operation in operations:
            try:
                await apply_fn(operation)
                report.applied.append(operation)
            except Exception as e:
                error = SyncItemError(
                    f"Failed to replay {operation.operation_type.value}: {e}",
                    operation_id=operation.id,
                    operation_type=operation.operation_type.value,
                    details={"payload": operation.payload},
                )
                logger.error(str(error), exc_info=e)
                report.failed.append(error)

        # Operations enqueued while the loop was suspended stay queued
        drained_ids = {operation.id for operation in operations}
        async with self._lock:
            remaining = [
                item for item in await self._load_raw()
                if item.get("id") not in drained_ids
            ]
            report.cleared = await self._local_db.store(StorageKeys.PENDING_OPERATIONS, remaining)
        logger.info(
            f"Replay complete: {len(report.applied)} applied, {len(report.failed)} failed"
        )
        return report
