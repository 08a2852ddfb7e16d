# =============================================================================
# aed_core/offline/data_service.py
# AED Data Service - Single API for Online/Offline Operations
# =============================================================================
"""
AedDataService - the primary API for all inventory data operations.

This service provides one interface that automatically handles:
- Online mode: remote store operations, mirrored into the local store
- Offline mode: local snapshot operations plus the pending-operation queue
- Fallback to the local snapshot when an online read fails
- Status enrichment of every AED it returns

Usage:
------
from aed_core.offline import get_data_service

service = get_data_service()

# Fetch data (auto-selects source)
aeds = await service.get_all_aeds()

# Save data (auto-queues for sync if offline)
await service.update_aed({"Title": "CU-AED-001", "Notes": "Cabinet alarm fixed"})

# Check status
status = await service.get_sync_status()
print(f"Pending sync: {status['pending_changes']}")
"""

from __future__ import annotations
import asyncio
from typing import Any, Dict, List, Mapping, Optional
import logging

from aed_core.errors import ConnectivityError, NotFoundError, ValidationError
from aed_core.inventory.models import (
    AED_FIELD_MAP,
    AedRecord,
    LogEntry,
    OperationType,
    PendingOperation,
    utc_now_iso,
)
from aed_core.inventory.status import enrich
from aed_core.inventory.validators import validate_aed
from aed_core.offline.connection_manager import ConnectionManager, ConnectionStatus
from aed_core.offline.local_database import LocalDatabase, StorageKeys
from aed_core.offline.pending_queue import PendingOperationQueue
from aed_core.offline.remote_store import LOG_APP_VERSION, RemoteRepository, max_numeric_id
from aed_core.offline.sync_coordinator import SyncCoordinator

logger = logging.getLogger(__name__)


AED_COLUMNS = frozenset(AED_FIELD_MAP.values())

# Changing any of these recomputes the calculated expiry dates
EXPIRY_INPUT_COLUMNS = frozenset({
    "BatteryInstallDate",
    "BatteryLifespanMonths",
    "PadsInstallDate",
    "PadsLifespanMonths",
})

SEARCH_COLUMNS = ("Title", "BuildingName", "BuildingCode", "SpecificLocationDescription")


def _clean_aed_payload(data: Mapping[str, Any]) -> Dict[str, Any]:
    """Keep stored columns only; derived status fields never reach a store."""
    return {column: value for column, value in data.items() if column in AED_COLUMNS}


class AedDataService:
    """
    Data service providing a single API for online/offline operations.

    This is the main entry point for all data operations. It handles:
    - Connection state detection (via ConnectionManager)
    - Data source selection (remote store vs local snapshot)
    - Offline mutation queueing and replay (via SyncCoordinator)
    """

    def __init__(
        self,
        connection_manager: ConnectionManager,
        local_db: LocalDatabase,
        repository: RemoteRepository,
    ):
        """
        Args:
            connection_manager: Decides whether the remote store is used
            local_db: Offline store holding the snapshot and queue
            repository: The remote store (system of record while online)
        """
        self._connection = connection_manager
        self._local_db = local_db
        self._repository = repository
        self._queue = PendingOperationQueue(local_db)
        self._sync = SyncCoordinator(
            connection_manager=connection_manager,
            local_db=local_db,
            queue=self._queue,
            repository=repository,
            apply_fn=self._apply_pending_operation,
        )
        # Serializes read-modify-write of the local snapshot
        self._snapshot_lock = asyncio.Lock()
        self._connection.set_remote_probe(lambda: self._repository.is_open)

    # =========================================================================
    # PROPERTIES
    # =========================================================================

    @property
    def is_online(self) -> bool:
        """Check if currently online."""
        return self._connection.is_online

    @property
    def connection_status(self) -> str:
        return self._connection.status.value

    @property
    def queue(self) -> PendingOperationQueue:
        return self._queue

    @property
    def sync_coordinator(self) -> SyncCoordinator:
        return self._sync

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    def open(
        self,
        inventory: Optional[List[Mapping[str, Any]]] = None,
        log: Optional[List[Mapping[str, Any]]] = None,
    ) -> None:
        """
        Open the remote store (if not already open) and the local store.

        Args:
            inventory: Initial remote inventory
            log: Initial remote submission log
        """
        if not self._repository.is_open:
            self._repository.open(inventory=inventory, log=log)
        self._local_db.initialize()
        self._connection.check_connection()
        logger.info(f"AedDataService opened. Online: {self.is_online}")

    def close(self) -> None:
        """Close the remote store and release the local database."""
        try:
            self._repository.close()
            self._local_db.close()
        finally:
            self._connection.check_connection()
        logger.info("AedDataService closed")

    # =========================================================================
    # LOCAL SNAPSHOT HELPERS
    # =========================================================================

    async def _local_inventory(self) -> List[Dict[str, Any]]:
        rows = await self._local_db.load(StorageKeys.INVENTORY, [])
        return rows if isinstance(rows, list) else []

    async def _local_log(self) -> List[Dict[str, Any]]:
        rows = await self._local_db.load(StorageKeys.SUBMISSION_LOG, [])
        return rows if isinstance(rows, list) else []

    async def _mirror_aed(self, record: Dict[str, Any]) -> None:
        """Upsert one AED (matched by Title) into the local snapshot."""
        async with self._snapshot_lock:
            inventory = await self._local_inventory()
            for index, item in enumerate(inventory):
                if item.get("Title") == record.get("Title"):
                    inventory[index] = record
                    break
            else:
                inventory.append(record)
            await self._local_db.store(StorageKeys.INVENTORY, inventory)

    async def _mirror_log(self, entry: Dict[str, Any]) -> None:
        async with self._snapshot_lock:
            log = await self._local_log()
            log.append(entry)
            await self._local_db.store(StorageKeys.SUBMISSION_LOG, log)

    @staticmethod
    def _require_offline_allowed(operation: str, allowed: bool) -> None:
        """Raise ConnectivityError unless the caller opted into offline handling."""
        if not allowed:
            raise ConnectivityError(
                f"Cannot {operation} while offline",
                operation=operation,
            )

    # =========================================================================
    # READS
    # =========================================================================

    async def get_all_aeds(self, use_offline_fallback: bool = True) -> List[AedRecord]:
        """
        All AEDs with freshly derived status.

        Online reads refresh the local inventory snapshot.

        Raises:
            ConnectivityError: Offline (or the remote read failed) and
                fallback is disabled
        """
        if self.is_online:
            try:
                rows = await self._repository.get_all_aeds()
                async with self._snapshot_lock:
                    await self._local_db.store(StorageKeys.INVENTORY, rows)
                return [enrich(AedRecord.from_dict(row)) for row in rows]
            except ConnectivityError as e:
                logger.warning(f"Online fetch of AEDs failed: {e}")
                self._require_offline_allowed("get_all_aeds", use_offline_fallback)
        else:
            self._require_offline_allowed("get_all_aeds", use_offline_fallback)

        rows = await self._local_inventory()
        logger.debug(f"Serving {len(rows)} AEDs from local snapshot")
        return [enrich(AedRecord.from_dict(row)) for row in rows]

    async def get_aed_by_title(
        self,
        title: str,
        use_offline_fallback: bool = True,
    ) -> Optional[AedRecord]:
        """The AED with this Title, or None."""
        if self.is_online:
            try:
                row = await self._repository.get_aed_by_title(title)
                return enrich(AedRecord.from_dict(row)) if row is not None else None
            except ConnectivityError as e:
                logger.warning(f"Online fetch of {title} failed: {e}")
                self._require_offline_allowed("get_aed_by_title", use_offline_fallback)
        else:
            self._require_offline_allowed("get_aed_by_title", use_offline_fallback)

        for row in await self._local_inventory():
            if row.get("Title") == title:
                return enrich(AedRecord.from_dict(row))
        return None

    async def get_service_due_aeds(self, use_offline_fallback: bool = True) -> List[AedRecord]:
        """AEDs whose derived status is anything but Operational."""
        aeds = await self.get_all_aeds(use_offline_fallback=use_offline_fallback)
        return [aed for aed in aeds if aed.needs_service]

    async def search_aeds(self, query: str, use_offline_fallback: bool = True) -> List[AedRecord]:
        """
        Case-insensitive substring search over title, building and location.

        An empty query returns every AED.
        """
        aeds = await self.get_all_aeds(use_offline_fallback=use_offline_fallback)
        needle = (query or "").strip().lower()
        if not needle:
            return aeds

        matches = []
        for aed in aeds:
            row = aed.to_dict()
            if any(needle in str(row.get(column) or "").lower() for column in SEARCH_COLUMNS):
                matches.append(aed)
        return matches

    async def get_log_entries_for_aed(
        self,
        title: str,
        use_offline_fallback: bool = True,
    ) -> List[LogEntry]:
        if self.is_online:
            try:
                rows = await self._repository.get_log_entries_for_aed(title)
                return [LogEntry.from_dict(row) for row in rows]
            except ConnectivityError as e:
                logger.warning(f"Online fetch of log for {title} failed: {e}")
                self._require_offline_allowed("get_log_entries_for_aed", use_offline_fallback)
        else:
            self._require_offline_allowed("get_log_entries_for_aed", use_offline_fallback)

        return [
            LogEntry.from_dict(row)
            for row in await self._local_log()
            if row.get("AedLinkTitle") == title
        ]

    async def get_all_log_entries(self, use_offline_fallback: bool = True) -> List[LogEntry]:
        """Whole submission log; online reads refresh the local copy."""
        if self.is_online:
            try:
                rows = await self._repository.get_all_log_entries()
                async with self._snapshot_lock:
                    await self._local_db.store(StorageKeys.SUBMISSION_LOG, rows)
                return [LogEntry.from_dict(row) for row in rows]
            except ConnectivityError as e:
                logger.warning(f"Online fetch of submission log failed: {e}")
                self._require_offline_allowed("get_all_log_entries", use_offline_fallback)
        else:
            self._require_offline_allowed("get_all_log_entries", use_offline_fallback)

        return [LogEntry.from_dict(row) for row in await self._local_log()]

    # =========================================================================
    # WRITES
    # =========================================================================

    async def add_aed(
        self,
        data: Mapping[str, Any],
        store_offline_if_needed: bool = True,
        validate: bool = False,
    ) -> AedRecord:
        """
        Add a new AED.

        Expiry dates are calculated from install date + lifespan when the
        payload does not carry them.

        Args:
            data: Column-named AED fields
            store_offline_if_needed: Queue the add when offline instead of failing
            validate: Run the form validation rules first

        Raises:
            ValidationError: ``validate`` is set and the payload is invalid, or
                the Title is already taken (nothing is queued)
            ConnectivityError: Offline and queueing is disabled
        """
        if validate:
            errors = validate_aed(data)
            if errors:
                raise ValidationError("AED data is invalid", errors=errors)

        record = AedRecord.from_dict(_clean_aed_payload(data)).with_calculated_expiry()
        payload = {
            column: value
            for column, value in record.to_dict().items()
            if column not in ("id", "Created", "Modified")
        }

        if self.is_online:
            try:
                return await self._add_aed_remote(payload)
            except ConnectivityError as e:
                logger.warning(f"Online add of {payload.get('Title')} failed: {e}")
                self._require_offline_allowed("add_aed", store_offline_if_needed)
        else:
            self._require_offline_allowed("add_aed", store_offline_if_needed)

        async with self._snapshot_lock:
            inventory = await self._local_inventory()
            title = payload.get("Title")
            if any(item.get("Title") == title for item in inventory):
                raise ValidationError(
                    "AED title already exists",
                    errors={"Title": f"{title} is already in the inventory"},
                )
            await self._queue.enqueue(OperationType.ADD_AED, payload)
            now = utc_now_iso()
            # Provisional id; replaced by the remote id on the next sync
            local_id = max_numeric_id(item.get("id") for item in inventory) + 1
            local = {**payload, "id": local_id, "Created": now, "Modified": now}
            inventory.append(local)
            await self._local_db.store(StorageKeys.INVENTORY, inventory)
        return enrich(AedRecord.from_dict(local))

    async def update_aed(
        self,
        data: Mapping[str, Any],
        store_offline_if_needed: bool = True,
    ) -> AedRecord:
        """
        Merge ``data`` into the AED with the same Title (last write wins).

        Raises:
            NotFoundError: No AED has that Title; nothing is changed or queued
            ConnectivityError: Offline and queueing is disabled
        """
        changes = _clean_aed_payload(data)
        title = changes.get("Title")

        if self.is_online:
            try:
                return await self._update_aed_remote(changes)
            except ConnectivityError as e:
                logger.warning(f"Online update of {title} failed: {e}")
                self._require_offline_allowed("update_aed", store_offline_if_needed)
        else:
            self._require_offline_allowed("update_aed", store_offline_if_needed)

        async with self._snapshot_lock:
            inventory = await self._local_inventory()
            for index, item in enumerate(inventory):
                if item.get("Title") == title:
                    break
            else:
                raise NotFoundError("AED not found", title=title, collection="local inventory")

            payload = self._with_recalculated_expiry(item, changes)
            await self._queue.enqueue(OperationType.UPDATE_AED, payload)
            merged = {**item, **payload, "id": item.get("id"), "Modified": utc_now_iso()}
            inventory[index] = merged
            await self._local_db.store(StorageKeys.INVENTORY, inventory)
        return enrich(AedRecord.from_dict(merged))

    async def create_log_entry(
        self,
        data: Mapping[str, Any],
        store_offline_if_needed: bool = True,
    ) -> LogEntry:
        """
        Append an entry to the submission log.

        Raises:
            ConnectivityError: Offline and queueing is disabled
        """
        payload = {
            column: value
            for column, value in LogEntry.from_dict(data).to_dict().items()
            if column not in ("logId", "Created", "Modified", "AppVersion")
        }
        payload["SubmissionTimestamp"] = payload.get("SubmissionTimestamp") or utc_now_iso()

        if self.is_online:
            try:
                return await self._create_log_remote(payload)
            except ConnectivityError as e:
                logger.warning(f"Online log entry for {payload.get('AedLinkTitle')} failed: {e}")
                self._require_offline_allowed("create_log_entry", store_offline_if_needed)
        else:
            self._require_offline_allowed("create_log_entry", store_offline_if_needed)

        await self._queue.enqueue(OperationType.ADD_LOG, payload)
        async with self._snapshot_lock:
            log = await self._local_log()
            now = utc_now_iso()
            local = {
                **payload,
                "logId": max_numeric_id(entry.get("logId") for entry in log) + 1,
                "Created": now,
                "Modified": now,
                "AppVersion": LOG_APP_VERSION,
            }
            log.append(local)
            await self._local_db.store(StorageKeys.SUBMISSION_LOG, log)
        return LogEntry.from_dict(local)

    @staticmethod
    def _with_recalculated_expiry(
        existing: Mapping[str, Any],
        changes: Dict[str, Any],
    ) -> Dict[str, Any]:
        """``changes`` plus fresh expiry dates when an expiry input changed."""
        if not EXPIRY_INPUT_COLUMNS.intersection(changes):
            return changes
        record = AedRecord.from_dict(existing).merged(changes).with_calculated_expiry(force=True)
        return {
            **changes,
            "CalculatedBatteryExpiryDate": record.battery_expiry_date,
            "CalculatedPadsExpiryDate": record.pads_expiry_date,
        }

    # =========================================================================
    # ONLINE PATH (also used to replay queued operations)
    # =========================================================================

    async def _add_aed_remote(self, payload: Mapping[str, Any]) -> AedRecord:
        stored = await self._repository.add_aed(payload)
        await self._mirror_aed(stored)
        logger.info(f"Added AED {stored.get('Title')} (id {stored.get('id')})")
        return enrich(AedRecord.from_dict(stored))

    async def _update_aed_remote(self, changes: Dict[str, Any]) -> AedRecord:
        title = changes.get("Title")
        payload = changes
        if EXPIRY_INPUT_COLUMNS.intersection(changes):
            existing = await self._repository.get_aed_by_title(title)
            if existing is None:
                raise NotFoundError("AED not found", title=title, collection="inventory")
            payload = self._with_recalculated_expiry(existing, changes)
        stored = await self._repository.update_aed(payload)
        await self._mirror_aed(stored)
        return enrich(AedRecord.from_dict(stored))

    async def _create_log_remote(self, payload: Mapping[str, Any]) -> LogEntry:
        stored = await self._repository.create_log_entry(payload)
        await self._mirror_log(stored)
        return LogEntry.from_dict(stored)

    async def _apply_pending_operation(self, operation: PendingOperation) -> Any:
        """Replay one queued mutation through the online path."""
        if operation.operation_type == OperationType.ADD_AED:
            return await self._add_aed_remote(operation.payload)
        if operation.operation_type == OperationType.UPDATE_AED:
            return await self._update_aed_remote(dict(operation.payload))
        if operation.operation_type == OperationType.ADD_LOG:
            return await self._create_log_remote(operation.payload)
        raise ValueError(f"Unknown operation type: {operation.operation_type}")

    # =========================================================================
    # SYNC OPERATIONS
    # =========================================================================

    async def initialize_offline_data(self) -> Dict[str, Any]:
        """
        Replay pending changes and refresh the offline copy (when online).

        Returns:
            {"success": bool, "message": str}
        """
        return await self._sync.initialize()

    async def force_sync(self) -> bool:
        """
        Trigger immediate sync.

        Returns:
            True if online and every pending change applied
        """
        return await self._sync.force_sync()

    async def get_sync_status(self) -> Dict[str, Any]:
        return await self._sync.get_sync_status()

    # =========================================================================
    # STATUS & DIAGNOSTICS
    # =========================================================================

    def get_status(self) -> Dict[str, Any]:
        """
        Get status information for UI display.
        """
        return {
            "connection": self._connection.get_status_display(),
            "sync": self._sync.get_status_display(),
            "is_online": self.is_online,
        }

    def force_offline(self) -> None:
        """Force offline mode."""
        self._connection.force_offline()

    def force_check_connection(self) -> bool:
        """Probe connectivity now; True when online."""
        return self._connection.check_connection().status is ConnectionStatus.ONLINE


# Singleton accessor
_data_service: Optional[AedDataService] = None


def get_data_service() -> AedDataService:
    """
    Get the global AedDataService instance.

    The remote store is opened with the sample campus data when
    ``AED_SEED_DATA`` is enabled, empty otherwise.

    Usage:
        from aed_core.offline import get_data_service

        service = get_data_service()
        aeds = await service.get_all_aeds()
    """
    global _data_service
    if _data_service is None:
        from aed_core.config import get_settings
        from aed_core.data import SEED_INVENTORY, SEED_SUBMISSION_LOG
        from aed_core.offline.connection_manager import get_connection_manager
        from aed_core.offline.local_database import get_local_database
        from aed_core.logging import setup_logging

        settings = get_settings()
        setup_logging(settings.log_level, log_to_file=False)
        service = AedDataService(
            connection_manager=get_connection_manager(),
            local_db=get_local_database(),
            repository=RemoteRepository(delay=settings.simulated_delay),
        )
        if settings.seed_data:
            service.open(inventory=SEED_INVENTORY, log=SEED_SUBMISSION_LOG)
        else:
            service.open()
        _data_service = service
    return _data_service


def reset_data_service() -> None:
    """Close and forget the global instance."""
    global _data_service
    if _data_service is not None:
        _data_service.close()
        _data_service = None
