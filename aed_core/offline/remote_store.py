# =============================================================================
# aed_core/offline/remote_store.py
# Simulated remote store for the AED inventory and submission log
# =============================================================================
"""
RemoteRepository - in-process stand-in for the campus SharePoint lists.

The repository owns its two collections (inventory and submission log) and
is the system of record while the app is online. It is constructed once per
process, opened with seed data and closed at teardown, and injected into the
data service.

Every call awaits a fixed artificial delay to simulate network latency.
Records are copied on the way in and out, so callers never hold references
into the collections.
"""

from __future__ import annotations
import asyncio
import copy
from typing import Any, Dict, Iterable, List, Mapping, Optional
import logging

from aed_core.errors import ConnectivityError, NotFoundError, ValidationError
from aed_core.inventory.models import utc_now_iso

logger = logging.getLogger(__name__)


LOG_APP_VERSION = "1.0"


def max_numeric_id(ids: Iterable[Any]) -> int:
    """Highest id that parses as an integer; others are skipped. 0 when none do."""
    highest = 0
    for value in ids:
        if value is None:
            continue
        try:
            highest = max(highest, int(value))
        except (TypeError, ValueError):
            logger.debug(f"Ignoring non-numeric id {value!r}")
    return highest


class IdAllocator:
    """
    Hands out integer ids as ``max(existing ids, last issued) + 1``.

    Allocation reads and bumps the counter without suspending, so two
    coroutines can never receive the same id. An empty collection starts
    at 1. Ids that are not integers are ignored.
    """

    def __init__(self, start: int = 0):
        self._last = start

    def seed(self, existing_ids: Iterable[Any]) -> None:
        """Reset the counter to the highest of ``existing_ids``."""
        self._last = max_numeric_id(existing_ids)

    def next_id(self, existing_ids: Iterable[Any] = ()) -> int:
        self._last = max(self._last, max_numeric_id(existing_ids)) + 1
        return self._last

    @property
    def last(self) -> int:
        return self._last


class RemoteRepository:
    """
    Simulated remote CRUD store.

    Usage:
        repo = RemoteRepository(delay=0.4)
        repo.open(inventory=SEED_INVENTORY, log=SEED_SUBMISSION_LOG)
        aeds = await repo.get_all_aeds()
        repo.close()
    """

    def __init__(self, delay: float = 0.4):
        """
        Args:
            delay: Artificial latency in seconds awaited by every call
        """
        self.delay = delay
        self._inventory: List[Dict[str, Any]] = []
        self._log: List[Dict[str, Any]] = []
        self._aed_ids = IdAllocator()
        self._log_ids = IdAllocator()
        self._open = False

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    def open(
        self,
        inventory: Optional[Iterable[Mapping[str, Any]]] = None,
        log: Optional[Iterable[Mapping[str, Any]]] = None,
    ) -> None:
        """Load the collections and start serving requests."""
        self._inventory = [dict(item) for item in (inventory or [])]
        self._log = [dict(item) for item in (log or [])]
        self._aed_ids.seed(item.get("id") for item in self._inventory)
        self._log_ids.seed(item.get("logId") for item in self._log)
        self._open = True
        logger.info(
            f"Remote store opened with {len(self._inventory)} AEDs "
            f"and {len(self._log)} log entries"
        )

    def close(self) -> None:
        """Stop serving requests and drop the collections."""
        self._open = False
        self._inventory = []
        self._log = []
        logger.info("Remote store closed")

    @property
    def is_open(self) -> bool:
        return self._open

    async def _request(self, operation: str) -> None:
        """Simulate one network round trip."""
        if not self._open:
            raise ConnectivityError("Remote store is not available", operation=operation)
        if self.delay > 0:
            await asyncio.sleep(self.delay)
        if not self._open:
            raise ConnectivityError("Remote store closed during request", operation=operation)

    # =========================================================================
    # INVENTORY
    # =========================================================================

    async def get_all_aeds(self) -> List[Dict[str, Any]]:
        await self._request("get_all_aeds")
        return copy.deepcopy(self._inventory)

    async def get_aed_by_title(self, title: str) -> Optional[Dict[str, Any]]:
        await self._request("get_aed_by_title")
        for item in self._inventory:
            if item.get("Title") == title:
                return copy.deepcopy(item)
        return None

    def title_exists(self, title: Any) -> bool:
        return any(item.get("Title") == title for item in self._inventory)

    async def add_aed(self, data: Mapping[str, Any]) -> Dict[str, Any]:
        """
        Insert a new AED with a fresh id and audit timestamps.

        Raises:
            ValidationError: An AED with the same Title already exists
        """
        await self._request("add_aed")
        record = dict(data)
        title = record.get("Title")
        # Checked and appended without an await in between
        if self.title_exists(title):
            raise ValidationError(
                "AED title already exists",
                errors={"Title": f"{title} is already in the inventory"},
            )
        now = utc_now_iso()
        record["id"] = self._aed_ids.next_id(item.get("id") for item in self._inventory)
        record["Created"] = now
        record["Modified"] = now
        self._inventory.append(record)
        logger.debug(f"Added AED {record.get('Title')} as id {record['id']}")
        return copy.deepcopy(record)

    async def update_aed(self, data: Mapping[str, Any]) -> Dict[str, Any]:
        """
        Merge ``data`` into the AED with the same Title (last write wins).

        Raises:
            NotFoundError: No AED has that Title; nothing is changed
        """
        await self._request("update_aed")
        title = data.get("Title")
        for index, item in enumerate(self._inventory):
            if item.get("Title") == title:
                merged = {**item, **dict(data)}
                # Identity and creation stamp belong to the stored record
                merged["id"] = item.get("id")
                merged["Created"] = item.get("Created")
                merged["Modified"] = utc_now_iso()
                self._inventory[index] = merged
                return copy.deepcopy(merged)
        raise NotFoundError("AED not found", title=title, collection="inventory")

    # =========================================================================
    # SUBMISSION LOG
    # =========================================================================

    async def create_log_entry(self, data: Mapping[str, Any]) -> Dict[str, Any]:
        await self._request("create_log_entry")
        now = utc_now_iso()
        entry = dict(data)
        entry["logId"] = self._log_ids.next_id(item.get("logId") for item in self._log)
        entry["Created"] = now
        entry["Modified"] = now
        entry["AppVersion"] = LOG_APP_VERSION
        self._log.append(entry)
        return copy.deepcopy(entry)

    async def get_log_entries_for_aed(self, title: str) -> List[Dict[str, Any]]:
        await self._request("get_log_entries_for_aed")
        return [copy.deepcopy(item) for item in self._log if item.get("AedLinkTitle") == title]

    async def get_all_log_entries(self) -> List[Dict[str, Any]]:
        await self._request("get_all_log_entries")
        return copy.deepcopy(self._log)

    # =========================================================================
    # INSPECTION
    # =========================================================================

    def snapshot(self) -> Dict[str, List[Dict[str, Any]]]:
        """Synchronous copy of both collections (no simulated latency)."""
        return {
            "inventory": copy.deepcopy(self._inventory),
            "log": copy.deepcopy(self._log),
        }
