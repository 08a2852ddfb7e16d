# =============================================================================
# aed_core/offline/local_database.py
# Local SQLite Key-Value Store for Offline Operations
# =============================================================================
"""
LocalDatabase - durable key-value storage backing the offline copy.

Features:
- One ``kv_store`` table, values JSON-encoded
- Every read/write runs inside a transaction scope that commits or rolls back
- Failures are logged and never raised: reads fall back to the caller's
  default, writes become no-ops
- Async API; SQLite I/O runs in a worker thread so each call is a
  suspension point for the event loop
"""

from __future__ import annotations
import asyncio
import json
import sqlite3
import threading
from contextlib import contextmanager
from datetime import date, datetime
from enum import Enum
from pathlib import Path
from typing import Any, Optional, Union
import logging

import numpy as np
import pandas as pd

from aed_core.errors import PersistenceError
from aed_core.services.base_service import ServiceResult

logger = logging.getLogger(__name__)


class StorageKeys:
    """The four fixed keys of the offline store."""
    INVENTORY = "aed_inventory"
    SUBMISSION_LOG = "aed_submission_log"
    PENDING_OPERATIONS = "pending_operations"
    LAST_SYNC = "last_sync_timestamp"

    ALL = (INVENTORY, SUBMISSION_LOG, PENDING_OPERATIONS, LAST_SYNC)


def _json_default(value: Any) -> Any:
    """Serialize values the json module does not know about."""
    if isinstance(value, (pd.Timestamp, datetime, date)):
        return value.isoformat()
    if isinstance(value, np.integer):
        return int(value)
    if isinstance(value, np.floating):
        return None if np.isnan(value) else float(value)
    if isinstance(value, np.bool_):
        return bool(value)
    if isinstance(value, Enum):
        return value.value
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


class LocalDatabase:
    """
    Local SQLite key-value store for offline data.

    Usage:
        db = LocalDatabase(Path("local_data/aed_inventory.db"))
        db.initialize()
        await db.store(StorageKeys.INVENTORY, records)
        records = await db.load(StorageKeys.INVENTORY, [])
    """

    SCHEMA = """
        CREATE TABLE IF NOT EXISTS kv_store (
            key TEXT PRIMARY KEY,
            value TEXT,
            updated_at TEXT DEFAULT CURRENT_TIMESTAMP
        )
    """

    def __init__(self, db_path: Union[str, Path]):
        """
        Initialize local database.

        Args:
            db_path: Path to SQLite database file, or ":memory:"
        """
        self.db_path = db_path
        self._connection: Optional[sqlite3.Connection] = None
        self._lock = threading.Lock()
        self._initialized = False
        self._ensure_directory()

    def _ensure_directory(self) -> None:
        """Ensure database directory exists."""
        if str(self.db_path) == ":memory:":
            return
        Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)

    def _get_connection(self) -> sqlite3.Connection:
        """Get the shared database connection, opening it on first use."""
        if self._connection is None:
            self._connection = sqlite3.connect(
                str(self.db_path),
                check_same_thread=False,
            )
            self._connection.row_factory = sqlite3.Row
        return self._connection

    @contextmanager
    def transaction(self):
        """Scoped, serialized access to the connection; commits or rolls back."""
        with self._lock:
            conn = self._get_connection()
            try:
                yield conn
                conn.commit()
            except Exception:
                conn.rollback()
                raise

    def initialize(self) -> None:
        """Initialize database schema."""
        if self._initialized:
            return

        with self.transaction() as conn:
            conn.execute(self.SCHEMA)

        self._initialized = True
        logger.info(f"Local database initialized at: {self.db_path}")

    # =========================================================================
    # SYNCHRONOUS PRIMITIVES (raise PersistenceError)
    # =========================================================================

    def _write(self, key: str, value: Any) -> None:
        try:
            self.initialize()
            payload = json.dumps(value, default=_json_default)
            with self.transaction() as conn:
                conn.execute(
                    """
                    INSERT OR REPLACE INTO kv_store (key, value, updated_at)
                    VALUES (?, ?, ?)
                    """,
                    [key, payload, datetime.now().isoformat()]
                )
        except (sqlite3.Error, TypeError, ValueError) as e:
            raise PersistenceError(f"Failed to write {key}: {e}", key=key, action="write")

    def _read(self, key: str) -> Optional[Any]:
        """Stored value for ``key``, or None when the key was never written."""
        try:
            self.initialize()
            with self.transaction() as conn:
                row = conn.execute(
                    "SELECT value FROM kv_store WHERE key = ?",
                    [key]
                ).fetchone()
        except sqlite3.Error as e:
            raise PersistenceError(f"Failed to read {key}: {e}", key=key, action="read")

        if row is None or row["value"] is None:
            return None
        try:
            return json.loads(row["value"])
        except json.JSONDecodeError as e:
            raise PersistenceError(f"Corrupt value under {key}: {e}", key=key, action="decode")

    # =========================================================================
    # ASYNC API
    # =========================================================================

    async def store_result(self, key: str, value: Any) -> ServiceResult:
        """Write ``value`` under ``key``; the outcome is reported, never raised."""
        try:
            await asyncio.to_thread(self._write, key, value)
            return ServiceResult.ok(value)
        except PersistenceError as e:
            logger.error(str(e))
            return ServiceResult.from_exception(e)

    async def store(self, key: str, value: Any) -> bool:
        """Write ``value`` under ``key``. Returns False (and logs) on failure."""
        return (await self.store_result(key, value)).success

    async def load_result(self, key: str, default: Any = None) -> ServiceResult:
        """
        Read the value under ``key``.

        A missing key is a normal, successful read of ``default``. A read
        failure yields a degraded result carrying ``default``.
        """
        try:
            value = await asyncio.to_thread(self._read, key)
        except PersistenceError as e:
            logger.error(f"{e} - using default")
            return ServiceResult.fallback(default, e.message, e.code, e.details)
        return ServiceResult.ok(default if value is None else value)

    async def load(self, key: str, default: Any = None) -> Any:
        """Read the value under ``key``; ``default`` when missing or unreadable."""
        return (await self.load_result(key, default)).data

    async def to_dataframe(self, key: str) -> pd.DataFrame:
        """Load a stored array of records as a DataFrame."""
        rows = await self.load(key, [])
        if not isinstance(rows, list):
            return pd.DataFrame()
        return pd.DataFrame(rows)

    def close(self) -> None:
        """Close database connection."""
        with self._lock:
            if self._connection is not None:
                self._connection.close()
                self._connection = None
        self._initialized = False


# Singleton accessor
_local_database: Optional[LocalDatabase] = None


def get_local_database() -> LocalDatabase:
    """Get the global LocalDatabase instance."""
    global _local_database
    if _local_database is None:
        from aed_core.config import get_settings
        _local_database = LocalDatabase(get_settings().db_path)
        _local_database.initialize()
    return _local_database
