# =============================================================================
# tests/unit/test_local_database.py
# Unit Tests for the SQLite key-value store
# =============================================================================

import asyncio

import numpy as np
import pandas as pd

from aed_core.offline.local_database import LocalDatabase, StorageKeys


class TestStoreAndLoad:
    """Round trips through the kv_store table"""

    def test_store_then_load(self, local_db):
        records = [{"Title": "CU-AED-001", "Latitude": 40.0076, "IsPubliclyAccessible": True}]

        async def scenario():
            assert await local_db.store(StorageKeys.INVENTORY, records)
            return await local_db.load(StorageKeys.INVENTORY, [])

        assert asyncio.run(scenario()) == records

    def test_missing_key_returns_default(self, local_db):
        result = asyncio.run(local_db.load_result(StorageKeys.LAST_SYNC, "never"))

        assert result.success
        assert not result.degraded
        assert result.data == "never"

    def test_overwrite_replaces_value(self, local_db):
        async def scenario():
            await local_db.store(StorageKeys.LAST_SYNC, "2025-01-01T00:00:00Z")
            await local_db.store(StorageKeys.LAST_SYNC, "2025-02-01T00:00:00Z")
            return await local_db.load(StorageKeys.LAST_SYNC)

        assert asyncio.run(scenario()) == "2025-02-01T00:00:00Z"

    def test_numpy_and_pandas_values_are_encoded(self, local_db):
        value = {
            "count": np.int64(3),
            "ratio": np.float64(0.5),
            "flag": np.bool_(True),
            "when": pd.Timestamp("2025-01-01T00:00:00Z"),
        }

        async def scenario():
            await local_db.store("scratch", value)
            return await local_db.load("scratch")

        loaded = asyncio.run(scenario())
        assert loaded["count"] == 3
        assert loaded["flag"] is True
        assert loaded["when"].startswith("2025-01-01T00:00:00")

    def test_values_survive_reopen(self, db_path):
        first = LocalDatabase(db_path)
        asyncio.run(first.store(StorageKeys.PENDING_OPERATIONS, [{"id": "a"}]))
        first.close()

        second = LocalDatabase(db_path)
        try:
            assert asyncio.run(second.load(StorageKeys.PENDING_OPERATIONS, [])) == [{"id": "a"}]
        finally:
            second.close()

    def test_memory_database(self):
        db = LocalDatabase(":memory:")
        try:
            asyncio.run(db.store(StorageKeys.LAST_SYNC, "x"))
            assert asyncio.run(db.load(StorageKeys.LAST_SYNC)) == "x"
        finally:
            db.close()


class TestFailuresAreNotRaised:
    """Store failures degrade instead of raising"""

    def test_unserializable_value_is_a_noop(self, local_db):
        async def scenario():
            await local_db.store(StorageKeys.LAST_SYNC, "kept")
            stored = await local_db.store(StorageKeys.LAST_SYNC, object())
            return stored, await local_db.load(StorageKeys.LAST_SYNC)

        stored, value = asyncio.run(scenario())
        assert stored is False
        assert value == "kept"

    def test_corrupt_value_falls_back_to_default(self, local_db):
        with local_db.transaction() as conn:
            conn.execute(
                "INSERT OR REPLACE INTO kv_store (key, value) VALUES (?, ?)",
                [StorageKeys.INVENTORY, "{not json"],
            )

        result = asyncio.run(local_db.load_result(StorageKeys.INVENTORY, []))

        assert not result.success
        assert result.degraded
        assert result.data == []
        assert result.error_code == "STORE_001"

    def test_store_result_reports_failure(self, local_db):
        result = asyncio.run(local_db.store_result(StorageKeys.INVENTORY, {1, 2}))

        assert not result.success
        assert result.error_code == "STORE_001"


def test_to_dataframe(local_db):
    rows = [{"Title": "CU-AED-001", "Floor": "1"}, {"Title": "CU-AED-002", "Floor": "2"}]

    async def scenario():
        await local_db.store(StorageKeys.INVENTORY, rows)
        return await local_db.to_dataframe(StorageKeys.INVENTORY)

    df = asyncio.run(scenario())
    assert list(df["Title"]) == ["CU-AED-001", "CU-AED-002"]
    assert asyncio.run(local_db.to_dataframe(StorageKeys.SUBMISSION_LOG)).empty
