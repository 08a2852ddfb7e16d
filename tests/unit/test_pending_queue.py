# =============================================================================
# tests/unit/test_pending_queue.py
# Unit Tests for the pending-operation queue
# =============================================================================

import asyncio

from aed_core.errors import SyncItemError
from aed_core.inventory.models import OperationType
from aed_core.offline.local_database import LocalDatabase, StorageKeys
from aed_core.offline.pending_queue import PendingOperationQueue


class TestEnqueue:

    def test_enqueue_persists_immediately(self, local_db, db_path):
        queue = PendingOperationQueue(local_db)
        operation = asyncio.run(queue.enqueue(OperationType.ADD_LOG, {"AedLinkTitle": "CU-AED-001"}))

        # A second handle on the same file sees the operation
        other = LocalDatabase(db_path)
        try:
            stored = asyncio.run(other.load(StorageKeys.PENDING_OPERATIONS, []))
        finally:
            other.close()

        assert [item["id"] for item in stored] == [operation.id]
        assert stored[0]["type"] == "ADD_LOG"

    def test_pending_is_fifo(self, local_db):
        queue = PendingOperationQueue(local_db)

        async def scenario():
            for i in range(5):
                await queue.enqueue(OperationType.UPDATE_AED, {"Title": f"CU-AED-00{i}"})
            return await queue.pending()

        pending = asyncio.run(scenario())
        assert [op.payload["Title"] for op in pending] == [f"CU-AED-00{i}" for i in range(5)]

    def test_count(self, local_db):
        queue = PendingOperationQueue(local_db)

        async def scenario():
            await queue.enqueue(OperationType.ADD_AED, {})
            await queue.enqueue(OperationType.ADD_AED, {})
            return await queue.count()

        assert asyncio.run(scenario()) == 2

    def test_malformed_entries_are_skipped(self, local_db):
        queue = PendingOperationQueue(local_db)

        async def scenario():
            await local_db.store(StorageKeys.PENDING_OPERATIONS, [
                {"id": "bad", "type": "DELETE_AED", "payload": {}},
                {"id": "good", "type": "ADD_LOG", "payload": {}},
            ])
            return await queue.pending()

        assert [op.id for op in asyncio.run(scenario())] == ["good"]


class TestDrainAndReplay:

    def test_replays_in_order_and_clears(self, local_db):
        queue = PendingOperationQueue(local_db)
        seen = []

        async def apply(operation):
            seen.append(operation.payload["n"])

        async def scenario():
            for n in range(3):
                await queue.enqueue(OperationType.ADD_LOG, {"n": n})
            report = await queue.drain_and_replay(apply)
            return report, await queue.count()

        report, remaining = asyncio.run(scenario())

        assert seen == [0, 1, 2]
        assert report.all_applied
        assert report.total == 3
        assert report.cleared
        assert remaining == 0

    def test_failures_are_reported_and_do_not_stop_the_loop(self, local_db):
        queue = PendingOperationQueue(local_db)
        seen = []

        async def apply(operation):
            seen.append(operation.payload["n"])
            if operation.payload["n"] == 1:
                raise RuntimeError("remote rejected")

        async def scenario():
            for n in range(3):
                await queue.enqueue(OperationType.ADD_LOG, {"n": n})
            report = await queue.drain_and_replay(apply)
            return report, await queue.count()

        report, remaining = asyncio.run(scenario())

        assert seen == [0, 1, 2]
        assert len(report.applied) == 2
        assert not report.all_applied
        error = report.failed[0]
        assert isinstance(error, SyncItemError)
        assert error.code == "SYNC_001"
        assert error.details["payload"] == {"n": 1}
        # The whole batch is removed once the loop finishes
        assert remaining == 0

    def test_empty_queue(self, local_db):
        queue = PendingOperationQueue(local_db)

        async def apply(operation):
            raise AssertionError("nothing to apply")

        report = asyncio.run(queue.drain_and_replay(apply))
        assert report.total == 0
        assert report.all_applied

    def test_operations_enqueued_during_drain_are_kept(self, local_db):
        queue = PendingOperationQueue(local_db)

        async def apply(operation):
            if operation.payload["n"] == 0:
                await queue.enqueue(OperationType.ADD_LOG, {"n": "late"})

        async def scenario():
            await queue.enqueue(OperationType.ADD_LOG, {"n": 0})
            await queue.drain_and_replay(apply)
            return await queue.pending()

        remaining = asyncio.run(scenario())
        assert [op.payload["n"] for op in remaining] == ["late"]
