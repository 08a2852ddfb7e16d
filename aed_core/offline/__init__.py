# =============================================================================
# aed_core/offline/__init__.py
# Offline-First Architecture for the AED inventory
# =============================================================================
"""
Offline-First Architecture Module

Inspectors work in basements and stairwells. The data layer behaves the same
whether the remote store is reachable or not: reads fall back to the last
saved snapshot, writes are queued and replayed on the next sync.

Architecture:
------------
┌─────────────────────────────────────────────────────────────────┐
│                    OFFLINE-FIRST ARCHITECTURE                    │
├─────────────────────────────────────────────────────────────────┤
│                                                                  │
│   ┌──────────────────────────────────────────────────────────┐  │
│   │                    AedDataService                         │  │
│   │         (Single API - Apps use this only)                 │  │
│   └──────────────────────────────────────────────────────────┘  │
│                            │                                     │
│              ┌─────────────┴─────────────┐                      │
│              ▼                           ▼                      │
│   ┌──────────────────┐        ┌──────────────────┐             │
│   │  ConnectionMgr   │        │ SyncCoordinator  │             │
│   │  (Online/Offline)│        │ (Replay + Pull)  │             │
│   └──────────────────┘        └──────────────────┘             │
│                                          │                       │
│                               ┌──────────┴──────────┐           │
│                               ▼                     ▼           │
│                        ┌────────────┐        ┌──────────┐       │
│                        │ Remote     │◄──────►│  SQLite  │       │
│                        │ Repository │  Sync  │ (Local)  │       │
│                        └────────────┘        └──────────┘       │
│                                                   ▲              │
│                                       ┌───────────┴──────┐      │
│                                       │ PendingOperation │      │
│                                       │      Queue       │      │
│                                       └──────────────────┘      │
└─────────────────────────────────────────────────────────────────┘

Usage:
------
from aed_core.offline import AedDataService, get_data_service

# Get the singleton service
service = get_data_service()

# Use it - automatically handles online/offline
aeds = await service.get_all_aeds()
await service.create_log_entry({...})

# Check status
status = await service.get_sync_status()
"""

from aed_core.offline.connection_manager import (
    ConnectionManager,
    ConnectionState,
    ConnectionStatus,
    get_connection_manager,
)

from aed_core.offline.local_database import (
    LocalDatabase,
    StorageKeys,
    get_local_database,
)

from aed_core.offline.pending_queue import (
    DrainReport,
    PendingOperationQueue,
)

from aed_core.offline.remote_store import (
    IdAllocator,
    RemoteRepository,
)

from aed_core.offline.sync_coordinator import (
    SyncCoordinator,
    SyncState,
)

from aed_core.offline.data_service import (
    AedDataService,
    get_data_service,
    reset_data_service,
)

__all__ = [
    # Connection Management
    "ConnectionManager",
    "ConnectionState",
    "ConnectionStatus",
    "get_connection_manager",
    # Local Database
    "LocalDatabase",
    "StorageKeys",
    "get_local_database",
    # Pending Operations
    "DrainReport",
    "PendingOperationQueue",
    # Remote Store
    "IdAllocator",
    "RemoteRepository",
    # Sync
    "SyncCoordinator",
    "SyncState",
    # Data Service (Main API)
    "AedDataService",
    "get_data_service",
    "reset_data_service",
]
