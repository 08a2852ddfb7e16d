# =============================================================================
# tests/conftest.py
# Pytest Configuration and Fixtures
# =============================================================================

import copy
from datetime import datetime, timezone

import numpy as np
import pandas as pd
import pytest
from unittest.mock import patch

from aed_core.data import SEED_INVENTORY, SEED_SUBMISSION_LOG
from aed_core.offline.connection_manager import ConnectionManager
from aed_core.offline.data_service import AedDataService
from aed_core.offline.local_database import LocalDatabase
from aed_core.offline.remote_store import RemoteRepository


# Reference time for every date-sensitive test
FIXED_NOW = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)


def iso(ts) -> str:
    return pd.Timestamp(ts).tz_convert("UTC").strftime("%Y-%m-%dT%H:%M:%SZ")


@pytest.fixture
def fixed_now():
    return FIXED_NOW


# =============================================================================
# STORE FIXTURES
# =============================================================================

@pytest.fixture
def db_path(tmp_path):
    """Temporary SQLite file"""
    return tmp_path / "local_data" / "aed_inventory.db"


@pytest.fixture
def local_db(db_path):
    """LocalDatabase on a temporary file, closed after the test"""
    db = LocalDatabase(db_path)
    db.initialize()
    yield db
    db.close()


@pytest.fixture
def repository():
    """Zero-delay remote store opened with the sample campus data"""
    repo = RemoteRepository(delay=0)
    repo.open(
        inventory=copy.deepcopy(SEED_INVENTORY),
        log=copy.deepcopy(SEED_SUBMISSION_LOG),
    )
    yield repo
    repo.close()


@pytest.fixture
def empty_repository():
    """Zero-delay remote store with no records"""
    repo = RemoteRepository(delay=0)
    repo.open()
    yield repo
    repo.close()


# =============================================================================
# CONNECTIVITY FIXTURES
# =============================================================================

@pytest.fixture
def online_connection():
    """Connection manager whose probe always succeeds"""
    return ConnectionManager(probe=lambda: True)


@pytest.fixture
def offline_connection():
    """Connection manager pinned offline"""
    manager = ConnectionManager(probe=lambda: True)
    manager.force_offline()
    return manager


@pytest.fixture
def data_service(online_connection, local_db, repository):
    """Data service wired to the sample store, online"""
    service = AedDataService(
        connection_manager=online_connection,
        local_db=local_db,
        repository=repository,
    )
    service.open()
    return service


# =============================================================================
# SAMPLE DATA FIXTURES
# =============================================================================

@pytest.fixture
def sample_aed_payload():
    """A valid new-AED form submission"""
    return {
        "Title": "CU-AED-010",
        "BuildingName": "Macky Auditorium",
        "BuildingCode": "MCKY",
        "Floor": "1",
        "SpecificLocationDescription": "West lobby, by the box office",
        "Latitude": 40.0099,
        "Longitude": -105.2720,
        "IsPubliclyAccessible": True,
        "Manufacturer": "ZOLL",
        "Model": "AED Plus",
        "SerialNumber": "X17A999001",
        "BatteryInstallDate": "2025-01-31T00:00:00Z",
        "BatteryLifespanMonths": 60,
        "PadsInstallDate": "2025-01-31T00:00:00Z",
        "PadsLifespanMonths": 60,
        "PadsType": "CPR-D-padz Adult",
    }


@pytest.fixture
def random_aed_records():
    """
    Generate 200 AEDs with expiries scattered around FIXED_NOW and a mix
    of check statuses.
    """
    rng = np.random.default_rng(42)
    n = 200
    battery_offsets = rng.integers(-900, 900, n)
    pads_offsets = rng.integers(-900, 900, n)
    statuses = rng.choice(["Pass", "Pass - Minor Issues", "Fail - Needs Attention", ""], n)
    missing = rng.random(n) < 0.05

    now = pd.Timestamp(FIXED_NOW)
    records = []
    for i in range(n):
        battery = now + pd.Timedelta(days=int(battery_offsets[i]))
        pads = now + pd.Timedelta(days=int(pads_offsets[i]))
        records.append({
            "id": i + 1,
            "Title": f"CU-AED-{i + 1:03d}",
            "BuildingName": f"Building {i % 17}",
            "CalculatedBatteryExpiryDate": None if missing[i] else iso(battery),
            "CalculatedPadsExpiryDate": iso(pads),
            "LastMonthlyCheckStatus": str(statuses[i]),
        })
    return records


# =============================================================================
# MOCK FIXTURES
# =============================================================================

@pytest.fixture
def mock_streamlit():
    """Patch the Streamlit module used for user-facing error messages"""
    with patch("aed_core.errors.handlers.st") as mock_st:
        yield mock_st
