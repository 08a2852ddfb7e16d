# =============================================================================
# tests/integration/test_bootstrap.py
# Integration Tests for the process-wide data service
# =============================================================================

import asyncio
import logging

import pytest

from aed_core import config
from aed_core.offline import connection_manager, data_service, local_database


@pytest.fixture
def fresh_singletons(monkeypatch, tmp_path):
    monkeypatch.setenv("AED_DB_PATH", str(tmp_path / "aed.db"))
    monkeypatch.setenv("AED_SIMULATED_DELAY_MS", "0")
    monkeypatch.setenv("AED_SEED_DATA", "1")
    monkeypatch.setenv("AED_FORCE_OFFLINE", "1")
    monkeypatch.setenv("AED_LOG_LEVEL", "WARNING")
    monkeypatch.setattr(connection_manager, "_connection_manager", None)
    monkeypatch.setattr(local_database, "_local_database", None)
    monkeypatch.setattr(data_service, "_data_service", None)
    config.reset_settings()
    yield tmp_path
    data_service.reset_data_service()
    config.reset_settings()


def test_get_data_service_is_configured_from_environment(fresh_singletons):
    service = data_service.get_data_service()

    assert data_service.get_data_service() is service
    assert (fresh_singletons / "aed.db").exists()
    assert logging.getLogger().level == logging.WARNING
    # Pinned offline: nothing saved yet, startup reports degraded mode
    assert not service.is_online
    result = asyncio.run(service.initialize_offline_data())
    assert result["success"] is False


def test_seeded_store_serves_sample_data_once_online(fresh_singletons):
    service = data_service.get_data_service()
    connection_manager.get_connection_manager().force_online()

    async def scenario():
        await service.initialize_offline_data()
        return await service.get_all_aeds()

    aeds = asyncio.run(scenario())
    assert [aed.title for aed in aeds][:2] == ["CU-AED-001", "CU-AED-002"]
