# =============================================================================
# aed_core/config.py
# Runtime configuration: .env defaults, environment overrides
# =============================================================================
"""
Settings for the offline/sync core.

Values are read from the process environment after loading a ``.env`` file
from the project root (if present). Every key has a default so the core runs
with no configuration at all.

    AED_DB_PATH               SQLite file backing the local store
    AED_SIMULATED_DELAY_MS    Artificial latency of the simulated remote store
    AED_CONNECTION_TIMEOUT    Socket timeout (seconds) for connectivity probes
    AED_CONNECTIVITY_HOSTS    Comma separated host:port list to probe
    AED_FORCE_OFFLINE         Start pinned offline (1/true/yes)
    AED_SEED_DATA             Open the simulated remote store with sample data
    AED_LOG_LEVEL             Logging level name
"""

from __future__ import annotations
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Tuple

from dotenv import load_dotenv

from aed_core.errors import ConfigurationError

PROJECT_ROOT = Path(__file__).resolve().parent.parent
load_dotenv(PROJECT_ROOT / ".env")

DEFAULT_DB_PATH = PROJECT_ROOT / "local_data" / "aed_inventory.db"

DEFAULT_CONNECTIVITY_HOSTS = "8.8.8.8:53,1.1.1.1:53,208.67.222.222:53"

_TRUE_VALUES = {"1", "true", "yes", "on"}


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in _TRUE_VALUES


def _env_number(name: str, default: float, cast=float):
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = cast(raw)
    except ValueError:
        raise ConfigurationError(
            f"Invalid value for {name}: {raw!r}",
            config_key=name,
            expected_type=cast.__name__,
        )
    if value < 0:
        raise ConfigurationError(
            f"{name} must not be negative",
            config_key=name,
            expected_type=cast.__name__,
        )
    return value


def parse_hosts(raw: str) -> List[Tuple[str, int]]:
    """Parse ``host:port,host:port`` into a list of tuples."""
    hosts = []
    for item in raw.split(","):
        item = item.strip()
        if not item:
            continue
        host, sep, port = item.rpartition(":")
        if not sep or not host:
            raise ConfigurationError(
                f"Connectivity host must be host:port, got {item!r}",
                config_key="AED_CONNECTIVITY_HOSTS",
            )
        try:
            hosts.append((host, int(port)))
        except ValueError:
            raise ConfigurationError(
                f"Invalid port in connectivity host {item!r}",
                config_key="AED_CONNECTIVITY_HOSTS",
                expected_type="int",
            )
    return hosts


@dataclass
class Settings:
    """Resolved configuration for one process."""
    db_path: Path = DEFAULT_DB_PATH
    simulated_delay_ms: int = 400
    connection_timeout: float = 5.0
    connectivity_hosts: List[Tuple[str, int]] = field(
        default_factory=lambda: parse_hosts(DEFAULT_CONNECTIVITY_HOSTS)
    )
    force_offline: bool = False
    seed_data: bool = True
    log_level: str = "INFO"

    @property
    def simulated_delay(self) -> float:
        """Simulated remote latency in seconds."""
        return self.simulated_delay_ms / 1000.0

    @classmethod
    def from_env(cls) -> Settings:
        """Build settings from the environment."""
        return cls(
            db_path=Path(os.getenv("AED_DB_PATH", str(DEFAULT_DB_PATH))),
            simulated_delay_ms=_env_number("AED_SIMULATED_DELAY_MS", 400, int),
            connection_timeout=_env_number("AED_CONNECTION_TIMEOUT", 5.0, float),
            connectivity_hosts=parse_hosts(
                os.getenv("AED_CONNECTIVITY_HOSTS", DEFAULT_CONNECTIVITY_HOSTS)
            ),
            force_offline=_env_bool("AED_FORCE_OFFLINE", False),
            seed_data=_env_bool("AED_SEED_DATA", True),
            log_level=os.getenv("AED_LOG_LEVEL", "INFO").upper(),
        )


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the process-wide settings, loading them on first use."""
    global _settings
    if _settings is None:
        _settings = Settings.from_env()
    return _settings


def reset_settings() -> None:
    """Forget cached settings so the next call re-reads the environment."""
    global _settings
    _settings = None
