# =============================================================================
# aed_core/offline/connection_manager.py
# Connection Status Detection and Management
# =============================================================================
"""
ConnectionManager - decides whether the remote store is reachable.

Two questions are asked on every check: is there a network at all (socket
probe against well-known hosts, or an injected probe), and is the remote
store itself open (``remote_probe``). Both must hold for ONLINE; a network
without the store is DEGRADED. ``force_offline`` / ``force_online`` pin the
network answer, the store is still asked.

Results are cached: callers see the outcome of the last check until
``check_connection`` runs again.
"""

from __future__ import annotations
import socket
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, List, Optional, Sequence, Tuple
import logging

logger = logging.getLogger(__name__)

Probe = Callable[[], bool]
StatusCallback = Callable[["ConnectionState"], None]


class ConnectionStatus(Enum):
    """Connection status states."""
    ONLINE = "online"           # Network reachable and remote store open
    OFFLINE = "offline"         # No network
    DEGRADED = "degraded"       # Network OK but remote store unavailable
    UNKNOWN = "unknown"         # Never checked


@dataclass
class ConnectionState:
    """Outcome of the most recent check."""
    status: ConnectionStatus = ConnectionStatus.UNKNOWN
    internet_available: bool = False
    remote_available: bool = False
    forced: bool = False
    last_check: Optional[datetime] = None
    last_online: Optional[datetime] = None
    consecutive_failures: int = 0
    error_message: Optional[str] = None


def _stamp(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


class ConnectionManager:
    """
    Connectivity detection for the data layer.

    Usage:
        manager = ConnectionManager(hosts=[("8.8.8.8", 53)], timeout=2)
        manager.set_remote_probe(lambda: repository.is_open)
        if manager.is_online:
            ...  # remote store
        else:
            ...  # local snapshot
    """

    DEFAULT_TIMEOUT = 5.0

    def __init__(
        self,
        hosts: Optional[Sequence[Tuple[str, int]]] = None,
        timeout: Optional[float] = None,
        probe: Optional[Probe] = None,
        remote_probe: Optional[Probe] = None,
    ):
        """
        Args:
            hosts: (host, port) pairs tried in order by the socket probe
            timeout: Socket timeout in seconds
            probe: Replaces the socket probe when given
            remote_probe: Reports whether the remote store itself is available
        """
        self._state = ConnectionState()
        self._callbacks: List[StatusCallback] = []
        self._hosts = list(hosts or [])
        self._timeout = self.DEFAULT_TIMEOUT if timeout is None else timeout
        self._probe = probe
        self._remote_probe = remote_probe
        self._override: Optional[bool] = None

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def status(self) -> ConnectionStatus:
        """Cached status; the first access runs a check."""
        if self._state.status is ConnectionStatus.UNKNOWN:
            self.check_connection()
        return self._state.status

    @property
    def is_online(self) -> bool:
        return self.status is ConnectionStatus.ONLINE

    @property
    def is_offline(self) -> bool:
        return not self.is_online

    def set_remote_probe(self, remote_probe: Optional[Probe]) -> None:
        self._remote_probe = remote_probe

    # -------------------------------------------------------------------------
    # Checking
    # -------------------------------------------------------------------------

    def check_connection(self) -> ConnectionState:
        """Probe now, update the cached state and notify on a status change."""
        state = self._state
        previous = state.status
        now = datetime.now(timezone.utc)

        if self._override is None:
            network = self._ask(self._network_probe, "Connectivity probe")
        else:
            network = self._override
        remote = network and self._ask(self._remote_probe, "Remote store check")

        state.last_check = now
        state.forced = self._override is not None
        state.internet_available = network
        state.remote_available = remote

        if remote:
            state.status = ConnectionStatus.ONLINE
            state.last_online = now
            state.consecutive_failures = 0
            state.error_message = None
        else:
            state.status = ConnectionStatus.DEGRADED if network else ConnectionStatus.OFFLINE
            state.consecutive_failures += 1

        if state.status is not previous:
            logger.info(f"Connection status changed: {previous.value} -> {state.status.value}")
            self._notify()
        return state

    def _ask(self, probe: Optional[Probe], label: str) -> bool:
        if probe is None:
            return True
        try:
            return bool(probe())
        except Exception as e:
            self._state.error_message = str(e)
            logger.debug(f"{label} failed: {e}")
            return False

    def _network_probe(self) -> bool:
        """Injected probe, else the first configured host that accepts TCP."""
        if self._probe is not None:
            return self._probe()

        for address in self._hosts:
            try:
                with socket.create_connection(address, timeout=self._timeout):
                    return True
            except OSError as e:
                self._state.error_message = str(e)
        return False

    # -------------------------------------------------------------------------
    # Overrides
    # -------------------------------------------------------------------------

    def force_offline(self) -> None:
        """Pin offline mode (airplane mode, basements, tests)."""
        self._override = False
        self.check_connection()
        logger.info("Forced offline mode")

    def force_online(self) -> None:
        """Pin the network as up; the remote store must still be open."""
        self._override = True
        self.check_connection()
        logger.info("Forced online mode")

    def clear_override(self) -> ConnectionState:
        """Drop any pinned mode and probe again."""
        self._override = None
        return self.check_connection()

    # -------------------------------------------------------------------------
    # Callbacks
    # -------------------------------------------------------------------------

    def register_callback(self, callback: StatusCallback) -> None:
        """Call ``callback(state)`` whenever the status changes."""
        if callback not in self._callbacks:
            self._callbacks.append(callback)

    def unregister_callback(self, callback: StatusCallback) -> None:
        if callback in self._callbacks:
            self._callbacks.remove(callback)

    def _notify(self) -> None:
        for callback in list(self._callbacks):
            try:
                callback(self._state)
            except Exception as e:
                logger.error(f"Connection callback {callback!r} failed: {e}")

    def get_status_display(self) -> dict:
        """Plain dict of the cached state for a status badge."""
        state = self._state
        return {
            "status": state.status.value,
            "is_online": state.status is ConnectionStatus.ONLINE,
            "internet": state.internet_available,
            "remote": state.remote_available,
            "forced": state.forced,
            "last_check": _stamp(state.last_check),
            "last_online": _stamp(state.last_online),
            "failures": state.consecutive_failures,
            "error": state.error_message,
        }


_connection_manager: Optional[ConnectionManager] = None


def get_connection_manager() -> ConnectionManager:
    """Process-wide ConnectionManager built from settings."""
    global _connection_manager
    if _connection_manager is None:
        from aed_core.config import get_settings
        settings = get_settings()
        _connection_manager = ConnectionManager(
            hosts=settings.connectivity_hosts,
            timeout=settings.connection_timeout,
        )
        if settings.force_offline:
            _connection_manager.force_offline()
    return _connection_manager
