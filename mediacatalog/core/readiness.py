"""
Readiness gate for the catalog backend.

Reads and writes consult ``is_ready`` before touching the catalog. State is
pushed by the MongoDB connection lifecycle (startup ping, driver topology
changes, shutdown) so it may lag the real connection state until the next
topology change.
"""

import logging
import threading
from enum import Enum
from typing import Callable, Optional

from pymongo import monitoring

from mediacatalog.core.exceptions import BackendUnavailable

logger = logging.getLogger(__name__)


class BackendState(str, Enum):
    CONNECTING = "connecting"
    CONNECTED = "connected"
    DISCONNECTED = "disconnected"
    ERROR = "error"


class ReadinessGate:
    """
    Tracks whether the catalog store is reachable.

    ``state_source`` replaces the pushed state entirely when given; tests and
    alternative deployments use it to plug in their own notion of readiness.
    """

    def __init__(self, state_source: Optional[Callable[[], bool]] = None) -> None:
        self._state_source = state_source
        self._state = BackendState.CONNECTING
        self._lock = threading.Lock()

    @property
    def state(self) -> BackendState:
        return self._state

    @property
    def is_ready(self) -> bool:
        if self._state_source is not None:
            return bool(self._state_source())
        return self._state is BackendState.CONNECTED

    def require_ready(self) -> None:
        if not self.is_ready:
            raise BackendUnavailable()

    def mark_connected(self) -> None:
        self._transition(BackendState.CONNECTED)

    def mark_disconnected(self) -> None:
        self._transition(BackendState.DISCONNECTED)

    def mark_error(self, reason: Optional[str] = None) -> None:
        self._transition(BackendState.ERROR, reason)

    def _transition(self, new_state: BackendState, reason: Optional[str] = None) -> None:
        with self._lock:
            old_state = self._state
            self._state = new_state
        if old_state is new_state:
            return
        if new_state is BackendState.CONNECTED:
            logger.info("Catalog backend connected (was %s)", old_state.value)
        else:
            logger.warning(
                "Catalog backend %s (was %s)%s",
                new_state.value,
                old_state.value,
                f": {reason}" if reason else "",
            )


class GateTopologyListener(monitoring.TopologyListener):
    """Feeds pymongo topology changes into a ReadinessGate.

    The catalog counts as reachable while the topology has a writable server,
    so an unreachable secondary does not close the gate.
    """

    def __init__(self, gate: ReadinessGate) -> None:
        self.gate = gate

    def opened(self, event) -> None:
        pass

    def description_changed(self, event) -> None:
        if event.new_description.has_writable_server():
            self.gate.mark_connected()
        else:
            self.gate.mark_error("no writable server in topology")

    def closed(self, event) -> None:
        self.gate.mark_disconnected()
