"""
Observable connection health for the user store.

The store reports every successful or failed round-trip here; subscribers
are told when the connection comes up, drops, or comes back.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Callable, List, Optional

logger = logging.getLogger(__name__)


class ConnectionState(str, Enum):
    UNKNOWN = "unknown"
    CONNECTED = "connected"
    DISCONNECTED = "disconnected"


class ConnectionEvent(str, Enum):
    CONNECTED = "connected"
    DISCONNECTED = "disconnected"
    RECONNECTED = "reconnected"


Listener = Callable[[ConnectionEvent, Optional[BaseException]], None]


class ConnectionHealth:
    def __init__(self) -> None:
        self._state = ConnectionState.UNKNOWN
        self._was_connected = False
        self._listeners: List[Listener] = []

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def is_healthy(self) -> bool:
        return self._state is ConnectionState.CONNECTED

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register ``listener``; returns a callable that removes it."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def mark_connected(self) -> None:
        if self._state is ConnectionState.CONNECTED:
            return
        event = ConnectionEvent.RECONNECTED if self._was_connected else ConnectionEvent.CONNECTED
        self._state = ConnectionState.CONNECTED
        self._was_connected = True
        logger.info("Database %s", event.value)
        self._emit(event, None)

    def mark_disconnected(self, error: Optional[BaseException] = None) -> None:
        if self._state is ConnectionState.DISCONNECTED:
            return
        self._state = ConnectionState.DISCONNECTED
        logger.warning("Database disconnected: %s", error)
        self._emit(ConnectionEvent.DISCONNECTED, error)

    def _emit(self, event: ConnectionEvent, error: Optional[BaseException]) -> None:
        for listener in list(self._listeners):
            try:
                listener(event, error)
            except Exception:
                logger.exception("Connection health listener failed on %s", event.value)
