"""
Connection Registry.

Every live connection by id, with the global connection cap.
"""

from __future__ import annotations

import threading

from shared.config.logging import get_logger
from shared.config.settings import settings

from ws_gateway.components.connection.connection import Connection

logger = get_logger(__name__)


class ConnectionRegistry:
    """Thread-safe map of connection id to Connection."""

    def __init__(self, max_connections: int | None = None):
        self._max_connections = (
            max_connections if max_connections is not None else settings.ws_max_total_connections
        )
        self._connections: dict[str, Connection] = {}
        self._lock = threading.Lock()

    def register(self, connection: Connection) -> bool:
        """
        Returns:
            False if the registry is at capacity.
        """
        with self._lock:
            if len(self._connections) >= self._max_connections:
                logger.warning(
                    "Connection limit reached",
                    limit=self._max_connections,
                    connection_id=connection.id,
                )
                return False
            self._connections[connection.id] = connection
        return True

    def unregister(self, connection: Connection) -> bool:
        """
        Returns:
            True if the connection was registered. Repeated calls are no-ops.
        """
        with self._lock:
            return self._connections.pop(connection.id, None) is not None

    def get(self, connection_id: str) -> Connection | None:
        with self._lock:
            return self._connections.get(connection_id)

    def all(self) -> list[Connection]:
        with self._lock:
            return list(self._connections.values())

    def __len__(self) -> int:
        with self._lock:
            return len(self._connections)

    def __contains__(self, connection: Connection) -> bool:
        with self._lock:
            return connection.id in self._connections
