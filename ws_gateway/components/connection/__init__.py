"""
Connection management components.

Connections with their outboxes, the registry of live connections, and
per-room locks.
"""

from ws_gateway.components.connection.connection import Connection, Identity
from ws_gateway.components.connection.locks import LockManager
from ws_gateway.components.connection.registry import ConnectionRegistry

__all__ = [
    "Connection",
    "Identity",
    "LockManager",
    "ConnectionRegistry",
]
