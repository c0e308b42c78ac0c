"""
WebSocket Gateway Components.

Organized into domain-specific modules:
- core/       - Constants (close codes, timeouts)
- connection/ - Connections with outboxes, registry, per-room locks
- broadcast/  - Room membership and fan-out
- auth/       - Authentication strategies (guest, tenant JWT)
- endpoints/  - The WebSocket endpoint (reader/writer tasks)
- data/       - Tenant existence lookups

New code should import from specific submodules for clarity.
"""

from ws_gateway.components.core.constants import MSG_PING_PLAIN, WSCloseCode, WSConstants
from ws_gateway.components.connection.connection import Connection, Identity
from ws_gateway.components.connection.locks import LockManager
from ws_gateway.components.connection.registry import ConnectionRegistry
from ws_gateway.components.broadcast.router import RoomRouter
from ws_gateway.components.auth.strategies import (
    AuthResult,
    AuthStrategy,
    TenantTokenAuthStrategy,
)
from ws_gateway.components.data.tenant_lookup import TenantLookup
from ws_gateway.components.endpoints.gateway import GatewayEndpoint

__all__ = [
    # Core
    "MSG_PING_PLAIN",
    "WSCloseCode",
    "WSConstants",
    # Connection
    "Connection",
    "Identity",
    "LockManager",
    "ConnectionRegistry",
    # Broadcast
    "RoomRouter",
    # Auth
    "AuthResult",
    "AuthStrategy",
    "TenantTokenAuthStrategy",
    # Data
    "TenantLookup",
    # Endpoints
    "GatewayEndpoint",
]
