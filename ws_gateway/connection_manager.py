"""
WebSocket Connection Manager.

Thin orchestrator that composes the gateway components:
- TenantTokenAuthStrategy: token -> Identity
- ConnectionRegistry: live connections and the global cap
- RoomRouter: room membership and fan-out

It is also the RoomBroadcaster the EventPublisher publishes through, so
services in the same process deliver straight into connection outboxes.

Room rules:
- "<tenantId>": dashboard room, only for a connection authenticated as
  that tenant.
- "guest:<tenantId>": guest room, any connection, tenant must exist.
"""

from __future__ import annotations

from typing import Any, Callable

from shared.config.constants import EventType
from shared.config.logging import audit_ws_connection, get_logger
from shared.infrastructure.rooms import guest_room, tenant_room
from shared.security.auth import CredentialVerifier
from shared.utils.exceptions import (
    AuthError,
    CapacityError,
    NotFoundError,
    RoomAccessError,
    ValidationError,
)

from ws_gateway.components.auth.strategies import AuthStrategy, TenantTokenAuthStrategy
from ws_gateway.components.broadcast.router import RoomRouter
from ws_gateway.components.connection.connection import Connection, Identity
from ws_gateway.components.connection.registry import ConnectionRegistry
from ws_gateway.components.core.constants import WSCloseCode

logger = get_logger(__name__)

__all__ = ["ConnectionManager"]


class ConnectionManager:
    """
    Manages WebSocket connections and their room memberships.

    Every method is thread-safe. authenticate(), check_guest_room() and
    join_guest_room() (unless tenant_checked) may query the database and
    should be run off the event loop.

    Usage:
        manager = ConnectionManager(tenant_exists=TenantLookup())
        identity = manager.authenticate(token)
        connection = manager.connect(identity, notify=wake_writer)
        manager.join_tenant_room(connection, identity.tenant_id)
        ...
        manager.leave(connection)
    """

    def __init__(
        self,
        tenant_exists: Callable[[str], bool],
        verifier: CredentialVerifier | None = None,
        auth_strategy: AuthStrategy | None = None,
        registry: ConnectionRegistry | None = None,
        router: RoomRouter | None = None,
        max_pending: int | None = None,
    ) -> None:
        self._tenant_exists = tenant_exists
        self._auth = (
            auth_strategy if auth_strategy is not None
            else TenantTokenAuthStrategy(tenant_exists, verifier)
        )
        self._registry = registry if registry is not None else ConnectionRegistry()
        self._router = router if router is not None else RoomRouter()
        self._router.set_evict_callback(self._evicted)
        self._max_pending = max_pending

    @property
    def router(self) -> RoomRouter:
        return self._router

    @property
    def registry(self) -> ConnectionRegistry:
        return self._registry

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def authenticate(self, token: str | None) -> Identity:
        """
        Resolve a connection's identity from its token.

        No token means a guest.

        Raises:
            AuthError: If a token is present but invalid, expired, or names
                a tenant that no longer exists
        """
        result = self._auth.authenticate(token)
        if not result.success or result.identity is None:
            audit_ws_connection("AUTH_FAILED", reason=result.audit_reason)
            raise AuthError(result.error_message or "Authentication failed")
        return result.identity

    def connect(
        self,
        identity: Identity,
        notify: Callable[[], None] | None = None,
    ) -> Connection:
        """
        Register a live connection.

        Args:
            identity: Identity from authenticate().
            notify: Called (from any thread) whenever the connection's
                outbox gains a message or it is closed.

        Raises:
            CapacityError: If the gateway is at its connection limit
        """
        connection = Connection(identity, notify=notify, max_pending=self._max_pending)
        if not self._registry.register(connection):
            raise CapacityError(connection_id=connection.id)

        audit_ws_connection(
            "CONNECT",
            connection_id=connection.id,
            tenant_id=identity.tenant_id,
        )
        return connection

    def leave(self, connection: Connection, code: int = WSCloseCode.NORMAL) -> None:
        """
        Close a connection and remove it from every room and the registry.

        Idempotent: calling it again for a departed connection does nothing.
        """
        connection.close(code)
        rooms = self._router.leave_all(connection)
        if self._registry.unregister(connection):
            audit_ws_connection(
                "DISCONNECT",
                connection_id=connection.id,
                tenant_id=connection.identity.tenant_id,
                rooms=rooms,
                close_code=connection.close_code,
            )

    def shutdown(self) -> int:
        """
        Close every live connection with GOING_AWAY.

        Returns:
            Number of connections closed.
        """
        logger.info("WebSocket manager shutting down...")
        connections = self._registry.all()
        for connection in connections:
            self.leave(connection, WSCloseCode.GOING_AWAY)
        logger.info("WebSocket shutdown complete. Closed %d connections.", len(connections))
        return len(connections)

    def _evicted(self, connection: Connection) -> None:
        audit_ws_connection(
            "EVICTED",
            connection_id=connection.id,
            tenant_id=connection.identity.tenant_id,
            reason="delivery_failed",
            pending=connection.pending,
        )
        self.leave(connection, WSCloseCode.POLICY_VIOLATION)

    # =========================================================================
    # Rooms
    # =========================================================================

    def join_tenant_room(self, connection: Connection, tenant_id: Any) -> str:
        """
        Join the dashboard room of the connection's own tenant.

        On success the connection is acked with room_joined.

        Raises:
            AuthError: If the connection is a guest
            RoomAccessError: If tenant_id is not the connection's tenant
        """
        identity = connection.identity
        if identity.is_guest:
            audit_ws_connection(
                "JOIN_DENIED",
                connection_id=connection.id,
                room=str(tenant_id),
                reason="guest",
            )
            raise AuthError("Authentication required to join a tenant room")

        if not isinstance(tenant_id, str) or tenant_id != identity.tenant_id:
            audit_ws_connection(
                "JOIN_DENIED",
                connection_id=connection.id,
                tenant_id=identity.tenant_id,
                room=str(tenant_id),
                reason="tenant_mismatch",
            )
            raise RoomAccessError(str(tenant_id), connection_id=connection.id)

        room = tenant_room(tenant_id)
        self._join(connection, room)
        return room

    def check_guest_room(self, tenant_id: Any) -> str:
        """
        Resolve the guest room of an existing tenant without joining it.

        Has no side effects, so the gateway can abandon a slow lookup.

        Raises:
            ValidationError: If tenant_id is not a non-empty string
            NotFoundError: If the tenant does not exist
        """
        if not isinstance(tenant_id, str) or not tenant_id.strip():
            raise ValidationError("tenantId is required", field="tenantId")

        if not self._tenant_exists(tenant_id):
            raise NotFoundError("Tenant", tenant_id)

        return guest_room(tenant_id)

    def join_guest_room(
        self,
        connection: Connection,
        tenant_id: Any,
        tenant_checked: bool = False,
    ) -> str:
        """
        Join a tenant's guest room. Open to any connection.

        On success the connection is acked with room_joined.

        Args:
            tenant_checked: check_guest_room() already succeeded for this
                tenant, so the existence lookup is skipped.

        Raises:
            ValidationError: If tenant_id is not a non-empty string
            NotFoundError: If the tenant does not exist
        """
        if tenant_checked:
            room = guest_room(tenant_id)
        else:
            room = self.check_guest_room(tenant_id)
        self._join(connection, room)
        return room

    def _join(self, connection: Connection, room: str) -> None:
        ack = {"event": EventType.ROOM_JOINED, "data": {"room": room}}
        if not self._router.join(connection, room, ack=ack):
            logger.debug("Join ignored for closed connection", connection_id=connection.id, room=room)
            return
        logger.info(
            "Connection joined room",
            connection_id=connection.id,
            tenant_id=connection.identity.tenant_id,
            room=room,
        )

    # =========================================================================
    # Broadcasting
    # =========================================================================

    def broadcast(self, room: str, event: str, payload: dict[str, Any]) -> int:
        """
        Deliver an event to every connection in a room.

        Returns:
            Number of connections it was delivered to.
        """
        return self._router.broadcast(room, event, payload)

    # =========================================================================
    # Statistics
    # =========================================================================

    def get_stats(self) -> dict[str, int]:
        return {
            "connections": len(self._registry),
            **self._router.get_stats(),
        }
