"""
Event Publisher implementation.
Fans committed domain changes out to WebSocket rooms.
"""

from typing import Any, Protocol

from shared.config.constants import EventType
from shared.config.logging import get_logger
from shared.infrastructure.rooms import guest_room, tenant_room

logger = get_logger(__name__)


class RoomBroadcaster(Protocol):
    """Anything that can deliver an event to every member of a room."""

    def broadcast(self, room: str, event: str, payload: dict[str, Any]) -> int: ...


class Audience:
    """Which of a tenant's rooms receive an event."""

    TENANT = "tenant"  # dashboard only
    TENANT_AND_GUEST = "tenant_and_guest"


class EventPublisher:
    """
    Publishes domain events to the rooms of the tenant that owns them.

    Called synchronously after commit, so events for one entity go out in
    commit order. Delivery failures are logged and never raised: the
    committed operation has already succeeded.

    Usage:
        publisher = EventPublisher(connection_manager)
        publisher.publish(EventType.NEW_ORDER, order.tenant_id, payload)
    """

    # Audience mapping by event type
    AUDIENCE_MAP: dict[str, str] = {
        EventType.NEW_ORDER: Audience.TENANT,
        EventType.ORDER_UPDATED: Audience.TENANT_AND_GUEST,
        EventType.TABLE_STATUS_CHANGED: Audience.TENANT_AND_GUEST,
        EventType.TABLE_PAID: Audience.TENANT_AND_GUEST,
    }

    def __init__(self, broadcaster: RoomBroadcaster | None = None):
        self._broadcaster = broadcaster

    def rooms_for(self, event: str, tenant_id: str) -> list[str]:
        """
        Rooms an event is delivered to, dashboard room first.

        Raises:
            KeyError: If the event type has no audience
        """
        audience = self.AUDIENCE_MAP[event]
        if audience == Audience.TENANT:
            return [tenant_room(tenant_id)]
        return [tenant_room(tenant_id), guest_room(tenant_id)]

    def publish(self, event: str, tenant_id: str, payload: dict[str, Any]) -> int:
        """
        Publish an event to the tenant's rooms.

        Returns:
            Number of connections the event was delivered to
        """
        if self._broadcaster is None:
            logger.debug("No broadcaster attached, event dropped", event_type=event)
            return 0

        delivered = 0
        for room in self.rooms_for(event, tenant_id):
            try:
                delivered += self._broadcaster.broadcast(room, event, payload)
            except Exception as e:
                logger.error(
                    "Failed to publish event",
                    event_type=event,
                    room=room,
                    error=str(e),
                )

        logger.debug(
            "Event published",
            event_type=event,
            tenant_id=tenant_id,
            delivered=delivered,
        )
        return delivered
