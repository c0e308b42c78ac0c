"""
Room Router.

Room membership and fan-out. A room is a set of connections keyed by name
(a tenant id for dashboards, "guest:<tenantId>" for guest devices).

Delivery happens under the room's lock, so a connection joining while a
broadcast is in flight either receives that event or joins after it; it
never sees it twice and never misses one it was a member for. Delivery is
only an outbox append, so holding the lock does not wait on sockets.
"""

from __future__ import annotations

import threading
from typing import Any, Callable

from shared.config.logging import get_logger

from ws_gateway.components.connection.connection import Connection
from ws_gateway.components.connection.locks import LockManager
from ws_gateway.components.core.constants import WSCloseCode

logger = get_logger(__name__)


class RoomRouter:
    """
    Thread-safe room membership and broadcast.

    Usage:
        router = RoomRouter(on_evict=manager.leave)
        router.join(connection, "tenant-1")
        delivered = router.broadcast("tenant-1", "new_order", payload)
    """

    def __init__(
        self,
        locks: LockManager | None = None,
        on_evict: Callable[[Connection], None] | None = None,
    ):
        self._locks = locks if locks is not None else LockManager()
        self._on_evict = on_evict
        # Insertion-ordered member dicts keep fan-out order stable
        self._rooms: dict[str, dict[Connection, None]] = {}
        self._table_lock = threading.Lock()

    def set_evict_callback(self, on_evict: Callable[[Connection], None]) -> None:
        self._on_evict = on_evict

    # =========================================================================
    # Membership
    # =========================================================================

    def join(
        self,
        connection: Connection,
        room: str,
        ack: dict[str, Any] | None = None,
    ) -> bool:
        """
        Add a connection to a room. Joining a room twice is a no-op.

        An ack message, if given, is enqueued under the room lock so it
        reaches the connection before any event broadcast to the room after
        the join.

        Returns:
            False if the connection is already closed.
        """
        with self._locks.hold(room):
            if not connection._enter_room(room):
                return False
            with self._table_lock:
                self._rooms.setdefault(room, {})[connection] = None
            if ack is not None:
                connection.deliver(ack)

        logger.debug("Joined room", connection_id=connection.id, room=room)
        return True

    def leave_all(self, connection: Connection) -> list[str]:
        """
        Remove a connection from every room it joined. Idempotent.

        Returns:
            The rooms it was removed from.
        """
        rooms = connection._take_rooms()
        for room in rooms:
            with self._locks.hold(room):
                with self._table_lock:
                    members = self._rooms.get(room)
                    emptied = False
                    if members is not None:
                        members.pop(connection, None)
                        if not members:
                            del self._rooms[room]
                            emptied = True
                if emptied:
                    self._locks.discard(room)

        if rooms:
            logger.debug("Left rooms", connection_id=connection.id, rooms=rooms)
        return rooms

    def members(self, room: str) -> list[Connection]:
        with self._locks.hold(room):
            with self._table_lock:
                return list(self._rooms.get(room, {}))

    def room_names(self) -> list[str]:
        with self._table_lock:
            return sorted(self._rooms)

    # =========================================================================
    # Fan-out
    # =========================================================================

    def broadcast(self, room: str, event: str, payload: Any) -> int:
        """
        Deliver {"event", "data"} to every connection currently in the room.

        Connections whose outbox is full or whose delivery raises are evicted
        after the fan-out; the others are unaffected.

        Returns:
            Number of connections the event was delivered to.
        """
        message = {"event": event, "data": payload}
        delivered = 0
        failed: list[Connection] = []

        with self._locks.hold(room):
            with self._table_lock:
                members = list(self._rooms.get(room, {}))

            for connection in members:
                try:
                    if connection.deliver(message):
                        delivered += 1
                    else:
                        failed.append(connection)
                except Exception as e:
                    logger.warning(
                        "Delivery failed",
                        connection_id=connection.id,
                        room=room,
                        error=str(e),
                    )
                    failed.append(connection)

        for connection in failed:
            self._evict(connection)

        logger.debug(
            "Broadcast complete",
            room=room,
            event_type=event,
            delivered=delivered,
            evicted=len(failed),
        )
        return delivered

    def _evict(self, connection: Connection) -> None:
        connection.close(WSCloseCode.POLICY_VIOLATION)
        if self._on_evict is not None:
            try:
                self._on_evict(connection)
                return
            except Exception as e:
                logger.error("Evict callback failed", connection_id=connection.id, error=str(e))
        self.leave_all(connection)

    def get_stats(self) -> dict[str, int]:
        with self._table_lock:
            return {
                "rooms": len(self._rooms),
                "memberships": sum(len(m) for m in self._rooms.values()),
            }
