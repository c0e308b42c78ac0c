"""
Connection and Identity.

A Connection is the gateway-side handle for one socket: who it is, which
rooms it joined, and an outbox the socket writer drains. Delivery into the
outbox is non-blocking and thread-safe, so broadcasts issued from worker
threads never wait on a slow socket.
"""

from __future__ import annotations

import threading
import uuid
from collections import deque
from dataclasses import dataclass
from typing import Any, Callable, Optional

from shared.config.logging import get_logger
from shared.config.settings import settings

from ws_gateway.components.core.constants import WSCloseCode

logger = get_logger(__name__)

Message = dict[str, Any]


@dataclass(frozen=True, slots=True)
class Identity:
    """
    Who a connection is, fixed at connect time.

    Authenticated dashboards carry a tenant id and slug; guests carry neither.
    """

    tenant_id: Optional[str] = None
    slug: Optional[str] = None

    @classmethod
    def guest(cls) -> "Identity":
        return cls()

    @property
    def is_guest(self) -> bool:
        return self.tenant_id is None


class Connection:
    """
    One live socket.

    Thread-safety: deliver(), drain() and close() may be called from any
    thread. The room set is only changed by the RoomRouter while it holds
    the room's lock.
    """

    def __init__(
        self,
        identity: Identity,
        notify: Callable[[], None] | None = None,
        max_pending: int | None = None,
        connection_id: str | None = None,
    ):
        self.id = connection_id or uuid.uuid4().hex[:12]
        self.identity = identity
        self._notify = notify
        self._max_pending = (
            max_pending if max_pending is not None else settings.ws_max_pending_messages
        )

        self._lock = threading.Lock()
        self._outbox: deque[Message] = deque()
        self._rooms: set[str] = set()
        self._closed = False
        self._close_code: int | None = None

    def __repr__(self) -> str:
        return f"<Connection(id={self.id}, tenant_id={self.identity.tenant_id})>"

    @property
    def rooms(self) -> frozenset[str]:
        with self._lock:
            return frozenset(self._rooms)

    @property
    def is_closed(self) -> bool:
        return self._closed

    @property
    def close_code(self) -> int | None:
        return self._close_code

    @property
    def pending(self) -> int:
        return len(self._outbox)

    def deliver(self, message: Message) -> bool:
        """
        Enqueue a message for the writer.

        Returns:
            False if the connection is closed or its outbox is full; the
            caller is expected to evict it.
        """
        with self._lock:
            if self._closed:
                return False
            if len(self._outbox) >= self._max_pending:
                logger.warning(
                    "Outbox full, dropping slow consumer",
                    connection_id=self.id,
                    pending=len(self._outbox),
                )
                return False
            self._outbox.append(message)

        return self._wake()

    def send_event(self, event: str, data: Any = None) -> bool:
        """Enqueue a single {"event", "data"} frame for this connection only."""
        return self.deliver({"event": event, "data": data})

    def drain(self) -> list[Message]:
        """Take every queued message, oldest first."""
        with self._lock:
            messages = list(self._outbox)
            self._outbox.clear()
        return messages

    def close(self, code: int = WSCloseCode.NORMAL) -> bool:
        """
        Mark the connection closed and wake the writer so it can close the socket.

        Returns:
            True if this call closed it, False if it was already closed.
        """
        with self._lock:
            if self._closed:
                return False
            self._closed = True
            self._close_code = int(code)

        self._wake()
        return True

    # =========================================================================
    # Room bookkeeping (called by RoomRouter under the room lock)
    # =========================================================================

    def _enter_room(self, room: str) -> bool:
        with self._lock:
            if self._closed:
                return False
            self._rooms.add(room)
            return True

    def _take_rooms(self) -> list[str]:
        with self._lock:
            rooms = sorted(self._rooms)
            self._rooms.clear()
        return rooms

    def _wake(self) -> bool:
        if self._notify is None:
            return True
        try:
            self._notify()
        except RuntimeError:
            # Event loop already closed; nobody will drain this outbox
            with self._lock:
                self._closed = True
                if self._close_code is None:
                    self._close_code = int(WSCloseCode.GOING_AWAY)
            return False
        return True
