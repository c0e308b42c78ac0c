"""
Tests for the gateway's connection, lock and routing components.
"""

import asyncio
import threading

import pytest

from ws_gateway.components.broadcast.router import RoomRouter
from ws_gateway.components.connection.connection import Connection, Identity
from ws_gateway.components.connection.locks import LockManager
from ws_gateway.components.connection.registry import ConnectionRegistry
from ws_gateway.components.core.constants import WSCloseCode


def _events(connection: Connection) -> list[str]:
    return [message["event"] for message in connection.drain()]


class TestConnection:
    """Outbox behavior of a single connection."""

    def test_deliver_and_drain_in_order(self):
        connection = Connection(Identity.guest())

        connection.send_event("a", 1)
        connection.send_event("b", 2)

        assert connection.drain() == [{"event": "a", "data": 1}, {"event": "b", "data": 2}]
        assert connection.drain() == []

    def test_full_outbox_refuses(self):
        connection = Connection(Identity.guest(), max_pending=2)

        assert connection.send_event("a") is True
        assert connection.send_event("b") is True
        assert connection.send_event("c") is False
        assert connection.pending == 2

    def test_closed_connection_refuses(self):
        connection = Connection(Identity.guest())

        assert connection.close(WSCloseCode.GOING_AWAY) is True
        assert connection.close() is False
        assert connection.close_code == WSCloseCode.GOING_AWAY
        assert connection.send_event("a") is False

    def test_notify_called_on_delivery_and_close(self):
        calls = []
        connection = Connection(Identity.guest(), notify=lambda: calls.append(1))

        connection.send_event("a")
        connection.close()

        assert len(calls) == 2

    def test_dead_event_loop_closes_connection(self):
        def notify():
            raise RuntimeError("Event loop is closed")

        connection = Connection(Identity.guest(), notify=notify)

        assert connection.send_event("a") is False
        assert connection.is_closed

    @pytest.mark.asyncio
    async def test_delivery_from_worker_thread_wakes_loop(self):
        """Broadcasts issued on worker threads wake the writer on the event loop."""
        loop = asyncio.get_running_loop()
        wakeup = asyncio.Event()
        connection = Connection(
            Identity.guest(),
            notify=lambda: loop.call_soon_threadsafe(wakeup.set),
        )

        await asyncio.to_thread(connection.send_event, "new_order", {"id": "o1"})
        await asyncio.wait_for(wakeup.wait(), timeout=1.0)

        assert connection.drain() == [{"event": "new_order", "data": {"id": "o1"}}]

    def test_identity(self):
        assert Identity.guest().is_guest
        assert not Identity(tenant_id="t", slug="s").is_guest


class TestLockManager:

    def test_same_room_same_lock_while_held(self):
        locks = LockManager()

        with locks.hold("room"):
            assert locks.get_stats() == {"room_locks": 1}

    def test_discarded_lock_is_replaced(self):
        locks = LockManager()
        with locks.hold("room"):
            locks.discard("room")

        with locks.hold("room"):
            assert locks.get_stats() == {"room_locks": 1}


class TestConnectionRegistry:

    def test_register_and_unregister_idempotent(self):
        registry = ConnectionRegistry(max_connections=10)
        connection = Connection(Identity.guest())

        assert registry.register(connection)
        assert connection in registry
        assert registry.unregister(connection) is True
        assert registry.unregister(connection) is False
        assert len(registry) == 0

    def test_capacity(self):
        registry = ConnectionRegistry(max_connections=1)

        assert registry.register(Connection(Identity.guest()))
        assert not registry.register(Connection(Identity.guest()))


class TestRoomRouter:

    def test_broadcast_reaches_only_room_members(self):
        router = RoomRouter()
        a = Connection(Identity(tenant_id="t1", slug="one"))
        b = Connection(Identity(tenant_id="t2", slug="two"))
        router.join(a, "t1")
        router.join(b, "t2")

        assert router.broadcast("t1", "new_order", {"id": "o1"}) == 1

        assert _events(a) == ["new_order"]
        assert _events(b) == []

    def test_broadcast_to_empty_room(self):
        assert RoomRouter().broadcast("nobody", "new_order", {}) == 0

    def test_join_twice_counts_once(self):
        router = RoomRouter()
        connection = Connection(Identity.guest())
        router.join(connection, "guest:t1")
        router.join(connection, "guest:t1")

        assert router.broadcast("guest:t1", "order_updated", {}) == 1

    def test_ack_precedes_later_broadcasts(self):
        router = RoomRouter()
        connection = Connection(Identity.guest())

        router.join(connection, "guest:t1", ack={"event": "room_joined", "data": {"room": "guest:t1"}})
        router.broadcast("guest:t1", "order_updated", {})

        assert _events(connection) == ["room_joined", "order_updated"]

    def test_fifo_per_room(self):
        router = RoomRouter()
        connection = Connection(Identity.guest())
        router.join(connection, "room")

        for i in range(20):
            router.broadcast("room", "e", i)

        assert [m["data"] for m in connection.drain()] == list(range(20))

    def test_leave_all_is_idempotent(self):
        router = RoomRouter()
        connection = Connection(Identity(tenant_id="t1", slug="one"))
        router.join(connection, "t1")
        router.join(connection, "guest:t1")

        assert router.leave_all(connection) == ["guest:t1", "t1"]
        assert router.leave_all(connection) == []
        assert router.room_names() == []
        assert router.broadcast("t1", "e", {}) == 0

    def test_closed_connection_cannot_join(self):
        router = RoomRouter()
        connection = Connection(Identity.guest())
        connection.close()

        assert router.join(connection, "guest:t1") is False
        assert router.members("guest:t1") == []

    def test_slow_consumer_evicted_without_affecting_others(self):
        evicted = []
        router = RoomRouter(on_evict=lambda c: (evicted.append(c), router.leave_all(c)))
        slow = Connection(Identity.guest(), max_pending=1)
        healthy = Connection(Identity.guest())
        router.join(slow, "room")
        router.join(healthy, "room")

        router.broadcast("room", "e", 1)
        delivered = router.broadcast("room", "e", 2)

        assert delivered == 1
        assert evicted == [slow]
        assert slow.is_closed
        assert slow.close_code == WSCloseCode.POLICY_VIOLATION
        assert router.members("room") == [healthy]
        assert [m["data"] for m in healthy.drain()] == [1, 2]

    def test_raising_delivery_evicted(self):
        router = RoomRouter()
        broken = Connection(Identity.guest())
        healthy = Connection(Identity.guest())
        router.join(broken, "room")
        router.join(healthy, "room")

        def explode(message):
            raise ValueError("socket gone")

        broken.deliver = explode

        assert router.broadcast("room", "e", {}) == 1
        assert router.members("room") == [healthy]

    def test_concurrent_joins_and_broadcasts(self):
        """Every member present before a broadcast gets it exactly once."""
        router = RoomRouter()
        connections = [Connection(Identity.guest(), max_pending=1000) for _ in range(50)]
        start = threading.Barrier(3)

        def join_all():
            start.wait()
            for connection in connections:
                router.join(connection, "room")

        def broadcast_many(event):
            start.wait()
            for i in range(100):
                router.broadcast("room", event, i)

        threads = [
            threading.Thread(target=join_all),
            threading.Thread(target=broadcast_many, args=("a",)),
            threading.Thread(target=broadcast_many, args=("b",)),
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        for connection in connections:
            messages = connection.drain()
            for event in ("a", "b"):
                received = [m["data"] for m in messages if m["event"] == event]
                # A contiguous tail of what the publisher sent, in order
                assert received == list(range(100 - len(received), 100))
        assert len(router.members("room")) == 50
