"""
Lock Manager for WebSocket Gateway.

One threading.Lock per room, so joins, leaves and broadcasts on different
rooms never contend. Broadcasts are issued from worker threads (services
publish after commit) as well as from the event loop, hence threading
rather than asyncio locks.

LOCK ORDERING:
==============
room lock -> meta lock (hold() verifies the mapping while holding the room)
room lock -> RoomRouter table lock

The meta lock is never held while waiting on a room lock.
"""

from __future__ import annotations

import threading
from collections.abc import Iterator
from contextlib import contextmanager

from shared.config.logging import get_logger

logger = get_logger(__name__)


class LockManager:
    """
    Per-room locks.

    A room's lock is discarded when the room empties. A thread that picked
    up a discarded lock notices after acquiring it and retries with the
    current one, so two threads never act on one room under different locks.
    """

    def __init__(self):
        self._room_locks: dict[str, threading.Lock] = {}
        self._meta_lock = threading.Lock()

    def _get_room_lock(self, room: str) -> threading.Lock:
        with self._meta_lock:
            lock = self._room_locks.get(room)
            if lock is None:
                lock = threading.Lock()
                self._room_locks[room] = lock
            return lock

    def _is_current(self, room: str, lock: threading.Lock) -> bool:
        with self._meta_lock:
            return self._room_locks.get(room) is lock

    @contextmanager
    def hold(self, room: str) -> Iterator[None]:
        """Hold the room's lock for the duration of the block."""
        while True:
            lock = self._get_room_lock(room)
            lock.acquire()
            if self._is_current(room, lock):
                break
            lock.release()
        try:
            yield
        finally:
            lock.release()

    def discard(self, room: str) -> None:
        """
        Forget a room's lock. Must be called while holding it, once the
        room has no members.
        """
        with self._meta_lock:
            self._room_locks.pop(room, None)

    def get_stats(self) -> dict[str, int]:
        with self._meta_lock:
            return {"room_locks": len(self._room_locks)}
