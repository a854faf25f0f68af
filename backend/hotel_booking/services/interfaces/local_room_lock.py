"""
In-process room lock - one asyncio.Lock per room id.
"""

import asyncio
import time
from contextlib import asynccontextmanager
from typing import AsyncIterator

from hotel_booking.core.logging import get_logger
from hotel_booking.core.metrics import record_lock_timeout, record_lock_wait
from hotel_booking.domain.errors import RoomLockTimeout
from hotel_booking.services.interfaces.room_lock import RoomLock

logger = get_logger(__name__)


class LocalRoomLock(RoomLock):
    """
    Serializes reservations per room inside one event loop.

    Use when:
    - A single API process serves all booking traffic
    - Tests and local development

    Across several processes this alone is not enough; the room row lock
    taken inside the transaction covers that case on PostgreSQL.

    A room's lock lives only while some request holds or waits for it, so
    the table stays bounded by the number of in-flight reservations.
    """

    strategy = "local"

    def __init__(self, timeout: float = 5.0):
        self.timeout = timeout
        self._locks: dict[int, asyncio.Lock] = {}
        self._users: dict[int, int] = {}

    @asynccontextmanager
    async def hold(self, room_id: int) -> AsyncIterator[None]:
        lock = self._locks.setdefault(room_id, asyncio.Lock())
        self._users[room_id] = self._users.get(room_id, 0) + 1
        try:
            start = time.perf_counter()
            try:
                await asyncio.wait_for(lock.acquire(), timeout=self.timeout)
            except asyncio.TimeoutError:
                record_lock_timeout(self.strategy)
                logger.warning("room_lock_timeout", room_id=room_id, timeout=self.timeout)
                raise RoomLockTimeout(room_id, self.timeout)
            record_lock_wait(self.strategy, time.perf_counter() - start)
            try:
                yield
            finally:
                lock.release()
        finally:
            self._users[room_id] -= 1
            if self._users[room_id] == 0:
                del self._users[room_id]
                del self._locks[room_id]

    def active_rooms(self) -> int:
        """Rooms with a lock currently held or awaited."""
        return len(self._locks)
