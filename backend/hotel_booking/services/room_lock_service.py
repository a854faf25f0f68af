"""
Distributed room lock for multi-worker deployments.
Implements RoomLock interface using Redis.

Failure mode:
  On Redis connection failure the lock "fails open": the reservation goes
  ahead without the distributed lock. The database stays authoritative:
  the room row is still locked with SELECT ... FOR UPDATE inside the
  reservation transaction, so capacity holds on PostgreSQL even then.
  We only lose the cheap queueing in front of the database.
"""

import time
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import redis.asyncio as redis
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import LockError, TimeoutError as RedisTimeoutError

from hotel_booking.core.logging import get_logger
from hotel_booking.core.metrics import (
    record_lock_timeout,
    record_lock_wait,
    redis_connection_errors,
)
from hotel_booking.domain.errors import RoomLockTimeout
from hotel_booking.infrastructure.redis_client import get_redis
from hotel_booking.services.interfaces.room_lock import RoomLock

logger = get_logger(__name__)


class RedisRoomLock(RoomLock):
    """
    Redis-based room lock.

    Use when:
    - Several API workers or hosts accept bookings
    - Popular rooms see bursts of simultaneous requests

    `ttl` bounds how long a crashed holder can block a room.
    """

    strategy = "redis"

    def __init__(
        self,
        client: Optional[redis.Redis] = None,
        timeout: float = 5.0,
        ttl: float = 30.0,
        prefix: str = "room-lock",
    ):
        self.redis = client if client is not None else get_redis()
        self.timeout = timeout
        self.ttl = ttl
        self.prefix = prefix

    def key(self, room_id: int) -> str:
        return f"{self.prefix}:{room_id}"

    @asynccontextmanager
    async def hold(self, room_id: int) -> AsyncIterator[None]:
        lock = self.redis.lock(self.key(room_id), timeout=self.ttl, blocking_timeout=self.timeout)
        start = time.perf_counter()
        try:
            acquired = await lock.acquire()
        except (RedisConnectionError, RedisTimeoutError) as e:
            redis_connection_errors.inc()
            logger.error("room_lock_unavailable", room_id=room_id, error=str(e))
            acquired = None

        if acquired is None:
            # Fail open, the row lock still guards capacity
            yield
            return

        if not acquired:
            record_lock_timeout(self.strategy)
            logger.warning("room_lock_timeout", room_id=room_id, timeout=self.timeout)
            raise RoomLockTimeout(room_id, self.timeout)

        record_lock_wait(self.strategy, time.perf_counter() - start)
        try:
            yield
        finally:
            try:
                await lock.release()
            except LockError:
                # Held past ttl; someone else may already own the key
                logger.warning("room_lock_expired", room_id=room_id, ttl=self.ttl)
            except (RedisConnectionError, RedisTimeoutError) as e:
                redis_connection_errors.inc()
                logger.error("room_lock_release_failed", room_id=room_id, error=str(e))
