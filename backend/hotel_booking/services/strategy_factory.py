"""
Room lock strategy factory.
Configures which mutual-exclusion strategy reservations use.
"""

from typing import Optional

from hotel_booking.core.config import get_settings
from hotel_booking.services.interfaces.room_lock import RoomLock
from hotel_booking.services.interfaces.local_room_lock import LocalRoomLock
from hotel_booking.services.room_lock_service import RedisRoomLock


def get_room_lock_strategy() -> RoomLock:
    """
    Build the configured room lock.

    - local: LocalRoomLock (single process, default)
    - redis: RedisRoomLock (several workers)

    Selected via the ROOM_LOCK_STRATEGY env var.
    """
    settings = get_settings()
    strategy = settings.ROOM_LOCK_STRATEGY.lower()

    if strategy == 'redis':
        return RedisRoomLock(
            timeout=settings.ROOM_LOCK_TIMEOUT_SECONDS,
            ttl=settings.ROOM_LOCK_TTL_SECONDS,
        )
    if strategy == 'local':
        return LocalRoomLock(timeout=settings.ROOM_LOCK_TIMEOUT_SECONDS)
    raise ValueError(f"Unknown ROOM_LOCK_STRATEGY: {settings.ROOM_LOCK_STRATEGY}")


# Singleton instance
_room_lock: Optional[RoomLock] = None


def get_room_lock() -> RoomLock:
    """Get room lock singleton."""
    global _room_lock
    if _room_lock is None:
        _room_lock = get_room_lock_strategy()
    return _room_lock
