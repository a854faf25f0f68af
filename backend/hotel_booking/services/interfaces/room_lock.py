"""
Per-room lock strategy interface.
Allows swapping between in-process and distributed mutual exclusion.
"""

from abc import ABC, abstractmethod
from typing import AsyncContextManager


class RoomLock(ABC):
    """
    Interface for per-room mutual exclusion.

    Implementations:
    - LocalRoomLock: one asyncio.Lock per room, single process
    - RedisRoomLock: Redis lock per room, shared by all workers

    The lock is held across the occupancy check, the booking write and the
    commit, so two reservations for the same room never interleave.
    """

    strategy: str = "abstract"

    @abstractmethod
    def hold(self, room_id: int) -> AsyncContextManager[None]:
        """
        Hold the lock for `room_id` for the duration of the block.

        Raises:
            RoomLockTimeout: if the lock could not be acquired in time
        """
        pass
