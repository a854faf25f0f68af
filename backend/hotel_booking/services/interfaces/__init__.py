"""
Service interfaces for dependency inversion.
Allows swapping implementations without changing business logic.
"""

from .room_lock import RoomLock
from .local_room_lock import LocalRoomLock

__all__ = ['RoomLock', 'LocalRoomLock']
