"""
Capacity-safe room reservation.

The occupancy check and the booking write are one atomic unit per room:

  1. Acquire the per-room lock (LocalRoomLock or RedisRoomLock)
  2. BEGIN; SELECT room ... FOR UPDATE
  3. COUNT bookings in the room (minus the booking being moved, if any)
  4. If count < capacity, run the caller's write
  5. COMMIT, then release the lock

A second request for the same room waits at step 1 (or at the row lock in
step 2 when it comes from another process) and counts the committed
bookings of the first. Occupancy is recomputed every time; there is no
counter to drift.
"""

import time
from typing import Awaitable, Callable, Optional

from hotel_booking.core.logging import get_logger
from hotel_booking.core.metrics import reservation_latency
from hotel_booking.db.base import MAX_ROW_ID
from hotel_booking.domain.errors import RoomLockTimeout
from hotel_booking.domain.results import BookingErrorKind, BookingResult
from hotel_booking.models import Booking
from hotel_booking.services.interfaces.room_lock import RoomLock
from hotel_booking.stores.interfaces import BookingStore, RoomRepository

logger = get_logger(__name__)


def has_vacancy(occupancy: int, capacity: int) -> bool:
    """A room at capacity is full; one more fits only below it."""
    return occupancy < capacity


class CapacityAllocator:

    def __init__(self, rooms: RoomRepository, bookings: BookingStore, room_lock: RoomLock):
        self._rooms = rooms
        self._bookings = bookings
        self._room_lock = room_lock

    async def reserve(
        self,
        room_id: int,
        write: Callable[[], Awaitable[Booking]],
        excluding_booking_id: Optional[int] = None,
    ) -> BookingResult[Booking]:
        """
        Run `write` only if `room_id` has room for one more booking.

        `excluding_booking_id` leaves a booking out of the occupancy count;
        used when moving a booking so it never counts against itself.
        Exceptions raised by `write` roll the transaction back and propagate.
        """
        if room_id > MAX_ROW_ID:
            # No row can carry this id; skip the lock and the query
            return BookingResult.failure(BookingErrorKind.ROOM_NOT_FOUND, f"Room {room_id} not found")

        start = time.perf_counter()
        try:
            async with self._room_lock.hold(room_id):
                async with self._bookings.transaction():
                    room = await self._rooms.find_by_id_for_update(room_id)
                    if room is None:
                        return BookingResult.failure(
                            BookingErrorKind.ROOM_NOT_FOUND, f"Room {room_id} not found"
                        )

                    occupancy = await self._bookings.count_by_room_id(room_id, excluding_booking_id)
                    if not has_vacancy(occupancy, room.capacity):
                        logger.info(
                            "room_full",
                            room_id=room_id,
                            occupancy=occupancy,
                            capacity=room.capacity,
                        )
                        return BookingResult.failure(
                            BookingErrorKind.NO_VACANCY, f"Room {room_id} has no vacancy"
                        )

                    booking = await write()
        except RoomLockTimeout:
            return BookingResult.failure(
                BookingErrorKind.NO_VACANCY, f"Room {room_id} is busy, try again"
            )
        finally:
            reservation_latency.observe(time.perf_counter() - start)

        return BookingResult.success(booking)
