"""
Booking service: one hotel room per eligible attendee.

CONCURRENCY STRATEGY: Per-room lock + row lock
==============================================

Problem:
  Two users try to take the last bed in a room simultaneously.
  Both count occupancy=capacity-1, both insert, both succeed.
  Result: Overbooking.

Solution:
  CapacityAllocator wraps "count bookings in room" and "insert/update the
  booking" in one transaction that is serialized per room:

  1. A per-room lock (in-process asyncio.Lock or a Redis lock) queues
     requests for the same room in front of the database
  2. Inside the transaction the room row is read with SELECT ... FOR UPDATE,
     so requests from other processes queue on the row as well
  3. The lock is released only after COMMIT, so the next request counts the
     committed booking

  Requests for different rooms never wait on each other.

Eligibility and capacity are re-checked on every create and update; a
ticket that went back to RESERVED since the last call is rejected.

Open semantics, decided here:
  - A user who already holds a booking cannot create another one
    (NOT_ELIGIBLE); the store enforces it with a unique constraint too.
  - Updating without an existing booking is NOT_ELIGIBLE, not NOT_FOUND.
"""

from typing import Any, Optional

from hotel_booking.core.logging import get_logger
from hotel_booking.core.metrics import record_booking_attempt
from hotel_booking.domain.errors import DuplicateBookingError
from hotel_booking.domain.results import BookingErrorKind, BookingResult
from hotel_booking.models import Booking
from hotel_booking.services.capacity import CapacityAllocator
from hotel_booking.services.eligibility import NOT_ELIGIBLE_MESSAGE, EligibilityChecker
from hotel_booking.services.interfaces.room_lock import RoomLock
from hotel_booking.stores.interfaces import (
    BookingStore,
    EnrollmentRepository,
    RoomRepository,
    TicketRepository,
)

logger = get_logger(__name__)

SUCCESS_EVENTS = {"create": "booking_created", "update": "booking_updated"}


def parse_positive_id(value: Any) -> Optional[int]:
    """
    Coerce a client-supplied id to a positive int.
    Accepts ints and digit strings; anything else (0, negatives, floats,
    booleans, None) gives None.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value > 0 else None
    if isinstance(value, str) and value.strip().isdigit():
        parsed = int(value.strip())
        return parsed if parsed > 0 else None
    return None


class BookingService:

    def __init__(
        self,
        bookings: BookingStore,
        enrollments: EnrollmentRepository,
        tickets: TicketRepository,
        rooms: RoomRepository,
        room_lock: RoomLock,
    ):
        self._bookings = bookings
        self._eligibility = EligibilityChecker(enrollments, tickets)
        self._allocator = CapacityAllocator(rooms, bookings, room_lock)

    async def get_booking(self, user_id: int) -> BookingResult[Booking]:
        """Return the user's booking with its room. Never writes."""
        booking = await self._bookings.find_by_user_id(user_id)
        if booking is None:
            return BookingResult.failure(BookingErrorKind.NOT_FOUND, "Booking not found")
        return BookingResult.success(booking)

    async def create_booking(self, user_id: int, room_id: Any) -> BookingResult[Booking]:
        """Book `room_id` for a user who has no booking yet."""
        parsed_room_id = parse_positive_id(room_id)
        if parsed_room_id is None:
            return self._finish("create", user_id, room_id, _invalid_room_id())

        eligibility = await self._eligibility.check(user_id)
        if not eligibility.ok:
            return self._finish("create", user_id, parsed_room_id, BookingResult(error=eligibility.error))

        if await self._bookings.find_by_user_id(user_id) is not None:
            return self._finish(
                "create", user_id, parsed_room_id,
                BookingResult.failure(BookingErrorKind.NOT_ELIGIBLE, "User already has a booking"),
            )

        async def write() -> Booking:
            return await self._bookings.create(user_id, parsed_room_id)

        result = await self._reserve(user_id, parsed_room_id, write)
        return self._finish("create", user_id, parsed_room_id, result)

    async def update_booking(
        self,
        user_id: int,
        room_id: Any,
        booking_id: Any = None,
    ) -> BookingResult[Booking]:
        """
        Move the user's booking to `room_id`.

        When `booking_id` is given it must be the user's own booking.
        The booking's id and user never change.
        """
        parsed_room_id = parse_positive_id(room_id)
        if parsed_room_id is None:
            return self._finish("update", user_id, room_id, _invalid_room_id())

        parsed_booking_id = None
        if booking_id is not None:
            parsed_booking_id = parse_positive_id(booking_id)
            if parsed_booking_id is None:
                return self._finish(
                    "update", user_id, parsed_room_id,
                    BookingResult.failure(BookingErrorKind.INVALID_INPUT, "bookingId must be a positive integer"),
                )

        eligibility = await self._eligibility.check(user_id)
        if not eligibility.ok:
            return self._finish("update", user_id, parsed_room_id, BookingResult(error=eligibility.error))

        existing = await self._bookings.find_by_user_id(user_id)
        if existing is None or (parsed_booking_id is not None and existing.id != parsed_booking_id):
            return self._finish(
                "update", user_id, parsed_room_id,
                BookingResult.failure(BookingErrorKind.NOT_ELIGIBLE, "User has no booking to change"),
            )
        existing_id = existing.id

        async def write() -> Booking:
            return await self._bookings.update(existing_id, parsed_room_id)

        result = await self._reserve(user_id, parsed_room_id, write, excluding_booking_id=existing_id)
        return self._finish("update", user_id, parsed_room_id, result)

    async def _reserve(self, user_id, room_id, write, excluding_booking_id=None) -> BookingResult[Booking]:
        try:
            return await self._allocator.reserve(room_id, write, excluding_booking_id=excluding_booking_id)
        except DuplicateBookingError:
            # Lost a race with another request by the same user
            return BookingResult.failure(BookingErrorKind.NOT_ELIGIBLE, NOT_ELIGIBLE_MESSAGE)

    def _finish(self, operation: str, user_id: int, room_id: Any, result: BookingResult[Booking]) -> BookingResult[Booking]:
        if result.ok:
            record_booking_attempt(operation, "ok")
            logger.info(
                SUCCESS_EVENTS[operation],
                booking_id=result.value.id,
                user_id=user_id,
                room_id=room_id,
            )
        else:
            record_booking_attempt(operation, result.kind.value.lower())
            logger.warning(
                "booking_rejected",
                operation=operation,
                user_id=user_id,
                room_id=room_id,
                reason=result.kind.value,
            )
        return result


def _invalid_room_id() -> BookingResult[Booking]:
    return BookingResult.failure(BookingErrorKind.INVALID_INPUT, "roomId must be a positive integer")
