"""
Store interfaces (repository pattern).

The booking services depend only on these. Implementations are bound to
one unit of work and passed in explicitly; there is no global client.
"""

from abc import ABC, abstractmethod
from typing import AsyncContextManager, Optional

from hotel_booking.models import Booking, Enrollment, Room, Ticket


class EnrollmentRepository(ABC):

    @abstractmethod
    async def find_with_address_by_user_id(self, user_id: int) -> Optional[Enrollment]:
        """Return the user's enrollment with its address loaded, or None."""
        pass


class TicketRepository(ABC):

    @abstractmethod
    async def find_by_enrollment_id(self, enrollment_id: int) -> Optional[Ticket]:
        """Return the enrollment's ticket with its ticket type loaded, or None."""
        pass


class RoomRepository(ABC):

    @abstractmethod
    async def find_by_id(self, room_id: int) -> Optional[Room]:
        pass

    @abstractmethod
    async def find_by_id_for_update(self, room_id: int) -> Optional[Room]:
        """
        Return the room and lock its row until the current transaction ends.
        Concurrent reservations for the same room queue up here.
        """
        pass


class BookingStore(ABC):
    """
    Persistence for Booking records.

    Implementations must enforce one booking per user and raise
    DuplicateBookingError when a write would break that.
    """

    @abstractmethod
    def transaction(self) -> AsyncContextManager[None]:
        """Commit everything done inside the block, or roll it back on error."""
        pass

    @abstractmethod
    async def create(self, user_id: int, room_id: int) -> Booking:
        pass

    @abstractmethod
    async def find_by_user_id(self, user_id: int) -> Optional[Booking]:
        """Return the user's booking with its room loaded, or None."""
        pass

    @abstractmethod
    async def find_by_room_id(self, room_id: int) -> list[Booking]:
        pass

    @abstractmethod
    async def count_by_room_id(self, room_id: int, excluding_booking_id: Optional[int] = None) -> int:
        """Occupancy of a room, optionally ignoring one booking."""
        pass

    @abstractmethod
    async def update(self, booking_id: int, room_id: int) -> Booking:
        """Move a booking to another room. id and user_id never change."""
        pass

    @abstractmethod
    async def upsert(self, booking_id: Optional[int], user_id: int, room_id: int) -> Booking:
        """Update the booking if it exists, otherwise create one for the user."""
        pass
