"""
In-memory stores for service-level tests.

Every read and write yields to the event loop, so concurrent callers
interleave the way they would against a real database.
"""

import asyncio
from contextlib import asynccontextmanager
from itertools import count
from typing import AsyncIterator, Optional

from hotel_booking.domain.errors import DuplicateBookingError
from hotel_booking.models import Booking, Enrollment, Room, Ticket, TicketStatus, TicketType
from hotel_booking.services.booking_service import BookingService
from hotel_booking.services.interfaces.local_room_lock import LocalRoomLock
from hotel_booking.services.interfaces.room_lock import RoomLock
from hotel_booking.stores.interfaces import (
    BookingStore,
    EnrollmentRepository,
    RoomRepository,
    TicketRepository,
)


class InMemoryDatabase:
    def __init__(self):
        self.enrollments: dict[int, Enrollment] = {}
        self.tickets: dict[int, Ticket] = {}
        self.rooms: dict[int, Room] = {}
        self.bookings: dict[int, Booking] = {}
        self._ids = count(1)

    def next_id(self) -> int:
        return next(self._ids)

    def add_room(self, capacity: int, hotel_id: int = 1) -> Room:
        room_id = self.next_id()
        room = Room(id=room_id, name=f"Room {room_id}", capacity=capacity, hotel_id=hotel_id)
        self.rooms[room_id] = room
        return room

    def add_eligible_user(
        self,
        status: TicketStatus = TicketStatus.PAID,
        is_remote: bool = False,
        includes_hotel: bool = True,
    ) -> int:
        user_id = self.next_id()
        enrollment = Enrollment(id=self.next_id(), user_id=user_id, name="Attendee", cpf="000", phone="0")
        self.enrollments[user_id] = enrollment
        ticket_type = TicketType(
            id=self.next_id(), name="Hotel", price=600, is_remote=is_remote, includes_hotel=includes_hotel,
        )
        ticket = Ticket(
            id=self.next_id(), enrollment_id=enrollment.id, ticket_type_id=ticket_type.id, status=status,
        )
        ticket.ticket_type = ticket_type
        self.tickets[enrollment.id] = ticket
        return user_id

    def add_booking(self, user_id: int, room_id: int) -> Booking:
        booking = Booking(id=self.next_id(), user_id=user_id, room_id=room_id)
        self.bookings[booking.id] = booking
        return booking

    def occupancy(self, room_id: int) -> int:
        return sum(1 for b in self.bookings.values() if b.room_id == room_id)


class InMemoryEnrollmentRepository(EnrollmentRepository):
    def __init__(self, db: InMemoryDatabase):
        self.db = db

    async def find_with_address_by_user_id(self, user_id: int) -> Optional[Enrollment]:
        await asyncio.sleep(0)
        return self.db.enrollments.get(user_id)


class InMemoryTicketRepository(TicketRepository):
    def __init__(self, db: InMemoryDatabase):
        self.db = db

    async def find_by_enrollment_id(self, enrollment_id: int) -> Optional[Ticket]:
        await asyncio.sleep(0)
        return self.db.tickets.get(enrollment_id)


class InMemoryRoomRepository(RoomRepository):
    def __init__(self, db: InMemoryDatabase):
        self.db = db

    async def find_by_id(self, room_id: int) -> Optional[Room]:
        await asyncio.sleep(0)
        return self.db.rooms.get(room_id)

    async def find_by_id_for_update(self, room_id: int) -> Optional[Room]:
        return await self.find_by_id(room_id)


class InMemoryBookingStore(BookingStore):
    def __init__(self, db: InMemoryDatabase):
        self.db = db
        self.writes = 0

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[None]:
        yield

    async def create(self, user_id: int, room_id: int) -> Booking:
        await asyncio.sleep(0)
        if any(b.user_id == user_id for b in self.db.bookings.values()):
            raise DuplicateBookingError(user_id)
        self.writes += 1
        return self.db.add_booking(user_id, room_id)

    async def find_by_user_id(self, user_id: int) -> Optional[Booking]:
        await asyncio.sleep(0)
        for booking in self.db.bookings.values():
            if booking.user_id == user_id:
                booking.room = self.db.rooms.get(booking.room_id)
                return booking
        return None

    async def find_by_room_id(self, room_id: int) -> list[Booking]:
        await asyncio.sleep(0)
        return [b for b in self.db.bookings.values() if b.room_id == room_id]

    async def count_by_room_id(self, room_id: int, excluding_booking_id: Optional[int] = None) -> int:
        bookings = await self.find_by_room_id(room_id)
        return sum(1 for b in bookings if b.id != excluding_booking_id)

    async def update(self, booking_id: int, room_id: int) -> Booking:
        await asyncio.sleep(0)
        self.writes += 1
        booking = self.db.bookings[booking_id]
        booking.room_id = room_id
        booking.room = self.db.rooms.get(room_id)
        return booking

    async def upsert(self, booking_id: Optional[int], user_id: int, room_id: int) -> Booking:
        if booking_id in self.db.bookings:
            return await self.update(booking_id, room_id)
        return await self.create(user_id, room_id)


def make_service(db: InMemoryDatabase, room_lock: Optional[RoomLock] = None) -> BookingService:
    return BookingService(
        bookings=InMemoryBookingStore(db),
        enrollments=InMemoryEnrollmentRepository(db),
        tickets=InMemoryTicketRepository(db),
        rooms=InMemoryRoomRepository(db),
        room_lock=room_lock or LocalRoomLock(timeout=5.0),
    )
