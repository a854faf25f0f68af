"""
SQLAlchemy implementations of the store interfaces.

All repositories for one request share a single AsyncSession, so the room
row lock taken by SqlAlchemyRoomRepository.find_by_id_for_update and the
booking write done by SqlAlchemyBookingStore land in the same transaction.
"""

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from hotel_booking.core.logging import get_logger
from hotel_booking.domain.errors import DuplicateBookingError
from hotel_booking.models import Booking, Enrollment, Room, Ticket
from hotel_booking.stores.interfaces import (
    BookingStore,
    EnrollmentRepository,
    RoomRepository,
    TicketRepository,
)

logger = get_logger(__name__)


class SqlAlchemyEnrollmentRepository(EnrollmentRepository):

    def __init__(self, session: AsyncSession):
        self._session = session

    async def find_with_address_by_user_id(self, user_id: int) -> Optional[Enrollment]:
        result = await self._session.execute(
            select(Enrollment)
            .options(selectinload(Enrollment.address))
            .where(Enrollment.user_id == user_id)
        )
        return result.scalars().first()


class SqlAlchemyTicketRepository(TicketRepository):

    def __init__(self, session: AsyncSession):
        self._session = session

    async def find_by_enrollment_id(self, enrollment_id: int) -> Optional[Ticket]:
        result = await self._session.execute(
            select(Ticket)
            .options(selectinload(Ticket.ticket_type))
            .where(Ticket.enrollment_id == enrollment_id)
        )
        return result.scalars().first()


class SqlAlchemyRoomRepository(RoomRepository):

    def __init__(self, session: AsyncSession):
        self._session = session

    async def find_by_id(self, room_id: int) -> Optional[Room]:
        result = await self._session.execute(select(Room).where(Room.id == room_id))
        return result.scalar_one_or_none()

    async def find_by_id_for_update(self, room_id: int) -> Optional[Room]:
        # FOR UPDATE is a no-op on SQLite; the room lock still serializes there
        result = await self._session.execute(
            select(Room)
            .where(Room.id == room_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()


class SqlAlchemyBookingStore(BookingStore):

    def __init__(self, session: AsyncSession):
        self._session = session

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[None]:
        try:
            yield
            await self._session.commit()
        except Exception:
            await self._session.rollback()
            raise

    async def create(self, user_id: int, room_id: int) -> Booking:
        booking = Booking(user_id=user_id, room_id=room_id)
        self._session.add(booking)
        await self._flush(user_id)
        await self._session.refresh(booking)
        return booking

    async def find_by_user_id(self, user_id: int) -> Optional[Booking]:
        result = await self._session.execute(
            select(Booking)
            .options(selectinload(Booking.room))
            .where(Booking.user_id == user_id)
            .order_by(Booking.id)
        )
        return result.scalars().first()

    async def find_by_room_id(self, room_id: int) -> list[Booking]:
        result = await self._session.execute(
            select(Booking).where(Booking.room_id == room_id).order_by(Booking.id)
        )
        return list(result.scalars().all())

    async def count_by_room_id(self, room_id: int, excluding_booking_id: Optional[int] = None) -> int:
        query = select(func.count(Booking.id)).where(Booking.room_id == room_id)
        if excluding_booking_id is not None:
            query = query.where(Booking.id != excluding_booking_id)
        return (await self._session.execute(query)).scalar_one()

    async def update(self, booking_id: int, room_id: int) -> Booking:
        booking = await self._session.get(Booking, booking_id)
        if booking is None:
            raise LookupError(f"Booking {booking_id} not found")
        booking.room_id = room_id
        await self._flush(booking.user_id)
        # Reload updated_at and the new room for the caller
        await self._session.refresh(booking, attribute_names=["updated_at", "room"])
        return booking

    async def upsert(self, booking_id: Optional[int], user_id: int, room_id: int) -> Booking:
        if booking_id is not None and await self._session.get(Booking, booking_id) is not None:
            return await self.update(booking_id, room_id)
        return await self.create(user_id, room_id)

    async def _flush(self, user_id: int) -> None:
        try:
            await self._session.flush()
        except IntegrityError as e:
            logger.warning("booking_write_conflict", user_id=user_id, error=str(e.orig))
            raise DuplicateBookingError(user_id) from e
