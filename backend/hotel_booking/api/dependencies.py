"""
Per-request wiring of the booking service.

Every request gets its own repositories bound to its own session; the room
lock is process-wide so that all requests share it.
"""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from hotel_booking.db.session import get_db
from hotel_booking.services.booking_service import BookingService
from hotel_booking.services.interfaces.room_lock import RoomLock
from hotel_booking.services.strategy_factory import get_room_lock
from hotel_booking.stores.sqlalchemy_store import (
    SqlAlchemyBookingStore,
    SqlAlchemyEnrollmentRepository,
    SqlAlchemyRoomRepository,
    SqlAlchemyTicketRepository,
)


def build_booking_service(session: AsyncSession, room_lock: RoomLock) -> BookingService:
    return BookingService(
        bookings=SqlAlchemyBookingStore(session),
        enrollments=SqlAlchemyEnrollmentRepository(session),
        tickets=SqlAlchemyTicketRepository(session),
        rooms=SqlAlchemyRoomRepository(session),
        room_lock=room_lock,
    )


def get_booking_service(
    db: AsyncSession = Depends(get_db),
    room_lock: RoomLock = Depends(get_room_lock),
) -> BookingService:
    return build_booking_service(db, room_lock)
