"""
Tests for the SQLAlchemy store implementations.
"""

import pytest

from hotel_booking.domain.errors import DuplicateBookingError
from hotel_booking.stores.sqlalchemy_store import (
    SqlAlchemyBookingStore,
    SqlAlchemyEnrollmentRepository,
    SqlAlchemyRoomRepository,
    SqlAlchemyTicketRepository,
)
from tests import factories


@pytest.mark.asyncio
async def test_create_and_find_by_user(session_factory, db_session, eligible_user, test_room):
    async with session_factory() as session:
        store = SqlAlchemyBookingStore(session)
        async with store.transaction():
            created = await store.create(eligible_user.id, test_room.id)

    async with session_factory() as session:
        found = await SqlAlchemyBookingStore(session).find_by_user_id(eligible_user.id)

    assert found.id == created.id
    assert found.room.id == test_room.id
    assert found.created_at is not None


@pytest.mark.asyncio
async def test_find_by_user_missing(db_session):
    assert await SqlAlchemyBookingStore(db_session).find_by_user_id(424242) is None


@pytest.mark.asyncio
async def test_count_and_find_by_room(db_session, test_room):
    users = [await factories.create_eligible_user(db_session) for _ in range(3)]
    bookings = [await factories.create_booking(db_session, u, test_room) for u in users]
    store = SqlAlchemyBookingStore(db_session)

    assert [b.id for b in await store.find_by_room_id(test_room.id)] == [b.id for b in bookings]
    assert await store.count_by_room_id(test_room.id) == 3
    assert await store.count_by_room_id(test_room.id, excluding_booking_id=bookings[0].id) == 2
    assert await store.count_by_room_id(test_room.id + 999) == 0


@pytest.mark.asyncio
async def test_update_changes_room_only(session_factory, db_session, eligible_user, test_room):
    hotel = await factories.create_hotel(db_session)
    target = await factories.create_room(db_session, hotel, capacity=1)
    booking = await factories.create_booking(db_session, eligible_user, test_room)

    async with session_factory() as session:
        store = SqlAlchemyBookingStore(session)
        async with store.transaction():
            updated = await store.update(booking.id, target.id)

    assert updated.id == booking.id
    assert updated.user_id == eligible_user.id
    assert updated.room_id == target.id
    assert updated.room.id == target.id


@pytest.mark.asyncio
async def test_upsert(session_factory, db_session, eligible_user, test_room):
    hotel = await factories.create_hotel(db_session)
    target = await factories.create_room(db_session, hotel, capacity=1)

    async with session_factory() as session:
        store = SqlAlchemyBookingStore(session)
        async with store.transaction():
            created = await store.upsert(None, eligible_user.id, test_room.id)
        async with store.transaction():
            moved = await store.upsert(created.id, eligible_user.id, target.id)

    assert moved.id == created.id
    assert moved.room_id == target.id


@pytest.mark.asyncio
async def test_unique_booking_per_user(session_factory, db_session, eligible_user, test_room):
    await factories.create_booking(db_session, eligible_user, test_room)

    async with session_factory() as session:
        store = SqlAlchemyBookingStore(session)
        with pytest.raises(DuplicateBookingError):
            async with store.transaction():
                await store.create(eligible_user.id, test_room.id)

    async with session_factory() as session:
        assert await SqlAlchemyBookingStore(session).count_by_room_id(test_room.id) == 1


@pytest.mark.asyncio
async def test_enrollment_and_ticket_lookup(db_session, eligible_user):
    enrollment = await SqlAlchemyEnrollmentRepository(db_session).find_with_address_by_user_id(eligible_user.id)
    ticket = await SqlAlchemyTicketRepository(db_session).find_by_enrollment_id(enrollment.id)

    assert enrollment.address.city == "Rio de Janeiro"
    assert ticket.ticket_type.includes_hotel is True


@pytest.mark.asyncio
async def test_room_lookup(db_session, test_room):
    rooms = SqlAlchemyRoomRepository(db_session)

    assert (await rooms.find_by_id(test_room.id)).capacity == 3
    assert (await rooms.find_by_id_for_update(test_room.id)).id == test_room.id
    assert await rooms.find_by_id(test_room.id + 999) is None
