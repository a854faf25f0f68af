"""
Factories for seeding test data.
"""

from itertools import count

from sqlalchemy.ext.asyncio import AsyncSession

from hotel_booking.models import (
    Address, Booking, Enrollment, Hotel, Room, Ticket, TicketStatus, TicketType, User,
)

_seq = count(1)


async def _save(session: AsyncSession, obj):
    session.add(obj)
    await session.commit()
    await session.refresh(obj)
    return obj


async def create_user(session: AsyncSession) -> User:
    return await _save(session, User(email=f"attendee{next(_seq)}@example.com"))


async def create_enrollment_with_address(session: AsyncSession, user: User) -> Enrollment:
    enrollment = await _save(
        session,
        Enrollment(name="Test Attendee", cpf="123.456.789-00", phone="(21) 98999-9999", user_id=user.id),
    )
    await _save(
        session,
        Address(
            cep="22250-040",
            street="Rua Teste",
            city="Rio de Janeiro",
            state="RJ",
            number="10",
            neighborhood="Botafogo",
            enrollment_id=enrollment.id,
        ),
    )
    return enrollment


async def create_ticket_type(
    session: AsyncSession,
    is_remote: bool = False,
    includes_hotel: bool = True,
) -> TicketType:
    return await _save(
        session,
        TicketType(name="In person + hotel", price=600, is_remote=is_remote, includes_hotel=includes_hotel),
    )


async def create_ticket(
    session: AsyncSession,
    enrollment: Enrollment,
    ticket_type: TicketType,
    status: TicketStatus = TicketStatus.PAID,
) -> Ticket:
    return await _save(
        session,
        Ticket(enrollment_id=enrollment.id, ticket_type_id=ticket_type.id, status=status),
    )


async def create_hotel(session: AsyncSession) -> Hotel:
    n = next(_seq)
    return await _save(session, Hotel(name=f"Hotel {n}", image=f"https://example.com/hotel{n}.png"))


async def create_room(session: AsyncSession, hotel: Hotel, capacity: int = 3) -> Room:
    return await _save(session, Room(name=f"{next(_seq)}", capacity=capacity, hotel_id=hotel.id))


async def create_booking(session: AsyncSession, user: User, room: Room) -> Booking:
    return await _save(session, Booking(user_id=user.id, room_id=room.id))


async def create_eligible_user(
    session: AsyncSession,
    status: TicketStatus = TicketStatus.PAID,
    is_remote: bool = False,
    includes_hotel: bool = True,
) -> User:
    user = await create_user(session)
    enrollment = await create_enrollment_with_address(session, user)
    ticket_type = await create_ticket_type(session, is_remote=is_remote, includes_hotel=includes_hotel)
    await create_ticket(session, enrollment, ticket_type, status=status)
    return user
