"""
Booking eligibility.

A user may hold a hotel room only with an enrollment and a ticket that is
PAID, not remote, and includes the hotel. Every failure is reported as the
same NOT_ELIGIBLE kind; the precise reason only goes to the log.
"""

from typing import Optional

from hotel_booking.core.logging import get_logger
from hotel_booking.domain.results import BookingErrorKind, BookingResult
from hotel_booking.models import Ticket, TicketStatus
from hotel_booking.stores.interfaces import EnrollmentRepository, TicketRepository

logger = get_logger(__name__)

NOT_ELIGIBLE_MESSAGE = "User is not eligible to book a hotel room"


def ticket_rejection_reason(ticket: Ticket) -> Optional[str]:
    """Return why a ticket does not allow a hotel booking, or None if it does."""
    if ticket.status != TicketStatus.PAID:
        return "ticket_not_paid"
    if ticket.ticket_type.is_remote:
        return "ticket_is_remote"
    if not ticket.ticket_type.includes_hotel:
        return "ticket_without_hotel"
    return None


class EligibilityChecker:
    """Read-only; calling it never reserves anything."""

    def __init__(self, enrollments: EnrollmentRepository, tickets: TicketRepository):
        self._enrollments = enrollments
        self._tickets = tickets

    async def check(self, user_id: int) -> BookingResult[Ticket]:
        enrollment = await self._enrollments.find_with_address_by_user_id(user_id)
        if enrollment is None:
            return self._reject(user_id, "no_enrollment")

        ticket = await self._tickets.find_by_enrollment_id(enrollment.id)
        if ticket is None:
            return self._reject(user_id, "no_ticket")

        reason = ticket_rejection_reason(ticket)
        if reason is not None:
            return self._reject(user_id, reason)

        return BookingResult.success(ticket)

    def _reject(self, user_id: int, reason: str) -> BookingResult[Ticket]:
        logger.info("booking_not_eligible", user_id=user_id, reason=reason)
        return BookingResult.failure(BookingErrorKind.NOT_ELIGIBLE, NOT_ELIGIBLE_MESSAGE)
