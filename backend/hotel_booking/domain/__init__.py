from hotel_booking.domain.results import BookingError, BookingErrorKind, BookingResult

__all__ = ["BookingError", "BookingErrorKind", "BookingResult"]
