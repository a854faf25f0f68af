from hotel_booking.schemas.booking import (
    BookingRequest, RoomResponse, BookingWithRoomResponse, BookingIdResponse,
)

__all__ = [
    "BookingRequest", "RoomResponse", "BookingWithRoomResponse", "BookingIdResponse",
]
