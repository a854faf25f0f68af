"""
Booking endpoints.

The service returns a BookingResult; this module only maps failure kinds to
status codes and shapes the response bodies.
"""

from typing import NoReturn, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, status

from hotel_booking.api.dependencies import get_booking_service
from hotel_booking.core.security import get_current_user_id
from hotel_booking.domain.results import BookingErrorKind, BookingResult
from hotel_booking.schemas.booking import BookingIdResponse, BookingRequest, BookingWithRoomResponse
from hotel_booking.services.booking_service import BookingService

router = APIRouter(prefix="/booking", tags=["Booking"])

STATUS_BY_KIND = {
    BookingErrorKind.INVALID_INPUT: status.HTTP_400_BAD_REQUEST,
    BookingErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    BookingErrorKind.NOT_ELIGIBLE: status.HTTP_403_FORBIDDEN,
    BookingErrorKind.ROOM_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    BookingErrorKind.NO_VACANCY: status.HTTP_403_FORBIDDEN,
}


def raise_for_result(result: BookingResult) -> NoReturn:
    raise HTTPException(
        status_code=STATUS_BY_KIND[result.kind],
        detail={"code": result.kind.value, "message": result.error.message},
    )


@router.get("", response_model=BookingWithRoomResponse)
async def get_booking(
    user_id: int = Depends(get_current_user_id),
    service: BookingService = Depends(get_booking_service),
):
    """Get the authenticated user's booking and its room."""
    result = await service.get_booking(user_id)
    if not result.ok:
        raise_for_result(result)
    return BookingWithRoomResponse.model_validate(result.value)


@router.post("", response_model=BookingIdResponse)
async def create_booking(
    payload: Optional[BookingRequest] = Body(default=None),
    user_id: int = Depends(get_current_user_id),
    service: BookingService = Depends(get_booking_service),
):
    """
    Book a hotel room.

    Requires a paid, in-person ticket that includes the hotel. Concurrent
    requests for the same room are serialized so capacity is never exceeded.
    """
    room_id = payload.roomId if payload else None
    result = await service.create_booking(user_id, room_id)
    if not result.ok:
        raise_for_result(result)
    return BookingIdResponse(booking_id=result.value.id)


@router.put("/{booking_id}", response_model=BookingIdResponse)
async def update_booking(
    booking_id: str,
    payload: Optional[BookingRequest] = Body(default=None),
    user_id: int = Depends(get_current_user_id),
    service: BookingService = Depends(get_booking_service),
):
    """Move the authenticated user's booking to another room."""
    room_id = payload.roomId if payload else None
    result = await service.update_booking(user_id, room_id, booking_id=booking_id)
    if not result.ok:
        raise_for_result(result)
    return BookingIdResponse(booking_id=result.value.id)
