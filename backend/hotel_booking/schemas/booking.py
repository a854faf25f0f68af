"""
Pydantic schemas for booking request/response bodies.

Field names stay snake_case in Python; the wire format is camelCase via
aliases. populate_by_name lets ORM objects and keyword construction use
the snake_case names.
"""

from datetime import datetime
from typing import Any
from pydantic import BaseModel, Field


class BookingRequest(BaseModel):
    # Validated by BookingService so a bad value maps to 400, not 422
    roomId: Any = None


class RoomResponse(BaseModel):
    id: int
    name: str
    capacity: int
    hotel_id: int = Field(alias="hotelId")
    created_at: datetime = Field(alias="createdAt")
    updated_at: datetime = Field(alias="updatedAt")

    model_config = {"from_attributes": True, "populate_by_name": True}


class BookingWithRoomResponse(BaseModel):
    id: int
    room: RoomResponse = Field(alias="Room")

    model_config = {"from_attributes": True, "populate_by_name": True}


class BookingIdResponse(BaseModel):
    booking_id: int = Field(alias="bookingId")

    model_config = {"populate_by_name": True}
