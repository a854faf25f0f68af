"""Exceptions raised by stores and room locks.

These are translated into BookingResult failures by the services; they never
reach the HTTP layer.
"""


class DuplicateBookingError(Exception):
    """Raised by a store when a user would end up with a second booking."""

    def __init__(self, user_id: int) -> None:
        super().__init__(f"User {user_id} already has a booking")
        self.user_id = user_id


class RoomLockTimeout(Exception):
    """Raised when a per-room lock could not be acquired in time."""

    def __init__(self, room_id: int, timeout: float) -> None:
        super().__init__(f"Timed out after {timeout}s waiting for room {room_id}")
        self.room_id = room_id
        self.timeout = timeout
