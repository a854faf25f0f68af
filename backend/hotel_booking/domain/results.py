"""Result type for booking operations.

Business failures (not eligible, no vacancy, ...) are ordinary outcomes of
a booking request, so they are returned as values instead of raised. Only
infrastructure failures propagate as exceptions.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


class BookingErrorKind(str, Enum):
    """Failure kinds the HTTP layer maps to status codes."""

    INVALID_INPUT = "INVALID_INPUT"
    NOT_FOUND = "NOT_FOUND"
    NOT_ELIGIBLE = "NOT_ELIGIBLE"
    ROOM_NOT_FOUND = "ROOM_NOT_FOUND"
    NO_VACANCY = "NO_VACANCY"


@dataclass(frozen=True)
class BookingError:
    kind: BookingErrorKind
    message: str

    def __str__(self) -> str:
        return f"{self.kind.value}: {self.message}"


@dataclass(frozen=True)
class BookingResult(Generic[T]):
    """Either a value or a BookingError, never both."""

    value: Optional[T] = None
    error: Optional[BookingError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def kind(self) -> Optional[BookingErrorKind]:
        return self.error.kind if self.error else None

    @classmethod
    def success(cls, value: T) -> "BookingResult[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, kind: BookingErrorKind, message: str) -> "BookingResult[T]":
        return cls(error=BookingError(kind=kind, message=message))
