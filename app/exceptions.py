"""
Domain exceptions for the room booking engine.

Services raise these; the API layer turns them into HTTP responses through
`to_http_exception` (see the handler registered in app.main).
"""

from enum import Enum
from typing import Any, Dict, Optional

from fastapi import HTTPException, status


class RejectionReason(str, Enum):
    INVALID_RANGE = "INVALID_RANGE"
    DURATION_OUT_OF_RANGE = "DURATION_OUT_OF_RANGE"
    MISALIGNED = "MISALIGNED"
    ROOM_INACTIVE = "ROOM_INACTIVE"
    OUTSIDE_OPENING_HOURS = "OUTSIDE_OPENING_HOURS"
    BLACKED_OUT = "BLACKED_OUT"
    ROOM_ALREADY_BOOKED = "ROOM_ALREADY_BOOKED"
    QUOTA_EXCEEDED = "QUOTA_EXCEEDED"

    @property
    def is_input_error(self) -> bool:
        return self in _INPUT_REASONS


_INPUT_REASONS = frozenset(
    {
        RejectionReason.INVALID_RANGE,
        RejectionReason.DURATION_OUT_OF_RANGE,
        RejectionReason.MISALIGNED,
    }
)


class DomainException(Exception):
    """Base exception for all domain-specific errors."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_http_exception(self) -> HTTPException:
        return HTTPException(
            status_code=self.status_code,
            detail={
                "message": self.message,
                "code": self.code,
                "details": self.details,
            },
        )


class ValidationException(DomainException):
    """Malformed query parameters or arguments."""

    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundException(DomainException):
    status_code = status.HTTP_404_NOT_FOUND


class UnauthorizedException(DomainException):
    status_code = status.HTTP_401_UNAUTHORIZED


class ForbiddenException(DomainException):
    status_code = status.HTTP_403_FORBIDDEN


class BookingRejected(DomainException):
    """A reservation request failed one of the booking rules."""

    def __init__(
        self,
        reason: RejectionReason,
        message: str,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.reason = reason
        super().__init__(message, code=reason.value, details=details)

    @property
    def status_code(self) -> int:  # type: ignore[override]
        if self.reason.is_input_error:
            return status.HTTP_400_BAD_REQUEST
        return status.HTTP_409_CONFLICT


class RoomClosedError(BookingRejected):
    """The room has no opening hours for the requested weekday."""

    def __init__(self, room_id: str, weekday: str) -> None:
        super().__init__(
            RejectionReason.OUTSIDE_OPENING_HOURS,
            f"Room has no schedule for {weekday}",
            details={"room_id": room_id, "weekday": weekday},
        )


class LockTimeoutError(DomainException):
    """The room lock could not be acquired in time."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    def __init__(self, room_id: str, attempts: int) -> None:
        super().__init__(
            "Room is busy, please retry",
            code="ROOM_LOCK_TIMEOUT",
            details={"room_id": room_id, "attempts": attempts},
        )
