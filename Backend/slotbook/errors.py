"""
Typed errors raised by the booking core.

Every error carries a kind and a human-readable message. The HTTP layer maps
kinds to status codes; the core never translates them itself.
"""

from enum import Enum
from typing import Any, Optional


class ErrorKind(str, Enum):
    VALIDATION_ERROR = "VALIDATION_ERROR"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"
    UNAUTHORIZED = "UNAUTHORIZED"


class BookingError(Exception):
    kind: ErrorKind = ErrorKind.VALIDATION_ERROR

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        self.message = message
        self.details = details
        super().__init__(message)

    def to_dict(self) -> dict:
        data = {"code": self.kind.value, "message": self.message}
        if self.details:
            data["details"] = self.details
        return data


class ValidationError(BookingError):
    """Malformed input: bad phone, date/time format, duration or day of week."""
    kind = ErrorKind.VALIDATION_ERROR


class NotFoundError(BookingError):
    """Entity missing or owned by another business."""
    kind = ErrorKind.NOT_FOUND


class ConflictError(BookingError):
    """The requested slot was claimed by someone else."""
    kind = ErrorKind.CONFLICT


class UnauthorizedError(BookingError):
    kind = ErrorKind.UNAUTHORIZED
