"""Booking domain errors.

Each kind carries the HTTP status the API maps it to, a stable machine code,
and one user-facing message. Storage failures form a separate hierarchy so
callers can tell "your request broke a rule" apart from "the database is down".
"""

from fastapi import status


class BookingError(Exception):
    """Base class for every rule violation raised by the booking engine."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    code: str = "BOOKING_ERROR"
    message: str = "Booking request rejected"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.message
        super().__init__(self.message)


class PermissionDenied(BookingError):
    status_code = status.HTTP_403_FORBIDDEN
    code = "PERMISSION_DENIED"
    message = "You do not have permission to perform this action"


class NotFound(BookingError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "NOT_FOUND"
    message = "Resource not found"


class PropertyUnavailable(BookingError):
    code = "PROPERTY_UNAVAILABLE"
    message = "Property is not available for booking"


class InvalidDateRange(BookingError):
    code = "INVALID_DATE_RANGE"
    message = "Check-out date must be after check-in date"


class CapacityExceeded(BookingError):
    code = "CAPACITY_EXCEEDED"
    message = "Number of guests exceeds the property maximum"


class DateConflict(BookingError):
    code = "DATE_CONFLICT"
    message = "Property is not available for the selected dates"


class InvalidTransition(BookingError):
    code = "INVALID_TRANSITION"
    message = "Booking status change is not allowed"


class AlreadyCanceled(BookingError):
    code = "ALREADY_CANCELED"
    message = "Booking is already canceled"


class CannotCancelCompleted(BookingError):
    code = "CANNOT_CANCEL_COMPLETED"
    message = "Cannot cancel completed booking"


class CancellationWindowClosed(BookingError):
    code = "CANCELLATION_WINDOW_CLOSED"
    message = "Cannot cancel booking within 24 hours of check-in"


class StorageError(RuntimeError):
    """Raised when the booking store itself fails (connectivity, unexpected constraint)."""

    status_code: int = status.HTTP_503_SERVICE_UNAVAILABLE
    message: str = "Storage temporarily unavailable"
