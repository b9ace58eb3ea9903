# equiplend/errors.py
from __future__ import annotations

from typing import Optional


class BookingError(Exception):
    """Base class for every refused booking or availability operation."""

    code = "booking_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(BookingError):
    code = "validation"


class NotFoundError(BookingError):
    code = "not_found"


class InvalidRangeError(BookingError):
    code = "invalid_range"


class PastDateError(InvalidRangeError):
    """Start date lies before today."""

    code = "past_date"


class OverCapacityError(BookingError):
    """More units requested than the item owns in total."""

    code = "over_capacity"


class InsufficientAvailabilityError(BookingError):
    code = "insufficient_availability"

    def __init__(self, message: str, available_quantity: int):
        super().__init__(message)
        self.available_quantity = available_quantity


class AvailabilityBoundsError(ValidationError):
    """Counter adjustment would leave `available` outside 0..quantity."""

    code = "availability_out_of_bounds"


class InvalidTransitionError(BookingError):
    code = "invalid_transition"


class UnauthorizedError(BookingError):
    code = "unauthorized"


class StorageError(Exception):
    """A collection could not be written back to the store."""

    def __init__(self, key: str, reason: Optional[BaseException] = None):
        msg = f"Could not persist collection {key!r}"
        if reason is not None:
            msg += f": {reason}"
        super().__init__(msg)
        self.key = key
