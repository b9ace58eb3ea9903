"""
Availability calculation.

Capacity for a new or edited booking is always recomputed from the bookings
that overlap the requested window, never read from the equipment's live
`available` counter (which only tracks checked-out units).
"""

from __future__ import annotations

from typing import Iterable, Optional

from .bookings import BookingStore
from .dates import DateLike, ranges_overlap, to_date
from .errors import (
    BookingError,
    InsufficientAvailabilityError,
    InvalidRangeError,
    NotFoundError,
    OverCapacityError,
    ValidationError,
)
from .models import Availability, Booking, Equipment
from .registry import EquipmentRegistry


def coerce_quantity(quantity) -> int:
    if isinstance(quantity, bool):
        raise ValidationError("Quantity must be a whole number")
    try:
        qty = int(quantity)
    except (TypeError, ValueError):
        raise ValidationError("Quantity must be a whole number") from None
    if qty != quantity and not isinstance(quantity, str):
        raise ValidationError("Quantity must be a whole number")
    if qty < 1:
        raise ValidationError("Quantity must be at least 1")
    return qty


def booked_quantity(bookings: Iterable[Booking], equipment_id: str,
                    start: DateLike, end: DateLike,
                    exclude_booking_id: Optional[str] = None) -> int:
    """Units held by non-cancelled, non-rejected bookings overlapping [start, end]."""
    equipment_id = str(equipment_id)
    return sum(
        b.quantity
        for b in bookings
        if b.equipment_id == equipment_id
        and b.id != exclude_booking_id
        and b.holds_capacity
        and ranges_overlap(start, end, b.start_date, b.end_date)
    )


def ensure_available(equipment: Equipment, bookings: Iterable[Booking],
                     start: DateLike, end: DateLike, quantity: int,
                     exclude_booking_id: Optional[str] = None) -> int:
    """Raise unless `quantity` units are free; return the free unit count."""
    if quantity > equipment.quantity:
        raise OverCapacityError(f"Only {equipment.quantity} units available in total")
    free = equipment.quantity - booked_quantity(
        bookings, equipment.id, start, end, exclude_booking_id
    )
    if quantity > free:
        raise InsufficientAvailabilityError(
            f"Only {max(free, 0)} units available for this date range", free
        )
    return free


def check_availability(registry: EquipmentRegistry, bookings: BookingStore,
                       equipment_id: str, start: DateLike, end: DateLike,
                       quantity, exclude_booking_id: Optional[str] = None) -> Availability:
    equipment = registry.get(equipment_id)
    if equipment is None:
        return Availability(False, 0, "Equipment not found", NotFoundError.code)

    current = bookings.list()
    s = e = None
    try:
        s, e = to_date(start), to_date(end)
        if s is None or e is None:
            raise InvalidRangeError("Start date and end date are required")
        qty = coerce_quantity(quantity)
        free = ensure_available(equipment, current, s, e, qty, exclude_booking_id)
    except InsufficientAvailabilityError as exc:
        return Availability(False, exc.available_quantity, exc.message, exc.code)
    except BookingError as exc:
        free = 0
        if s is not None and e is not None:
            free = equipment.quantity - booked_quantity(current, equipment.id, s, e, exclude_booking_id)
        return Availability(False, free, exc.message, exc.code)
    return Availability(True, free)
