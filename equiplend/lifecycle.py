"""
Booking lifecycle manager.

Every command takes the acting user first and returns a `BookingResult`;
refusals never raise past this module. Transitions:

    pending  -> approved | rejected | cancelled
    approved -> active | cancelled
    active   -> completed

Checkout and return move the equipment's `available` counter by the
booking's quantity in the same command as the status change.

Commands run one at a time per process (Streamlit serves every session
from a thread of the same process), so a check and the write that
follows it are never interleaved with another command.
"""

from __future__ import annotations

import logging
import threading
from datetime import date
from typing import Callable, Dict, Iterable, List, Optional

from .availability import check_availability, coerce_quantity, ensure_available
from .bookings import BookingStore
from .dates import DateLike, to_date, validate_date_range
from .errors import (
    BookingError,
    InvalidRangeError,
    InvalidTransitionError,
    NotFoundError,
    StorageError,
    UnauthorizedError,
    ValidationError,
)
from .models import (
    ACTIVE,
    APPROVED,
    CANCELLED,
    COMPLETED,
    PENDING,
    REJECTED,
    TRANSITIONS,
    Actor,
    Availability,
    Booking,
    BookingResult,
    Equipment,
    utc_now,
)
from .registry import EquipmentRegistry

logger = logging.getLogger(__name__)

command_lock = threading.RLock()

_REFUSALS = {
    APPROVED: "Only pending bookings can be approved",
    REJECTED: "Only pending bookings can be rejected",
    ACTIVE: "Only approved bookings can be checked out",
    COMPLETED: "Only active bookings can be returned",
    CANCELLED: "Only pending or approved bookings can be cancelled",
}


class BookingManager:
    def __init__(self, registry: EquipmentRegistry, bookings: BookingStore,
                 today: Optional[Callable[[], date]] = None):
        self.registry = registry
        self.bookings = bookings
        self.today = today or date.today

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def get_booking(self, booking_id: str) -> Optional[Booking]:
        return self.bookings.get(booking_id)

    def all_bookings(self) -> List[Booking]:
        return self.bookings.list()

    def user_bookings(self, user_id: str) -> List[Booking]:
        return self.bookings.by_user(user_id)

    def equipment_bookings(self, equipment_id: str) -> List[Booking]:
        return self.bookings.by_equipment(equipment_id)

    def bookings_by_status(self, status: str) -> List[Booking]:
        return self.bookings.by_status(status)

    def pending_bookings(self) -> List[Booking]:
        return self.bookings.pending()

    def active_bookings(self) -> List[Booking]:
        return self.bookings.active()

    def check_availability(self, equipment_id: str, start: DateLike, end: DateLike,
                           quantity, exclude_booking_id: Optional[str] = None) -> Availability:
        with command_lock:
            return check_availability(self.registry, self.bookings, equipment_id,
                                      start, end, quantity, exclude_booking_id)

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------
    def create_booking(self, actor: Optional[Actor], equipment_id: str,
                       start_date: DateLike, end_date: DateLike, quantity,
                       purpose: str = "") -> BookingResult:
        return self._run("create", None, self._create, actor, equipment_id,
                         start_date, end_date, quantity, purpose)

    def update_booking(self, actor: Optional[Actor], booking_id: str,
                       start_date: DateLike = None, end_date: DateLike = None,
                       quantity=None, purpose: Optional[str] = None) -> BookingResult:
        return self._run("update", booking_id, self._update, actor, booking_id,
                         start_date, end_date, quantity, purpose)

    def approve_booking(self, actor: Optional[Actor], booking_id: str) -> BookingResult:
        return self._run("approve", booking_id, self._approve, actor, booking_id)

    def reject_booking(self, actor: Optional[Actor], booking_id: str,
                       reason: str = "") -> BookingResult:
        return self._run("reject", booking_id, self._reject, actor, booking_id, reason)

    def checkout_booking(self, actor: Optional[Actor], booking_id: str) -> BookingResult:
        return self._run("checkout", booking_id, self._checkout, actor, booking_id)

    def return_booking(self, actor: Optional[Actor], booking_id: str) -> BookingResult:
        return self._run("return", booking_id, self._return, actor, booking_id)

    def cancel_booking(self, actor: Optional[Actor], booking_id: str) -> BookingResult:
        return self._run("cancel", booking_id, self._cancel, actor, booking_id)

    def delete_booking(self, actor: Optional[Actor], booking_id: str) -> BookingResult:
        return self._run("delete", booking_id, self._delete, actor, booking_id)

    def import_catalog(self, actor: Optional[Actor],
                       items: Iterable[Equipment]) -> BookingResult:
        """Replace the catalog, keeping units that are checked out counted as out."""
        return self._run("import", None, self._import_catalog, actor, items)

    def seed_catalog(self, items: Iterable[Equipment]) -> bool:
        with command_lock:
            return self.registry.seed_if_empty(items)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    def _run(self, op: str, booking_id: Optional[str], fn, *args) -> BookingResult:
        try:
            with command_lock:
                booking = fn(*args)
        except BookingError as exc:
            logger.warning("Booking %s refused for %s: [%s] %s",
                           op, booking_id or "-", exc.code, exc.message)
            return BookingResult.fail(exc)
        except StorageError as exc:
            logger.error("Booking %s failed for %s: %s", op, booking_id or "-", exc)
            return BookingResult(success=False, error=str(exc), code="storage")
        return BookingResult.ok(booking)

    def _require_admin(self, actor: Optional[Actor], action: str) -> None:
        if actor is None or not actor.is_admin:
            raise UnauthorizedError(f"Only admins can {action}")

    def _require_booking(self, booking_id: str) -> Booking:
        booking = self.bookings.get(booking_id)
        if booking is None:
            raise NotFoundError("Booking not found")
        return booking

    def _require_transition(self, booking: Booking, target: str) -> None:
        if target not in TRANSITIONS.get(booking.status, ()):
            raise InvalidTransitionError(
                f"{_REFUSALS.get(target, 'Invalid transition')} "
                f"(booking {booking.id} is {booking.status})"
            )

    def _transition(self, booking: Booking, target: str, **changes) -> Booking:
        updated = self.bookings.update(booking.id, status=target, **changes)
        if updated is None:
            raise NotFoundError("Booking not found")
        logger.info("Booking %s %s -> %s", booking.id, booking.status, target)
        return updated

    def _create(self, actor, equipment_id, start_date, end_date, quantity, purpose) -> Booking:
        if actor is None:
            raise UnauthorizedError("You must be logged in to make a booking")
        if not equipment_id or start_date in (None, "") or end_date in (None, "") \
                or quantity in (None, ""):
            raise ValidationError("All fields are required")

        qty = coerce_quantity(quantity)
        start, end = validate_date_range(start_date, end_date, self.today)

        equipment = self.registry.get(equipment_id)
        if equipment is None:
            raise NotFoundError("Equipment not found")
        ensure_available(equipment, self.bookings.list(), start, end, qty)

        booking = self.bookings.create(Booking(
            id="",
            equipment_id=equipment.id,
            equipment_name=equipment.name,
            user_id=actor.id,
            user_name=actor.name,
            user_email=actor.email,
            start_date=start,
            end_date=end,
            quantity=qty,
            purpose=(purpose or "").strip(),
            status=PENDING,
        ))
        logger.info("Booking %s created by %s: %d x %s, %s..%s",
                    booking.id, actor.id, qty, equipment.id, start, end)
        return booking

    def _update(self, actor, booking_id, start_date, end_date, quantity, purpose) -> Booking:
        if actor is None:
            raise UnauthorizedError("You must be logged in to edit a booking")
        booking = self._require_booking(booking_id)
        if booking.user_id != actor.id and not actor.is_admin:
            raise UnauthorizedError("You can only edit your own bookings")
        if booking.is_terminal:
            raise InvalidTransitionError(f"Cannot edit a {booking.status} booking")

        changes = {}
        start = to_date(start_date) or booking.start_date
        end = to_date(end_date) or booking.end_date
        qty = booking.quantity if quantity in (None, "") else coerce_quantity(quantity)

        if booking.status == ACTIVE and qty != booking.quantity:
            raise ValidationError("Cannot change the quantity of checked-out equipment")

        if start != booking.start_date:
            validate_date_range(start, end, self.today)
        elif start > end:
            raise InvalidRangeError("End date must be on or after start date")

        if (start, end, qty) != (booking.start_date, booking.end_date, booking.quantity):
            equipment = self.registry.get(booking.equipment_id)
            if equipment is None:
                raise NotFoundError("Equipment not found")
            ensure_available(equipment, self.bookings.list(), start, end, qty,
                             exclude_booking_id=booking.id)
            changes.update(start_date=start, end_date=end, quantity=qty)

        if purpose is not None:
            changes["purpose"] = purpose.strip()

        if not changes:
            return booking
        updated = self.bookings.update(booking.id, **changes)
        if updated is None:
            raise NotFoundError("Booking not found")
        logger.info("Booking %s updated by %s: %s", booking.id, actor.id, sorted(changes))
        return updated

    def _approve(self, actor, booking_id) -> Booking:
        self._require_admin(actor, "approve bookings")
        booking = self._require_booking(booking_id)
        self._require_transition(booking, APPROVED)
        return self._transition(booking, APPROVED)

    def _reject(self, actor, booking_id, reason) -> Booking:
        self._require_admin(actor, "reject bookings")
        booking = self._require_booking(booking_id)
        self._require_transition(booking, REJECTED)
        return self._transition(booking, REJECTED, rejection_reason=(reason or "").strip())

    def _checkout(self, actor, booking_id) -> Booking:
        self._require_admin(actor, "checkout equipment")
        booking = self._require_booking(booking_id)
        self._require_transition(booking, ACTIVE)
        return self._move_units(booking, ACTIVE, -booking.quantity, checked_out_at=utc_now())

    def _return(self, actor, booking_id) -> Booking:
        self._require_admin(actor, "process returns")
        booking = self._require_booking(booking_id)
        self._require_transition(booking, COMPLETED)
        return self._move_units(booking, COMPLETED, booking.quantity, returned_at=utc_now())

    def _move_units(self, booking: Booking, target: str, delta: int, **changes) -> Booking:
        """Adjust the equipment counter and the booking status together."""
        self.registry.adjust_availability(booking.equipment_id, delta)
        try:
            return self._transition(booking, target, **changes)
        except (StorageError, NotFoundError):
            self.registry.adjust_availability(booking.equipment_id, -delta)
            raise

    def _cancel(self, actor, booking_id) -> Booking:
        if actor is None:
            raise UnauthorizedError("You must be logged in to cancel a booking")
        booking = self._require_booking(booking_id)
        if booking.user_id != actor.id and not actor.is_admin:
            raise UnauthorizedError("You can only cancel your own bookings")
        if booking.status == ACTIVE:
            raise InvalidTransitionError(
                "Cannot cancel an active booking. Please return the equipment first."
            )
        self._require_transition(booking, CANCELLED)
        return self._transition(booking, CANCELLED)

    def _delete(self, actor, booking_id) -> None:
        self._require_admin(actor, "delete bookings")
        booking = self._require_booking(booking_id)
        if booking.status != ACTIVE:
            self._remove(booking)
        else:
            # the units come back into stock with the booking gone
            self.registry.adjust_availability(booking.equipment_id, booking.quantity)
            try:
                self._remove(booking)
            except (StorageError, NotFoundError):
                self.registry.adjust_availability(booking.equipment_id, -booking.quantity)
                raise
            logger.warning("Deleted active booking %s; %d x %s returned to stock",
                           booking.id, booking.quantity, booking.equipment_id)
        logger.info("Booking %s deleted by %s", booking.id, actor.id)
        return None

    def _remove(self, booking: Booking) -> None:
        if not self.bookings.delete(booking.id):
            raise NotFoundError("Booking not found")

    def _import_catalog(self, actor, items) -> None:
        self._require_admin(actor, "import the catalog")
        items = list(items)
        if not items:
            raise ValidationError("The imported catalog is empty")
        ids = [e.id for e in items]
        if len(set(ids)) != len(ids):
            raise ValidationError("The imported catalog has duplicate ids")

        out: Dict[str, int] = {}
        for b in self.bookings.active():
            out[b.equipment_id] = out.get(b.equipment_id, 0) + b.quantity
        missing = sorted(set(out) - set(ids))
        if missing:
            raise ValidationError(
                f"Checked-out equipment is missing from the import: {', '.join(missing)}"
            )
        for e in items:
            held = out.get(e.id, 0)
            if held > e.quantity:
                raise ValidationError(
                    f"{e.name or e.id}: {held} units are checked out "
                    f"but the import lists only {e.quantity}"
                )
            e.available = e.quantity - held

        self.registry.replace_all(items)
        logger.info("Catalog imported by %s (%d items, %d with units out)",
                    actor.id, len(items), len(out))
        return None
