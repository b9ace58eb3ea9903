from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, Iterable, List, Optional
from uuid import uuid4

from .errors import BookingError
from .models import ACTIVE, PENDING, Booking, utc_now
from .store import BOOKINGS_KEY, KeyValueStore, load_records

logger = logging.getLogger(__name__)


class BookingStore:
    """Durable booking collection; every write rewrites the full list."""

    def __init__(self, store: KeyValueStore, key: str = BOOKINGS_KEY):
        self.store = store
        self.key = key

    def _load(self) -> List[Booking]:
        out = []
        for rec in load_records(self.store, self.key):
            try:
                out.append(Booking.from_dict(rec))
            except (KeyError, TypeError, ValueError, BookingError):
                logger.warning("Skipping malformed booking record: %r", rec)
        return out

    def _save(self, bookings: Iterable[Booking]) -> None:
        self.store.save(self.key, [b.to_dict() for b in bookings])

    # ---- reads ------------------------------------------------------------
    def list(self) -> List[Booking]:
        return self._load()

    def get(self, booking_id: str) -> Optional[Booking]:
        booking_id = str(booking_id)
        for b in self._load():
            if b.id == booking_id:
                return b
        return None

    def by_user(self, user_id: str) -> List[Booking]:
        return [b for b in self._load() if b.user_id == str(user_id)]

    def by_equipment(self, equipment_id: str) -> List[Booking]:
        return [b for b in self._load() if b.equipment_id == str(equipment_id)]

    def by_status(self, status: str) -> List[Booking]:
        return [b for b in self._load() if b.status == status]

    def pending(self) -> List[Booking]:
        return self.by_status(PENDING)

    def active(self) -> List[Booking]:
        return self.by_status(ACTIVE)

    # ---- writes -----------------------------------------------------------
    def create(self, booking: Booking) -> Booking:
        """Append a booking, assigning a fresh id and `created_at`."""
        bookings = self._load()
        taken = {b.id for b in bookings}
        new_id = booking.id
        while not new_id or new_id in taken:
            new_id = str(uuid4())[:8]
        created = replace(booking, id=new_id, created_at=utc_now())
        bookings.append(created)
        self._save(bookings)
        return created

    def update(self, booking_id: str, **changes: Any) -> Optional[Booking]:
        bookings = self._load()
        for i, b in enumerate(bookings):
            if b.id == str(booking_id):
                bookings[i] = replace(b, updated_at=utc_now(), **changes)
                self._save(bookings)
                return bookings[i]
        return None

    def delete(self, booking_id: str) -> bool:
        bookings = self._load()
        kept = [b for b in bookings if b.id != str(booking_id)]
        if len(kept) == len(bookings):
            return False
        self._save(kept)
        return True
