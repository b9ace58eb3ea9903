"""Equipment registry: catalog records plus the live `available` counter."""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional

from .errors import AvailabilityBoundsError, NotFoundError
from .models import Equipment, utc_now
from .store import EQUIPMENT_KEY, KeyValueStore, load_records

logger = logging.getLogger(__name__)


class EquipmentRegistry:
    def __init__(self, store: KeyValueStore, key: str = EQUIPMENT_KEY):
        self.store = store
        self.key = key

    def _load(self) -> List[Equipment]:
        items = []
        for rec in load_records(self.store, self.key):
            try:
                items.append(Equipment.from_dict(rec))
            except (KeyError, TypeError, ValueError):
                logger.warning("Skipping malformed equipment record: %r", rec)
        return items

    def _save(self, items: Iterable[Equipment]) -> None:
        self.store.save(self.key, [e.to_dict() for e in items])

    def list(self) -> List[Equipment]:
        return self._load()

    def get(self, equipment_id: str) -> Optional[Equipment]:
        equipment_id = str(equipment_id)
        for item in self._load():
            if item.id == equipment_id:
                return item
        return None

    def categories(self) -> List[str]:
        return sorted({e.category for e in self._load()})

    def is_empty(self) -> bool:
        return not self._load()

    def replace_all(self, items: Iterable[Equipment]) -> None:
        """Install a whole catalog (seed data or an import)."""
        now = utc_now()
        items = list(items)
        for e in items:
            e.created_at = e.created_at or now
        self._save(items)
        logger.info("Equipment catalog replaced (%d items)", len(items))

    def seed_if_empty(self, items: Iterable[Equipment]) -> bool:
        if not self.is_empty():
            return False
        self.replace_all(items)
        return True

    def adjust_availability(self, equipment_id: str, delta: int) -> Equipment:
        """
        Add `delta` to an item's `available` count and persist it.

        The whole collection is read, changed and written back in one call.
        Raises NotFoundError for an unknown id and AvailabilityBoundsError
        if the result would fall outside 0..quantity; nothing is written
        in either case.
        """
        equipment_id = str(equipment_id)
        items = self._load()
        for item in items:
            if item.id != equipment_id:
                continue
            new_available = item.available + int(delta)
            if new_available < 0 or new_available > item.quantity:
                raise AvailabilityBoundsError(
                    f"Invalid availability update for {item.name}: "
                    f"{item.available} {delta:+d} is outside 0..{item.quantity}"
                )
            item.available = new_available
            item.updated_at = utc_now()
            self._save(items)
            logger.info("Equipment %s available %+d -> %d/%d",
                        item.id, delta, item.available, item.quantity)
            return item
        raise NotFoundError("Equipment not found")
