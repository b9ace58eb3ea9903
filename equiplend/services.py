from __future__ import annotations

import logging
from typing import Optional

from .bookings import BookingStore
from .catalog import seed_equipment
from .config import Settings, load_settings
from .lifecycle import BookingManager
from .registry import EquipmentRegistry
from .store import JsonFileStore, KeyValueStore

logger = logging.getLogger(__name__)


def open_store(settings: Optional[Settings] = None) -> KeyValueStore:
    settings = settings or load_settings()
    if settings.backend == "sql":
        from .db import SqlBlobStore  # sqlmodel only needed for this backend

        settings.store_dir.mkdir(parents=True, exist_ok=True)
        logger.info("Using database store at %s", settings.db_url)
        return SqlBlobStore(db_url=settings.db_url)
    logger.info("Using JSON file store under %s", settings.store_dir)
    return JsonFileStore(settings.store_dir)


def build_manager(store: KeyValueStore, seed: bool = True) -> BookingManager:
    manager = BookingManager(EquipmentRegistry(store), BookingStore(store))
    if seed and manager.seed_catalog(seed_equipment()):
        logger.info("Seeded demo equipment catalog")
    return manager
