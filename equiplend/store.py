from __future__ import annotations
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, List, Protocol

from .errors import StorageError

logger = logging.getLogger(__name__)

# Collection keys, one JSON array each
EQUIPMENT_KEY = "equipment_booking_equipment"
BOOKINGS_KEY = "equipment_booking_bookings"
USERS_KEY = "equipment_booking_users"


class KeyValueStore(Protocol):
    def load(self, key: str) -> Any: ...
    def save(self, key: str, value: Any) -> None: ...
    def remove(self, key: str) -> None: ...


def decode(key: str, text: str | None) -> Any:
    """Parse a stored blob; corrupt text is logged and read as missing."""
    if not text:
        return None
    try:
        return json.loads(text)
    except ValueError:
        logger.warning("Collection %s is corrupt; treating it as empty", key)
        return None


def encode(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False, indent=2)


def load_records(store: KeyValueStore, key: str) -> List[Dict[str, Any]]:
    data = store.load(key)
    if not isinstance(data, list):
        if data is not None:
            logger.warning("Collection %s is not a list; treating it as empty", key)
        return []
    return [r for r in data if isinstance(r, dict)]


class MemoryStore:
    """Dict-backed store; values still round-trip through JSON text."""

    def __init__(self, initial: Dict[str, Any] | None = None):
        self._blobs: Dict[str, str] = {}
        for k, v in (initial or {}).items():
            self.save(k, v)

    def load(self, key: str) -> Any:
        return decode(key, self._blobs.get(key))

    def save(self, key: str, value: Any) -> None:
        self._blobs[key] = encode(value)

    def remove(self, key: str) -> None:
        self._blobs.pop(key, None)

    def put_raw(self, key: str, text: str) -> None:
        self._blobs[key] = text


class JsonFileStore:
    """One `<key>.json` file per collection under `root`."""

    def __init__(self, root: str | os.PathLike):
        self.root = Path(root)
        self.root.mkdir(parents=True, exist_ok=True)

    def _path(self, key: str) -> Path:
        return self.root / f"{key}.json"

    def load(self, key: str) -> Any:
        p = self._path(key)
        if not p.exists():
            return None
        try:
            with open(p, "r", encoding="utf-8") as f:
                return decode(key, f.read())
        except OSError as exc:
            logger.warning("Could not read %s (%s); treating it as empty", p, exc)
            return None

    def save(self, key: str, value: Any) -> None:
        p = self._path(key)
        tmp = None
        try:
            # unique temp name per write so concurrent savers never share one
            with tempfile.NamedTemporaryFile("w", encoding="utf-8", dir=self.root,
                                             prefix=f".{key}.", suffix=".tmp",
                                             delete=False) as f:
                tmp = f.name
                f.write(encode(value))
            os.replace(tmp, p)
        except OSError as exc:
            if tmp is not None:
                Path(tmp).unlink(missing_ok=True)
            raise StorageError(key, exc) from exc

    def remove(self, key: str) -> None:
        try:
            self._path(key).unlink()
        except FileNotFoundError:
            pass
        except OSError as exc:
            raise StorageError(key, exc) from exc
