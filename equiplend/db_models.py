# equiplend/db_models.py
from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from sqlmodel import SQLModel, Field


# ---------------------------
# Key/value blobs
# ---------------------------

class KVBlob(SQLModel, table=True):
    """
    One serialized record collection per key (equipment, bookings, users...).
    The value is the same JSON text the file store writes, so the two
    backends are interchangeable.
    """
    __tablename__ = "kv_blob"

    key: str = Field(primary_key=True, max_length=128)
    value: str = Field(nullable=False)
    updated_at: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(timezone.utc), nullable=True
    )
