# equiplend/db.py
from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Iterator, Optional

import streamlit as st
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import SQLModel, Session, create_engine

from .db_models import KVBlob
from .errors import StorageError
from .store import decode, encode

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------
# Engine factory
# ---------------------------------------------------------------------
def make_engine(db_url: str):
    """
    Create a SQLAlchemy/SQLModel engine and make sure the blob table exists.

    - For SQLite: sets journal_mode=WAL, busy_timeout, foreign_keys=ON.
    """
    connect_args = {"check_same_thread": False} if db_url.startswith("sqlite") else {}
    engine = create_engine(db_url, connect_args=connect_args, pool_pre_ping=True)

    if db_url.startswith("sqlite"):
        with engine.connect() as conn:
            conn.exec_driver_sql("PRAGMA journal_mode=WAL;")
            conn.exec_driver_sql("PRAGMA synchronous=NORMAL;")
            conn.exec_driver_sql("PRAGMA busy_timeout=5000;")
            conn.exec_driver_sql("PRAGMA foreign_keys=ON;")

    SQLModel.metadata.create_all(engine)
    return engine


# Shared across reruns & sessions of the Streamlit app.
@st.cache_resource(show_spinner=False)
def get_engine(db_url: str):
    return make_engine(db_url)


@contextmanager
def get_session(engine) -> Iterator[Session]:
    """
    Context-managed Session:

        with get_session(engine) as s:
            s.add(obj)
            s.commit()

    """
    with Session(engine) as session:
        yield session


# ---------------------------------------------------------------------
# Store backed by the kv_blob table
# ---------------------------------------------------------------------
class SqlBlobStore:
    """Same load/save protocol as JsonFileStore, persisted in a database."""

    def __init__(self, engine=None, db_url: Optional[str] = None):
        if engine is None:
            if not db_url:
                raise ValueError("SqlBlobStore needs an engine or a db_url")
            engine = get_engine(db_url)
        self.engine = engine

    def load(self, key: str) -> Any:
        try:
            with get_session(self.engine) as s:
                row = s.get(KVBlob, key)
                text = row.value if row is not None else None
        except SQLAlchemyError as exc:
            logger.warning("Could not read %s from database (%s); treating it as empty", key, exc)
            return None
        return decode(key, text)

    def save(self, key: str, value: Any) -> None:
        text = encode(value)
        try:
            with get_session(self.engine) as s:
                row = s.get(KVBlob, key)
                if row is None:
                    row = KVBlob(key=key, value=text)
                else:
                    row.value = text
                    row.updated_at = datetime.now(timezone.utc)
                s.add(row)
                s.commit()
        except SQLAlchemyError as exc:
            raise StorageError(key, exc) from exc

    def remove(self, key: str) -> None:
        try:
            with get_session(self.engine) as s:
                row = s.get(KVBlob, key)
                if row is not None:
                    s.delete(row)
                    s.commit()
        except SQLAlchemyError as exc:
            raise StorageError(key, exc) from exc
