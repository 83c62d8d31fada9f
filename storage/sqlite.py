"""SQLite helpers for the persistence layer."""
from __future__ import annotations

import os
import sqlite3
from contextlib import contextmanager
from datetime import datetime
from typing import Iterator, Optional

from .migrate import migrate


@contextmanager
def get_conn(db_path: str) -> Iterator[sqlite3.Connection]:
    """Yield a SQLite connection with foreign keys on; commit when the block succeeds."""

    directory = os.path.dirname(db_path) or "."
    os.makedirs(directory, exist_ok=True)
    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    try:
        yield conn
        conn.commit()
    finally:
        conn.close()


class SqliteRepository:  # Base for repositories sharing one database file
    def __init__(self, db_path: str) -> None:
        self._path = str(db_path)
        migrate(self._path)

    @property
    def path(self) -> str:
        return self._path

    def _conn(self):
        return get_conn(self._path)


def to_text(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def from_text(value: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(value) if value else None
