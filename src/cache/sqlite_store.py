# src/cache/sqlite_store.py — v2
"""SQLite-based section store (CACHE_BACKEND=sqlite).

Uses stdlib sqlite3, no external dependency. Several logical keys can share
one database file; each key owns a single row.
"""

from __future__ import annotations

import logging
import sqlite3
from pathlib import Path

from pydantic import ValidationError

from sectioncache.cache.base_cache_store import DEFAULT_CACHE_KEY, BaseSectionStore
from sectioncache.cache.errors import DeserializationError, StorageError
from sectioncache.cache.models import CacheEnvelope

logger = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS section_envelopes (
    key TEXT PRIMARY KEY,
    data TEXT NOT NULL,
    updated_at TEXT DEFAULT CURRENT_TIMESTAMP
);
"""


class SqliteSectionStore(BaseSectionStore):
    """SQLite-backed section store."""

    def __init__(self, db_path: Path | str, key: str = DEFAULT_CACHE_KEY) -> None:
        super().__init__(key)
        self._db_path = Path(db_path).expanduser()
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._conn = sqlite3.connect(str(self._db_path))
        self._conn.execute("PRAGMA journal_mode=WAL")
        self._conn.executescript(_SCHEMA)

    async def load(self) -> CacheEnvelope | None:
        """Read the envelope row for this key."""
        try:
            cursor = self._conn.execute(
                "SELECT data FROM section_envelopes WHERE key = ?", (self._key,)
            )
            row = cursor.fetchone()
        except sqlite3.Error as e:
            raise StorageError(f"Failed to read envelope {self._key}: {e}") from e
        if row is None:
            return None
        try:
            return CacheEnvelope.model_validate_json(row[0])
        except ValidationError as e:
            raise DeserializationError(
                f"Corrupt envelope {self._key}: {e}"
            ) from e

    async def save(self, envelope: CacheEnvelope) -> None:
        """Store the envelope (upsert)."""
        try:
            self._conn.execute(
                """INSERT OR REPLACE INTO section_envelopes (key, data, updated_at)
                   VALUES (?, ?, CURRENT_TIMESTAMP)""",
                (self._key, envelope.model_dump_json()),
            )
            self._conn.commit()
        except sqlite3.Error as e:
            raise StorageError(f"Failed to write envelope {self._key}: {e}") from e

    async def clear(self) -> None:
        """Delete the envelope row."""
        try:
            self._conn.execute(
                "DELETE FROM section_envelopes WHERE key = ?", (self._key,)
            )
            self._conn.commit()
        except sqlite3.Error as e:
            raise StorageError(f"Failed to delete envelope {self._key}: {e}") from e

    def close(self) -> None:
        """Close the database connection."""
        self._conn.close()
