# src/cache/json_store.py — v3
"""JSON file-based section store (default CACHE_BACKEND=json).

Stores the envelope as one JSON file under CACHE_ROOT, named after the key.
Writes go through a temp file and os.replace so a crash never leaves a
half-written envelope behind.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path

from pydantic import ValidationError

from sectioncache.cache.base_cache_store import DEFAULT_CACHE_KEY, BaseSectionStore
from sectioncache.cache.errors import DeserializationError, StorageError
from sectioncache.cache.models import CacheEnvelope

logger = logging.getLogger(__name__)


class JsonSectionStore(BaseSectionStore):
    """File-based section store using one JSON file per key."""

    def __init__(self, cache_root: Path | str, key: str = DEFAULT_CACHE_KEY) -> None:
        super().__init__(key)
        self._root = Path(cache_root).expanduser()

    @property
    def path(self) -> Path:
        safe_key = self._key.replace("/", "_").replace("\\", "_")
        return self._root / f"{safe_key}.json"

    async def load(self) -> CacheEnvelope | None:
        """Read the envelope file, None if it does not exist."""
        path = self.path
        try:
            raw = path.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as e:
            raise StorageError(f"Failed to read {path}: {e}") from e

        try:
            return CacheEnvelope(**json.loads(raw.decode("utf-8")))
        except (UnicodeDecodeError, json.JSONDecodeError, TypeError, ValidationError) as e:
            raise DeserializationError(f"Corrupt envelope in {path}: {e}") from e

    async def save(self, envelope: CacheEnvelope) -> None:
        """Atomically replace the envelope file."""
        path = self.path
        temp_name: str | None = None
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w", delete=False, dir=path.parent, encoding="utf-8", suffix=".tmp"
            ) as tmp:
                temp_name = tmp.name
                tmp.write(envelope.model_dump_json(indent=2))
                tmp.flush()
                os.fsync(tmp.fileno())
            os.replace(temp_name, path)
        except OSError as e:
            if temp_name is not None:
                self._discard_temp(temp_name)
            raise StorageError(f"Failed to write {path}: {e}") from e
        logger.debug("Saved envelope %s (%d sections)", self._key, len(envelope.data))

    @staticmethod
    def _discard_temp(temp_name: str) -> None:
        try:
            os.unlink(temp_name)
        except OSError as e:
            logger.warning("Failed to remove temp file %s: %s", temp_name, e)

    async def clear(self) -> None:
        """Delete the envelope file."""
        try:
            self.path.unlink(missing_ok=True)
        except OSError as e:
            raise StorageError(f"Failed to delete {self.path}: {e}") from e
