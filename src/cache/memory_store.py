# src/cache/memory_store.py — v1
"""In-process section store (CACHE_BACKEND=memory).

Keeps the serialized envelope in a dict so load() exercises the same decode
path as the durable backends. Nothing survives the process.
"""

from __future__ import annotations

from pydantic import ValidationError

from sectioncache.cache.base_cache_store import DEFAULT_CACHE_KEY, BaseSectionStore
from sectioncache.cache.errors import DeserializationError
from sectioncache.cache.models import CacheEnvelope


class MemorySectionStore(BaseSectionStore):
    """Dict-backed section store."""

    def __init__(self, key: str = DEFAULT_CACHE_KEY) -> None:
        super().__init__(key)
        self._records: dict[str, str] = {}
        self.save_count = 0

    async def load(self) -> CacheEnvelope | None:
        raw = self._records.get(self._key)
        if raw is None:
            return None
        try:
            return CacheEnvelope.model_validate_json(raw)
        except ValidationError as e:
            raise DeserializationError(f"Corrupt envelope {self._key}: {e}") from e

    async def save(self, envelope: CacheEnvelope) -> None:
        self._records[self._key] = envelope.model_dump_json()
        self.save_count += 1

    async def clear(self) -> None:
        self._records.pop(self._key, None)

    def put_raw(self, raw: str) -> None:
        """Store a raw record as-is (seeding, corruption scenarios)."""
        self._records[self._key] = raw
