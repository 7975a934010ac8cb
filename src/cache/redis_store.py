# src/cache/redis_store.py — v2
"""Redis-based section store (CACHE_BACKEND=redis).

Requires 'redis' package: pip install redis.
Handy when the client runs next to a local Redis it already uses for other
state. Still a single-writer store: this is not a shared cache.
"""

from __future__ import annotations

import logging

from pydantic import ValidationError

from sectioncache.cache.base_cache_store import DEFAULT_CACHE_KEY, BaseSectionStore
from sectioncache.cache.errors import DeserializationError, StorageError
from sectioncache.cache.models import CacheEnvelope

logger = logging.getLogger(__name__)

_KEY_PREFIX = "sectioncache:"


class RedisSectionStore(BaseSectionStore):
    """Redis-backed section store."""

    def __init__(self, redis_url: str, key: str = DEFAULT_CACHE_KEY) -> None:
        super().__init__(key)
        try:
            import redis
        except ImportError as e:
            raise ImportError(
                "redis package required: pip install redis"
            ) from e

        self._redis_error: type[Exception] = redis.RedisError
        self._client = redis.Redis.from_url(redis_url, decode_responses=True)

    @property
    def redis_key(self) -> str:
        return f"{_KEY_PREFIX}{self._key}"

    async def load(self) -> CacheEnvelope | None:
        """Read the envelope value."""
        try:
            data = self._client.get(self.redis_key)
        except self._redis_error as e:
            raise StorageError(f"Failed to read envelope {self._key}: {e}") from e
        if data is None:
            return None
        try:
            return CacheEnvelope.model_validate_json(data)
        except ValidationError as e:
            raise DeserializationError(
                f"Corrupt envelope {self._key}: {e}"
            ) from e

    async def save(self, envelope: CacheEnvelope) -> None:
        """Replace the envelope value."""
        try:
            self._client.set(self.redis_key, envelope.model_dump_json())
        except self._redis_error as e:
            raise StorageError(f"Failed to write envelope {self._key}: {e}") from e

    async def clear(self) -> None:
        """Delete the envelope value."""
        try:
            self._client.delete(self.redis_key)
        except self._redis_error as e:
            raise StorageError(f"Failed to delete envelope {self._key}: {e}") from e

    def close(self) -> None:
        """Close the Redis connection."""
        self._client.close()
