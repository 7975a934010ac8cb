# src/cache/base_cache_store.py — v2
"""Abstract section store interface.

A store persists exactly one CacheEnvelope under one logical key. It holds no
business logic and needs no locking: the coordinator is its only caller and
serializes its own writes.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from sectioncache.cache.models import CacheEnvelope

DEFAULT_CACHE_KEY = "dashboard.stats.v2"


class BaseSectionStore(ABC):
    """Unified interface for envelope storage backends."""

    def __init__(self, key: str = DEFAULT_CACHE_KEY) -> None:
        if not key:
            raise ValueError("Store key must be a non-empty string")
        self._key = key

    @property
    def key(self) -> str:
        """Logical storage key (bump its version suffix to invalidate)."""
        return self._key

    @abstractmethod
    async def load(self) -> CacheEnvelope | None:
        """Return the stored envelope, or None if nothing is stored.

        Raises:
            StorageError: On I/O failure.
            DeserializationError: If the stored record is corrupt.
        """

    @abstractmethod
    async def save(self, envelope: CacheEnvelope) -> None:
        """Replace the stored envelope.

        Raises:
            StorageError: On I/O failure.
        """

    @abstractmethod
    async def clear(self) -> None:
        """Remove the stored envelope. Missing key is not an error."""
