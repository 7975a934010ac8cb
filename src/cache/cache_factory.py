# src/cache/cache_factory.py — v3
"""Factory for section store instantiation (CACHE_BACKEND row)."""

from __future__ import annotations

from sectioncache.cache.base_cache_store import DEFAULT_CACHE_KEY, BaseSectionStore
from sectioncache.config.settings import Settings

_DEFAULT_ROOT = "~/.sectioncache/cache"


def create_section_store(settings: Settings | None = None) -> BaseSectionStore:
    """Instantiate the configured store backend.

    Args:
        settings: Application settings. Defaults to JSON backend.

    Returns:
        Configured BaseSectionStore implementation.
    """
    backend = "json" if settings is None else settings.cache_backend
    key = DEFAULT_CACHE_KEY if settings is None else settings.cache_key
    cache_root = _DEFAULT_ROOT if settings is None else str(settings.cache_root)

    if backend == "json":
        from sectioncache.cache.json_store import JsonSectionStore
        return JsonSectionStore(cache_root=cache_root, key=key)

    if backend == "sqlite":
        from sectioncache.cache.sqlite_store import SqliteSectionStore
        db_path = f"{cache_root}/sectioncache.db"
        return SqliteSectionStore(db_path=db_path, key=key)

    if backend == "redis":
        from sectioncache.cache.redis_store import RedisSectionStore
        if settings is None or not settings.cache_redis_url:
            raise ValueError(
                "CACHE_REDIS_URL must be set when CACHE_BACKEND=redis"
            )
        return RedisSectionStore(redis_url=settings.cache_redis_url, key=key)

    if backend == "memory":
        from sectioncache.cache.memory_store import MemorySectionStore
        return MemorySectionStore(key=key)

    raise ValueError(f"Unsupported cache backend: {backend!r}")
