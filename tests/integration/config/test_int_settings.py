# tests/integration/config/test_int_settings.py — v2
"""Integration tests for configuration loading.

Tests Settings with real .env files feeding the store factory and TTL policy.
No external services required.
"""

from __future__ import annotations

from datetime import timedelta
from pathlib import Path

import pytest

from sectioncache.cache.cache_factory import create_section_store
from sectioncache.cache.sqlite_store import SqliteSectionStore
from sectioncache.config.settings import ConfigurationError, Settings


class TestSettingsLoading:

    def test_from_env_file(self, tmp_path: Path):
        env_file = tmp_path / ".env"
        env_file.write_text(
            "CACHE_BACKEND=sqlite\n"
            f"CACHE_ROOT={tmp_path / 'store'}\n"
            "CACHE_KEY=ops.stats.v1\n"
            "CACHE_TTL_SECONDS=120\n"
            "CACHE_TTL_OVERRIDES=jobs=30\n"
            "LOG_FORMAT=text\n"
        )
        settings = Settings(_env_file=str(env_file))
        assert settings.cache_backend == "sqlite"
        assert settings.ttl == timedelta(seconds=120)
        assert settings.ttl_overrides_map == {"jobs": timedelta(seconds=30)}
        assert settings.log_format == "text"

        store = create_section_store(settings)
        try:
            assert isinstance(store, SqliteSectionStore)
            assert store.key == "ops.stats.v1"
            assert (tmp_path / "store" / "sectioncache.db").exists()
        finally:
            store.close()

    def test_inconsistent_env_file(self, tmp_path: Path):
        env_file = tmp_path / ".env"
        env_file.write_text("CACHE_BACKEND=redis\nCACHE_TTL_OVERRIDES=jobs\n")
        with pytest.raises(ConfigurationError) as exc_info:
            Settings(_env_file=str(env_file))
        message = str(exc_info.value)
        assert "CACHE_REDIS_URL" in message
        assert "CACHE_TTL_OVERRIDES" in message
