# tests/unit/config/test_settings.py — v2
"""Tests for config/settings.py — typed Settings and validation rules."""

from __future__ import annotations

from datetime import timedelta

import pytest

from sectioncache.config.settings import (
    ConfigurationError,
    Settings,
    load_settings,
    parse_ttl_overrides,
)


class TestSettingsDefaults:
    def test_default_backend(self):
        s = Settings(_env_file=None)
        assert s.cache_backend == "json"
        assert s.cache_key == "dashboard.stats.v2"

    def test_default_ttl(self):
        s = Settings(_env_file=None)
        assert s.ttl == timedelta(minutes=5)
        assert s.ttl_overrides_map == {}

    def test_default_logging(self):
        s = Settings(_env_file=None)
        assert s.log_format == "json"
        assert s.log_file is None


class TestSettingsValidation:
    def test_redis_without_url(self):
        with pytest.raises(ConfigurationError, match="CACHE_REDIS_URL"):
            Settings(_env_file=None, cache_backend="redis")

    def test_redis_with_url(self):
        s = Settings(_env_file=None, cache_backend="redis", cache_redis_url="redis://localhost:6379/0")
        assert s.cache_backend == "redis"

    def test_non_positive_ttl(self):
        with pytest.raises(ValueError, match="cache_ttl_seconds"):
            Settings(_env_file=None, cache_ttl_seconds=0)

    def test_blank_key(self):
        with pytest.raises(ValueError, match="cache_key"):
            Settings(_env_file=None, cache_key="   ")

    def test_malformed_overrides(self):
        with pytest.raises(ConfigurationError, match="CACHE_TTL_OVERRIDES"):
            Settings(_env_file=None, cache_ttl_overrides="jobs:60")

    def test_overrides_map(self):
        s = Settings(_env_file=None, cache_ttl_overrides="jobs=60, users=600")
        assert s.ttl_overrides_map == {
            "jobs": timedelta(seconds=60),
            "users": timedelta(seconds=600),
        }

    def test_env_variables(self, monkeypatch):
        monkeypatch.setenv("CACHE_TTL_SECONDS", "120")
        monkeypatch.setenv("CACHE_BACKEND", "memory")
        s = Settings(_env_file=None)
        assert s.cache_ttl_seconds == 120
        assert s.cache_backend == "memory"


class TestParseTtlOverrides:
    def test_empty(self):
        assert parse_ttl_overrides("") == {}
        assert parse_ttl_overrides(" , ") == {}

    def test_fractional(self):
        assert parse_ttl_overrides("jobs=1.5") == {"jobs": timedelta(seconds=1.5)}

    @pytest.mark.parametrize("raw", ["jobs", "=60", "jobs=abc", "jobs=0", "jobs=-5"])
    def test_invalid(self, raw):
        with pytest.raises(ValueError):
            parse_ttl_overrides(raw)


class TestLoadSettings:
    def test_overrides(self):
        s = load_settings(_env_file=None, cache_ttl_seconds=30)
        assert s.ttl == timedelta(seconds=30)
