# tests/unit/cache/test_base_cache_store.py — v2
"""Tests for cache/base_cache_store.py — BaseSectionStore ABC."""

from __future__ import annotations

import pytest

from sectioncache.cache.base_cache_store import DEFAULT_CACHE_KEY, BaseSectionStore
from sectioncache.cache.memory_store import MemorySectionStore


class TestBaseSectionStore:
    def test_cannot_instantiate(self):
        with pytest.raises(TypeError):
            BaseSectionStore()  # type: ignore[abstract]

    def test_has_required_methods(self):
        for method in ["load", "save", "clear"]:
            assert hasattr(BaseSectionStore, method)

    def test_default_key_is_versioned(self):
        assert MemorySectionStore().key == DEFAULT_CACHE_KEY
        assert DEFAULT_CACHE_KEY.endswith(".v2")

    def test_empty_key_rejected(self):
        with pytest.raises(ValueError, match="non-empty"):
            MemorySectionStore(key="")
