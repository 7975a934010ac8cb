# tests/integration/conftest.py — v8
"""Shared fixtures for integration tests.

File backends run against tmp_path. The redis backend needs a live server:
set TEST_REDIS_URL (e.g. redis://localhost:6379/15) or those tests skip.
"""

from __future__ import annotations

import os

import pytest


def pytest_configure(config):
    config.addinivalue_line("markers", "redis: marks tests requiring a live Redis server")


@pytest.fixture
def redis_url() -> str:
    url = os.environ.get("TEST_REDIS_URL", "")
    if not url:
        pytest.skip("TEST_REDIS_URL not set")
    pytest.importorskip("redis")
    return url
