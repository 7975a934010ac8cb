# tests/conftest.py — v2
"""Shared test fixtures for all unit and integration tests.

Provides a controllable clock, scripted section fetchers, in-memory stores and
temp directories. No external services: all remote I/O is faked.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any

import pytest

from sectioncache.cache.memory_store import MemorySectionStore
from sectioncache.cache.models import CacheEnvelope
from sectioncache.logging.context import clear_context

SECTIONS = ("users", "jobs", "bookings", "applications")
T0 = datetime(2026, 2, 7, 14, 0, 0, tzinfo=timezone.utc)


class FakeClock:
    """Manually advanced UTC clock."""

    def __init__(self, start: datetime = T0) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


class ScriptedFetcher:
    """Per-section fetch double.

    `results[section]` is a payload or an exception instance to raise. Calls
    are recorded in order. When `gates[section]` is set, the fetch waits on
    that event before settling.
    """

    def __init__(self, results: dict[str, Any] | None = None) -> None:
        self.results: dict[str, Any] = dict(results or {})
        self.calls: list[str] = []
        self.gates: dict[str, asyncio.Event] = {}

    def gate(self, section: str) -> asyncio.Event:
        event = asyncio.Event()
        self.gates[section] = event
        return event

    async def __call__(self, section: str) -> Any:
        self.calls.append(section)
        gate = self.gates.get(section)
        if gate is not None:
            await gate.wait()
        result = self.results.get(section, {"total": 0})
        if isinstance(result, BaseException):
            raise result
        return result


class StatusRecorder:
    """Status listener that keeps every published map."""

    def __init__(self) -> None:
        self.events: list[dict[str, Any]] = []

    def __call__(self, statuses: dict[str, Any]) -> None:
        self.events.append(statuses)

    def history(self, section: str) -> list[tuple[bool, str | None]]:
        """Distinct (loading, error) transitions seen for one section."""
        seen: list[tuple[bool, str | None]] = []
        for statuses in self.events:
            status = statuses[section]
            state = (status.loading, status.error)
            if not seen or seen[-1] != state:
                seen.append(state)
        return seen


# === FIXTURES: Time & doubles ===


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def fetcher() -> ScriptedFetcher:
    return ScriptedFetcher()


@pytest.fixture
def recorder() -> StatusRecorder:
    return StatusRecorder()


@pytest.fixture
def memory_store() -> MemorySectionStore:
    return MemorySectionStore()


@pytest.fixture
def sample_envelope() -> CacheEnvelope:
    """Envelope: users 2 minutes old, jobs 10 minutes old, bookings absent."""
    return CacheEnvelope(
        data={"users": {"total": 40}, "jobs": {"total": 7}},
        timestamps={
            "users": T0 - timedelta(minutes=2),
            "jobs": T0 - timedelta(minutes=10),
        },
    )


# === FIXTURES: Temp dirs ===


@pytest.fixture
def tmp_cache_dir(tmp_path: Path) -> Path:
    """Temporary cache directory."""
    cache = tmp_path / "cache"
    cache.mkdir()
    return cache


# === Isolation ===


@pytest.fixture(autouse=True)
def _reset_logging_state():
    """Undo setup_logging() and context vars between tests."""
    root = logging.getLogger("sectioncache")
    level, handlers = root.level, list(root.handlers)
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)
    clear_context()
