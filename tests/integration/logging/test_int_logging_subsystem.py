# tests/integration/logging/test_int_logging_subsystem.py — v2
"""Integration tests for the logging subsystem.

Covers: logging/logger.py, logging/handlers.py, logging/context.py as seen
through a real refresh.
"""
from __future__ import annotations

import io
import json
import logging

import pytest

from sectioncache.cache.coordinator import SectionRefreshCoordinator
from sectioncache.config.settings import Settings
from sectioncache.logging.logger import setup_logging, setup_logging_from_settings


def _lines(stream: io.StringIO) -> list[dict]:
    return [json.loads(line) for line in stream.getvalue().splitlines() if line.strip()]


class TestRefreshLogging:

    @pytest.mark.asyncio
    async def test_failure_logged_with_section_context(self, memory_store, fetcher, clock):
        stream = io.StringIO()
        setup_logging(level="DEBUG", log_format="json", stream=stream)
        fetcher.results = {"jobs": TimeoutError("view timed out")}
        coord = SectionRefreshCoordinator(
            sections=("users", "jobs"), fetch_section=fetcher, store=memory_store, clock=clock,
        )
        await coord.refresh()

        records = _lines(stream)
        failure = next(r for r in records if r["level"] == "WARNING" and "jobs" in r["message"])
        assert failure["context"]["section"] == "jobs"
        assert failure["context"]["cache_key"] == memory_store.key
        assert "refresh_id" in failure["context"]

    @pytest.mark.asyncio
    async def test_refresh_ids_differ(self, memory_store, fetcher, clock):
        stream = io.StringIO()
        setup_logging(level="DEBUG", log_format="json", stream=stream)
        coord = SectionRefreshCoordinator(
            sections=("users",), fetch_section=fetcher, store=memory_store, clock=clock,
        )
        await coord.refresh()
        clock.advance(minutes=6)
        await coord.refresh()
        ids = {r["context"]["refresh_id"] for r in _lines(stream) if "refresh_id" in r.get("context", {})}
        assert len(ids) == 2


class TestFileLogging:

    def test_rotating_file_receives_text(self, tmp_path):
        log_file = tmp_path / "logs" / "sectioncache.log"
        settings = Settings(_env_file=None, log_format="text", log_file=log_file, log_level="INFO")
        setup_logging_from_settings(settings)

        logging.getLogger("sectioncache.cache.coordinator").info("written to disk")
        for handler in logging.getLogger("sectioncache").handlers:
            handler.flush()
        assert "written to disk" in log_file.read_text(encoding="utf-8")
