# tests/unit/cache/test_unit_cache_models.py — v1
"""Tests for cache/models.py — envelope, status and refresh result models."""

from __future__ import annotations

from datetime import datetime, timezone

from sectioncache.cache.errors import SectionFetchError
from sectioncache.cache.models import CacheEnvelope, RefreshResult, SectionStatus


class TestCacheEnvelope:
    def test_defaults_empty(self):
        env = CacheEnvelope()
        assert env.data == {}
        assert env.timestamps == {}
        assert env.is_empty()

    def test_json_round_trip_keeps_timezone(self):
        ts = datetime(2026, 2, 7, 14, 0, tzinfo=timezone.utc)
        env = CacheEnvelope(data={"jobs": {"total": 12}}, timestamps={"jobs": ts})
        restored = CacheEnvelope.model_validate_json(env.model_dump_json())
        assert restored.timestamps["jobs"] == ts
        assert restored.data["jobs"] == {"total": 12}

    def test_timestamps_parsed_from_iso(self):
        env = CacheEnvelope(timestamps={"users": "2026-02-07T14:00:00Z"})
        assert env.timestamps["users"].year == 2026

    def test_naive_timestamp_read_as_utc(self):
        env = CacheEnvelope.model_validate_json(
            '{"data": {"users": {}}, "timestamps": {"users": "2026-02-07T13:59:00"}}'
        )
        assert env.timestamps["users"] == datetime(2026, 2, 7, 13, 59, tzinfo=timezone.utc)

    def test_offset_timestamp_kept(self):
        env = CacheEnvelope(timestamps={"users": "2026-02-07T15:00:00+01:00"})
        assert env.timestamps["users"] == datetime(2026, 2, 7, 14, 0, tzinfo=timezone.utc)


class TestSectionStatus:
    def test_idle_default(self):
        s = SectionStatus()
        assert s.loading is False
        assert s.error is None
        assert s.last_updated is None

    def test_skeleton_only_while_loading_without_error(self):
        assert SectionStatus(loading=True).show_skeleton is True
        assert SectionStatus(loading=True, error="x").show_skeleton is False
        assert SectionStatus().show_skeleton is False


class TestRefreshResult:
    def test_success(self):
        assert RefreshResult(fetched=["jobs"]).success is True

    def test_failure(self):
        err = SectionFetchError("jobs", RuntimeError("down"))
        assert RefreshResult(failed={"jobs": err}).success is False

    def test_skipped_is_not_success(self):
        assert RefreshResult(skipped=True).success is False


class TestSectionFetchError:
    def test_message_from_cause(self):
        err = SectionFetchError("bookings", RuntimeError("network error"))
        assert err.message == "network error"
        assert err.section == "bookings"
        assert "bookings" in str(err)

    def test_default_message(self):
        assert SectionFetchError("x", ValueError()).message == "Failed to load data"
