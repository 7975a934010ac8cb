# src/cache/staleness.py — v1
"""TTL policy: decide which sections are expired or missing.

A section is stale when it was never fetched (no timestamp), when it has no
payload, or when strictly more than its TTL has elapsed since the last
successful fetch. Missing dominates "not old enough".
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import datetime, timedelta

DEFAULT_TTL = timedelta(minutes=5)


@dataclass(frozen=True)
class TtlPolicy:
    """Uniform TTL with optional per-section overrides."""

    default: timedelta = DEFAULT_TTL
    overrides: Mapping[str, timedelta] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.default <= timedelta(0):
            raise ValueError("TTL must be positive")
        for section, ttl in self.overrides.items():
            if ttl <= timedelta(0):
                raise ValueError(f"TTL override for {section!r} must be positive")

    def ttl_for(self, section: str) -> timedelta:
        return self.overrides.get(section, self.default)

    def is_expired(self, section: str, fetched_at: datetime | None, now: datetime) -> bool:
        if fetched_at is None:
            return True
        return now - fetched_at > self.ttl_for(section)


def partition_sections(
    requested: Iterable[str],
    timestamps: Mapping[str, datetime],
    present: Iterable[str],
    policy: TtlPolicy,
    now: datetime,
) -> tuple[list[str], list[str]]:
    """Split requested sections into (expired_or_missing, fresh).

    Args:
        requested: Sections the caller asked for, order preserved.
        timestamps: Last successful fetch per section.
        present: Sections that currently hold a payload.
        policy: TTL policy.
        now: Reference instant.

    Returns:
        Tuple of (sections to fetch, sections served from cache).
    """
    has_payload = set(present)
    stale: list[str] = []
    fresh: list[str] = []
    for section in requested:
        if section not in has_payload or policy.is_expired(
            section, timestamps.get(section), now
        ):
            stale.append(section)
        else:
            fresh.append(section)
    return stale, fresh
