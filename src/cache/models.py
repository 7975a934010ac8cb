# src/cache/models.py — v3
"""Section cache domain models: CacheEnvelope, SectionStatus, RefreshResult."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, field_validator

from sectioncache.cache.errors import SectionFetchError


class CacheEnvelope(BaseModel):
    """Durable unit: every section's payload and last-fetch instant under one key."""

    data: dict[str, Any] = {}
    timestamps: dict[str, datetime] = {}

    @field_validator("timestamps")
    @classmethod
    def assume_utc(cls, v: dict[str, datetime]) -> dict[str, datetime]:  # noqa: N805
        """Naive instants from older or foreign writers are read as UTC."""
        return {
            section: ts if ts.tzinfo is not None else ts.replace(tzinfo=timezone.utc)
            for section, ts in v.items()
        }

    def is_empty(self) -> bool:
        return not self.data


class SectionStatus(BaseModel):
    """Per-section view state published to consumers. Never persisted."""

    loading: bool = False
    error: str | None = None
    last_updated: datetime | None = None

    @property
    def show_skeleton(self) -> bool:
        return self.loading and self.error is None


@dataclass
class RefreshResult:
    """Outcome of one refresh() call."""

    requested: list[str] = field(default_factory=list)
    fetched: list[str] = field(default_factory=list)
    fresh: list[str] = field(default_factory=list)
    failed: dict[str, SectionFetchError] = field(default_factory=dict)
    persisted: bool = False
    skipped: bool = False
    statuses: dict[str, SectionStatus] = field(default_factory=dict)

    @property
    def success(self) -> bool:
        return not self.skipped and not self.failed
