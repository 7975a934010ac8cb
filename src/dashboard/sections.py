# src/dashboard/sections.py — v1
"""Dashboard section fetcher over the `dashboard_metrics` row.

The remote query itself is injected: `query(columns)` must return the
metrics row restricted to those columns (a mapping, or None when the view
has no row). This module only decides which columns belong to which section
and shapes the row into section payloads.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Iterable, Mapping
from datetime import timedelta
from typing import Any

from pydantic import BaseModel

from sectioncache.cache.base_cache_store import BaseSectionStore
from sectioncache.cache.coordinator import SectionRefreshCoordinator, StatusListener
from sectioncache.cache.staleness import DEFAULT_TTL
from sectioncache.dashboard.models import DEFAULT_STATS, SECTION_KEYS, SECTION_MODELS

logger = logging.getLogger(__name__)

MetricsQuery = Callable[[list[str]], Awaitable[Mapping[str, Any] | None]]

SECTION_COLUMNS: dict[str, tuple[str, ...]] = {
    "users": ("users_total", "users_active", "users_suspended"),
    "jobs": ("jobs_total", "jobs_active"),
    "bookings": ("bookings_total", "bookings_completed"),
    "applications": ("applications_pending", "applications_approved"),
}


def build_column_list(sections: Iterable[str]) -> list[str]:
    """Columns needed for the given sections, de-duplicated, order kept.

    Raises:
        KeyError: On an unknown section.
    """
    columns: dict[str, None] = {}
    for section in dict.fromkeys(sections):
        for column in SECTION_COLUMNS[section]:
            columns[column] = None
    return list(columns)


def to_section_payload(section: str, row: Mapping[str, Any] | None) -> BaseModel:
    """Shape one section's columns into its payload model. Missing/null -> 0."""
    model = SECTION_MODELS[section]
    if not row:
        return model()
    prefix = f"{section}_"
    values = {
        column[len(prefix):]: row.get(column) or 0
        for column in SECTION_COLUMNS[section]
    }
    return model.model_validate(values)


def make_section_fetcher(query: MetricsQuery) -> Callable[[str], Awaitable[BaseModel]]:
    """Wrap a metrics query into a per-section fetch callable."""

    async def fetch_section(section: str) -> BaseModel:
        columns = build_column_list([section])
        row = await query(columns)
        if row is None:
            logger.info("No dashboard_metrics row for '%s', using zeros", section)
        return to_section_payload(section, row)

    return fetch_section


def create_dashboard_coordinator(
    query: MetricsQuery,
    store: BaseSectionStore,
    ttl: timedelta = DEFAULT_TTL,
    *,
    ttl_overrides: Mapping[str, timedelta] | None = None,
    on_status: StatusListener | None = None,
    **kwargs: Any,
) -> SectionRefreshCoordinator:
    """Coordinator preconfigured with the four dashboard sections."""
    return SectionRefreshCoordinator(
        sections=SECTION_KEYS,
        fetch_section=make_section_fetcher(query),
        store=store,
        ttl=ttl,
        ttl_overrides=ttl_overrides,
        defaults=DEFAULT_STATS,
        section_models=SECTION_MODELS,
        on_status=on_status,
        **kwargs,
    )
