# src/dashboard/cards.py — v1
"""Stat card view models: project snapshot + section status into what a card shows."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from pydantic import BaseModel

from sectioncache.cache.models import SectionStatus


@dataclass(frozen=True)
class StatDefinition:
    section: str
    title: str
    path: tuple[str, ...]
    icon: str
    color: str


class StatCard(BaseModel):
    key: str
    section: str
    title: str
    value: int | float | None = None
    icon: str
    color: str
    loading: bool = False
    error: str | None = None
    show_skeleton: bool = False
    last_updated: datetime | None = None


STAT_DEFINITIONS: tuple[StatDefinition, ...] = (
    StatDefinition("users", "Total Users", ("users", "total"), "people", "#3f51b5"),
    StatDefinition("users", "Active Users", ("users", "active"), "person", "#4caf50"),
    StatDefinition("users", "Suspended Users", ("users", "suspended"), "person-off", "#f44336"),
    StatDefinition("jobs", "Total Jobs", ("jobs", "total"), "work", "#ff9800"),
    StatDefinition("jobs", "Active Jobs", ("jobs", "active"), "work-outline", "#2196f3"),
    StatDefinition("bookings", "Total Bookings", ("bookings", "total"), "event", "#9c27b0"),
    StatDefinition(
        "bookings", "Completed Bookings", ("bookings", "completed"), "check-circle", "#4caf50"
    ),
    StatDefinition(
        "applications", "Pending Applications", ("applications", "pending"), "pending", "#ff5722"
    ),
)


def value_at(snapshot: Mapping[str, Any], path: Sequence[str]) -> Any:
    """Walk a key path through dicts and models. None when any step is missing."""
    current: Any = snapshot
    for step in path:
        if current is None:
            return None
        if isinstance(current, Mapping):
            current = current.get(step)
        elif isinstance(current, BaseModel):
            current = getattr(current, step, None)
        else:
            return None
    return current


def build_stat_cards(
    snapshot: Mapping[str, Any],
    statuses: Mapping[str, SectionStatus],
    definitions: Sequence[StatDefinition] = STAT_DEFINITIONS,
) -> list[StatCard]:
    """One card per definition, carrying its section's loading/error state."""
    cards: list[StatCard] = []
    for definition in definitions:
        status = statuses.get(definition.section) or SectionStatus()
        cards.append(
            StatCard(
                key=f"{definition.section}:{definition.title}",
                section=definition.section,
                title=definition.title,
                value=value_at(snapshot, definition.path),
                icon=definition.icon,
                color=definition.color,
                loading=status.loading,
                error=status.error,
                show_skeleton=status.show_skeleton,
                last_updated=status.last_updated,
            )
        )
    return cards
