# src/logging/context.py — v2
"""Contextual logging support: attach cache_key, refresh_id, section to log records."""

from __future__ import annotations

import contextvars
from dataclasses import dataclass
from typing import Any

# Context variables for structured logging, set per refresh cycle.
_cache_key: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "cache_key", default=None
)
_refresh_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "refresh_id", default=None
)
_section: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "section", default=None
)


@dataclass
class LogContext:
    """Immutable snapshot of current logging context."""

    cache_key: str | None = None
    refresh_id: str | None = None
    section: str | None = None

    def as_dict(self) -> dict[str, Any]:
        """Return non-None fields as dict for JSON log injection."""
        return {k: v for k, v in self.__dict__.items() if v is not None}


def get_context() -> LogContext:
    """Snapshot current context variables."""
    return LogContext(
        cache_key=_cache_key.get(),
        refresh_id=_refresh_id.get(),
        section=_section.get(),
    )


def set_refresh_context(cache_key: str, refresh_id: str) -> None:
    """Set refresh-level context (called once per refresh cycle)."""
    _cache_key.set(cache_key)
    _refresh_id.set(refresh_id)


def set_section_context(section: str | None) -> None:
    """Set section-level context (called inside each section fetch task)."""
    _section.set(section)


def clear_context() -> None:
    """Reset all context variables."""
    _cache_key.set(None)
    _refresh_id.set(None)
    _section.set(None)
