# src/cache/merge.py — v1
"""Merge and status-projection helpers used by the refresh coordinator.

Merging a section always replaces its payload wholesale; nothing here ever
writes a slot other than the one it was asked to write.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ValidationError

from sectioncache.cache.models import CacheEnvelope, SectionStatus

logger = logging.getLogger(__name__)

SectionModels = Mapping[str, type[BaseModel]]


def coerce_payload(
    section: str, payload: Any, section_models: SectionModels | None
) -> Any:
    """Validate a payload into its section model when one is registered.

    Raises:
        pydantic.ValidationError: If the payload does not fit the model.
    """
    if not section_models:
        return payload
    model = section_models[section]
    if isinstance(payload, model):
        return payload
    if isinstance(payload, BaseModel):
        payload = payload.model_dump()
    return model.model_validate(payload)


def dump_payload(payload: Any) -> Any:
    """Turn a payload into plain JSON-ready data."""
    if isinstance(payload, BaseModel):
        return payload.model_dump(mode="json")
    return payload


def build_envelope(
    data: Mapping[str, Any], timestamps: Mapping[str, datetime]
) -> CacheEnvelope:
    """Snapshot current data and timestamps into a persistable envelope."""
    return CacheEnvelope(
        data={section: dump_payload(payload) for section, payload in data.items()},
        timestamps=dict(timestamps),
    )


def seed_from_envelope(
    envelope: CacheEnvelope,
    sections: Iterable[str],
    section_models: SectionModels | None = None,
) -> tuple[dict[str, Any], dict[str, datetime]]:
    """Extract the known sections from a persisted envelope.

    Unknown sections are dropped. A payload that no longer fits its model is
    dropped together with its timestamp, so that section reads as missing.

    Returns:
        Tuple of (data, timestamps).
    """
    known = set(sections)
    data: dict[str, Any] = {}
    timestamps: dict[str, datetime] = {}

    for section, payload in envelope.data.items():
        if section not in known:
            logger.debug("Ignoring unknown cached section '%s'", section)
            continue
        try:
            data[section] = coerce_payload(section, payload, section_models)
        except ValidationError as e:
            logger.warning("Discarding cached section '%s': %s", section, e)
            continue
        if section in envelope.timestamps:
            timestamps[section] = envelope.timestamps[section]

    return data, timestamps


def merge_with_defaults(
    data: Mapping[str, Any], defaults: Mapping[str, Any]
) -> dict[str, Any]:
    """Overlay real section data on top of the static defaults."""
    merged = dict(defaults)
    merged.update(data)
    return merged


def apply_status_updates(
    statuses: Mapping[str, SectionStatus],
    updates: Mapping[str, Mapping[str, Any]],
) -> dict[str, SectionStatus]:
    """Return a new status map with partial per-section updates applied."""
    result = dict(statuses)
    for section, fields in updates.items():
        current = result.get(section) or SectionStatus()
        result[section] = current.model_copy(update=dict(fields))
    return result
