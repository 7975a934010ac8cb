# src/cache/coordinator.py — v1
"""Sectioned refresh coordinator: read-through TTL cache over independent sections.

The coordinator owns an in-memory snapshot (one payload per section) and the
instant each section was last fetched successfully. A refresh:

  1. marks the requested sections as loading (published immediately),
  2. seeds the snapshot from the store on first use,
  3. serves sections younger than their TTL straight from the snapshot,
  4. fetches every expired or missing section concurrently,
  5. merges each success into its own slot as it settles,
  6. persists the whole envelope once, after every fetch has settled.

Failures never escape refresh(): a rejected fetch becomes that section's
status error and leaves its previous payload in place, and storage errors
are logged and ignored.

Everything runs on one event loop. Each fetch task only ever writes its own
section slot, so the snapshot needs no mutex. The locks below only serialize
the one-time load and the store writes.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from collections.abc import Awaitable, Callable, Iterable, Mapping
from datetime import datetime, timedelta, timezone
from typing import Any

from pydantic import BaseModel

from sectioncache.cache.base_cache_store import BaseSectionStore
from sectioncache.cache.errors import DeserializationError, SectionFetchError, StorageError
from sectioncache.cache.merge import (
    apply_status_updates,
    build_envelope,
    coerce_payload,
    merge_with_defaults,
    seed_from_envelope,
)
from sectioncache.cache.models import RefreshResult, SectionStatus
from sectioncache.cache.staleness import DEFAULT_TTL, TtlPolicy, partition_sections
from sectioncache.logging.context import set_refresh_context, set_section_context

logger = logging.getLogger(__name__)

ALL_SECTIONS = "all"

FetchSection = Callable[[str], Awaitable[Any]]
StatusListener = Callable[[dict[str, SectionStatus]], None]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SectionRefreshCoordinator:
    """Decide what is stale, fetch only that, merge safely, report status.

    One instance per logical cache. Hand it to consumers by reference and
    call close() on teardown.

    Args:
        sections: Fixed universe of section keys.
        fetch_section: Async callable returning the payload for one section.
        store: Envelope persistence backend.
        ttl: Uniform staleness window.
        ttl_overrides: Optional per-section TTLs.
        defaults: Static empty payloads shown for sections never fetched.
        section_models: Optional pydantic model per section; must cover
            every section when given.
        clock: Returns the current UTC instant.
        on_status: Optional status listener, same as subscribe().
    """

    def __init__(
        self,
        sections: Iterable[str],
        fetch_section: FetchSection,
        store: BaseSectionStore,
        ttl: timedelta = DEFAULT_TTL,
        *,
        ttl_overrides: Mapping[str, timedelta] | None = None,
        defaults: Mapping[str, Any] | None = None,
        section_models: Mapping[str, type[BaseModel]] | None = None,
        clock: Callable[[], datetime] | None = None,
        on_status: StatusListener | None = None,
    ) -> None:
        self._sections: tuple[str, ...] = tuple(sections)
        if not self._sections:
            raise ValueError("At least one section is required")
        if len(set(self._sections)) != len(self._sections):
            raise ValueError(f"Duplicate section keys in {self._sections!r}")

        known = set(self._sections)
        for label, mapping in (("ttl_overrides", ttl_overrides), ("defaults", defaults)):
            unknown = set(mapping or {}) - known
            if unknown:
                raise ValueError(f"{label} name unknown sections: {sorted(unknown)}")
        if section_models is not None and set(section_models) != known:
            raise ValueError("section_models must cover exactly the configured sections")

        self._policy = TtlPolicy(default=ttl, overrides=dict(ttl_overrides or {}))
        self._fetch_section = fetch_section
        self._store = store
        self._section_models = dict(section_models) if section_models else None
        self._defaults = {
            section: coerce_payload(section, payload, self._section_models)
            for section, payload in (defaults or {}).items()
        }
        self._clock = clock or _utcnow

        self._data: dict[str, Any] = {}
        self._timestamps: dict[str, datetime] = {}
        self._statuses: dict[str, SectionStatus] = {
            section: SectionStatus() for section in self._sections
        }
        self._listeners: list[StatusListener] = []
        if on_status is not None:
            self._listeners.append(on_status)

        self._loaded = False
        self._load_lock = asyncio.Lock()
        self._save_lock = asyncio.Lock()
        self._full_refresh_in_flight = False
        self._silent_refreshes = 0
        self._initial_load = True
        self._closed = False

    # --- Read-only views ---

    @property
    def sections(self) -> tuple[str, ...]:
        return self._sections

    @property
    def store(self) -> BaseSectionStore:
        return self._store

    @property
    def snapshot(self) -> dict[str, Any]:
        """Current payload for every section.

        Static defaults fill sections never fetched; None where no default exists.
        """
        merged = merge_with_defaults(self._data, self._defaults)
        return {section: merged.get(section) for section in self._sections}

    @property
    def data(self) -> dict[str, Any]:
        """Only the sections that hold real (fetched or persisted) payloads."""
        return dict(self._data)

    @property
    def timestamps(self) -> dict[str, datetime]:
        return dict(self._timestamps)

    @property
    def statuses(self) -> dict[str, SectionStatus]:
        return dict(self._statuses)

    def status(self, section: str) -> SectionStatus:
        return self._statuses[section]

    @property
    def has_data(self) -> bool:
        return bool(self._data)

    @property
    def refreshing(self) -> bool:
        """True while a silent (pull-to-refresh style) refresh is running."""
        return self._silent_refreshes > 0

    @property
    def is_initial_load(self) -> bool:
        return self._initial_load

    @property
    def full_refresh_in_flight(self) -> bool:
        return self._full_refresh_in_flight

    @property
    def closed(self) -> bool:
        return self._closed

    def stale_sections(self) -> list[str]:
        """Sections a full refresh would fetch right now."""
        stale, _ = partition_sections(
            self._sections, self._timestamps, self._data, self._policy, self._clock()
        )
        return stale

    # --- Listeners ---

    def subscribe(self, listener: StatusListener) -> Callable[[], None]:
        """Register a status listener. Returns a callable that unsubscribes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _publish(self) -> None:
        statuses = dict(self._statuses)
        for listener in list(self._listeners):
            try:
                listener(statuses)
            except Exception:
                logger.exception("Status listener %r failed", listener)

    def _update_statuses(self, updates: Mapping[str, Mapping[str, Any]]) -> None:
        if not updates:
            return
        self._statuses = apply_status_updates(self._statuses, updates)
        self._publish()

    # --- Lifecycle ---

    async def hydrate(self) -> bool:
        """Load the persisted envelope and publish whatever it holds.

        Lets a consumer render cached data before any network round trip.

        Returns:
            True if at least one section was found in the store.
        """
        if self._closed:
            return False
        await self._ensure_loaded()
        if not self._data:
            return False

        self._update_statuses({
            section: {
                "loading": False,
                "error": None,
                "last_updated": self._timestamps.get(section),
            }
            for section in self._data
            if not self._statuses[section].loading
        })
        if not self.stale_sections():
            self._initial_load = False
        return True

    def close(self) -> None:
        """Tear down: later fetch results are discarded and refresh() is a no-op."""
        self._closed = True
        self._full_refresh_in_flight = False
        self._listeners.clear()

    # --- Refresh ---

    async def refresh(
        self, sections: Iterable[str] | None = None, *, silent: bool = False
    ) -> RefreshResult:
        """Refresh the expired or missing sections among those requested.

        Args:
            sections: Explicit subset to refresh (or a single key). None,
                empty or "all" means every section; only such unscoped
                refreshes are deduplicated.
            silent: Background refresh (flags `refreshing` instead of
                ending the initial load).

        Returns:
            RefreshResult describing what was fetched, served fresh, failed.

        Raises:
            ValueError: If an unknown section key is requested.
        """
        requested, scoped = self._resolve_sections(sections)

        if self._closed:
            logger.debug("Coordinator closed, ignoring refresh of %s", requested)
            return RefreshResult(requested=requested, skipped=True, statuses=self.statuses)
        if not scoped and self._full_refresh_in_flight:
            logger.debug("Full refresh already in flight, skipping")
            return RefreshResult(requested=requested, skipped=True, statuses=self.statuses)

        refresh_id = uuid.uuid4().hex[:8]
        set_refresh_context(self._store.key, refresh_id)
        result = RefreshResult(requested=requested)

        if not scoped:
            self._full_refresh_in_flight = True
        if silent:
            self._silent_refreshes += 1
        self._update_statuses(
            {section: {"loading": True, "error": None} for section in requested}
        )

        try:
            await self._run_refresh(requested, result)
        except Exception as exc:
            logger.exception("Refresh %s failed unexpectedly", refresh_id)
            message = str(exc) or SectionFetchError.DEFAULT_MESSAGE
            self._update_statuses({
                section: {"loading": False, "error": message}
                for section in requested
                if self._statuses[section].loading
            })
        finally:
            if not scoped:
                self._full_refresh_in_flight = False
            if silent:
                self._silent_refreshes -= 1
            else:
                self._initial_load = False

        result.statuses = self.statuses
        return result

    def _resolve_sections(self, sections: Iterable[str] | None) -> tuple[list[str], bool]:
        """Return (requested sections in order, whether the call was scoped)."""
        if isinstance(sections, str):
            if sections == ALL_SECTIONS and sections not in self._statuses:
                sections = None
            else:
                sections = [sections]
        explicit = list(dict.fromkeys(sections)) if sections is not None else []
        unknown = [s for s in explicit if s not in self._statuses]
        if unknown:
            raise ValueError(f"Unknown sections: {unknown}")
        if not explicit:
            return list(self._sections), False
        return explicit, True

    async def _run_refresh(self, requested: list[str], result: RefreshResult) -> None:
        await self._ensure_loaded()
        if self._closed:
            result.skipped = True
            return

        stale, fresh = partition_sections(
            requested, self._timestamps, self._data, self._policy, self._clock()
        )
        result.fresh = fresh
        self._update_statuses({
            section: {
                "loading": False,
                "error": None,
                "last_updated": self._timestamps.get(section),
            }
            for section in fresh
        })

        if not stale:
            logger.debug("All %d requested section(s) fresh", len(fresh))
            return

        logger.info("Fetching %d stale section(s): %s", len(stale), ", ".join(stale))
        outcomes = await asyncio.gather(*(self._fetch_one(section) for section in stale))

        for section, (succeeded, error) in zip(stale, outcomes):
            if succeeded:
                result.fetched.append(section)
            elif error is not None:
                result.failed[section] = error

        if self._closed:
            result.skipped = True
            return
        if result.fetched:
            result.persisted = await self._persist()

        logger.info(
            "Refresh complete: %d fetched, %d failed, %d fresh",
            len(result.fetched),
            len(result.failed),
            len(result.fresh),
        )

    async def _fetch_one(self, section: str) -> tuple[bool, SectionFetchError | None]:
        """Fetch one section and merge it into its own slot.

        Returns:
            (succeeded, error). Both falsy when the result was discarded
            because the coordinator closed in the meantime.
        """
        set_section_context(section)
        try:
            payload = await self._fetch_section(section)
            payload = coerce_payload(section, payload, self._section_models)
        except Exception as exc:
            if self._closed:
                return False, None
            error = SectionFetchError(section, exc)
            logger.warning("Section '%s' fetch failed: %s", section, error.message)
            self._update_statuses({
                section: {
                    "loading": False,
                    "error": error.message,
                    "last_updated": self._timestamps.get(section),
                }
            })
            return False, error

        if self._closed:
            logger.debug("Discarding '%s' result after close", section)
            return False, None

        fetched_at = self._clock()
        self._data[section] = payload
        self._timestamps[section] = fetched_at
        self._update_statuses(
            {section: {"loading": False, "error": None, "last_updated": fetched_at}}
        )
        return True, None

    # --- Persistence ---

    async def _ensure_loaded(self) -> None:
        """Seed the snapshot from the store exactly once."""
        if self._loaded:
            return
        async with self._load_lock:
            if self._loaded:
                return
            envelope = None
            try:
                envelope = await self._store.load()
            except DeserializationError as e:
                logger.warning("Cached envelope is corrupt, starting cold: %s", e)
                await self._discard_corrupt_envelope()
            except StorageError as e:
                logger.warning("Failed to read cached envelope, starting cold: %s", e)

            if envelope is not None:
                data, timestamps = seed_from_envelope(
                    envelope, self._sections, self._section_models
                )
                for section, payload in data.items():
                    self._data.setdefault(section, payload)
                    if section in timestamps:
                        self._timestamps.setdefault(section, timestamps[section])
                logger.info(
                    "Loaded %d cached section(s) from '%s'", len(data), self._store.key
                )
            self._loaded = True

    async def _discard_corrupt_envelope(self) -> None:
        try:
            await self._store.clear()
        except StorageError as e:
            logger.warning("Failed to clear corrupt envelope: %s", e)

    async def _persist(self) -> bool:
        """Write the full envelope. Returns False if the store rejected it."""
        async with self._save_lock:
            envelope = build_envelope(self._data, self._timestamps)
            try:
                await self._store.save(envelope)
            except StorageError as e:
                logger.warning("Failed to persist envelope '%s': %s", self._store.key, e)
                return False
        logger.debug("Persisted %d section(s) to '%s'", len(envelope.data), self._store.key)
        return True
