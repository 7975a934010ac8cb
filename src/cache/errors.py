# src/cache/errors.py — v1
"""Error taxonomy for the section cache.

StorageError and DeserializationError are recovered inside the coordinator
(cold start / no-op). SectionFetchError is surfaced per section in the status
map and never aborts sibling fetches.
"""

from __future__ import annotations


class StorageError(Exception):
    """Persisted envelope could not be read or written."""


class DeserializationError(StorageError):
    """Persisted envelope exists but cannot be decoded."""


class SectionFetchError(Exception):
    """A single section's fetch was rejected."""

    DEFAULT_MESSAGE = "Failed to load data"

    def __init__(self, section: str, cause: BaseException) -> None:
        self.section = section
        self.cause = cause
        self.message = str(cause) or self.DEFAULT_MESSAGE
        super().__init__(f"Section '{section}' fetch failed: {self.message}")
