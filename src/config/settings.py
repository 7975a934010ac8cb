# src/config/settings.py — v2
"""Typed configuration loaded from .env via pydantic-settings.

Single source of truth for deployment-specific settings: which store backend
holds the envelope, the TTL policy, and logging.
"""

from __future__ import annotations

from datetime import timedelta
from pathlib import Path
from typing import Literal

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConfigurationError(Exception):
    """Raised when configuration is internally inconsistent."""


def parse_ttl_overrides(raw: str) -> dict[str, timedelta]:
    """Parse 'jobs=60,users=600' into {section: timedelta(seconds)}.

    Raises:
        ValueError: On a malformed pair or a non-positive duration.
    """
    overrides: dict[str, timedelta] = {}
    for pair in raw.split(","):
        pair = pair.strip()
        if not pair:
            continue
        section, sep, seconds = pair.partition("=")
        section = section.strip()
        if not sep or not section:
            raise ValueError(f"Invalid TTL override {pair!r}, expected section=seconds")
        try:
            value = float(seconds)
        except ValueError as e:
            raise ValueError(f"Invalid TTL seconds in {pair!r}") from e
        if value <= 0:
            raise ValueError(f"TTL override for {section!r} must be > 0")
        overrides[section] = timedelta(seconds=value)
    return overrides


class Settings(BaseSettings):
    """Application settings loaded from .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # === Cache store ===
    cache_backend: Literal["json", "sqlite", "redis", "memory"] = "json"
    cache_root: Path = Path("~/.sectioncache/cache")
    cache_key: str = "dashboard.stats.v2"
    cache_redis_url: str = ""

    # === Staleness ===
    cache_ttl_seconds: float = 300.0
    cache_ttl_overrides: str = ""

    # === Logging ===
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["json", "text"] = "json"
    log_file: Path | None = None
    log_rotation: str = "10MB"
    log_retention: int = 30

    # --- Validators ---

    @field_validator("cache_ttl_seconds")
    @classmethod
    def validate_ttl(cls, v: float) -> float:  # noqa: N805
        if v <= 0:
            raise ValueError("cache_ttl_seconds must be > 0")
        return v

    @field_validator("cache_key")
    @classmethod
    def validate_cache_key(cls, v: str) -> str:  # noqa: N805
        if not v.strip():
            raise ValueError("cache_key must not be empty")
        return v.strip()

    @model_validator(mode="after")
    def validate_config_consistency(self) -> Settings:
        """Validate cross-field consistency rules."""
        errors: list[str] = []

        if self.cache_backend == "redis" and not self.cache_redis_url:
            errors.append("CACHE_REDIS_URL must be set when CACHE_BACKEND=redis")

        try:
            parse_ttl_overrides(self.cache_ttl_overrides)
        except ValueError as e:
            errors.append(f"CACHE_TTL_OVERRIDES: {e}")

        if self.log_retention < 0:
            errors.append("LOG_RETENTION must be >= 0")

        if errors:
            raise ConfigurationError("; ".join(errors))

        return self

    # --- Helpers ---

    @property
    def ttl(self) -> timedelta:
        """Uniform staleness window."""
        return timedelta(seconds=self.cache_ttl_seconds)

    @property
    def ttl_overrides_map(self) -> dict[str, timedelta]:
        """Per-section TTLs parsed from CACHE_TTL_OVERRIDES."""
        return parse_ttl_overrides(self.cache_ttl_overrides)


def load_settings(**overrides: object) -> Settings:
    """Load settings from .env with optional overrides.

    Args:
        **overrides: Field-level overrides (for testing or per-screen config).

    Returns:
        Validated Settings instance.

    Raises:
        ConfigurationError: If configuration is internally inconsistent.
    """
    return Settings(**overrides)  # type: ignore[arg-type]
