# src/dashboard/models.py — v1
"""Dashboard section payloads: one model per section plus the aggregate."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel

DashboardSection = Literal["users", "jobs", "bookings", "applications"]

SECTION_KEYS: tuple[DashboardSection, ...] = ("users", "jobs", "bookings", "applications")


class UsersStats(BaseModel):
    total: int = 0
    active: int = 0
    suspended: int = 0


class JobsStats(BaseModel):
    total: int = 0
    active: int = 0


class BookingsStats(BaseModel):
    total: int = 0
    completed: int = 0


class ApplicationsStats(BaseModel):
    pending: int = 0
    approved: int = 0


class DashboardStats(BaseModel):
    """Aggregate of every dashboard section."""

    users: UsersStats = UsersStats()
    jobs: JobsStats = JobsStats()
    bookings: BookingsStats = BookingsStats()
    applications: ApplicationsStats = ApplicationsStats()

    @classmethod
    def from_snapshot(cls, snapshot: dict[str, object]) -> DashboardStats:
        """Build from a coordinator snapshot (missing or None sections stay zero)."""
        return cls.model_validate(
            {
                key: value
                for key, value in snapshot.items()
                if key in SECTION_KEYS and value is not None
            }
        )


SECTION_MODELS: dict[str, type[BaseModel]] = {
    "users": UsersStats,
    "jobs": JobsStats,
    "bookings": BookingsStats,
    "applications": ApplicationsStats,
}

DEFAULT_STATS: dict[str, BaseModel] = {
    section: model() for section, model in SECTION_MODELS.items()
}
