"""Beanie ODM document models for MongoDB collections.

Only drive sessions and their raw position breadcrumbs are persisted.
Street coverage is rebuilt client-side each session and never stored.

Usage:
    from db.models import Breadcrumb, DriveSession

    session = DriveSession(name="Neighborhood run")
    await session.insert()

    crumbs = await Breadcrumb.find(
        Breadcrumb.session_id == str(session.id),
    ).sort("+timestamp").to_list()
"""

from __future__ import annotations

from datetime import UTC, datetime

from beanie import Document, Indexed
from pydantic import Field, ValidationInfo, field_validator
from pymongo import ASCENDING, DESCENDING, IndexModel

from core.spatial import GeometryService


def _utcnow() -> datetime:
    return datetime.now(UTC)


class DriveSession(Document):
    """One tracking session (start to stop)."""

    name: str
    is_active: bool = True
    created_at: datetime = Field(default_factory=_utcnow)
    ended_at: datetime | None = None
    distance_km: float | None = None

    class Settings:
        name = "sessions"
        indexes = [
            IndexModel([("created_at", DESCENDING)], name="sessions_created_at_desc"),
        ]


class Breadcrumb(Document):
    """A raw position sample accepted during an active session."""

    session_id: Indexed(str)
    lat: float
    lng: float
    accuracy: float | None = None
    timestamp: datetime = Field(default_factory=_utcnow)

    @field_validator("lng")
    @classmethod
    def _check_coordinates(cls, value: float, info: ValidationInfo) -> float:
        lat = info.data.get("lat")
        if lat is not None and not GeometryService.is_valid_lat_lng(lat, value):
            msg = f"Coordinates out of range: ({lat}, {value})"
            raise ValueError(msg)
        return value

    class Settings:
        name = "breadcrumbs"
        indexes = [
            IndexModel(
                [("session_id", ASCENDING), ("timestamp", ASCENDING)],
                name="breadcrumbs_session_timestamp",
            ),
        ]


ALL_DOCUMENT_MODELS = [DriveSession, Breadcrumb]
