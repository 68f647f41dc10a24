"""
Drive session and breadcrumb persistence.

Breadcrumbs are the only durable record of a drive: an append-only,
time-ordered log of accepted positions keyed by session id. Coverage is
never stored here.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from beanie import PydanticObjectId
from bson.errors import InvalidId

from core.exceptions import InvalidPosition, ResourceNotFoundError, ValidationError
from core.spatial import GeometryService
from db.models import Breadcrumb, DriveSession

if TYPE_CHECKING:
    from street_coverage.models import Position

logger = logging.getLogger(__name__)


def _object_id(session_id: str) -> PydanticObjectId:
    try:
        return PydanticObjectId(session_id)
    except (InvalidId, TypeError) as exc:
        msg = f"Session {session_id} not found"
        raise ResourceNotFoundError(msg, {"session_id": session_id}) from exc


async def create_session(name: str) -> DriveSession:
    name = (name or "").strip()
    if not name:
        msg = "Session name is required"
        raise ValidationError(msg, {"field": "name"})
    session = DriveSession(name=name)
    await session.insert()
    logger.info("Created drive session %s (%s)", session.id, name)
    return session


async def list_sessions() -> list[DriveSession]:
    """All sessions, newest first."""
    return await DriveSession.find_all().sort("-created_at").to_list()


async def get_session(session_id: str) -> DriveSession:
    session = await DriveSession.get(_object_id(session_id))
    if session is None:
        msg = f"Session {session_id} not found"
        raise ResourceNotFoundError(msg, {"session_id": session_id})
    return session


async def end_session(
    session_id: str,
    distance_km: float | None = None,
) -> DriveSession:
    session = await get_session(session_id)
    if session.is_active:
        session.is_active = False
        session.ended_at = datetime.now(UTC)
        if distance_km is not None:
            session.distance_km = distance_km
        await session.save()
        logger.info("Ended drive session %s", session_id)
    return session


async def add_breadcrumb(
    session_id: str,
    lat: float,
    lng: float,
    accuracy: float | None = None,
    timestamp: datetime | None = None,
) -> Breadcrumb:
    if not GeometryService.is_valid_lat_lng(lat, lng):
        msg = f"Invalid position ({lat}, {lng})"
        raise InvalidPosition(msg, {"lat": lat, "lng": lng})
    session = await get_session(session_id)
    if not session.is_active:
        msg = f"Session {session_id} has ended"
        raise ValidationError(msg, {"session_id": session_id})

    crumb = Breadcrumb(
        session_id=session_id,
        lat=lat,
        lng=lng,
        accuracy=accuracy,
        timestamp=timestamp or datetime.now(UTC),
    )
    await crumb.insert()
    return crumb


async def record_position(session_id: str, position: Position) -> Breadcrumb:
    return await add_breadcrumb(
        session_id,
        position.lat,
        position.lng,
        accuracy=position.accuracy,
        timestamp=position.timestamp,
    )


async def list_breadcrumbs(session_id: str) -> list[Breadcrumb]:
    """Breadcrumbs of one session in capture order."""
    return (
        await Breadcrumb.find(Breadcrumb.session_id == session_id)
        .sort("+timestamp")
        .to_list()
    )


class SessionService:
    """Session persistence facade."""

    @staticmethod
    async def create_session(name: str) -> DriveSession:
        return await create_session(name)

    @staticmethod
    async def list_sessions() -> list[DriveSession]:
        return await list_sessions()

    @staticmethod
    async def get_session(session_id: str) -> DriveSession:
        return await get_session(session_id)

    @staticmethod
    async def end_session(
        session_id: str,
        distance_km: float | None = None,
    ) -> DriveSession:
        return await end_session(session_id, distance_km)

    @staticmethod
    async def add_breadcrumb(
        session_id: str,
        lat: float,
        lng: float,
        accuracy: float | None = None,
    ) -> Breadcrumb:
        return await add_breadcrumb(session_id, lat, lng, accuracy)

    @staticmethod
    async def record_position(session_id: str, position: Position) -> Breadcrumb:
        return await record_position(session_id, position)

    @staticmethod
    async def list_breadcrumbs(session_id: str) -> list[Breadcrumb]:
        return await list_breadcrumbs(session_id)


__all__ = [
    "SessionService",
    "add_breadcrumb",
    "create_session",
    "end_session",
    "get_session",
    "list_breadcrumbs",
    "list_sessions",
    "record_position",
]
