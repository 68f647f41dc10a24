"""API routes for drive sessions and breadcrumbs."""

import logging
from typing import Any

from fastapi import APIRouter, status
from pydantic import BaseModel, Field

from core.api import api_route
from tracking.services.session_service import SessionService

logger = logging.getLogger(__name__)
router = APIRouter()


class SessionCreate(BaseModel):
    name: str = Field(min_length=1)


class SessionEnd(BaseModel):
    distance_km: float | None = Field(default=None, ge=0)


class BreadcrumbCreate(BaseModel):
    sessionId: str
    lat: float
    lng: float
    accuracy: float | None = Field(default=None, ge=0)


@router.get("/api/sessions")
@api_route(logger)
async def list_sessions() -> list[dict[str, Any]]:
    """List drive sessions, newest first."""
    sessions = await SessionService.list_sessions()
    return [s.model_dump(mode="json") for s in sessions]


@router.post("/api/sessions", status_code=status.HTTP_201_CREATED)
@api_route(logger)
async def create_session(payload: SessionCreate) -> dict[str, Any]:
    session = await SessionService.create_session(payload.name)
    return session.model_dump(mode="json")


@router.get("/api/sessions/{session_id}")
@api_route(logger)
async def get_session(session_id: str) -> dict[str, Any]:
    session = await SessionService.get_session(session_id)
    return session.model_dump(mode="json")


@router.post("/api/sessions/{session_id}/end")
@api_route(logger)
async def end_session(session_id: str, payload: SessionEnd) -> dict[str, Any]:
    session = await SessionService.end_session(session_id, payload.distance_km)
    return session.model_dump(mode="json")


@router.get("/api/sessions/{session_id}/breadcrumbs")
@api_route(logger)
async def list_breadcrumbs(session_id: str) -> list[dict[str, Any]]:
    """Breadcrumbs of a session in capture order."""
    await SessionService.get_session(session_id)
    crumbs = await SessionService.list_breadcrumbs(session_id)
    return [c.model_dump(mode="json") for c in crumbs]


@router.post("/api/breadcrumbs", status_code=status.HTTP_201_CREATED)
@api_route(logger)
async def create_breadcrumb(payload: BreadcrumbCreate) -> dict[str, Any]:
    crumb = await SessionService.add_breadcrumb(
        payload.sessionId,
        payload.lat,
        payload.lng,
        payload.accuracy,
    )
    return crumb.model_dump(mode="json")
