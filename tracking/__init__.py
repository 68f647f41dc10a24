"""Drive session tracking package."""

from fastapi import APIRouter

from tracking.api import sessions

router = APIRouter()
router.include_router(sessions.router, tags=["sessions"])

__all__ = ["router"]
