"""Liveness probe for the fleet desk API."""

from fastapi import APIRouter, Depends

from app.application.services import EditorSessionRegistry
from app.config import get_settings
from app.infrastructure.dependencies import get_editor_sessions

router = APIRouter(tags=["Health"])


@router.get("/health")
async def health_check(
    sessions: EditorSessionRegistry = Depends(get_editor_sessions),
) -> dict:
    """Report version, environment and how many editor sessions are open."""
    settings = get_settings()
    return {
        "status": "healthy",
        "service": settings.app_title,
        "version": settings.app_version,
        "environment": settings.app_env,
        "open_editor_sessions": len(sessions),
    }
