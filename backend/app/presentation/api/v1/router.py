"""V1 API router: health, client list and client editor endpoints."""

from fastapi import APIRouter

from app.presentation.api.v1.endpoints.health import router as health_router
from app.presentation.api.v1.endpoints.clients import router as clients_router
from app.presentation.api.v1.endpoints.client_editor import router as client_editor_router

router = APIRouter(prefix="/v1")
router.include_router(health_router)
router.include_router(clients_router)
router.include_router(client_editor_router)
