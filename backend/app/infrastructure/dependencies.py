"""FastAPI dependencies that bind infrastructure adapters to the application services."""

from collections.abc import AsyncGenerator
from datetime import timedelta
from functools import lru_cache

from fastapi import Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import get_settings
from app.application.interfaces import BlobStorage, CacheInvalidator, ClientRepository
from app.application.services import (
    ClientDialog,
    ClientLifecycleService,
    ClientSaveCoordinator,
    ClientService,
    ClientUploadService,
    EditorSession,
    EditorSessionRegistry,
    PreviewRegistry,
    SSEManager,
)
from app.domain.exceptions import EntityNotFoundError
from app.infrastructure.database.session import get_db_session
from app.infrastructure.database.repositories import SQLAlchemyClientRepository
from app.infrastructure.notifications import SessionNotifier, SSECacheInvalidator
from app.infrastructure.storage.local_blob_storage import LocalBlobStorage


# ── Process-wide singletons ─────────────────────────────────────────

@lru_cache
def get_blob_storage() -> BlobStorage:
    """Provides the local bucketed file store (created once per process)."""
    settings = get_settings()
    return LocalBlobStorage(
        root_dir=settings.storage_dir,
        public_base_url=settings.public_files_url,
    )


@lru_cache
def get_sse_manager() -> SSEManager:
    """Singleton SSE manager shared by every request and subscriber."""
    return SSEManager()


EDITOR_PREVIEW_PATH = "/api/v1/client-editor/sessions/{session_id}/previews"


def build_editor_sessions(
    uploads: ClientUploadService,
    *,
    idle_timeout: timedelta | None = None,
    max_sessions: int | None = None,
) -> EditorSessionRegistry:
    """Registry whose dialogs each get their own notifier and preview registry."""

    def new_dialog(session_id: str) -> ClientDialog:
        return ClientDialog(
            uploads=uploads,
            notifier=SessionNotifier(session_id),
            previews=PreviewRegistry(EDITOR_PREVIEW_PATH.format(session_id=session_id)),
        )

    return EditorSessionRegistry(
        dialog_factory=new_dialog,
        idle_timeout=idle_timeout,
        max_sessions=max_sessions,
    )


@lru_cache
def get_editor_sessions() -> EditorSessionRegistry:
    settings = get_settings()
    return build_editor_sessions(
        ClientUploadService(get_blob_storage()),
        idle_timeout=timedelta(minutes=settings.editor_session_idle_minutes),
        max_sessions=settings.max_editor_sessions,
    )


# ── Per-request services ────────────────────────────────────────────

def get_upload_service(
    storage: BlobStorage = Depends(get_blob_storage),
) -> ClientUploadService:
    return ClientUploadService(storage)


def get_cache_invalidator(
    sse_manager: SSEManager = Depends(get_sse_manager),
) -> CacheInvalidator:
    return SSECacheInvalidator(sse_manager)


async def get_client_repository(
    session: AsyncSession = Depends(get_db_session),
) -> AsyncGenerator[ClientRepository, None]:
    """Provides the SQLAlchemy client repository bound to the request session."""
    yield SQLAlchemyClientRepository(session)


async def get_client_service(
    repository: ClientRepository = Depends(get_client_repository),
) -> AsyncGenerator[ClientService, None]:
    """Provides a ClientService instance with its repository wired up."""
    yield ClientService(repository)


def get_editor_session(
    session_id: str,
    registry: EditorSessionRegistry = Depends(get_editor_sessions),
) -> EditorSession:
    """Resolves the ``{session_id}`` path parameter to an open editor session."""
    try:
        return registry.get(session_id)
    except EntityNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


async def get_save_coordinator(
    editor: EditorSession = Depends(get_editor_session),
    repository: ClientRepository = Depends(get_client_repository),
    uploads: ClientUploadService = Depends(get_upload_service),
    cache_invalidator: CacheInvalidator = Depends(get_cache_invalidator),
) -> AsyncGenerator[ClientSaveCoordinator, None]:
    """Provides a save coordinator reporting to the editor session's notifier."""
    yield ClientSaveCoordinator(
        repository=repository,
        uploads=uploads,
        notifier=editor.dialog.notifier,
        cache_invalidator=cache_invalidator,
    )


async def get_lifecycle_service(
    editor: EditorSession = Depends(get_editor_session),
    repository: ClientRepository = Depends(get_client_repository),
    cache_invalidator: CacheInvalidator = Depends(get_cache_invalidator),
) -> AsyncGenerator[ClientLifecycleService, None]:
    yield ClientLifecycleService(
        repository=repository,
        notifier=editor.dialog.notifier,
        cache_invalidator=cache_invalidator,
    )
