"""SQLite-backed fixtures for repository and API tests."""

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from app.application.services import ClientUploadService, SSEManager
from app.infrastructure.database import Base, get_db_session
from app.infrastructure.dependencies import (
    build_editor_sessions,
    get_blob_storage,
    get_editor_sessions,
    get_sse_manager,
)
from app.infrastructure.storage.local_blob_storage import LocalBlobStorage
from app.main import app


@pytest_asyncio.fixture
async def session_factory(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'fleet.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    await engine.dispose()


@pytest.fixture
def blob_storage(tmp_path) -> LocalBlobStorage:
    return LocalBlobStorage(tmp_path / "storage", "http://files.test/files")


@pytest_asyncio.fixture
async def api(session_factory, blob_storage):
    """HTTP client against the app, wired to SQLite and a temporary blob store."""

    async def _session():
        async with session_factory() as session:
            yield session

    sessions = build_editor_sessions(ClientUploadService(blob_storage))
    sse = SSEManager()
    app.dependency_overrides[get_db_session] = _session
    app.dependency_overrides[get_blob_storage] = lambda: blob_storage
    app.dependency_overrides[get_editor_sessions] = lambda: sessions
    app.dependency_overrides[get_sse_manager] = lambda: sse

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()
