"""Fleet desk API: application factory and startup/shutdown wiring."""

import logging
from contextlib import asynccontextmanager
from collections.abc import AsyncIterator
from pathlib import Path
from urllib.parse import urlparse

import asyncpg
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from app.config import get_settings
from app.application.services.client_upload_service import BUCKETS
from app.infrastructure.database import Base, engine
from app.infrastructure.dependencies import get_editor_sessions, get_sse_manager
from app.infrastructure.logging.log_config import setup_logging
from app.presentation.api.router import router as api_router

logger = logging.getLogger(__name__)


async def _ensure_database_exists(database_url: str) -> None:
    """Create the PostgreSQL database named in ``database_url`` when missing.

    Other backends (SQLite) create their database file on first connect.
    """
    if not database_url.startswith("postgresql"):
        return
    db_name = urlparse(database_url).path.lstrip("/")
    if not db_name:
        return

    server_url = database_url.rsplit("/", 1)[0] + "/postgres"
    try:
        conn = await asyncpg.connect(server_url)
    except (OSError, asyncpg.PostgresError) as exc:
        logger.warning("Database server unreachable, skipping auto-create of '%s': %s", db_name, exc)
        return

    try:
        if await conn.fetchval("SELECT 1 FROM pg_database WHERE datname = $1", db_name):
            return
        # CREATE DATABASE refuses to run inside a transaction.
        await conn.execute(f'CREATE DATABASE "{db_name}"')
        logger.info("Created database '%s'", db_name)
    except asyncpg.PostgresError as exc:
        logger.warning("Could not create database '%s': %s", db_name, exc)
    finally:
        await conn.close()


def _ensure_buckets(storage_dir: str) -> None:
    for bucket in BUCKETS:
        (Path(storage_dir) / bucket).mkdir(parents=True, exist_ok=True)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    settings = get_settings()
    setup_logging()

    await _ensure_database_exists(settings.database_url)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    _ensure_buckets(settings.storage_dir)
    logger.info("%s %s started (%s)", settings.app_title, settings.app_version, settings.app_env)

    yield

    discarded = get_editor_sessions().close_all()
    if discarded:
        logger.info("Discarded %d open editor session(s)", discarded)
    await get_sse_manager().shutdown()
    await engine.dispose()


def create_app() -> FastAPI:
    settings = get_settings()

    app = FastAPI(
        title=settings.app_title,
        version=settings.app_version,
        lifespan=lifespan,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(api_router)

    # Uploaded objects are public at <public_files_url>/<bucket>/<path>.
    app.mount(
        "/files",
        StaticFiles(directory=settings.storage_dir, check_dir=False),
        name="files",
    )
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("app.main:app", host="0.0.0.0", port=8030, reload=True)
