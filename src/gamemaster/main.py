"""FastAPI application factory."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI

from gamemaster.admin.router import router as admin_router
from gamemaster.auth.router import router as auth_router
from gamemaster.clubs.router import router as clubs_router
from gamemaster.competitions.router import router as competitions_router
from gamemaster.config import get_settings
from gamemaster.database import close_db, create_schema, init_db
from gamemaster.entries.router import router as entries_router
from gamemaster.health.router import router as health_router
from gamemaster.middleware import setup_middleware
from gamemaster.redis_client import close_redis, init_redis
from gamemaster.templates.router import router as templates_router

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup and shutdown lifecycle."""
    settings = get_settings()
    await init_db(settings.database_url)
    if settings.auto_create_schema:
        await create_schema()
        logger.info("schema_created")
    await init_redis(settings.redis_url)
    logger.info("startup_complete", environment=settings.environment)

    yield

    await close_db()
    await close_redis()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="GameMaster API",
        description="Multi-tenant sports competition platform: clubs, templates, competitions, entries and picks",
        version=settings.app_version,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    setup_middleware(app, settings)
    app.include_router(health_router, tags=["Health"])
    app.include_router(auth_router)
    app.include_router(admin_router)
    app.include_router(clubs_router)
    app.include_router(templates_router)
    app.include_router(competitions_router)
    app.include_router(entries_router)

    return app


app = create_app()
