"""Probe endpoints: liveness, readiness, version and a database round-trip."""

from fastapi import APIRouter, Depends
from sqlalchemy import func, select, text
from sqlalchemy.ext.asyncio import AsyncSession

from gamemaster.config import get_settings
from gamemaster.database import get_session
from gamemaster.db.models import Club
from gamemaster.redis_client import get_redis

router = APIRouter()


async def _check_database(db: AsyncSession) -> str:
    try:
        await db.execute(text("SELECT 1"))
    except Exception as exc:
        return f"error: {exc}"
    return "ok"


async def _check_redis() -> str:
    # Redis only backs rate limiting; without it the API still serves requests
    try:
        await get_redis().ping()
    except Exception as exc:
        return f"error: {exc}"
    return "ok"


@router.get("/health")
async def health() -> dict[str, str]:
    """Liveness probe: 200 while the process is up."""
    return {"status": "healthy"}


@router.get("/healthz")
async def healthz() -> dict[str, bool]:
    return {"ok": True}


@router.get("/ready")
async def readiness(db: AsyncSession = Depends(get_session)) -> dict[str, object]:  # noqa: B008
    """Readiness probe. ``degraded`` when any dependency check fails."""
    checks = {"database": await _check_database(db), "redis": await _check_redis()}
    status = "ready" if all(v == "ok" for v in checks.values()) else "degraded"
    return {"status": status, "checks": checks}


@router.get("/version")
async def version() -> dict[str, str]:
    settings = get_settings()
    return {"name": settings.app_name, "version": settings.app_version, "environment": settings.environment}


@router.get("/dbz")
async def dbz(db: AsyncSession = Depends(get_session)) -> dict[str, object]:  # noqa: B008
    """Round-trip to the database: count clubs."""
    result = await db.execute(select(func.count()).select_from(Club))
    return {"ok": True, "clubs": int(result.scalar_one())}
