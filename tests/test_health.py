"""Health endpoint tests."""

import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_health(client: AsyncClient) -> None:
    """GET /health returns 200 with healthy status."""
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


@pytest.mark.asyncio
async def test_healthz(client: AsyncClient) -> None:
    response = await client.get("/healthz")
    assert response.json() == {"ok": True}


@pytest.mark.asyncio
async def test_readiness_without_redis(client: AsyncClient) -> None:
    """GET /ready reports degraded when Redis is not configured."""
    response = await client.get("/ready")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "degraded"
    assert data["checks"]["database"] == "ok"
    assert data["checks"]["redis"].startswith("error")


@pytest.mark.asyncio
async def test_readiness_with_redis(client: AsyncClient, monkeypatch) -> None:
    from unittest.mock import AsyncMock, MagicMock

    fake = MagicMock()
    fake.ping = AsyncMock(return_value=True)
    monkeypatch.setattr("gamemaster.health.router.get_redis", lambda: fake)

    response = await client.get("/ready")
    assert response.json()["status"] == "ready"


@pytest.mark.asyncio
async def test_version(client: AsyncClient) -> None:
    """GET /version returns name, version and environment."""
    response = await client.get("/version")
    assert response.status_code == 200
    data = response.json()
    assert data["name"] == "GameMaster API"
    assert data["version"] == "0.1.0"
    assert data["environment"] == "test"


@pytest.mark.asyncio
async def test_dbz_counts_clubs(client: AsyncClient, club, other_club) -> None:
    response = await client.get("/dbz")
    assert response.status_code == 200
    assert response.json() == {"ok": True, "clubs": 2}
