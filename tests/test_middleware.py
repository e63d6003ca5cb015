"""Middleware tests: request ID, rate limiting, CORS, error handling."""

from __future__ import annotations

from typing import Any

import pytest
from httpx import ASGITransport, AsyncClient


class FakePipeline:
    def __init__(self, store: dict[str, int]) -> None:
        self.store = store
        self.keys: list[str] = []

    def incr(self, key: str) -> None:
        self.keys.append(key)

    def expire(self, key: str, seconds: int) -> None:
        pass

    async def execute(self) -> list[Any]:
        results: list[Any] = []
        for key in self.keys:
            self.store[key] = self.store.get(key, 0) + 1
            results.append(self.store[key])
        results.append(True)
        return results


class FakeRedis:
    """Just enough of redis.asyncio.Redis for the fixed-window counter."""

    def __init__(self) -> None:
        self.store: dict[str, int] = {}

    def pipeline(self) -> FakePipeline:
        return FakePipeline(self.store)


@pytest.fixture
def fake_redis(monkeypatch) -> FakeRedis:
    fake = FakeRedis()
    monkeypatch.setattr("gamemaster.middleware.rate_limit.get_redis", lambda: fake)
    return fake


@pytest.mark.asyncio
async def test_request_id_generated(client: AsyncClient) -> None:
    """Request ID is auto-generated when not provided."""
    response = await client.get("/health")
    assert "x-request-id" in response.headers
    assert len(response.headers["x-request-id"]) == 36  # UUID format


@pytest.mark.asyncio
async def test_request_id_preserved(client: AsyncClient) -> None:
    """Custom request ID is echoed back in response."""
    response = await client.get("/health", headers={"X-Request-Id": "test-abc-123"})
    assert response.headers["x-request-id"] == "test-abc-123"


@pytest.mark.asyncio
async def test_no_rate_limit_without_redis(client: AsyncClient) -> None:
    """Without Redis the limiter steps aside entirely."""
    response = await client.get("/version")
    assert response.status_code == 200
    assert "x-ratelimit-remaining" not in response.headers


@pytest.mark.asyncio
async def test_rate_limit_headers(client: AsyncClient, fake_redis: FakeRedis) -> None:
    """Rate limit headers are present on non-exempt endpoints."""
    response = await client.get("/version")
    assert response.headers["x-ratelimit-limit"] == "100"
    assert response.headers["x-ratelimit-remaining"] == "99"


@pytest.mark.asyncio
async def test_rate_limit_blocks_excess(client: AsyncClient, fake_redis: FakeRedis) -> None:
    """101st request returns 429 with Retry-After header."""
    for _ in range(100):
        await client.get("/version")
    response = await client.get("/version")
    assert response.status_code == 429
    assert "retry-after" in response.headers
    assert response.json() == {"error": "Rate limit exceeded. Try again later."}


@pytest.mark.asyncio
async def test_rate_limit_keyed_by_forwarded_client(client: AsyncClient, fake_redis: FakeRedis) -> None:
    await client.get("/version", headers={"X-Forwarded-For": "203.0.113.7, 10.0.0.1"})
    await client.get("/version", headers={"X-Forwarded-For": "198.51.100.2"})
    clients = {key.split(":")[2] for key in fake_redis.store}
    assert clients == {"203.0.113.7", "198.51.100.2"}


@pytest.mark.asyncio
async def test_health_exempt_from_rate_limit(client: AsyncClient, fake_redis: FakeRedis) -> None:
    """Health endpoints are exempt from rate limiting."""
    for _ in range(150):
        response = await client.get("/health")
        assert response.status_code == 200
    assert fake_redis.store == {}


@pytest.mark.asyncio
async def test_cors_preflight(client: AsyncClient) -> None:
    """CORS preflight returns access-control-allow-origin for configured origin."""
    response = await client.options(
        "/clubs",
        headers={
            "Origin": "http://localhost:3000",
            "Access-Control-Request-Method": "POST",
        },
    )
    assert response.headers["access-control-allow-origin"] == "http://localhost:3000"


@pytest.mark.asyncio
async def test_404_returns_json(client: AsyncClient) -> None:
    """Unknown paths return 404 with the common error body."""
    response = await client.get("/nonexistent-path")
    assert response.status_code == 404
    assert response.json() == {"error": "Not Found"}


@pytest.mark.asyncio
async def test_405_returns_json(client: AsyncClient) -> None:
    response = await client.delete("/clubs")
    assert response.status_code == 405
    assert response.json() == {"error": "Method Not Allowed"}


@pytest.mark.asyncio
async def test_malformed_json_is_validation_failure(client: AsyncClient) -> None:
    response = await client.post(
        "/auth/login", content=b"{not json", headers={"Content-Type": "application/json"},
    )
    assert response.status_code == 400
    assert response.json()["error"] == "Validation failed"


@pytest.mark.asyncio
async def test_500_returns_json() -> None:
    """Unhandled exceptions become a generic 500 without leaking details."""
    from gamemaster.main import create_app

    app = create_app()

    @app.get("/boom")
    async def boom() -> None:
        raise RuntimeError("database password is hunter2")

    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        response = await ac.get("/boom")
    assert response.status_code == 500
    assert response.json() == {"error": "Internal server error"}
