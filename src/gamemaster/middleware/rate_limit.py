"""Redis-backed fixed window rate limiting middleware."""

import time
from typing import Any

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from gamemaster.redis_client import get_redis

# Probes are never limited
_EXEMPT_PATHS = frozenset({"/health", "/healthz", "/ready"})


def client_key(request: Request) -> str:
    """Identify the caller by the first X-Forwarded-For hop, else the socket peer."""
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Rate limit requests per client using Redis counters."""

    def __init__(self, app: Any, requests_per_window: int = 100, window_seconds: int = 60) -> None:  # noqa: ANN401
        super().__init__(app)
        self.requests_per_window = requests_per_window
        self.window_seconds = window_seconds

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        """Check rate limit, return 429 if exceeded."""
        if request.url.path in _EXEMPT_PATHS or request.method == "OPTIONS":
            return await call_next(request)

        try:
            redis = get_redis()
        except RuntimeError:
            # Redis not initialized, run unlimited
            return await call_next(request)

        window = int(time.time()) // self.window_seconds
        rate_key = f"gm:ratelimit:{client_key(request)}:{window}"

        pipe = redis.pipeline()
        pipe.incr(rate_key)
        pipe.expire(rate_key, self.window_seconds + 1)
        results: list[Any] = await pipe.execute()

        current_count = int(results[0])
        remaining = max(0, self.requests_per_window - current_count)
        limit_headers = {
            "X-RateLimit-Remaining": str(remaining),
            "X-RateLimit-Limit": str(self.requests_per_window),
        }

        if current_count > self.requests_per_window:
            return JSONResponse(
                status_code=429,
                content={"error": "Rate limit exceeded. Try again later."},
                headers={"Retry-After": str(self.window_seconds), **limit_headers},
            )

        response = await call_next(request)
        response.headers.update(limit_headers)
        return response
