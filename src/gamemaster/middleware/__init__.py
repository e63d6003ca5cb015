"""Middleware registration."""

from fastapi import FastAPI

from gamemaster.config import Settings
from gamemaster.middleware.cors import setup_cors
from gamemaster.middleware.error_handler import setup_error_handlers
from gamemaster.middleware.logging import setup_logging
from gamemaster.middleware.rate_limit import RateLimitMiddleware
from gamemaster.middleware.request_id import RequestIdMiddleware


def setup_middleware(app: FastAPI, settings: Settings) -> None:
    """Register logging, error handlers and middleware.

    Starlette runs middleware in reverse-add order, so CORS is added last to
    wrap 429 responses from the rate limiter. A non-positive
    ``rate_limit_requests`` disables rate limiting.
    """
    setup_logging(settings)
    setup_error_handlers(app)
    if settings.rate_limit_requests > 0:
        app.add_middleware(
            RateLimitMiddleware,
            requests_per_window=settings.rate_limit_requests,
            window_seconds=settings.rate_limit_window_seconds,
        )
    app.add_middleware(RequestIdMiddleware)
    setup_cors(app, settings)
