"""Global error handlers: every failure renders as ``{"error": ..., "issues"?: [...]}``."""

from typing import Any

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from gamemaster.errors import GameMasterError

logger = structlog.get_logger()


def _error_body(message: str, issues: list[dict[str, Any]] | None = None) -> dict[str, Any]:
    body: dict[str, Any] = {"error": message}
    if issues:
        body["issues"] = issues
    return body


def _validation_issues(exc: RequestValidationError) -> list[dict[str, Any]]:
    """Flatten pydantic errors into ``{path, message, code}`` items, dropping the ``body`` prefix."""
    issues = []
    for err in exc.errors():
        loc = [str(p) for p in err.get("loc", ())]
        if loc and loc[0] in ("body", "query", "path"):
            loc = loc[1:]
        issues.append({
            "path": loc,
            "message": str(err.get("msg", "")),
            "code": str(err.get("type", "")),
        })
    return issues


def setup_error_handlers(app: FastAPI) -> None:
    """Register global exception handlers."""

    @app.exception_handler(GameMasterError)
    async def domain_exception_handler(request: Request, exc: GameMasterError) -> JSONResponse:
        """Map domain failures to their status code."""
        logger.info(
            "request_rejected",
            path=request.url.path,
            method=request.method,
            error=type(exc).__name__,
            reason=exc.message,
            status=exc.status_code,
        )
        return JSONResponse(status_code=exc.status_code, content=_error_body(exc.message, exc.issues))

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(_request: Request, exc: StarletteHTTPException) -> JSONResponse:
        """Handle HTTP exceptions with consistent JSON format."""
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(str(exc.detail)),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(_request: Request, exc: RequestValidationError) -> JSONResponse:
        """Schema failures are reported as 400 with field-level issues."""
        return JSONResponse(
            status_code=400,
            content=_error_body("Validation failed", _validation_issues(exc)),
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Catch-all for unhandled exceptions, always JSON."""
        logger.error(
            "unhandled_exception",
            path=request.url.path,
            method=request.method,
            error=str(exc),
            exc_info=exc,
        )
        return JSONResponse(
            status_code=500,
            content=_error_body("Internal server error"),
        )
