"""HTTP middleware, shared dependencies and exception handlers."""

from __future__ import annotations

import logging
import time
from collections.abc import Awaitable, Callable
from datetime import datetime, timezone
from http import HTTPStatus
from typing import Any

from fastapi import Depends, FastAPI, Request, Response
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from weathernode.runtime.errors import AdmissionDeniedError
from weathernode.server.monitoring import RequestLogEntry

logger = logging.getLogger(__name__)

CallNext = Callable[[Request], Awaitable[Response]]

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "X-XSS-Protection": "1; mode=block",
    "Referrer-Policy": "strict-origin-when-cross-origin",
    "Permissions-Policy": "geolocation=(), microphone=(), camera=()",
}


class InvalidQueryError(Exception):
    """Query parameters failed validation."""

    def __init__(self, details: list[str]) -> None:
        self.details = details
        super().__init__("Invalid query parameters")


def client_key(request: Request) -> str:
    """Identity the rate limiters key on: the peer address."""
    return request.client.host if request.client else "unknown"


def rate_limit(limiter_attr: str) -> Any:
    """Dependency that admits the request through ``app.state.<limiter_attr>``."""

    async def _admit(request: Request) -> None:
        getattr(request.app.state, limiter_attr).admit(client_key(request))

    return Depends(_admit)


async def security_headers(request: Request, call_next: CallNext) -> Response:
    response = await call_next(request)
    response.headers.update(SECURITY_HEADERS)
    return response


async def request_logger(request: Request, call_next: CallNext) -> Response:
    start = time.perf_counter()
    response = await call_next(request)
    elapsed_ms = round((time.perf_counter() - start) * 1000, 2)

    entry = RequestLogEntry(
        timestamp=datetime.now(timezone.utc).isoformat(),
        method=request.method,
        url=str(request.url.path) + (f"?{request.url.query}" if request.url.query else ""),
        ip=client_key(request),
        user_agent=request.headers.get("user-agent", "unknown"),
        status_code=response.status_code,
        response_time_ms=elapsed_ms,
        error=_status_phrase(response.status_code) if response.status_code >= 400 else None,
    )
    request.app.state.request_log.record(entry)
    logger.debug("%s %s - %d (%sms)", entry.method, entry.url, entry.status_code, elapsed_ms)
    return response


def _status_phrase(status_code: int) -> str:
    try:
        return HTTPStatus(status_code).phrase
    except ValueError:
        return "Unknown error"


def install_exception_handlers(app: FastAPI) -> None:
    """Map admission denials, query errors and unknown routes onto JSON bodies."""

    @app.exception_handler(AdmissionDeniedError)
    async def _admission_denied(request: Request, exc: AdmissionDeniedError) -> JSONResponse:
        return JSONResponse(
            status_code=429,
            content={
                "error": "Too many requests",
                "message": str(exc),
                "retryAfter": exc.retry_after,
            },
            headers={"Retry-After": str(exc.retry_after)},
        )

    @app.exception_handler(InvalidQueryError)
    async def _invalid_query(request: Request, exc: InvalidQueryError) -> JSONResponse:
        return JSONResponse(
            status_code=400,
            content={"error": str(exc), "details": exc.details},
        )

    @app.exception_handler(StarletteHTTPException)
    async def _http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        if exc.status_code == 404:
            content = {
                "error": "Not found",
                "message": f"Route {request.method} {request.url.path} not found",
            }
        else:
            content = {"error": _status_phrase(exc.status_code), "message": str(exc.detail)}
        return JSONResponse(status_code=exc.status_code, content=content, headers=exc.headers)

    @app.exception_handler(Exception)
    async def _unhandled(request: Request, exc: Exception) -> JSONResponse:
        logger.error(
            "Unhandled error on %s %s", request.method, request.url.path, exc_info=exc
        )
        settings = request.app.state.settings
        return JSONResponse(
            status_code=500,
            content={
                "error": "Internal server error",
                "message": str(exc) if settings.is_development else "Something went wrong",
            },
        )
