"""FastAPI application factory."""

from __future__ import annotations

import logging
import time
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from weathernode import __version__
from weathernode.config import Settings, load_settings
from weathernode.protocols.mcp.dispatcher import JsonRpcDispatcher
from weathernode.protocols.mcp.models import ServerInfo
from weathernode.protocols.mcp.tools import ToolRegistry
from weathernode.providers.base import WeatherProvider
from weathernode.providers.weatherapi import WeatherAPIClient
from weathernode.runtime.ratelimit import SlidingWindowLimiter
from weathernode.server import api, mcp, monitoring
from weathernode.server.middleware import (
    install_exception_handlers,
    request_logger,
    security_headers,
)
from weathernode.server.monitoring import RequestLog

logger = logging.getLogger(__name__)

SERVICE_NAME = "weathernode"


def build_dispatcher(
    provider: WeatherProvider,
    settings: Settings,
    *,
    stream: bool = False,
) -> JsonRpcDispatcher:
    """Dispatcher for one transport; the stdio stream renders records indented."""
    registry = ToolRegistry(provider, indent=2 if stream else None)
    return JsonRpcDispatcher(
        registry,
        server_info=ServerInfo(name=SERVICE_NAME, version=__version__),
        tool_errors=settings.stream_tool_errors if stream else settings.http_tool_errors,
    )


def create_app(
    settings: Settings | None = None,
    *,
    provider: WeatherProvider | None = None,
    clock: Callable[[], float] | None = None,
) -> FastAPI:
    """Build the HTTP application.

    *provider* replaces the WeatherAPI.com client (tests pass stubs);
    *clock* feeds both rate limiters, in milliseconds.
    """
    settings = settings or load_settings()
    owns_provider = provider is None
    if provider is None:
        provider = WeatherAPIClient.from_settings(settings)

    @asynccontextmanager
    async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
        logger.info(
            "%s started (rest=/api, mcp=/mcp, health=/api/health)", SERVICE_NAME
        )
        yield
        if owns_provider and isinstance(provider, WeatherAPIClient):
            await provider.aclose()

    app = FastAPI(
        title="weathernode",
        description="Weather tools over REST and the Model Context Protocol.",
        version=__version__,
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.provider = provider
    app.state.dispatcher = build_dispatcher(provider, settings)
    app.state.api_limiter = SlidingWindowLimiter.from_config(settings.api_rate_limit, clock=clock)
    app.state.mcp_limiter = SlidingWindowLimiter.from_config(settings.mcp_rate_limit, clock=clock)
    app.state.request_log = RequestLog(settings.request_log_size)
    app.state.started_at = time.monotonic()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.middleware("http")(security_headers)
    app.middleware("http")(request_logger)
    install_exception_handlers(app)

    app.include_router(api.router)
    app.include_router(mcp.router)
    app.include_router(monitoring.router)
    app.add_api_route("/", _service_index, methods=["GET"])

    return app


async def _service_index() -> dict[str, Any]:
    return {
        "service": SERVICE_NAME,
        "version": __version__,
        "endpoints": {"rest": "/api", "mcp": "/mcp", "health": "/api/health"},
        "documentation": {
            "rest": {
                "weather": "GET /api/weather?city=London",
                "forecast": "GET /api/forecast?city=London&days=3",
                "local": "GET /api/local",
            },
            "mcp": {
                "description": "POST /mcp with MCP protocol messages",
                "tools": ["get_weather", "get_forecast", "get_local_weather"],
            },
        },
    }
