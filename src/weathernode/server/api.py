"""REST routes under ``/api``, backed by the same provider as the MCP tools."""

from __future__ import annotations

import logging
import time
from collections.abc import Awaitable
from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from weathernode import __version__
from weathernode.providers.base import WeatherProvider  # noqa: TC001
from weathernode.server.middleware import InvalidQueryError, rate_limit

logger = logging.getLogger(__name__)

SERVICE_NAME = "weathernode"


class WeatherQuery(BaseModel):
    """Accepted query parameters for the weather routes."""

    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    city: str | None = Field(default=None, min_length=1, max_length=100)
    days: int | None = Field(default=None, ge=1, le=10)


def weather_query(request: Request) -> WeatherQuery:
    try:
        return WeatherQuery.model_validate(dict(request.query_params))
    except ValidationError as exc:
        details = [
            f"{'.'.join(str(part) for part in err['loc']) or 'query'}: {err['msg']}"
            for err in exc.errors()
        ]
        raise InvalidQueryError(details) from exc


def get_provider(request: Request) -> WeatherProvider:
    return request.app.state.provider


router = APIRouter(prefix="/api", tags=["weather"], dependencies=[rate_limit("api_limiter")])


async def _fetch(call: Awaitable[Any], kind: str, location: str | None, action: str) -> Any:
    """Await a provider call and map failures onto the REST error shapes."""
    try:
        record = await call
    except Exception as exc:
        logger.error("Failed to fetch %s for %s: %s", action, location or "default location", exc)
        return JSONResponse(status_code=500, content={"error": f"Failed to fetch {action}: {exc}"})

    if not record:
        return JSONResponse(
            status_code=404,
            content={"error": f"Could not fetch {kind} data for {location or 'default location'}"},
        )
    return record.model_dump(mode="json") if isinstance(record, BaseModel) else record


@router.get("/weather")
async def current_weather(
    query: WeatherQuery = Depends(weather_query),
    provider: WeatherProvider = Depends(get_provider),
) -> Any:
    """GET /api/weather?city=London"""
    return await _fetch(provider.fetch_current(query.city), "weather", query.city, "weather")


@router.get("/forecast")
async def forecast(
    query: WeatherQuery = Depends(weather_query),
    provider: WeatherProvider = Depends(get_provider),
) -> Any:
    """GET /api/forecast?city=London&days=3"""
    days = query.days if query.days is not None else 3
    return await _fetch(
        provider.fetch_forecast(query.city, days), "forecast", query.city, "forecast"
    )


@router.get("/local")
async def local_weather(
    _: WeatherQuery = Depends(weather_query),
    provider: WeatherProvider = Depends(get_provider),
) -> Any:
    return await _fetch(provider.fetch_local(), "weather", None, "local weather")


def _health(request: Request) -> dict[str, Any]:
    state = request.app.state
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "service": SERVICE_NAME,
        "version": __version__,
        "uptime": round(time.monotonic() - state.started_at, 3),
        "environment": state.settings.environment,
    }


@router.get("/health")
async def health(request: Request, _: WeatherQuery = Depends(weather_query)) -> dict[str, Any]:
    return _health(request)


@router.get("/health/detailed")
async def health_detailed(
    request: Request, _: WeatherQuery = Depends(weather_query)
) -> dict[str, Any]:
    settings = request.app.state.settings
    return {
        **_health(request),
        "features": {
            "weatherAPI": bool(settings.weather_api_key),
            "defaultLocation": settings.default_location,
            "temperatureUnit": settings.temp_unit,
        },
        "endpoints": {"rest": "/api", "mcp": "/mcp", "health": "/api/health"},
    }
