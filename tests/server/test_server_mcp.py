"""Tests for the ``POST /mcp`` endpoint."""

from __future__ import annotations

import json
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import httpx
from fastapi import FastAPI

from weathernode.config import Settings
from weathernode.protocols.mcp.models import ToolErrorStyle
from weathernode.providers.models import WeatherData
from weathernode.runtime.models import RateLimitConfig
from weathernode.server.app import create_app


def _make_provider() -> MagicMock:
    provider = MagicMock()
    provider.fetch_current = AsyncMock(
        return_value=WeatherData(
            city="London",
            country="United Kingdom",
            temperature=15,
            temperature_unit="C",
            feels_like=14,
            description="Sunny",
            humidity=60,
            pressure=1015,
            wind_speed=8,
        )
    )
    provider.fetch_forecast = AsyncMock(return_value=None)
    provider.fetch_local = AsyncMock(return_value=None)
    return provider


def _make_app(provider: MagicMock | None = None, **overrides: Any) -> FastAPI:
    return create_app(
        Settings(**overrides), provider=provider or _make_provider(), clock=lambda: 0.0
    )


async def _post(app: FastAPI, body: Any, *, raw: bytes | None = None) -> httpx.Response:
    async with httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app), base_url="http://test"
    ) as client:
        if raw is not None:
            return await client.post(
                "/mcp", content=raw, headers={"Content-Type": "application/json"}
            )
        return await client.post("/mcp", json=body)


class TestMcpEndpoint:
    async def test_initialize(self) -> None:
        resp = await _post(_make_app(), {"jsonrpc": "2.0", "id": 1, "method": "initialize"})
        assert resp.status_code == 200
        body = resp.json()
        assert body["jsonrpc"] == "2.0"
        assert body["id"] == 1
        assert body["result"]["protocolVersion"] == "2024-11-05"
        assert body["result"]["capabilities"] == {"tools": {}}

    async def test_tools_list(self) -> None:
        resp = await _post(_make_app(), {"jsonrpc": "2.0", "id": "a", "method": "tools/list"})
        names = [tool["name"] for tool in resp.json()["result"]["tools"]]
        assert names == ["get_weather", "get_forecast", "get_local_weather"]

    async def test_tools_call_compact_text(self) -> None:
        resp = await _post(
            _make_app(),
            {
                "jsonrpc": "2.0",
                "id": 2,
                "method": "tools/call",
                "params": {"name": "get_weather", "arguments": {"city": "London"}},
            },
        )
        text = resp.json()["result"]["content"][0]["text"]
        assert text.startswith('{"city":"London"')
        assert json.loads(text)["temperature"] == 15

    async def test_tool_failure_is_top_level_error(self) -> None:
        resp = await _post(
            _make_app(),
            {
                "jsonrpc": "2.0",
                "id": 3,
                "method": "tools/call",
                "params": {"name": "get_forecast", "arguments": {"city": "Nowhere"}},
            },
        )
        assert resp.status_code == 200
        assert resp.json() == {
            "jsonrpc": "2.0",
            "id": 3,
            "error": {
                "code": -32603,
                "message": "Tool execution failed: Could not fetch forecast data for Nowhere",
            },
        }

    async def test_tool_failure_result_style(self) -> None:
        app = _make_app(http_tool_errors=ToolErrorStyle.RESULT)
        resp = await _post(
            app,
            {"jsonrpc": "2.0", "id": 3, "method": "tools/call", "params": {"name": "nope"}},
        )
        result = resp.json()["result"]
        assert result["isError"] is True
        assert result["content"][0]["text"] == "Error: Unknown tool: nope"

    async def test_unknown_method(self) -> None:
        resp = await _post(_make_app(), {"jsonrpc": "2.0", "id": 4, "method": "resources/list"})
        assert resp.status_code == 200
        assert resp.json()["error"] == {"code": -32601, "message": "Method not found"}

    async def test_notification_gets_empty_200(self) -> None:
        provider = _make_provider()
        resp = await _post(
            _make_app(provider),
            {
                "jsonrpc": "2.0",
                "method": "tools/call",
                "params": {"name": "get_weather", "arguments": {}},
            },
        )
        assert resp.status_code == 200
        assert resp.content == b""
        provider.fetch_current.assert_not_awaited()

    async def test_null_id_is_a_notification(self) -> None:
        # Accepted as a notification rather than rejected as a parse error.
        resp = await _post(_make_app(), {"jsonrpc": "2.0", "id": None, "method": "tools/list"})
        assert resp.status_code == 200
        assert resp.content == b""

    async def test_float_ids_are_echoed(self) -> None:
        for request_id in (1.0, 1.5):
            resp = await _post(
                _make_app(), {"jsonrpc": "2.0", "id": request_id, "method": "tools/list"}
            )
            assert resp.status_code == 200
            body = resp.json()
            assert body["id"] == request_id
            assert isinstance(body["id"], float)
            assert "result" in body

    async def test_whitespace_in_method_is_trimmed(self) -> None:
        resp = await _post(_make_app(), {"jsonrpc": "2.0", "id": 5, "method": " tools/list "})
        assert "result" in resp.json()


class TestMcpParseErrors:
    async def test_invalid_json(self) -> None:
        resp = await _post(_make_app(), None, raw=b"{oops")
        assert resp.status_code == 400
        assert resp.json() == {
            "jsonrpc": "2.0",
            "id": None,
            "error": {
                "code": -32700,
                "message": "Parse error",
                "data": ["Request body must be valid JSON"],
            },
        }

    async def test_missing_method_echoes_id(self) -> None:
        resp = await _post(_make_app(), {"jsonrpc": "2.0", "id": 8})
        assert resp.status_code == 400
        body = resp.json()
        assert body["id"] == 8
        assert body["error"]["code"] == -32700
        assert body["error"]["data"]

    async def test_wrong_version(self) -> None:
        resp = await _post(_make_app(), {"jsonrpc": "1.0", "id": 1, "method": "initialize"})
        assert resp.status_code == 400

    async def test_array_body(self) -> None:
        resp = await _post(_make_app(), [{"jsonrpc": "2.0", "id": 1, "method": "initialize"}])
        assert resp.status_code == 400
        assert resp.json()["id"] is None

    async def test_params_must_be_object(self) -> None:
        resp = await _post(
            _make_app(), {"jsonrpc": "2.0", "id": 1, "method": "tools/call", "params": "x"}
        )
        assert resp.status_code == 400


class TestMcpRateLimit:
    async def test_429_after_budget(self) -> None:
        app = _make_app(mcp_rate_limit=RateLimitConfig(window_ms=30_000, max_requests=1))
        message = {"jsonrpc": "2.0", "id": 1, "method": "tools/list"}
        assert (await _post(app, message)).status_code == 200

        resp = await _post(app, message)
        assert resp.status_code == 429
        assert resp.headers["Retry-After"] == "30"
        assert resp.json()["retryAfter"] == 30

    async def test_notifications_count_against_budget(self) -> None:
        app = _make_app(mcp_rate_limit=RateLimitConfig(window_ms=30_000, max_requests=1))
        await _post(app, {"jsonrpc": "2.0", "method": "notifications/initialized"})
        resp = await _post(app, {"jsonrpc": "2.0", "id": 1, "method": "tools/list"})
        assert resp.status_code == 429
