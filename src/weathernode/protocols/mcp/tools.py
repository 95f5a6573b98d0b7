"""ToolRegistry — the static table of weather tools served over MCP.

Each entry pairs an immutable :class:`ToolDescriptor` with a coroutine that
maps the call's arguments onto a :class:`WeatherProvider` method. The
registry owns the failure policy for invocations: unknown names, empty
provider results and provider exceptions all surface as
:class:`ToolExecutionError` with a human-readable detail.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel

from weathernode.protocols.errors import ToolExecutionError, ToolNotFoundError
from weathernode.protocols.mcp.models import ToolDescriptor, ToolResult
from weathernode.utils.telemetry import ATTR_TOOL_IS_ERROR, ATTR_TOOL_NAME, get_tracer

if TYPE_CHECKING:
    from weathernode.providers.base import WeatherProvider

logger = logging.getLogger(__name__)
_tracer = get_tracer(__name__)

DEFAULT_FORECAST_DAYS = 3

ToolHandler = Callable[["WeatherProvider", dict[str, Any]], Awaitable[Any]]


@dataclass(frozen=True)
class ToolSpec:
    """A registered tool: its descriptor and how to invoke it.

    ``kind`` and ``location_arg`` build the message reported when the
    provider returns no data.
    """

    descriptor: ToolDescriptor
    handler: ToolHandler
    kind: str = "weather"
    location_arg: str | None = "city"

    @property
    def name(self) -> str:
        return self.descriptor.name

    def failure_message(self, arguments: dict[str, Any]) -> str:
        location = arguments.get(self.location_arg) if self.location_arg else None
        return f"Could not fetch {self.kind} data for {location or 'default location'}"


async def _get_weather(provider: WeatherProvider, args: dict[str, Any]) -> Any:
    return await provider.fetch_current(args.get("city"))


async def _get_forecast(provider: WeatherProvider, args: dict[str, Any]) -> Any:
    days = args.get("days")
    if days is None:
        days = DEFAULT_FORECAST_DAYS
    return await provider.fetch_forecast(args.get("city"), days)


async def _get_local_weather(provider: WeatherProvider, args: dict[str, Any]) -> Any:
    return await provider.fetch_current()


_CITY_PROPERTY = {
    "type": "string",
    "description": "City name (optional - uses DEFAULT_LOCATION if not provided)",
}

WEATHER_TOOLS: tuple[ToolSpec, ...] = (
    ToolSpec(
        descriptor=ToolDescriptor(
            name="get_weather",
            description="Get current weather for a city",
            input_schema={"type": "object", "properties": {"city": _CITY_PROPERTY}},
        ),
        handler=_get_weather,
    ),
    ToolSpec(
        descriptor=ToolDescriptor(
            name="get_forecast",
            description="Get weather forecast for a city",
            input_schema={
                "type": "object",
                "properties": {
                    "city": _CITY_PROPERTY,
                    "days": {
                        "type": "integer",
                        "description": "Number of days (1-10)",
                        "minimum": 1,
                        "maximum": 10,
                        "default": DEFAULT_FORECAST_DAYS,
                    },
                },
            },
        ),
        handler=_get_forecast,
        kind="forecast",
    ),
    ToolSpec(
        descriptor=ToolDescriptor(
            name="get_local_weather",
            description="Get current weather for your default location",
            input_schema={"type": "object", "properties": {}},
        ),
        handler=_get_local_weather,
        location_arg=None,
    ),
)


class ToolRegistry:
    """Name-to-tool table bound to one provider.

    Usage::

        registry = ToolRegistry(provider)
        registry.list_tools()                       # declaration order
        result = await registry.call("get_weather", {"city": "London"})

    *indent* controls how records are rendered into result text; ``None``
    gives compact JSON.
    """

    def __init__(
        self,
        provider: WeatherProvider,
        tools: Sequence[ToolSpec] = WEATHER_TOOLS,
        *,
        indent: int | None = None,
    ) -> None:
        self._provider = provider
        self._indent = indent
        self._tools: dict[str, ToolSpec] = {}
        for spec in tools:
            if spec.name in self._tools:
                msg = f"Duplicate tool name: {spec.name}"
                raise ValueError(msg)
            self._tools[spec.name] = spec

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)

    @property
    def provider(self) -> WeatherProvider:
        return self._provider

    def names(self) -> list[str]:
        return list(self._tools)

    def descriptors(self) -> list[ToolDescriptor]:
        return [spec.descriptor for spec in self._tools.values()]

    def list_tools(self) -> list[dict[str, Any]]:
        """Descriptors in wire shape, in declaration order."""
        return [descriptor.to_wire() for descriptor in self.descriptors()]

    async def call(self, name: Any, arguments: dict[str, Any]) -> ToolResult:
        """Invoke tool *name* and wrap its record in a :class:`ToolResult`.

        Raises:
            ToolExecutionError: The tool is unknown, the provider returned
                nothing, or the provider raised.
        """
        with _tracer.start_as_current_span("mcp.tool_call") as span:
            span.set_attribute(ATTR_TOOL_NAME, str(name))
            try:
                result = await self._invoke(name, arguments)
            except ToolExecutionError:
                span.set_attribute(ATTR_TOOL_IS_ERROR, True)
                raise
            span.set_attribute(ATTR_TOOL_IS_ERROR, False)
            return result

    async def _invoke(self, name: Any, arguments: dict[str, Any]) -> ToolResult:
        try:
            spec = self._resolve(name)
        except ToolNotFoundError as exc:
            raise ToolExecutionError(name, str(exc)) from exc

        try:
            record = await spec.handler(self._provider, arguments)
        except Exception as exc:
            detail = str(exc) or type(exc).__name__
            logger.warning("Tool %s failed: %s", spec.name, detail)
            raise ToolExecutionError(spec.name, detail) from exc

        if not record:
            raise ToolExecutionError(spec.name, spec.failure_message(arguments))

        return ToolResult.from_text(self.render(record))

    def _resolve(self, name: Any) -> ToolSpec:
        spec = self._tools.get(name) if isinstance(name, str) else None
        if spec is None:
            raise ToolNotFoundError(name)
        return spec

    def render(self, record: Any) -> str:
        """Serialize *record* to JSON text, keeping its key order."""
        data = record.model_dump(mode="json") if isinstance(record, BaseModel) else record
        if self._indent is None:
            return json.dumps(data, separators=(",", ":"), ensure_ascii=False)
        return json.dumps(data, indent=self._indent, ensure_ascii=False)
