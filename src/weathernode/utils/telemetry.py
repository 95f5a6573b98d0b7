"""Tracing for the dispatch path.

Three spans cover a request: ``mcp.dispatch`` around each JSON-RPC call,
``mcp.tool_call`` around each tool invocation and ``provider.fetch``
around each upstream HTTP request. Only ``opentelemetry-api`` is a hard
dependency; until :func:`configure_telemetry` installs the SDK provider
every span is a no-op.
"""

from __future__ import annotations

import sys
from typing import Any

from opentelemetry import trace

# ---------------------------------------------------------------------------
# Semantic attribute keys
# ---------------------------------------------------------------------------

ATTR_RPC_METHOD = "weathernode.rpc.method"
ATTR_RPC_NOTIFICATION = "weathernode.rpc.notification"
ATTR_RPC_ERROR_CODE = "weathernode.rpc.error_code"
ATTR_TOOL_NAME = "weathernode.tool.name"
ATTR_TOOL_IS_ERROR = "weathernode.tool.is_error"
ATTR_PROVIDER_ENDPOINT = "weathernode.provider.endpoint"
ATTR_PROVIDER_LOCATION = "weathernode.provider.location"

_INSTRUMENTATION_NAME = "weathernode"


def get_tracer(name: str | None = None) -> trace.Tracer:
    """Return a :class:`~opentelemetry.trace.Tracer` for *name*.

    If the OpenTelemetry SDK has not been configured the returned tracer
    is a no-op.
    """
    return trace.get_tracer(name or _INSTRUMENTATION_NAME)


def configure_telemetry(
    *,
    service_name: str = "weathernode",
    service_version: str | None = None,
    environment: str | None = None,
    export_to_console: bool = True,
    otlp_endpoint: str | None = None,
) -> None:
    """Install an SDK tracer provider (requires ``weathernode[otel]``).

    Console spans go to stderr, never stdout: the stdio transport owns
    stdout. *otlp_endpoint* adds a batching OTLP/gRPC exporter.

    Raises:
        ImportError: ``opentelemetry-sdk`` (or, for OTLP, the exporter) is
            not installed.
    """
    try:
        from opentelemetry.sdk.resources import Resource  # pyright: ignore[reportMissingImports]
        from opentelemetry.sdk.trace import TracerProvider  # pyright: ignore[reportMissingImports]
        from opentelemetry.sdk.trace.export import (  # pyright: ignore[reportMissingImports]
            BatchSpanProcessor,
            ConsoleSpanExporter,
            SimpleSpanProcessor,
        )
    except ImportError as exc:
        msg = (
            "opentelemetry-sdk is required for configure_telemetry(). "
            "Install it with: pip install weathernode[otel]"
        )
        raise ImportError(msg) from exc

    attributes: dict[str, str] = {"service.name": service_name}
    if service_version:
        attributes["service.version"] = service_version
    if environment:
        attributes["deployment.environment"] = environment
    provider = TracerProvider(resource=Resource.create(attributes))

    if export_to_console:
        provider.add_span_processor(SimpleSpanProcessor(ConsoleSpanExporter(out=sys.stderr)))
    if otlp_endpoint:
        provider.add_span_processor(BatchSpanProcessor(_otlp_exporter(otlp_endpoint)))

    trace.set_tracer_provider(provider)


def _otlp_exporter(endpoint: str) -> Any:
    try:
        from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter  # pyright: ignore[reportMissingImports]
    except ImportError as exc:
        msg = (
            "opentelemetry-exporter-otlp is required for OTLP export. "
            "Install it with: pip install weathernode[otel]"
        )
        raise ImportError(msg) from exc
    return OTLPSpanExporter(endpoint=endpoint)
