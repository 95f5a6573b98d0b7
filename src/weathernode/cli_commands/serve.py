"""Run the HTTP server or the stdio MCP server."""

from __future__ import annotations

import asyncio
from pathlib import Path

import click

from weathernode.cli_commands._output import configure_logging, load_cli_settings, setup_telemetry

_config_option = click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="YAML settings file (environment variables override it).",
)


@click.command()
@click.option("--host", default=None, help="Interface to bind (default from settings).")
@click.option("--port", type=int, default=None, help="Port to listen on (default from settings).")
@click.option("--telemetry", is_flag=True, help="Print OpenTelemetry spans to stderr.")
@_config_option
def serve(host: str | None, port: int | None, telemetry: bool, config: Path | None) -> None:
    """Run the HTTP server (REST under /api, MCP at /mcp)."""
    import uvicorn

    from weathernode.server.app import create_app

    settings = load_cli_settings(config)
    configure_logging(settings.log_level)
    setup_telemetry(settings, console_spans=telemetry)

    app = create_app(settings)
    uvicorn.run(
        app,
        host=host or settings.host,
        port=port or settings.port,
        log_level=settings.log_level.lower(),
    )


@click.command()
@_config_option
def stdio(config: Path | None) -> None:
    """Serve MCP over stdin/stdout (newline-delimited JSON-RPC)."""
    from weathernode.protocols.mcp.transport import serve_stdio
    from weathernode.providers.weatherapi import WeatherAPIClient
    from weathernode.runtime.ratelimit import SlidingWindowLimiter
    from weathernode.server.app import build_dispatcher

    settings = load_cli_settings(config)
    configure_logging(settings.log_level)
    setup_telemetry(settings, console_spans=False)

    async def _run() -> None:
        async with WeatherAPIClient.from_settings(settings) as provider:
            dispatcher = build_dispatcher(provider, settings, stream=True)
            limiter = SlidingWindowLimiter.from_config(settings.mcp_rate_limit)
            await serve_stdio(dispatcher, limiter=limiter)

    try:
        asyncio.run(_run())
    except KeyboardInterrupt:
        pass
