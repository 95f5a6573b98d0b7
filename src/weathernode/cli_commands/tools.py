"""``weathernode tools`` — list the weather tools and invoke them locally."""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path
from typing import Any

import click

from weathernode.cli_commands._output import (
    configure_logging,
    console,
    load_cli_settings,
    print_tool_result,
    print_tools_table,
)


@click.group()
def tools() -> None:
    """Inspect and invoke the weather tools."""


@tools.command("list")
def list_tools() -> None:
    """Show the tools served by tools/list, in order."""
    from weathernode.protocols.mcp.tools import WEATHER_TOOLS

    print_tools_table([spec.descriptor for spec in WEATHER_TOOLS])


def _parse_arguments(pairs: tuple[str, ...]) -> dict[str, Any]:
    arguments: dict[str, Any] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            msg = f"expected key=value, got {pair!r}"
            raise click.BadParameter(msg, param_hint="--arg")
        arguments[key] = int(value) if value.isascii() and value.isdigit() else value
    return arguments


@tools.command("call")
@click.argument("name")
@click.option(
    "--arg", "-a", "pairs", multiple=True, help="Tool argument as key=value (repeatable)."
)
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="YAML settings file.",
)
def call(name: str, pairs: tuple[str, ...], config: Path | None) -> None:
    """Invoke tool NAME against the configured provider and print its result."""
    from weathernode.protocols.errors import ToolExecutionError
    from weathernode.protocols.mcp.tools import ToolRegistry
    from weathernode.providers.weatherapi import WeatherAPIClient

    arguments = _parse_arguments(pairs)
    settings = load_cli_settings(config)
    configure_logging(settings.log_level)

    async def _call() -> Any:
        async with WeatherAPIClient.from_settings(settings) as provider:
            return await ToolRegistry(provider, indent=2).call(name, arguments)

    try:
        result = asyncio.run(_call())
    except ToolExecutionError as exc:
        console.print(f"[red]{exc}[/red]")
        sys.exit(1)

    print_tool_result(result)
