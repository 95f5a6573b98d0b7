"""Shared CLI output helpers."""

from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING

from rich.console import Console
from rich.table import Table

if TYPE_CHECKING:
    from pathlib import Path

    from weathernode.config import Settings
    from weathernode.protocols.mcp.models import ToolDescriptor, ToolResult

console = Console()
err_console = Console(stderr=True)


def load_cli_settings(config: Path | None) -> Settings:
    """Load settings for a command, exiting with a message on failure."""
    from weathernode.config import ConfigError, load_settings

    try:
        return load_settings(config)
    except ConfigError as exc:
        err_console.print(f"[red]Configuration error:[/red] {exc}")
        sys.exit(1)


def configure_logging(level: str) -> None:
    """Send log records to stderr so stdout stays free for protocol traffic."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def setup_telemetry(settings: Settings, *, console_spans: bool) -> None:
    """Install tracing when console spans are requested or an OTLP endpoint is set."""
    if not console_spans and not settings.otlp_endpoint:
        return

    from weathernode import __version__
    from weathernode.utils.telemetry import configure_telemetry

    try:
        configure_telemetry(
            service_version=__version__,
            environment=settings.environment,
            export_to_console=console_spans,
            otlp_endpoint=settings.otlp_endpoint,
        )
    except ImportError as exc:
        err_console.print(f"[red]Telemetry error:[/red] {exc}")
        sys.exit(1)


def print_tools_table(tools: list[ToolDescriptor]) -> None:
    """Pretty-print tool descriptors as a table."""
    table = Table(title="Weather Tools")
    table.add_column("Name", style="cyan")
    table.add_column("Description")
    table.add_column("Arguments")

    for tool in tools:
        properties = tool.input_schema.get("properties", {})
        table.add_row(tool.name, _truncate(tool.description), ", ".join(properties) or "-")

    console.print(table)


def print_tool_result(result: ToolResult) -> None:
    """Print a tool result, as JSON when the text parses."""
    import json

    text = result.text
    try:
        json.loads(text)
    except ValueError:
        console.print(text)
    else:
        console.print_json(text)


def _truncate(text: str, max_len: int = 80) -> str:
    if len(text) <= max_len:
        return text
    return text[: max_len - 3] + "..."
