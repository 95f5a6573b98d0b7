"""weathernode CLI entrypoint."""

from __future__ import annotations

import click

from weathernode import __version__


@click.group()
@click.version_option(version=__version__, prog_name="weathernode")
def main() -> None:
    """weathernode — weather tools over REST and MCP."""


# Register subcommands
from weathernode.cli_commands import register_commands  # noqa: E402

register_commands(main)

if __name__ == "__main__":
    main()
