"""Main Typer application: imports and registers all CLI commands.

Entry point: ``nodeforge`` (configured via pyproject.toml project.scripts).

Commands: start, offline, identity, discover, fetch-bootstrap.
"""

from __future__ import annotations

import logging

import typer
from rich.logging import RichHandler

from nodeforge.cli.commands.discover import discover_cmd
from nodeforge.cli.commands.fetch_bootstrap import fetch_bootstrap_cmd
from nodeforge.cli.commands.identity import identity_cmd
from nodeforge.cli.commands.start import offline_cmd, start_cmd
from nodeforge.config import LauncherConfig

app = typer.Typer(
    name="nodeforge",
    help="nodeforge: bootstrap identity and launch orchestrator for blockchain nodes.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)


def configure_logging(level: str) -> None:
    """Route stdlib logging through Rich at *level*."""
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=False, show_path=False)],
        force=True,
    )


@app.callback()
def main_callback(
    log_level: str = typer.Option(
        None,
        "--log-level",
        help="Logger level (default from NODEFORGE_LOG_LEVEL or INFO).",
    ),
) -> None:
    """Bootstrap identity and launch orchestrator."""
    configure_logging(log_level or LauncherConfig().log_level)


# Register subcommands
app.command(name="start", help="Select a join mode and launch the node.")(start_cmd)
app.command(name="offline", help="Launch a local offline node.")(offline_cmd)
app.command(name="identity", help="Print the network identity of a bootstrap file.")(identity_cmd)
app.command(name="discover", help="Show local/public addresses without launching.")(discover_cmd)
app.command(name="fetch-bootstrap", help="Download a network's bootstrap file.")(fetch_bootstrap_cmd)


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
