"""``nodeforge identity``: print the network identity of a bootstrap file."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape

from nodeforge.core.identity import legacy_hex_identity, read_bootstrap_artifact
from nodeforge.core.preflight import PreflightError

console = Console()


def identity_cmd(
    path: Path = typer.Argument(..., help="Bootstrap file to hash."),
    legacy: bool = typer.Option(
        False,
        "--legacy",
        help="Also print the raw hex digest used by older deployments.",
    ),
) -> None:
    """Derive the content-addressed network identity of a bootstrap file.

    The identity is base58(sha2-256 multihash) and names the node's
    storage directory.
    """
    try:
        artifact = read_bootstrap_artifact(path)
    except PreflightError as exc:
        console.print(f"[bold red]{escape(str(exc))}[/bold red]")
        raise typer.Exit(code=exc.exit_code) from exc

    if legacy:
        console.print(f"[bold]Identity:[/bold] {artifact.identity}")
        console.print(f"[bold]Legacy:[/bold]   {legacy_hex_identity(artifact.data)}")
    else:
        # Plain output for scripting
        console.print(artifact.identity, highlight=False)
