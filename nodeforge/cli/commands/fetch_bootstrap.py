"""``nodeforge fetch-bootstrap``: download a network's bootstrap file.

Saves the artifact under its own network identity so several networks'
bootstrap files can sit side by side in the data directory.
"""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape

from nodeforge.bridge.peer_directory import BootstrapDownloadError, download_bootstrap
from nodeforge.core.identity import derive_network_identity

console = Console()


def fetch_bootstrap_cmd(
    origin: str = typer.Argument(..., help="Origin node URL, e.g. http://testnet.trinci.net"),
    data_dir: Path = typer.Option(
        Path("data"),
        "--data-dir",
        "-d",
        help="Directory to store the bootstrap file in.",
    ),
    timeout: float = typer.Option(30.0, "--timeout", help="HTTP timeout in seconds."),
) -> None:
    """Fetch ``<origin>/api/v1/bootstrap`` and store it as ``<identity>.bin``."""
    try:
        data = download_bootstrap(origin, timeout=timeout)
    except BootstrapDownloadError as exc:
        console.print(f"[bold red]{escape(str(exc))}[/bold red]")
        raise typer.Exit(code=1) from exc

    identity = derive_network_identity(data)
    data_dir.mkdir(parents=True, exist_ok=True)
    target = data_dir / f"{identity}.bin"
    target.write_bytes(data)

    console.print(f"[bold green]Bootstrap retrieved[/bold green] ({len(data):,} bytes)")
    console.print(f"[bold]Identity:[/bold] {identity}")
    console.print(f"[bold]Saved to:[/bold] {escape(str(target))}")
