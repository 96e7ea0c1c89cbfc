"""Rich terminal renderer for launch progress.

Every phase (discovery, negotiation, identity derivation...) prints one
status line whatever its outcome, so a degraded launch can be diagnosed
after the fact.

Color scheme
------------
- green       : OK
- yellow      : DEGRADED (step failed, launch continues)
- dim         : SKIPPED
- bold red    : FAILED (launch aborted)
"""

from __future__ import annotations

from enum import Enum

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from nodeforge.models.launch import LaunchParameters, NodeAddress


class PhaseStatus(str, Enum):
    OK = "ok"
    DEGRADED = "degraded"
    SKIPPED = "skipped"
    FAILED = "failed"


_STATUS_ICONS: dict[PhaseStatus, str] = {
    PhaseStatus.OK: "[green]OK[/green]",
    PhaseStatus.DEGRADED: "[yellow]DEGRADED[/yellow]",
    PhaseStatus.SKIPPED: "[dim]SKIPPED[/dim]",
    PhaseStatus.FAILED: "[bold red]FAILED[/bold red]",
}


_MISSING = "[dim]-[/dim]"


def _cell(value: object, missing: str = _MISSING) -> str:
    """Escape *value* for a table cell; ``missing`` when empty."""
    if value is None or value == "":
        return missing
    return escape(str(value))


class LaunchRenderer:
    """Renders launch phases and the final parameter set.

    Parameters
    ----------
    console:
        Rich Console instance.  A new one is created if not provided.
    """

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    def phase(self, label: str, status: PhaseStatus, detail: str = "") -> None:
        """Print a single phase status line."""
        line = f"{_STATUS_ICONS[status]} [bold]{escape(label)}[/bold]"
        if detail:
            line += f": {escape(detail)}"
        self.console.print(line)

    def render_parameters(self, params: LaunchParameters, identity: str | None = None) -> Panel:
        """Render the assembled launch parameters as a Panel."""
        table = Table(show_header=False, box=None, padding=(0, 2))
        table.add_column("Parameter", style="bold cyan")
        table.add_column("Value")

        if identity:
            table.add_row("Network identity", _cell(identity))
        table.add_row("Local IP", _cell(params.local_ip))
        table.add_row("Public IP", _cell(params.public_ip))
        table.add_row("HTTP port", str(params.http_port))
        table.add_row("P2P port", _cell(params.p2p_port))
        table.add_row("Bootstrap path", _cell(params.bootstrap_path))
        table.add_row("P2P bootstrap", _cell(params.p2p_bootstrap_addr))
        table.add_row("DB path", _cell(params.db_path))
        if params.autoreplicant_origin:
            table.add_row("Replicating from", _cell(params.autoreplicant_origin))
        if params.offline:
            table.add_row("Offline", "[yellow]yes[/yellow]")
        if params.test_mode:
            table.add_row("Test mode", "[yellow]yes[/yellow]")

        return Panel(
            table,
            title="[bold]Launch Parameters[/bold]",
            border_style="green",
            padding=(1, 2),
        )

    def print_parameters(self, params: LaunchParameters, identity: str | None = None) -> None:
        self.console.print()
        self.console.print(self.render_parameters(params, identity))
        self.console.print()

    def render_address(self, address: NodeAddress) -> Table:
        """Render discovered address facts as a Table."""
        table = Table(show_header=True, header_style="bold cyan", expand=True)
        table.add_column("Fact", min_width=14)
        table.add_column("Value")
        table.add_row("Local IPs", _cell(", ".join(address.local), "[yellow]none[/yellow]"))
        table.add_row("Public IP", _cell(address.public, "[yellow]unknown[/yellow]"))
        table.add_row(
            "Mapped port",
            str(address.mapped_port) if address.mapped_port else "[yellow]none[/yellow]",
        )
        table.add_row("Endpoint", _cell(address.public_endpoint))
        return table

    def warn(self, message: str) -> None:
        """Print an operator-facing warning; *message* is never parsed as markup."""
        self.console.print(f"[yellow]{escape(message)}[/yellow]")

    def print_failure(self, error: Exception) -> None:
        self.console.print(f"[bold red]Launch aborted:[/bold red] {escape(str(error))}")

    def print_aborted(self) -> None:
        self.console.print("[dim]Quit requested, no node launched.[/dim]")
