"""``nodeforge discover``: report this host's reachability without launching.

Runs the same local/public discovery and (optionally) the same UPnP
negotiation the launcher would, and prints the resulting address facts.
"""

from __future__ import annotations

import typer
from rich.console import Console
from rich.panel import Panel

from nodeforge.bridge.discovery import local_addresses, public_address
from nodeforge.bridge.echo import build_echo_service
from nodeforge.bridge.upnp import UpnpNegotiator
from nodeforge.config import LauncherConfig
from nodeforge.core.preflight import PreflightError, require_tool, required_tools
from nodeforge.models.launch import NodeAddress
from nodeforge.monitor.renderer import LaunchRenderer

console = Console()


def discover_cmd(
    negotiate: bool = typer.Option(
        False,
        "--negotiate/--no-negotiate",
        help="Also ask the gateway for a P2P port mapping.",
    ),
) -> None:
    """Show local IPs, public IP and (optionally) a negotiated P2P port."""
    config = LauncherConfig()
    renderer = LaunchRenderer(console=console)

    try:
        for tool in required_tools(config):
            require_tool(tool)
    except PreflightError as exc:
        renderer.print_failure(exc)
        raise typer.Exit(code=exc.exit_code) from exc

    local = local_addresses()
    public = public_address(build_echo_service(config))

    mapping = None
    if negotiate and local:
        negotiator = UpnpNegotiator(
            config.negotiator_path, timeout=config.negotiation_timeout_seconds
        )
        mapping = negotiator.negotiate(local[0], config.p2p_target_port)

    address = NodeAddress(
        local=local,
        public=public or (mapping.public_ip if mapping else None),
        mapped_port=mapping.port if mapping else None,
    )

    degraded = not local or address.public is None
    console.print()
    console.print(
        Panel(
            renderer.render_address(address),
            title="[bold]Reachability[/bold]",
            border_style="yellow" if degraded else "green",
            padding=(1, 2),
        )
    )
    console.print()
