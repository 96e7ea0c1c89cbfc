"""Launch orchestrator: the central coordinator for a node start.

Wires the ModeSelector, its discovery collaborators, and the
ProcessLauncher into one run and maps the result onto a process exit
code:

- 0 when the operator quits,
- 1 when any preflight condition fails (nothing is launched),
- otherwise the node's own exit status.
"""

from __future__ import annotations

import logging

from rich.console import Console

from nodeforge.bridge.discovery import local_addresses
from nodeforge.bridge.echo import build_echo_service
from nodeforge.bridge.peer_directory import HttpPeerDirectory
from nodeforge.bridge.upnp import UpnpNegotiator
from nodeforge.config import LauncherConfig
from nodeforge.core.launcher import ProcessLauncher
from nodeforge.core.mode_selector import ModeSelector, Prompt
from nodeforge.core.preflight import PreflightError, required_tools
from nodeforge.models.selector import SelectionOutcome
from nodeforge.monitor.renderer import LaunchRenderer

logger = logging.getLogger(__name__)


class LaunchOrchestrator:
    """Runs one selector pass and, unless aborted, launches the node.

    Parameters
    ----------
    selector:
        A fresh ``ModeSelector``.
    launcher:
        The ``ProcessLauncher`` for the node executable.
    renderer:
        Terminal output for the summary and diagnostics.
    """

    def __init__(
        self,
        selector: ModeSelector,
        launcher: ProcessLauncher,
        *,
        renderer: LaunchRenderer | None = None,
    ) -> None:
        self.selector = selector
        self.launcher = launcher
        self.renderer = renderer or LaunchRenderer()
        self.outcome: SelectionOutcome | None = None

    @classmethod
    def from_config(
        cls,
        config: LauncherConfig,
        prompt: Prompt,
        *,
        console: Console | None = None,
    ) -> LaunchOrchestrator:
        """Build an orchestrator wired to the production collaborators."""
        renderer = LaunchRenderer(console=console)
        selector = ModeSelector(
            config,
            prompt,
            echo=build_echo_service(config),
            negotiator=UpnpNegotiator(
                config.negotiator_path, timeout=config.negotiation_timeout_seconds
            ),
            peer_directory=HttpPeerDirectory(
                timeout=config.discovery_timeout_seconds, id_path=config.peer_id_path
            ),
            discover_local=local_addresses,
            required_tools=required_tools(config),
            renderer=renderer,
        )
        return cls(selector, ProcessLauncher(config.node_executable), renderer=renderer)

    def run(self) -> int:
        """Select, compose, launch.  Returns the process exit code."""
        try:
            self.outcome = self.selector.run()
            if self.outcome.aborted:
                self.renderer.print_aborted()
                return 0

            params = self.outcome.parameters
            self.renderer.print_parameters(params, self.outcome.identity)
            return self.launcher.launch(params)
        except PreflightError as exc:
            logger.critical("Launch aborted: %s", exc)
            self.renderer.print_failure(exc)
            return exc.exit_code
