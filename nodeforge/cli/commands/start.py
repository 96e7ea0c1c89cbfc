"""``nodeforge start`` / ``nodeforge offline``: select a join mode and launch.

``start`` runs the interactive mode selector; ``--mode`` pre-answers the
first prompt.  ``offline`` is the non-interactive shortcut for a local
test node with the fixed offline bootstrap and storage.
"""

from __future__ import annotations

import typer
from rich.console import Console
from rich.markup import escape

from nodeforge.config import LauncherConfig
from nodeforge.core.mode_selector import Prompt
from nodeforge.core.orchestrator import LaunchOrchestrator

console = Console()


def _terminal_prompt(message: str) -> str:
    return console.input(f"[bold cyan]{escape(message)}[/bold cyan]")


def _closed_prompt(message: str) -> str:
    raise EOFError(message)


def _preset_prompt(first_answer: str, fallback: Prompt) -> Prompt:
    """Answer the first prompt with *first_answer*, then defer to *fallback*."""
    pending = [first_answer]

    def _ask(message: str) -> str:
        if pending:
            answer = pending.pop()
            console.print(f"[bold cyan]{escape(message)}[/bold cyan]{escape(answer)}")
            return answer
        return fallback(message)

    return _ask


def _run(prompt: Prompt, config: LauncherConfig) -> None:
    console.print()
    console.print("[bold]nodeforge[/bold] [dim]node start[/dim]")
    console.print()
    orchestrator = LaunchOrchestrator.from_config(config, prompt, console=console)
    exit_code = orchestrator.run()
    if exit_code != 0:
        raise typer.Exit(code=exit_code)


def start_cmd(
    mode: str = typer.Option(
        None,
        "--mode",
        "-m",
        help="Pre-select the launch mode: offline, testnet, mainnet or custom.",
    ),
    test_mode: bool = typer.Option(
        False,
        "--test-mode",
        "-t",
        help="Start the node in test mode.",
    ),
) -> None:
    """Select how this node joins a network, then launch it.

    Discovers local and public addresses, negotiates a P2P port with the
    gateway when possible, derives the network identity from the bootstrap
    file, and invokes the node executable once.
    """
    config = LauncherConfig()
    if test_mode:
        config = config.model_copy(update={"test_mode": True})
    prompt: Prompt = _terminal_prompt
    if mode:
        prompt = _preset_prompt(mode, prompt)
    _run(prompt, config)


def offline_cmd() -> None:
    """Launch a local offline node with the fixed offline bootstrap."""
    _run(_preset_prompt("offline", _closed_prompt), LauncherConfig())
