"""Shared test fixtures for nodeforge."""

from __future__ import annotations

import io
from collections.abc import Callable, Iterable
from pathlib import Path
from types import SimpleNamespace
from typing import Any

import pytest
from rich.console import Console

from nodeforge.bridge.echo import EchoUnavailableError
from nodeforge.config import LauncherConfig
from nodeforge.core.launcher import ProcessLauncher
from nodeforge.core.mode_selector import ModeSelector
from nodeforge.models.launch import NatMapping
from nodeforge.monitor.renderer import LaunchRenderer


# ---------------------------------------------------------------------------
# Fakes for the external collaborators
# ---------------------------------------------------------------------------


class ScriptedPrompt:
    """Answers prompts from a fixed list; EOF once the list is exhausted."""

    def __init__(self, answers: Iterable[str]) -> None:
        self._answers = list(answers)
        self.messages: list[str] = []

    def __call__(self, message: str) -> str:
        self.messages.append(message)
        if not self._answers:
            raise EOFError
        return self._answers.pop(0)


class FakeEcho:
    """EchoService returning a fixed address, or failing when address is None."""

    def __init__(self, address: str | None = "203.0.113.10") -> None:
        self.address = address
        self.calls = 0

    def query(self) -> str:
        self.calls += 1
        if self.address is None:
            raise EchoUnavailableError("echo service unreachable")
        return self.address


class FakeNegotiator:
    """Negotiator granting a fixed mapping, or none."""

    def __init__(self, mapping: NatMapping | None = None) -> None:
        self.mapping = mapping
        self.calls: list[tuple[str, int]] = []

    def negotiate(self, local_address: str, target_port: int) -> NatMapping | None:
        self.calls.append((local_address, target_port))
        return self.mapping


class FakePeerDirectory:
    def __init__(self, peer_id: str | None = "12D3KooWTestPeer") -> None:
        self.peer_id = peer_id
        self.calls: list[str] = []

    def fetch_peer_id(self, origin: str) -> str | None:
        self.calls.append(origin)
        return self.peer_id


class FakeLocalDiscovery:
    def __init__(self, addresses: tuple[str, ...] = ("192.168.1.20",)) -> None:
        self.addresses = addresses
        self.calls = 0

    def __call__(self) -> tuple[str, ...]:
        self.calls += 1
        return self.addresses


class FakeRunner:
    """``subprocess.run`` stand-in recording every argv."""

    def __init__(self, returncode: int = 0) -> None:
        self.returncode = returncode
        self.calls: list[list[str]] = []

    def __call__(self, argv: list[str], **kwargs: Any) -> SimpleNamespace:
        self.calls.append(list(argv))
        return SimpleNamespace(returncode=self.returncode, args=argv)


# ---------------------------------------------------------------------------
# Filesystem + config fixtures
# ---------------------------------------------------------------------------


BOOTSTRAP_BYTES = b"\x83\xa3bin\xc4\x04wasm\xa3txs\x90\xa5nonce\xa4test"
OFFLINE_BOOTSTRAP_BYTES = b"offline-bootstrap-artifact"


@pytest.fixture
def tmp_dir(tmp_path: Path) -> Path:
    """Provide a temporary directory for test artifacts."""
    return tmp_path


@pytest.fixture
def launch_config(tmp_dir: Path) -> LauncherConfig:
    """LauncherConfig whose bootstrap files and executable all exist."""
    data = tmp_dir / "data"
    data.mkdir()
    (data / "bootstrap.bin").write_bytes(BOOTSTRAP_BYTES)
    (data / "offline-bootstrap.bin").write_bytes(OFFLINE_BOOTSTRAP_BYTES)
    executable = tmp_dir / "trinci-node"
    executable.write_text("#!/bin/sh\nexit 0\n")

    return LauncherConfig(
        node_executable=executable,
        bootstrap_path=data / "bootstrap.bin",
        offline_bootstrap_path=data / "offline-bootstrap.bin",
        db_root=tmp_dir / "db",
        negotiator_path=tmp_dir / "missing-negotiator",
        echo_backend="http",
        testnet_origin="http://testnet.example",
        mainnet_origin="http://mainnet.example",
        testnet_p2p_multiaddr="/ip4/15.161.71.249/tcp/9006",
        mainnet_p2p_multiaddr="",
    )


@pytest.fixture
def console() -> Console:
    """Rich console writing into a string buffer."""
    return Console(file=io.StringIO(), width=200)


@pytest.fixture
def renderer(console: Console) -> LaunchRenderer:
    return LaunchRenderer(console=console)


# ---------------------------------------------------------------------------
# Selector factory
# ---------------------------------------------------------------------------


@pytest.fixture
def collaborators() -> SimpleNamespace:
    """Default set of fakes, all succeeding."""
    return SimpleNamespace(
        echo=FakeEcho(),
        negotiator=FakeNegotiator(NatMapping(public_ip="203.0.113.10", port=42001)),
        peer_directory=FakePeerDirectory(),
        discover_local=FakeLocalDiscovery(),
    )


@pytest.fixture
def make_selector(
    launch_config: LauncherConfig,
    collaborators: SimpleNamespace,
    renderer: LaunchRenderer,
) -> Callable[..., ModeSelector]:
    """Factory fixture: ModeSelector fed by scripted answers and the fakes."""

    def _factory(
        answers: Iterable[str],
        config: LauncherConfig | None = None,
        **overrides: Any,
    ) -> ModeSelector:
        kwargs: dict[str, Any] = {
            "echo": collaborators.echo,
            "negotiator": collaborators.negotiator,
            "peer_directory": collaborators.peer_directory,
            "discover_local": collaborators.discover_local,
            "renderer": renderer,
        }
        kwargs.update(overrides)
        return ModeSelector(config or launch_config, ScriptedPrompt(answers), **kwargs)

    return _factory


@pytest.fixture
def runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def make_launcher(launch_config: LauncherConfig, runner: FakeRunner) -> Callable[..., ProcessLauncher]:
    def _factory(executable: Path | None = None) -> ProcessLauncher:
        return ProcessLauncher(executable or launch_config.node_executable, runner=runner)

    return _factory
