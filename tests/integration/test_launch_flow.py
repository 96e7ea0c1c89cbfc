"""End-to-end launch flows with real child processes.

The node executable and the UPnP negotiator are small shell scripts, so
these tests exercise LaunchOrchestrator.from_config, the ProcessLauncher,
and the UpnpNegotiator exactly as production wires them.  Only the
network edges (interface table, HTTP echo, peer id lookup) are faked.
"""

from __future__ import annotations

import hashlib
import io
import stat
from pathlib import Path

import httpx
import pytest
from rich.console import Console

from nodeforge.bridge import echo, peer_directory
from nodeforge.config import LauncherConfig
from nodeforge.core import base58, preflight
from nodeforge.core.identity import derive_network_identity
from nodeforge.core import orchestrator as orchestrator_module
from nodeforge.core.orchestrator import LaunchOrchestrator

pytestmark = pytest.mark.skipif(
    not Path("/bin/sh").exists(), reason="shell scripts stand in for the node binaries"
)


def _script(path: Path, body: str) -> Path:
    path.write_text("#!/bin/sh\n" + body)
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return path


class Answers:
    def __init__(self, *answers: str) -> None:
        self._answers = list(answers)

    def __call__(self, message: str) -> str:
        if not self._answers:
            raise EOFError
        return self._answers.pop(0)


@pytest.fixture
def node_home(tmp_path: Path) -> Path:
    (tmp_path / "data").mkdir()
    (tmp_path / "data" / "bootstrap.bin").write_bytes(b"hello")
    (tmp_path / "data" / "offline-bootstrap.bin").write_bytes(b"offline genesis")
    _script(tmp_path / "trinci-node", 'printf "%s\\n" "$@" > "$(dirname "$0")/argv.txt"\nexit ${NODE_EXIT:-0}\n')
    _script(tmp_path / "negotiator", 'echo "203.0.113.10:42001"\n')
    return tmp_path


@pytest.fixture
def config(node_home: Path) -> LauncherConfig:
    return LauncherConfig(
        node_executable=node_home / "trinci-node",
        bootstrap_path=node_home / "data" / "bootstrap.bin",
        offline_bootstrap_path=node_home / "data" / "offline-bootstrap.bin",
        db_root=node_home / "db",
        negotiator_path=node_home / "negotiator",
        echo_backend="http",
        http_echo_url="http://echo.example/",
        testnet_origin="http://testnet.example",
    )


@pytest.fixture
def network(monkeypatch: pytest.MonkeyPatch):
    """Fake interface table and HTTP edges; records every HTTP URL."""
    urls: list[str] = []

    def fake_get(url, **kwargs):
        urls.append(url)
        request = httpx.Request("GET", url)
        if url.startswith("http://echo.example"):
            return httpx.Response(200, text="203.0.113.10", request=request)
        if url.endswith("/api/v1/p2p/id"):
            return httpx.Response(200, text="12D3KooWTestnetPeer", request=request)
        return httpx.Response(404, request=request)

    monkeypatch.setattr(echo.httpx, "get", fake_get)
    monkeypatch.setattr(peer_directory.httpx, "get", fake_get)
    monkeypatch.setattr(orchestrator_module, "local_addresses", lambda: ("192.168.1.20",))
    return urls


def _run(config: LauncherConfig, *answers: str) -> tuple[int, str]:
    console = Console(file=io.StringIO(), width=200)
    orchestrator = LaunchOrchestrator.from_config(config, Answers(*answers), console=console)
    code = orchestrator.run()
    return code, console.file.getvalue()


def _node_argv(node_home: Path) -> list[str]:
    return (node_home / "argv.txt").read_text().splitlines()


class TestLaunchFlow:
    def test_offline_makes_no_network_calls(self, config, node_home, network):
        code, _ = _run(config, "offline")
        assert code == 0
        assert network == []
        argv = _node_argv(node_home)
        assert "--offline" in argv
        assert argv[argv.index("--db-path") + 1] == str(node_home / "db" / "offline")
        assert "--local-ip" not in argv

    def test_testnet_full_launch(self, config, node_home, network):
        code, output = _run(config, "testnet")
        assert code == 0
        argv = _node_argv(node_home)
        identity = derive_network_identity(b"hello")

        assert argv[argv.index("--local-ip") + 1] == "192.168.1.20"
        assert argv[argv.index("--public-ip") + 1] == "203.0.113.10:42001"
        assert argv[argv.index("--p2p-port") + 1] == "42001"
        assert argv[argv.index("--db-path") + 1] == str(node_home / "db" / identity)
        assert argv[argv.index("--autoreplicant-procedure") + 1] == "http://testnet.example"
        assert argv[argv.index("--p2p-bootstrap-addr") + 1].startswith("12D3KooWTestnetPeer@/ip4/")
        assert "Launch Parameters" in output

    def test_hello_identity(self, config, node_home, network):
        _run(config, "testnet")
        db_path = Path(_node_argv(node_home)[_node_argv(node_home).index("--db-path") + 1])
        identity = db_path.name
        assert identity.startswith("Qm")
        assert base58.decode(identity) == b"\x12\x20" + hashlib.sha256(b"hello").digest()

    def test_negotiation_failure_still_launches(self, config, node_home, network):
        _script(node_home / "negotiator", "echo 'No IGD device found' >&2\nexit 1\n")
        code, output = _run(config, "testnet")
        assert code == 0
        argv = _node_argv(node_home)
        assert "--p2p-port" not in argv
        assert "--public-ip" not in argv
        assert "--local-ip" in argv
        assert "DEGRADED" in output

    def test_invalid_choice_reprompts(self, config, node_home, network):
        code, output = _run(config, "satellite", "", "offline")
        assert code == 0
        assert output.count("Unrecognized choice") == 2
        assert (node_home / "argv.txt").exists()

    def test_quit(self, config, node_home, network):
        code, _ = _run(config, "quit")
        assert code == 0
        assert not (node_home / "argv.txt").exists()

    def test_child_exit_code_propagates(self, config, node_home, network, monkeypatch):
        monkeypatch.setenv("NODE_EXIT", "3")
        code, _ = _run(config, "offline")
        assert code == 3


class TestPreflightFailures:
    def test_missing_bootstrap(self, config, node_home, network):
        (node_home / "data" / "bootstrap.bin").unlink()
        code, output = _run(config, "testnet")
        assert code == 1
        assert not (node_home / "argv.txt").exists()
        assert "Missing bootstrap file" in output

    def test_missing_executable(self, config, node_home, network):
        (node_home / "trinci-node").unlink()
        code, output = _run(config, "offline")
        assert code == 1
        assert str(node_home / "trinci-node") in output

    def test_missing_dig(self, config, node_home, network, monkeypatch):
        monkeypatch.setattr(preflight.shutil, "which", lambda name: None)
        dns_config = config.model_copy(update={"echo_backend": "dns"})
        code, output = _run(dns_config, "testnet")
        assert code == 1
        assert "dig" in output
        assert network == []
        assert not (node_home / "argv.txt").exists()
