"""Tests for local and public address discovery."""

from __future__ import annotations

import socket
from types import SimpleNamespace

import pytest

from nodeforge.bridge import discovery
from nodeforge.bridge.discovery import local_addresses, public_address
from nodeforge.bridge.echo import MalformedDiscoveryResponseError


def _addr(family, address: str) -> SimpleNamespace:
    return SimpleNamespace(family=family, address=address, netmask=None, broadcast=None, ptp=None)


@pytest.fixture
def fake_interfaces(monkeypatch: pytest.MonkeyPatch):
    """Install a psutil interface table built from ``(addrs, stats)``."""

    def _install(addrs: dict, up: dict) -> None:
        stats = {name: SimpleNamespace(isup=state) for name, state in up.items()}
        monkeypatch.setattr(discovery.psutil, "net_if_addrs", lambda: addrs)
        monkeypatch.setattr(discovery.psutil, "net_if_stats", lambda: stats)

    return _install


class TestLocalAddresses:
    def test_skips_loopback_ipv6_and_down_interfaces(self, fake_interfaces):
        fake_interfaces(
            {
                "lo": [_addr(socket.AF_INET, "127.0.0.1")],
                "eth0": [
                    _addr(socket.AF_INET, "192.168.1.20"),
                    _addr(socket.AF_INET6, "fe80::1"),
                ],
                "wlan0": [_addr(socket.AF_INET, "10.0.0.5")],
                "docker0": [_addr(socket.AF_INET, "172.17.0.1")],
            },
            {"lo": True, "eth0": True, "wlan0": True, "docker0": False},
        )
        assert local_addresses() == ("192.168.1.20", "10.0.0.5")

    def test_stable_ordering_and_dedup(self, fake_interfaces):
        fake_interfaces(
            {
                "eth1": [_addr(socket.AF_INET, "10.1.1.1")],
                "eth0": [_addr(socket.AF_INET, "10.0.0.1"), _addr(socket.AF_INET, "10.1.1.1")],
            },
            {"eth0": True, "eth1": True},
        )
        first = local_addresses()
        assert first == ("10.0.0.1", "10.1.1.1")
        assert local_addresses() == first

    def test_no_interfaces_is_empty(self, fake_interfaces):
        fake_interfaces({"lo": [_addr(socket.AF_INET, "127.0.0.1")]}, {"lo": True})
        assert local_addresses() == ()

    def test_interface_without_stats_is_kept(self, fake_interfaces):
        fake_interfaces({"tun0": [_addr(socket.AF_INET, "100.64.0.2")]}, {})
        assert local_addresses() == ("100.64.0.2",)


class TestPublicAddress:
    def test_success(self, collaborators):
        assert public_address(collaborators.echo) == "203.0.113.10"
        assert collaborators.echo.calls == 1

    def test_unavailable_degrades_to_none(self, collaborators):
        collaborators.echo.address = None
        assert public_address(collaborators.echo) is None
        assert collaborators.echo.calls == 1

    def test_malformed_degrades_to_none(self):
        class Garbled:
            def query(self) -> str:
                raise MalformedDiscoveryResponseError("garbage")

        assert public_address(Garbled()) is None
