"""Network address discovery: local interfaces and public address.

Local addresses come from psutil's interface table, so the output shape
is the same on Linux and macOS.  The public address comes from a single
query to an ``EchoService``; any failure there degrades to ``None``.
"""

from __future__ import annotations

import ipaddress
import logging
import socket

import psutil

from nodeforge.bridge.echo import DiscoveryError, EchoService

logger = logging.getLogger(__name__)


def local_addresses() -> tuple[str, ...]:
    """Return non-loopback IPv4 addresses bound to interfaces that are up.

    Interfaces are visited in name order and duplicates dropped, so the
    result is stable across calls.  An empty tuple is a valid answer.
    """
    stats = psutil.net_if_stats()
    found: list[str] = []
    for name, addrs in sorted(psutil.net_if_addrs().items()):
        if name in stats and not stats[name].isup:
            continue
        for addr in addrs:
            if addr.family != socket.AF_INET:
                continue
            try:
                ip = ipaddress.IPv4Address(addr.address)
            except ValueError:
                continue
            if ip.is_loopback:
                continue
            if str(ip) not in found:
                found.append(str(ip))
    logger.debug("Local IPv4 addresses: %s", found)
    return tuple(found)


def public_address(echo: EchoService) -> str | None:
    """Ask *echo* once for the public address; ``None`` on any failure."""
    try:
        address = echo.query()
    except DiscoveryError as exc:
        logger.warning("Public address discovery failed: %s", exc)
        return None
    logger.info("Public address: %s", address)
    return address
