"""NAT traversal via an external UPnP negotiator binary.

The negotiator is invoked as ``<negotiator> <local-ip> <target-port>``.
On success it asks the gateway for a TCP port mapping and prints a single
``external-ip:mapped-port`` line.  On failure it prints nothing useful and
usually exits non-zero.

One attempt only.  The mapping's lease is owned by the gateway; nothing
here renews it.
"""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import Protocol, runtime_checkable

from pydantic import ValidationError

from nodeforge.bridge.echo import MalformedDiscoveryResponseError, parse_ipv4
from nodeforge.models.launch import NatMapping

logger = logging.getLogger(__name__)


class NegotiationFailedError(RuntimeError):
    """The gateway did not grant a usable port mapping."""


def parse_mapping(output: str) -> NatMapping:
    """Parse the first non-empty ``ip:port`` line of negotiator output."""
    line = next((ln.strip() for ln in output.splitlines() if ln.strip()), "")
    if not line:
        raise NegotiationFailedError("negotiator produced no output")

    host, sep, port_text = line.rpartition(":")
    if not sep:
        raise NegotiationFailedError(f"expected 'ip:port', got {line!r}")
    try:
        ip = parse_ipv4(host)
        return NatMapping(public_ip=ip, port=int(port_text))
    except (MalformedDiscoveryResponseError, ValueError, ValidationError) as exc:
        raise NegotiationFailedError(f"malformed mapping {line!r}") from exc


@runtime_checkable
class Negotiator(Protocol):
    """Protocol for NAT traversal backends."""

    def negotiate(self, local_address: str, target_port: int) -> NatMapping | None:
        """Request an inbound mapping; ``None`` when none was granted."""
        ...


class UpnpNegotiator:
    """Runs the external negotiator binary once per ``negotiate`` call.

    Parameters
    ----------
    executable:
        Path to the negotiator binary.
    timeout:
        Seconds to wait for the gateway handshake.
    """

    def __init__(self, executable: Path, *, timeout: float = 30.0) -> None:
        self._executable = Path(executable)
        self._timeout = timeout

    def _run(self, local_address: str, target_port: int) -> str:
        if not self._executable.is_file():
            raise NegotiationFailedError(f"negotiator not found at {self._executable}")
        try:
            result = subprocess.run(
                [str(self._executable), local_address, str(target_port)],
                capture_output=True,
                text=True,
                timeout=self._timeout,
            )
        except subprocess.TimeoutExpired as exc:
            raise NegotiationFailedError(
                f"negotiator timed out after {self._timeout:g}s"
            ) from exc
        except OSError as exc:
            raise NegotiationFailedError(f"negotiator could not run: {exc}") from exc

        if result.returncode != 0:
            raise NegotiationFailedError(
                f"negotiator exited with status {result.returncode}: "
                f"{result.stderr.strip()[:200]}"
            )
        return result.stdout

    def negotiate(self, local_address: str, target_port: int) -> NatMapping | None:
        try:
            mapping = parse_mapping(self._run(local_address, target_port))
        except NegotiationFailedError as exc:
            logger.warning("UPnP negotiation failed, running without P2P port: %s", exc)
            return None
        logger.info("UPnP mapping granted: %s:%d", mapping.public_ip, mapping.port)
        return mapping
