"""Public-address echo services.

An echo service tells this host which IPv4 address the outside world sees
it connecting from.  Two backends are provided:

1. **DNS** (``DnsEchoService``): asks Google's ``o-o.myaddr`` TXT record
   through the ``dig`` binary.  Requires ``dig`` on PATH.
2. **HTTP** (``HttpEchoService``): fetches a plain-text echo URL with
   httpx.  No external binary needed.

Both make exactly one attempt and raise a ``DiscoveryError`` subclass on
any failure; the caller decides whether that is fatal (it never is for
public-address discovery).
"""

from __future__ import annotations

import ipaddress
import logging
import subprocess
from typing import Protocol, runtime_checkable

import httpx

from nodeforge.config import LauncherConfig

logger = logging.getLogger(__name__)


class DiscoveryError(RuntimeError):
    """Base class for recoverable address-discovery failures."""


class EchoUnavailableError(DiscoveryError):
    """The echo service could not be reached or its tool could not run."""


class MalformedDiscoveryResponseError(DiscoveryError):
    """The echo service answered with something that is not an IPv4 address."""


def parse_ipv4(text: str) -> str:
    """Validate *text* as a dotted IPv4 address and return it normalized."""
    candidate = text.strip().strip('"').strip()
    try:
        return str(ipaddress.IPv4Address(candidate))
    except ValueError as exc:
        raise MalformedDiscoveryResponseError(
            f"Echo response is not an IPv4 address: {text!r}"
        ) from exc


@runtime_checkable
class EchoService(Protocol):
    """Protocol for public-address echo backends."""

    def query(self) -> str:
        """Return this host's public IPv4 address.

        Raises ``DiscoveryError`` on timeout, unavailability, or a
        malformed answer.
        """
        ...


class DnsEchoService:
    """Public address via ``dig TXT +short <name> @<server>``.

    Parameters
    ----------
    name:
        TXT record that echoes the resolver's client address.
    server:
        Authoritative name server to ask directly.
    timeout:
        Seconds before the ``dig`` subprocess is abandoned.
    """

    def __init__(
        self,
        name: str = "o-o.myaddr.l.google.com",
        server: str = "ns1.google.com",
        *,
        timeout: float = 5.0,
        dig: str = "dig",
    ) -> None:
        self._name = name
        self._server = server
        self._timeout = timeout
        self._dig = dig

    @property
    def command(self) -> list[str]:
        return [self._dig, "TXT", "+short", self._name, f"@{self._server}"]

    def query(self) -> str:
        try:
            result = subprocess.run(
                self.command,
                capture_output=True,
                text=True,
                timeout=self._timeout,
            )
        except subprocess.TimeoutExpired as exc:
            raise EchoUnavailableError(
                f"dig timed out after {self._timeout:g}s"
            ) from exc
        except OSError as exc:
            raise EchoUnavailableError(f"dig could not run: {exc}") from exc

        if result.returncode != 0:
            raise EchoUnavailableError(
                f"dig exited with status {result.returncode}: {result.stderr.strip()}"
            )

        lines = [line for line in result.stdout.splitlines() if line.strip()]
        if not lines:
            raise MalformedDiscoveryResponseError("dig returned an empty answer")
        return parse_ipv4(lines[0])


class HttpEchoService:
    """Public address via a plain-text HTTP echo endpoint."""

    def __init__(self, url: str = "https://api.ipify.org", *, timeout: float = 5.0) -> None:
        self._url = url
        self._timeout = timeout

    def query(self) -> str:
        try:
            response = httpx.get(self._url, timeout=self._timeout)
            response.raise_for_status()
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise EchoUnavailableError(f"echo request to {self._url} failed: {exc}") from exc
        return parse_ipv4(response.text)


def build_echo_service(config: LauncherConfig) -> EchoService:
    """Construct the echo backend selected by ``config.echo_backend``."""
    if config.echo_backend == "http":
        return HttpEchoService(config.http_echo_url, timeout=config.discovery_timeout_seconds)
    return DnsEchoService(
        config.dns_echo_name,
        config.dns_echo_server,
        timeout=config.discovery_timeout_seconds,
    )
