"""HTTP lookups against a remote node: peer id and bootstrap download."""

from __future__ import annotations

import logging
from typing import Protocol, runtime_checkable

import httpx

logger = logging.getLogger(__name__)


class BootstrapDownloadError(RuntimeError):
    """The remote node did not serve a bootstrap artifact."""


@runtime_checkable
class PeerDirectory(Protocol):
    """Protocol for resolving a network origin to its P2P peer id."""

    def fetch_peer_id(self, origin: str) -> str | None:
        ...


class HttpPeerDirectory:
    """Resolves ``<origin><id_path>`` to the origin node's peer id.

    Parameters
    ----------
    timeout:
        Seconds for the single HTTP request.
    id_path:
        REST path serving the peer id as plain text.
    """

    def __init__(self, *, timeout: float = 5.0, id_path: str = "/api/v1/p2p/id") -> None:
        self._timeout = timeout
        self._id_path = id_path

    def fetch_peer_id(self, origin: str) -> str | None:
        url = origin.rstrip("/") + self._id_path
        try:
            response = httpx.get(url, timeout=self._timeout)
            response.raise_for_status()
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            logger.warning("Peer id lookup at %s failed: %s", url, exc)
            return None

        peer_id = response.text.strip().strip('"')
        if not peer_id:
            logger.warning("Peer id lookup at %s returned an empty body", url)
            return None
        return peer_id


def download_bootstrap(origin: str, *, timeout: float = 30.0) -> bytes:
    """Fetch the raw bootstrap artifact served by *origin*."""
    url = origin.rstrip("/") + "/api/v1/bootstrap"
    try:
        response = httpx.get(url, timeout=timeout, follow_redirects=True)
        response.raise_for_status()
    except (httpx.HTTPError, httpx.InvalidURL) as exc:
        raise BootstrapDownloadError(f"bootstrap download from {url} failed: {exc}") from exc
    if not response.content:
        raise BootstrapDownloadError(f"bootstrap download from {url} returned no data")
    logger.info("Bootstrap retrieved from %s (%d bytes)", url, len(response.content))
    return response.content
