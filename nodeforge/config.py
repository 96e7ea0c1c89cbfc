"""Launcher configuration: env-driven.

Centralized config using pydantic-settings for environment variable
support. Reads from a .env file and NODEFORGE_* environment variables.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

from nodeforge.models.launch import KnownNetwork


class LauncherConfig(BaseSettings):
    """Launcher configuration with environment variable overrides.

    All settings can be overridden via NODEFORGE_* environment variables
    or a .env file in the working directory.

    Examples
    --------
    Override via environment::

        export NODEFORGE_LOG_LEVEL=DEBUG
        export NODEFORGE_NODE_EXECUTABLE=/opt/node/bin/trinci-node
        export NODEFORGE_ECHO_BACKEND=http

    Or via .env file::

        NODEFORGE_DB_ROOT=/data/db
        NODEFORGE_HTTP_PORT=8080
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="NODEFORGE_",
        env_file_encoding="utf-8",
    )

    log_level: str = "INFO"

    # Node process
    node_executable: Path = Path("./target/release/trinci-node")
    http_port: int = 8000
    test_mode: bool = False

    # Bootstrap artifacts and storage
    bootstrap_path: Path = Path("./data/bootstrap.bin")
    offline_bootstrap_path: Path = Path("./data/offline-bootstrap.bin")
    db_root: Path = Path("./db")
    offline_db_subdir: str = "offline"

    # NAT traversal
    p2p_target_port: int = 8001
    negotiator_path: Path = Path("./tools/upnp_negotiator/target/release/upnp_negotiator")
    negotiation_timeout_seconds: float = 30.0

    # Public address echo
    echo_backend: Literal["dns", "http"] = "dns"
    dns_echo_name: str = "o-o.myaddr.l.google.com"
    dns_echo_server: str = "ns1.google.com"
    http_echo_url: str = "https://api.ipify.org"
    discovery_timeout_seconds: float = 5.0

    # Known networks
    testnet_origin: str = "http://testnet.trinci.net"
    mainnet_origin: str = "http://mainnet.trinci.net"
    testnet_p2p_multiaddr: str = "/ip4/15.161.71.249/tcp/9006"
    mainnet_p2p_multiaddr: str = ""
    peer_id_path: str = "/api/v1/p2p/id"

    @property
    def offline_db_path(self) -> Path:
        """Fixed storage directory for offline runs."""
        return self.db_root / self.offline_db_subdir

    def network_origin(self, network: KnownNetwork) -> str:
        """Remote origin URL replicated from when joining *network*."""
        if network == KnownNetwork.TESTNET:
            return self.testnet_origin
        return self.mainnet_origin

    def network_multiaddr(self, network: KnownNetwork) -> str:
        """P2P multiaddr of the network's bootstrap peer (may be empty)."""
        if network == KnownNetwork.TESTNET:
            return self.testnet_p2p_multiaddr
        return self.mainnet_p2p_multiaddr
