"""Launch models: join modes, address facts, and node startup parameters."""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field


class KnownNetwork(str, Enum):
    """Public networks with a fixed replication origin."""

    TESTNET = "testnet"
    MAINNET = "mainnet"


# ---------------------------------------------------------------------------
# LaunchMode, a tagged union discriminated on ``kind``
# ---------------------------------------------------------------------------


class OfflineMode(BaseModel):
    """Local-only node: no discovery, fixed bootstrap and storage."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["offline"] = "offline"


class KnownNetworkMode(BaseModel):
    """Join a well-known public network by replicating from its origin."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["known_network"] = "known_network"
    network: KnownNetwork


class CustomPeerMode(BaseModel):
    """Join through an operator-supplied peer address."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["custom_peer"] = "custom_peer"


class AutoReplicantMode(BaseModel):
    """Replicate state from an operator-supplied origin URL."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["auto_replicant"] = "auto_replicant"


LaunchMode = Annotated[
    Union[OfflineMode, KnownNetworkMode, CustomPeerMode, AutoReplicantMode],
    Field(discriminator="kind"),
]


# ---------------------------------------------------------------------------
# Address facts
# ---------------------------------------------------------------------------


class NatMapping(BaseModel):
    """A port mapping granted by the gateway: external ip + mapped port."""

    model_config = ConfigDict(frozen=True)

    public_ip: str
    port: int = Field(ge=1, le=65535)


class NodeAddress(BaseModel):
    """Reachability facts gathered fresh on every run. Never persisted."""

    model_config = ConfigDict(frozen=True)

    local: tuple[str, ...] = ()
    public: str | None = None
    mapped_port: int | None = None

    @property
    def public_endpoint(self) -> str | None:
        """``ip:port`` when both the public ip and a mapped port are known."""
        if self.public and self.mapped_port:
            return f"{self.public}:{self.mapped_port}"
        return None

    @property
    def local_joined(self) -> str | None:
        if not self.local:
            return None
        return "|".join(self.local)


# ---------------------------------------------------------------------------
# Launch parameters
# ---------------------------------------------------------------------------


class LaunchParameters(BaseModel):
    """Startup arguments for the node executable.

    Built exactly once by the mode selector and consumed by the
    ``ProcessLauncher``.  Fields left as ``None`` are omitted from the
    command line.
    """

    model_config = ConfigDict(frozen=True)

    local_ip: str | None = None
    public_ip: str | None = None
    http_port: int
    p2p_port: int | None = None
    bootstrap_path: Path
    p2p_bootstrap_addr: str | None = None
    db_path: Path
    autoreplicant_origin: str | None = None
    offline: bool = False
    test_mode: bool = False

    def to_argv(self) -> list[str]:
        """Render the node command-line arguments in canonical order."""
        argv: list[str] = []
        if self.local_ip is not None:
            argv += ["--local-ip", self.local_ip]
        if self.public_ip is not None:
            argv += ["--public-ip", self.public_ip]
        argv += ["--http-port", str(self.http_port)]
        if self.p2p_port is not None:
            argv += ["--p2p-port", str(self.p2p_port)]
        argv += ["--bootstrap-path", str(self.bootstrap_path)]
        if self.p2p_bootstrap_addr is not None:
            argv += ["--p2p-bootstrap-addr", self.p2p_bootstrap_addr]
        argv += ["--db-path", str(self.db_path)]
        if self.autoreplicant_origin is not None:
            argv += ["--autoreplicant-procedure", self.autoreplicant_origin]
        if self.offline:
            argv.append("--offline")
        if self.test_mode:
            argv.append("--test-mode")
        return argv
