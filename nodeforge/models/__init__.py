"""nodeforge data models: all Pydantic v2, all frozen (immutable)."""

from nodeforge.models.artifacts import SHA2_256_CODE, SHA2_256_LENGTH, BootstrapArtifact
from nodeforge.models.launch import (
    AutoReplicantMode,
    CustomPeerMode,
    KnownNetwork,
    KnownNetworkMode,
    LaunchMode,
    LaunchParameters,
    NatMapping,
    NodeAddress,
    OfflineMode,
)
from nodeforge.models.selector import (
    VALID_TRANSITIONS,
    LaunchContext,
    SelectionOutcome,
    SelectorState,
    StateTransition,
)

__all__ = [
    # artifacts
    "SHA2_256_CODE",
    "SHA2_256_LENGTH",
    "BootstrapArtifact",
    # launch
    "KnownNetwork",
    "OfflineMode",
    "KnownNetworkMode",
    "CustomPeerMode",
    "AutoReplicantMode",
    "LaunchMode",
    "NatMapping",
    "NodeAddress",
    "LaunchParameters",
    # selector
    "SelectorState",
    "VALID_TRANSITIONS",
    "StateTransition",
    "LaunchContext",
    "SelectionOutcome",
]
