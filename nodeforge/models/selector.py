"""Launch mode selector state models: strictly forward transitions."""

from __future__ import annotations

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from nodeforge.models.launch import LaunchMode, LaunchParameters, NodeAddress


class SelectorState(str, Enum):
    """States of the launch mode selector."""

    SELECT_MODE = "select_mode"
    OFFLINE = "offline"
    KNOWN_NETWORK = "known_network"
    CUSTOM_PEER = "custom_peer"
    AUTO_REPLICANT = "auto_replicant"
    LAUNCH = "launch"
    ABORTED = "aborted"


# Valid state transitions, enforced by ModeSelector.transition().
# LAUNCH and ABORTED are terminal; nothing leads back to SELECT_MODE.
VALID_TRANSITIONS: dict[SelectorState, set[SelectorState]] = {
    SelectorState.SELECT_MODE: {
        SelectorState.OFFLINE,
        SelectorState.KNOWN_NETWORK,
        SelectorState.CUSTOM_PEER,
        SelectorState.AUTO_REPLICANT,
        SelectorState.ABORTED,
    },
    SelectorState.OFFLINE: {SelectorState.LAUNCH},
    SelectorState.KNOWN_NETWORK: {SelectorState.LAUNCH},
    SelectorState.CUSTOM_PEER: {SelectorState.LAUNCH},
    SelectorState.AUTO_REPLICANT: {SelectorState.LAUNCH},
    SelectorState.LAUNCH: set(),  # terminal
    SelectorState.ABORTED: set(),  # terminal
}


class StateTransition(BaseModel):
    """Records a single selector transition."""

    model_config = ConfigDict(frozen=True)

    from_state: SelectorState
    to_state: SelectorState


class LaunchContext(BaseModel):
    """Everything gathered so far, threaded explicitly between states.

    Never mutated in place: each state returns an updated copy via
    ``model_copy(update=...)``.
    """

    model_config = ConfigDict(frozen=True)

    mode: LaunchMode | None = None
    bootstrap_path: Path | None = None
    storage_root: Path | None = None
    peer_address: str | None = None
    origin: str | None = None
    peer_id: str | None = None
    address: NodeAddress = Field(default_factory=NodeAddress)


class SelectionOutcome(BaseModel):
    """Final result of a selector run."""

    model_config = ConfigDict(frozen=True)

    state: SelectorState
    parameters: LaunchParameters | None = None
    identity: str | None = None
    history: list[StateTransition] = []

    @property
    def aborted(self) -> bool:
        return self.state == SelectorState.ABORTED
