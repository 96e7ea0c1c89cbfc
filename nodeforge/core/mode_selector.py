"""Launch mode selector: a small forward-only state machine.

    SELECT_MODE -> {OFFLINE, KNOWN_NETWORK, CUSTOM_PEER, AUTO_REPLICANT} -> LAUNCH
    SELECT_MODE -> ABORTED

Enforces:
- Valid state transitions only (VALID_TRANSITIONS table)
- Invalid operator input re-prompts without side effects
- Discovery and negotiation failures degrade, never abort
- Exactly one LaunchParameters built, at LAUNCH

Operator input comes from an injectable ``prompt`` callable so the loop
runs the same against a terminal or a scripted answer list.  All gathered
facts travel in an explicit ``LaunchContext``; the selector itself only
tracks its current state and transition history.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from pathlib import Path

from nodeforge.bridge.discovery import local_addresses, public_address
from nodeforge.bridge.echo import EchoService
from nodeforge.bridge.peer_directory import PeerDirectory
from nodeforge.bridge.upnp import Negotiator
from nodeforge.config import LauncherConfig
from nodeforge.core.identity import read_bootstrap_artifact, storage_path
from nodeforge.core.preflight import PreflightError, require_tool
from nodeforge.models.launch import (
    AutoReplicantMode,
    CustomPeerMode,
    KnownNetwork,
    KnownNetworkMode,
    LaunchMode,
    LaunchParameters,
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
from nodeforge.monitor.renderer import LaunchRenderer, PhaseStatus

logger = logging.getLogger(__name__)

Prompt = Callable[[str], str]

MODE_PROMPT = "Select launch mode [offline/testnet/mainnet/custom/quit]: "
CUSTOM_PROMPT = "Join through a peer or replicate from an origin? [peer/replicant/quit]: "
PEER_PROMPT = "Peer address (e.g. <peer-id>@/ip4/1.2.3.4/tcp/9006): "
STORAGE_PROMPT = "Storage root [{default}]: "
BOOTSTRAP_PROMPT = "Bootstrap file path [{default}]: "
ORIGIN_PROMPT = "Origin URL to replicate from: "

MODE_CHOICES = ("offline", "testnet", "mainnet", "custom", "quit")
CUSTOM_CHOICES = ("peer", "replicant", "quit")

_STATE_FOR_KIND: dict[str, SelectorState] = {
    "offline": SelectorState.OFFLINE,
    "known_network": SelectorState.KNOWN_NETWORK,
    "custom_peer": SelectorState.CUSTOM_PEER,
    "auto_replicant": SelectorState.AUTO_REPLICANT,
}


class InvalidTransitionError(RuntimeError):
    """Raised when a requested selector transition is not valid."""


class InvalidOperatorInputError(ValueError):
    """Raised by the choice parsers for unrecognized operator input."""


class OperatorInputClosedError(PreflightError):
    """Operator input ended before a required value was supplied."""


def _parse_choice(text: str, choices: Sequence[str]) -> str:
    answer = text.strip().lower()
    if answer not in choices:
        raise InvalidOperatorInputError(
            f"Unrecognized choice {text.strip()!r}; expected one of: {', '.join(choices)}"
        )
    return answer


def parse_mode_choice(text: str) -> str:
    """Normalize a SELECT_MODE answer or raise ``InvalidOperatorInputError``."""
    return _parse_choice(text, MODE_CHOICES)


def parse_custom_choice(text: str) -> str:
    """Normalize a custom sub-path answer or raise ``InvalidOperatorInputError``."""
    return _parse_choice(text, CUSTOM_CHOICES)


def parse_origin(text: str) -> str:
    """Validate an origin URL typed by the operator."""
    origin = text.strip()
    if not origin.startswith(("http://", "https://")):
        raise InvalidOperatorInputError(f"Origin must be an http(s) URL, got {origin!r}")
    return origin.rstrip("/")


def compose_parameters(
    mode: LaunchMode,
    context: LaunchContext,
    config: LauncherConfig,
    identity: str,
) -> LaunchParameters:
    """Assemble LaunchParameters from whatever the chosen path gathered."""
    if context.bootstrap_path is None:
        raise ValueError("LaunchContext has no bootstrap path")

    common = {
        "http_port": config.http_port,
        "bootstrap_path": context.bootstrap_path,
        "test_mode": config.test_mode,
    }

    if isinstance(mode, OfflineMode):
        return LaunchParameters(**common, db_path=config.offline_db_path, offline=True)

    address = context.address
    reach = {
        "local_ip": address.local_joined,
        "public_ip": address.public_endpoint,
        "p2p_port": address.mapped_port,
    }
    db_path = storage_path(context.storage_root or config.db_root, identity)

    if isinstance(mode, KnownNetworkMode):
        multiaddr = config.network_multiaddr(mode.network)
        bootstrap_addr = (
            f"{context.peer_id}@{multiaddr}" if context.peer_id and multiaddr else None
        )
        return LaunchParameters(
            **common,
            **reach,
            db_path=db_path,
            p2p_bootstrap_addr=bootstrap_addr,
            autoreplicant_origin=context.origin,
        )
    if isinstance(mode, CustomPeerMode):
        return LaunchParameters(
            **common,
            **reach,
            db_path=db_path,
            p2p_bootstrap_addr=context.peer_address,
        )
    if isinstance(mode, AutoReplicantMode):
        return LaunchParameters(
            **common,
            **reach,
            db_path=db_path,
            autoreplicant_origin=context.origin,
        )
    raise TypeError(f"Unhandled launch mode: {mode!r}")


class ModeSelector:
    """Drives the operator from mode choice to a LaunchParameters record.

    Parameters
    ----------
    config:
        Launcher configuration (ports, default paths, network origins).
    prompt:
        Called with a prompt string, returns the operator's answer.
        ``EOFError`` at the mode prompt means quit.
    echo:
        Public-address echo backend.
    negotiator:
        NAT traversal backend.
    peer_directory:
        Resolves known-network origins to peer ids.
    discover_local:
        Returns local IPv4 addresses; defaults to psutil enumeration.
    required_tools:
        Binaries checked with ``require_tool`` before any discovery.
    renderer:
        Receives one status line per phase.
    """

    def __init__(
        self,
        config: LauncherConfig,
        prompt: Prompt,
        *,
        echo: EchoService,
        negotiator: Negotiator,
        peer_directory: PeerDirectory,
        discover_local: Callable[[], tuple[str, ...]] = local_addresses,
        required_tools: Sequence[str] = (),
        renderer: LaunchRenderer | None = None,
    ) -> None:
        self._config = config
        self._prompt = prompt
        self._echo = echo
        self._negotiator = negotiator
        self._peer_directory = peer_directory
        self._discover_local = discover_local
        self._required_tools = list(required_tools)
        self._renderer = renderer or LaunchRenderer()
        self._state = SelectorState.SELECT_MODE
        self._history: list[StateTransition] = []

    # ------------------------------------------------------------------
    # State management
    # ------------------------------------------------------------------

    @property
    def state(self) -> SelectorState:
        return self._state

    @property
    def history(self) -> list[StateTransition]:
        return list(self._history)

    def transition(self, target: SelectorState) -> StateTransition:
        """Move to *target*, rejecting anything not in VALID_TRANSITIONS."""
        allowed = VALID_TRANSITIONS.get(self._state, set())
        if target not in allowed:
            raise InvalidTransitionError(
                f"Cannot transition from {self._state.value} to {target.value}. "
                f"Allowed: {sorted(s.value for s in allowed)}"
            )
        record = StateTransition(from_state=self._state, to_state=target)
        self._history.append(record)
        logger.debug("Selector: %s -> %s", self._state.value, target.value)
        self._state = target
        return record

    # ------------------------------------------------------------------
    # Run
    # ------------------------------------------------------------------

    def run(self) -> SelectionOutcome:
        """Run the selector to a terminal state.

        Raises ``PreflightError`` if a required tool or the bootstrap
        artifact is missing.
        """
        if self._state != SelectorState.SELECT_MODE:
            raise InvalidTransitionError("ModeSelector instances are single-use")

        mode = self._select_mode()
        if mode is None:
            self.transition(SelectorState.ABORTED)
            return SelectionOutcome(state=self._state, history=self.history)

        self.transition(_STATE_FOR_KIND[mode.kind])
        context = LaunchContext(mode=mode)
        if isinstance(mode, OfflineMode):
            context = self._gather_offline(context)
        elif isinstance(mode, KnownNetworkMode):
            context = self._gather_known_network(context, mode.network)
        elif isinstance(mode, CustomPeerMode):
            context = self._gather_custom_peer(context)
        elif isinstance(mode, AutoReplicantMode):
            context = self._gather_auto_replicant(context)

        self.transition(SelectorState.LAUNCH)
        identity = self._derive_identity(context)
        params = compose_parameters(mode, context, self._config, identity)
        return SelectionOutcome(
            state=self._state,
            parameters=params,
            identity=identity,
            history=self.history,
        )

    # ------------------------------------------------------------------
    # SELECT_MODE
    # ------------------------------------------------------------------

    def _ask_choice(self, message: str, parser: Callable[[str], str]) -> str:
        """Prompt until *parser* accepts the answer; EOF counts as quit."""
        while True:
            try:
                answer = self._prompt(message)
            except EOFError:
                return "quit"
            try:
                return parser(answer)
            except InvalidOperatorInputError as exc:
                logger.info("%s", exc)
                self._renderer.warn(str(exc))

    def _select_mode(self) -> LaunchMode | None:
        choice = self._ask_choice(MODE_PROMPT, parse_mode_choice)
        if choice == "quit":
            return None
        if choice == "offline":
            return OfflineMode()
        if choice in (KnownNetwork.TESTNET.value, KnownNetwork.MAINNET.value):
            return KnownNetworkMode(network=KnownNetwork(choice))

        sub = self._ask_choice(CUSTOM_PROMPT, parse_custom_choice)
        if sub == "quit":
            return None
        if sub == "peer":
            return CustomPeerMode()
        return AutoReplicantMode()

    # ------------------------------------------------------------------
    # Mode-specific gathering
    # ------------------------------------------------------------------

    def _ask_value(self, message: str, field: str) -> str:
        try:
            return self._prompt(message).strip()
        except EOFError:
            raise OperatorInputClosedError(
                f"Operator input closed before {field} was provided"
            ) from None

    def _ask_required(self, message: str, field: str, parser: Callable[[str], str]) -> str:
        while True:
            answer = self._ask_value(message, field)
            try:
                if not answer:
                    raise InvalidOperatorInputError(f"A {field} is required")
                return parser(answer)
            except InvalidOperatorInputError as exc:
                logger.info("%s", exc)
                self._renderer.warn(str(exc))

    def _gather_offline(self, context: LaunchContext) -> LaunchContext:
        self._renderer.phase("Network discovery", PhaseStatus.SKIPPED, "offline mode")
        return context.model_copy(update={
            "bootstrap_path": self._config.offline_bootstrap_path,
            "storage_root": self._config.db_root,
        })

    def _gather_known_network(self, context: LaunchContext, network: KnownNetwork) -> LaunchContext:
        origin = self._config.network_origin(network)
        address = self._probe_reachability()

        peer_id = self._peer_directory.fetch_peer_id(origin)
        if peer_id:
            self._renderer.phase("Peer id", PhaseStatus.OK, peer_id)
        else:
            self._renderer.phase("Peer id", PhaseStatus.DEGRADED, f"no peer id from {origin}")

        return context.model_copy(update={
            "origin": origin,
            "peer_id": peer_id,
            "address": address,
            "bootstrap_path": self._config.bootstrap_path,
            "storage_root": self._config.db_root,
        })

    def _gather_custom_peer(self, context: LaunchContext) -> LaunchContext:
        peer = self._ask_required(PEER_PROMPT, "peer address", str.strip)
        storage = self._ask_value(
            STORAGE_PROMPT.format(default=self._config.db_root), "storage root"
        )
        bootstrap = self._ask_value(
            BOOTSTRAP_PROMPT.format(default=self._config.bootstrap_path), "bootstrap path"
        )
        address = self._probe_reachability()
        return context.model_copy(update={
            "peer_address": peer,
            "storage_root": Path(storage) if storage else self._config.db_root,
            "bootstrap_path": Path(bootstrap) if bootstrap else self._config.bootstrap_path,
            "address": address,
        })

    def _gather_auto_replicant(self, context: LaunchContext) -> LaunchContext:
        origin = self._ask_required(ORIGIN_PROMPT, "origin URL", parse_origin)
        address = self._probe_reachability()
        return context.model_copy(update={
            "origin": origin,
            "address": address,
            "bootstrap_path": self._config.bootstrap_path,
            "storage_root": self._config.db_root,
        })

    # ------------------------------------------------------------------
    # Discovery + negotiation (failures tolerated)
    # ------------------------------------------------------------------

    def _probe_reachability(self) -> NodeAddress:
        for tool in self._required_tools:
            require_tool(tool)

        local = self._discover_local()
        if local:
            self._renderer.phase("Local discovery", PhaseStatus.OK, ", ".join(local))
        else:
            self._renderer.phase(
                "Local discovery", PhaseStatus.DEGRADED, "no active non-loopback IPv4 interface"
            )

        public = public_address(self._echo)
        if public:
            self._renderer.phase("Public discovery", PhaseStatus.OK, public)
        else:
            self._renderer.phase("Public discovery", PhaseStatus.DEGRADED, "public address unknown")

        mapping = None
        if local:
            target = self._config.p2p_target_port
            mapping = self._negotiator.negotiate(local[0], target)
            if mapping:
                self._renderer.phase(
                    "UPnP negotiation", PhaseStatus.OK, f"{mapping.public_ip}:{mapping.port}"
                )
            else:
                self._renderer.phase(
                    "UPnP negotiation", PhaseStatus.DEGRADED, "running node without P2P port"
                )
        else:
            self._renderer.phase("UPnP negotiation", PhaseStatus.SKIPPED, "no local address to map")

        if public is None and mapping is not None:
            public = mapping.public_ip

        return NodeAddress(
            local=local,
            public=public,
            mapped_port=mapping.port if mapping else None,
        )

    # ------------------------------------------------------------------
    # LAUNCH
    # ------------------------------------------------------------------

    def _derive_identity(self, context: LaunchContext) -> str:
        try:
            artifact = read_bootstrap_artifact(context.bootstrap_path)
        except PreflightError as exc:
            self._renderer.phase("Identity derivation", PhaseStatus.FAILED, str(exc))
            raise
        identity = artifact.identity
        self._renderer.phase("Identity derivation", PhaseStatus.OK, identity)
        logger.info("Network identity for %s: %s", artifact.path, identity)
        return identity
