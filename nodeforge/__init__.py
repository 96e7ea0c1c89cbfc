"""nodeforge: bootstrap identity and launch orchestrator for blockchain nodes.

Before a node starts, nodeforge:
  - derives the network identity from the bootstrap file
    (base58 of a sha2-256 multihash), used to namespace node storage
  - discovers local and public IPv4 addresses and negotiates a P2P port
    with the gateway over UPnP, degrading gracefully when either fails
  - resolves the operator's join mode (offline, testnet/mainnet, custom
    peer, auto-replicant) into one set of node startup parameters
  - invokes the node executable once
"""

__version__ = "0.3.0"
__description__ = "Bootstrap identity and launch orchestrator for blockchain nodes"

from nodeforge.core.orchestrator import LaunchOrchestrator
from nodeforge.cli.app import app as cli

__all__ = ["LaunchOrchestrator", "cli", "__version__"]
