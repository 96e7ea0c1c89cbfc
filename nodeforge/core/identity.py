"""Content identity derivation for bootstrap artifacts.

The network identity is the Base58 rendering of a sha2-256 multihash of
the artifact bytes::

    identity = base58(0x12 || 0x20 || sha256(artifact))

The Base58 alphabet contains no path separators, so the identity can be
used verbatim as a storage directory name.
"""

from __future__ import annotations

import hashlib
from pathlib import Path

from nodeforge.core import base58
from nodeforge.core.preflight import ArtifactReadError, require_artifact
from nodeforge.models.artifacts import BootstrapArtifact, multihash


def sha256_digest(data: bytes) -> bytes:
    """Return the raw 32-byte SHA-256 digest of *data*."""
    return hashlib.sha256(data).digest()


def derive_network_identity(data: bytes) -> str:
    """Return the network identity string for raw artifact bytes."""
    return base58.encode(multihash(sha256_digest(data)))


def legacy_hex_identity(data: bytes) -> str:
    """Identity scheme used by older deployments: the bare hex digest.

    Only useful for locating storage created by those deployments.
    """
    return hashlib.sha256(data).hexdigest()


def read_bootstrap_artifact(path: Path) -> BootstrapArtifact:
    """Read and hash the artifact at *path*.

    Raises
    ------
    MissingArtifactError
        If the file does not exist.
    ArtifactReadError
        If the file exists but cannot be read.
    """
    path = require_artifact(Path(path))
    try:
        data = path.read_bytes()
    except OSError as exc:
        raise ArtifactReadError(path, exc.strerror or str(exc)) from exc
    return BootstrapArtifact(path=path, data=data, digest=sha256_digest(data))


def storage_path(root: Path, identity: str) -> Path:
    """Namespaced storage directory for *identity* under *root*.

    The directory is not created here; the node's storage layer owns it.
    """
    return Path(root) / identity
