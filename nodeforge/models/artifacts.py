"""Bootstrap artifact model (immutable once read)."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict

from nodeforge.core import base58

# Multihash function code for sha2-256 and its digest length.
SHA2_256_CODE = 0x12
SHA2_256_LENGTH = 32


def multihash(digest: bytes, code: int = SHA2_256_CODE) -> bytes:
    """Prefix *digest* with its function code and length byte."""
    if len(digest) > 0xFF:
        raise ValueError(f"Digest too long for a single length byte: {len(digest)}")
    return bytes([code, len(digest)]) + digest


class BootstrapArtifact(BaseModel):
    """The genesis artifact seeding a network instance.

    The bytes are treated as opaque: only their sha2-256 digest matters.
    The structure inside (wasm binary, genesis transactions, nonce) is
    never parsed here.
    """

    model_config = ConfigDict(frozen=True)

    path: Path
    data: bytes
    digest: bytes

    @property
    def size_bytes(self) -> int:
        return len(self.data)

    @property
    def multihash(self) -> bytes:
        """Self-describing digest: function code + length + raw digest."""
        return multihash(self.digest)

    @property
    def identity(self) -> str:
        """Base58 rendering of the multihash, i.e. the network identity."""
        return base58.encode(self.multihash)
