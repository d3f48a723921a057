"""Program keypairs and program IDs.

A program ID is the base58-encoded Ed25519 public key of the program's
keypair.  Keypair files use the Solana CLI layout: a JSON array of 64 byte
values, the 32-byte secret seed followed by the 32-byte public key.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path

import base58
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey

KEYPAIR_DIR = Path("target") / "deploy"
KEYPAIR_SUFFIX = "-keypair.json"


@dataclass(frozen=True)
class Keypair:
    """Raw Ed25519 key material."""

    secret: bytes
    public: bytes

    @property
    def program_id(self) -> str:
        return base58.b58encode(self.public).decode("ascii")

    def to_json(self) -> str:
        return json.dumps(list(self.secret + self.public))


def generate_keypair() -> Keypair:
    """Generate a fresh Ed25519 keypair."""
    private_key = Ed25519PrivateKey.generate()

    secret = private_key.private_bytes(
        serialization.Encoding.Raw,
        serialization.PrivateFormat.Raw,
        serialization.NoEncryption(),
    )
    public = private_key.public_key().public_bytes(
        serialization.Encoding.Raw,
        serialization.PublicFormat.Raw,
    )
    return Keypair(secret=secret, public=public)


def generate_program_id() -> str:
    """Return a new random program ID."""
    return generate_keypair().program_id


def keypair_path(project_dir: str | Path, program_name: str) -> Path:
    """Location of the deploy keypair for *program_name*."""
    return Path(project_dir) / KEYPAIR_DIR / f"{program_name}{KEYPAIR_SUFFIX}"


def write_keypair(path: str | Path, keypair: Keypair) -> Path:
    """Write *keypair* to *path* in Solana CLI format."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(keypair.to_json())
    return path


def read_keypair(path: str | Path) -> Keypair:
    """Load a Solana CLI keypair file."""
    data = json.loads(Path(path).read_text())
    raw = bytes(data)
    if len(raw) != 64:
        raise ValueError(f"Keypair file {path} must hold 64 bytes, found {len(raw)}")
    return Keypair(secret=raw[:32], public=raw[32:])
