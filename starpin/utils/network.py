"""Solana cluster names and RPC endpoints."""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass

logger = logging.getLogger(__name__)

DEFAULT_NETWORK = "devnet"


@dataclass(frozen=True)
class Network:
    name: str
    url: str
    description: str


NETWORKS: dict[str, Network] = {
    "localnet": Network("localnet", "http://127.0.0.1:8899", "Local validator"),
    "devnet": Network("devnet", "https://api.devnet.solana.com", "Solana devnet"),
    "mainnet-beta": Network(
        "mainnet-beta", "https://api.mainnet-beta.solana.com", "Solana mainnet"
    ),
}

_ALIASES = {
    "localhost": "localnet",
    "mainnet": "mainnet-beta",
}


def lookup_network(network: str) -> Network:
    """Resolve a cluster name or alias; unknown names fall back to devnet."""
    key = _ALIASES.get(network, network)
    if key not in NETWORKS:
        logger.warning("Unknown network: %s. Using %s.", network, DEFAULT_NETWORK)
        key = DEFAULT_NETWORK
    return NETWORKS[key]


@dataclass
class SolanaConfig:
    """Output of ``solana config get``."""

    available: bool
    output: str = ""
    error: str = ""


def solana_config(timeout: int = 10) -> SolanaConfig:
    """Ask the Solana CLI for its current configuration."""
    try:
        proc = subprocess.run(
            ["solana", "config", "get"],
            capture_output=True,
            text=True,
            timeout=timeout,
        )
    except FileNotFoundError:
        return SolanaConfig(available=False, error="Solana CLI not found")
    except subprocess.TimeoutExpired:
        return SolanaConfig(available=False, error=f"solana config get timed out after {timeout}s")

    if proc.returncode != 0:
        return SolanaConfig(available=False, output=proc.stdout, error=proc.stderr.strip())
    return SolanaConfig(available=True, output=proc.stdout)
