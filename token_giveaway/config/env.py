"""
Environment variable loading for the giveaway.

- SOLANA_NETWORK: localnet | devnet | mainnet (default: localnet)
- SOLANA_RPC_URL: RPC endpoint; overrides the network default when set
- Loads .env from project root when available.
"""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv

# Project root: config is token_giveaway/config/, root is 2 levels up
_CONFIG_DIR = Path(__file__).resolve().parent
_PACKAGE_DIR = _CONFIG_DIR.parent
_ROOT = _PACKAGE_DIR.parent
_ENV_PATH = _ROOT / ".env"

LOCALNET_RPC_URL = "http://127.0.0.1:8899"
DEVNET_RPC_URL = "https://api.devnet.solana.com"
MAINNET_RPC_URL = "https://api.mainnet-beta.solana.com"

_NETWORK_URLS = {
    "localnet": LOCALNET_RPC_URL,
    "devnet": DEVNET_RPC_URL,
    "mainnet": MAINNET_RPC_URL,
}


def load_giveaway_env() -> None:
    """Load .env from project root. Safe to call multiple times; existing env wins."""
    load_dotenv(_ENV_PATH, override=False)


def get_solana_network() -> str:
    """
    Return SOLANA_NETWORK from env: localnet | devnet | mainnet.
    Unknown values fall back to localnet.
    """
    load_giveaway_env()
    raw = (os.getenv("SOLANA_NETWORK") or "localnet").strip().lower()
    if raw in ("mainnet", "mainnet-beta"):
        return "mainnet"
    if raw in _NETWORK_URLS:
        return raw
    return "localnet"


def get_solana_rpc_url() -> str:
    """
    Resolve Solana RPC URL from env.
    Order: SOLANA_RPC_URL > network default.
    """
    load_giveaway_env()
    url = (os.getenv("SOLANA_RPC_URL") or "").strip()
    if url:
        return url
    return _NETWORK_URLS[get_solana_network()]


def env_int(name: str, default: int) -> int:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    return int(raw)


def env_float(name: str, default: float) -> float:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    return float(raw)


def env_optional_int(name: str) -> int | None:
    raw = (os.getenv(name) or "").strip()
    return int(raw) if raw else None
