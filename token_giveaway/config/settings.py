"""
Giveaway settings: endpoint, funding, selection sizes, and polling knobs.

Every field defaults from a GIVEAWAY_* environment variable (after .env is
loaded) and falls back to the values of the reference demo run: 2 SOL airdrop,
500-token supply, 20 participants, 10 winners, 2 tokens each.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from functools import lru_cache

from token_giveaway.config.env import (
    env_float,
    env_int,
    env_optional_int,
    get_solana_rpc_url,
    load_giveaway_env,
)

LAMPORTS_PER_SOL = 1_000_000_000

DEFAULT_COMMITMENT = "finalized"
DEFAULT_AIRDROP_SOL = 2.0
DEFAULT_TOKEN_DECIMALS = 0
DEFAULT_TOKEN_SUPPLY = 500
DEFAULT_PARTICIPANT_COUNT = 20
DEFAULT_WINNER_COUNT = 10
DEFAULT_TRANSFER_AMOUNT = 2
DEFAULT_LOOKBACK_SLOTS = 200
DEFAULT_WAIT_BLOCKS = 1
DEFAULT_BLOCK_WAIT_TIMEOUT_SEC = 120.0
DEFAULT_POLL_INTERVAL_SEC = 1.0
DEFAULT_RESOLVE_CONCURRENCY = 4

_COMMITMENTS = ("processed", "confirmed", "finalized")


def _env_commitment() -> str:
    return (os.getenv("GIVEAWAY_COMMITMENT") or DEFAULT_COMMITMENT).strip().lower()


def _env_block_wait_timeout() -> float | None:
    timeout = env_float("GIVEAWAY_BLOCK_WAIT_TIMEOUT_SEC", DEFAULT_BLOCK_WAIT_TIMEOUT_SEC)
    # 0 or negative disables the deadline
    return timeout if timeout > 0 else None


@dataclass
class GiveawayConfig:
    """Config for one giveaway run (env or explicit)."""

    rpc_url: str = field(default_factory=get_solana_rpc_url)
    commitment: str = field(default_factory=_env_commitment)
    airdrop_sol: float = field(default_factory=lambda: env_float("GIVEAWAY_AIRDROP_SOL", DEFAULT_AIRDROP_SOL))
    token_decimals: int = field(default_factory=lambda: env_int("GIVEAWAY_TOKEN_DECIMALS", DEFAULT_TOKEN_DECIMALS))
    token_supply: int = field(default_factory=lambda: env_int("GIVEAWAY_TOKEN_SUPPLY", DEFAULT_TOKEN_SUPPLY))
    participant_count: int = field(default_factory=lambda: env_int("GIVEAWAY_PARTICIPANTS", DEFAULT_PARTICIPANT_COUNT))
    winner_count: int = field(default_factory=lambda: env_int("GIVEAWAY_WINNERS", DEFAULT_WINNER_COUNT))
    transfer_amount: int = field(default_factory=lambda: env_int("GIVEAWAY_TRANSFER_AMOUNT", DEFAULT_TRANSFER_AMOUNT))
    lookback_slots: int = field(default_factory=lambda: env_int("GIVEAWAY_LOOKBACK_SLOTS", DEFAULT_LOOKBACK_SLOTS))
    wait_blocks: int = field(default_factory=lambda: env_int("GIVEAWAY_WAIT_BLOCKS", DEFAULT_WAIT_BLOCKS))
    block_wait_timeout_sec: float | None = field(default_factory=_env_block_wait_timeout)
    block_poll_interval_sec: float = DEFAULT_POLL_INTERVAL_SEC
    confirm_poll_interval_sec: float = DEFAULT_POLL_INTERVAL_SEC
    resolve_concurrency: int = field(default_factory=lambda: env_int("GIVEAWAY_RESOLVE_CONCURRENCY", DEFAULT_RESOLVE_CONCURRENCY))
    random_seed: int | None = field(default_factory=lambda: env_optional_int("GIVEAWAY_RANDOM_SEED"))

    def __post_init__(self) -> None:
        if not self.rpc_url.strip():
            raise ValueError("rpc_url must be non-empty")
        if self.commitment not in _COMMITMENTS:
            raise ValueError(f"commitment must be one of {_COMMITMENTS}, got {self.commitment!r}")
        if self.participant_count < 1:
            raise ValueError("participant_count must be positive")
        if not (1 <= self.winner_count <= self.participant_count):
            raise ValueError(
                f"winner_count must be between 1 and participant_count ({self.participant_count}), got {self.winner_count}"
            )
        if self.transfer_amount < 1:
            raise ValueError("transfer_amount must be positive")
        if self.winner_count * self.transfer_amount > self.token_supply:
            raise ValueError("token_supply does not cover winner_count * transfer_amount")
        if self.token_decimals < 0:
            raise ValueError("token_decimals must be non-negative")
        if self.lookback_slots < 1:
            raise ValueError("lookback_slots must be positive")
        if self.wait_blocks < 0:
            raise ValueError("wait_blocks must be non-negative")
        if self.resolve_concurrency < 1:
            raise ValueError("resolve_concurrency must be positive")

    @property
    def airdrop_lamports(self) -> int:
        return int(self.airdrop_sol * LAMPORTS_PER_SOL)


@lru_cache(maxsize=1)
def get_settings() -> GiveawayConfig:
    """Return the process-wide settings, loading .env on first use."""
    load_giveaway_env()
    return GiveawayConfig()
