"""Participant generation and winner selection."""

from __future__ import annotations

import random
from typing import Sequence, TypeVar

from solders.keypair import Keypair
from solders.pubkey import Pubkey

T = TypeVar("T")


def generate_participants(count: int) -> list[Pubkey]:
    """`count` fresh, distinct participant addresses (from new keypairs)."""
    seen: set[Pubkey] = set()
    participants: list[Pubkey] = []
    while len(participants) < count:
        address = Keypair().pubkey()
        if address not in seen:
            seen.add(address)
            participants.append(address)
    return participants


def select_winners(pool: Sequence[T], k: int, rng: random.Random | None = None) -> list[T]:
    """
    Uniformly shuffle a copy of `pool` and take the first k.

    Not cryptographically secure; pass a seeded random.Random for replayable draws.
    """
    if k < 0 or k > len(pool):
        raise ValueError(f"cannot select {k} winners from a pool of {len(pool)}")
    rng = rng or random.Random()
    shuffled = list(pool)
    rng.shuffle(shuffled)
    return shuffled[:k]
