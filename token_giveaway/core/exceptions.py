"""
Application-level exceptions.

Every failure the giveaway raises on purpose derives from GiveawayError.
Transient RPC/transport errors (httpx, solana-py) are not wrapped; they
propagate unchanged and abort the run.
"""

from __future__ import annotations

from typing import Any


class GiveawayError(Exception):
    """Base class for giveaway failures."""


class TransactionDroppedError(GiveawayError):
    """Block height passed the reference's last valid height before the transaction was confirmed."""

    def __init__(self, signature: Any, last_valid_block_height: int, block_height: int) -> None:
        self.signature = signature
        self.last_valid_block_height = last_valid_block_height
        self.block_height = block_height
        super().__init__(
            f"transaction {signature} dropped: block height {block_height} exceeded "
            f"last valid block height {last_valid_block_height} (blockhash expired)"
        )


class TransactionFailedError(GiveawayError):
    """The transaction landed but its execution returned an error."""

    def __init__(self, signature: Any, err: Any) -> None:
        self.signature = signature
        self.err = err
        super().__init__(f"transaction {signature} failed: {err}")


class EmptySlotHistoryError(GiveawayError):
    """The node returned no blocks in the lookback window, so no slot can anchor a lookup table."""

    def __init__(self, start_slot: int) -> None:
        self.start_slot = start_slot
        super().__init__(f"no blocks found since slot {start_slot}; cannot anchor lookup table")


class BlockWaitTimeoutError(GiveawayError):
    """Ledger did not advance by the requested number of blocks before the deadline."""

    def __init__(self, blocks: int, timeout_sec: float, reference_height: int, observed_height: int) -> None:
        self.blocks = blocks
        self.timeout_sec = timeout_sec
        self.reference_height = reference_height
        self.observed_height = observed_height
        super().__init__(
            f"waited {timeout_sec}s for {blocks} new blocks past height {reference_height}; "
            f"last observed height {observed_height}"
        )


class LookupTableNotFoundError(GiveawayError):
    """Lookup table account is absent or not yet visible."""

    def __init__(self, address: Any) -> None:
        self.address = address
        super().__init__(f"lookup table {address} not found")


class InvalidAccountDataError(GiveawayError):
    """Account data does not decode as the expected layout."""
