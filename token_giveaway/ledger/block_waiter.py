"""
Wait for the ledger to advance a number of blocks.

Freshly written accounts (a just-created lookup table) are not reliably
visible to reads until a few blocks past the creating transaction.
"""

from __future__ import annotations

import asyncio
import time

from token_giveaway.core.exceptions import BlockWaitTimeoutError
from token_giveaway.giveaway_logging import get_logger
from token_giveaway.ledger.client import LedgerClient

logger = get_logger(__name__)

DEFAULT_POLL_INTERVAL_SEC = 1.0


class BlockWaiter:
    """Poll the latest block reference until its height passes a captured reference by n."""

    def __init__(
        self,
        ledger: LedgerClient,
        *,
        poll_interval_sec: float = DEFAULT_POLL_INTERVAL_SEC,
        timeout_sec: float | None = None,
    ) -> None:
        self._ledger = ledger
        self._poll_interval = poll_interval_sec
        self._timeout = timeout_sec

    async def _height(self) -> int:
        reference = await self._ledger.latest_block_reference()
        return reference.last_valid_block_height

    async def wait_for_blocks(self, n: int, timeout_sec: float | None = None) -> int:
        """
        Block until observed height > reference height + n; return the observed height.

        timeout_sec overrides the instance default; with neither set the wait is unbounded.
        Raises BlockWaitTimeoutError when the deadline passes first.
        """
        if n < 0:
            raise ValueError("n must be non-negative")
        timeout = timeout_sec if timeout_sec is not None else self._timeout
        print(f"Waiting for {n} new blocks")
        reference = await self._height()
        deadline = time.monotonic() + timeout if timeout is not None else None
        logger.info("block_wait_started", blocks=n, reference_height=reference, timeout_sec=timeout)
        while True:
            await asyncio.sleep(self._poll_interval)
            height = await self._height()
            if height > reference + n:
                logger.info("block_wait_done", reference_height=reference, height=height)
                return height
            if deadline is not None and time.monotonic() >= deadline:
                logger.warning(
                    "block_wait_timeout",
                    blocks=n,
                    reference_height=reference,
                    height=height,
                    timeout_sec=timeout,
                )
                raise BlockWaitTimeoutError(n, timeout, reference, height)
