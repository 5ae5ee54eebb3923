"""
Process entry point: one giveaway run against the configured endpoint.

Env: SOLANA_RPC_URL / SOLANA_NETWORK, GIVEAWAY_* (see config.settings), LOG_LEVEL, LOG_FORMAT.
Exit code 0 on a completed run (including the "lookup table not found" early
return), 1 when the run aborts on an error.
"""

from __future__ import annotations

import asyncio
import sys

from token_giveaway.config import GiveawayConfig, get_settings
from token_giveaway.giveaway.orchestrator import GiveawayOrchestrator, GiveawayResult
from token_giveaway.giveaway_logging import bind_run_context, get_logger
from token_giveaway.ledger.client import LedgerClient

logger = get_logger(__name__)


async def run_giveaway(config: GiveawayConfig) -> GiveawayResult:
    """Open a ledger connection, run the giveaway, close the connection."""
    ledger = LedgerClient.from_url(
        config.rpc_url,
        commitment=config.commitment,
        confirm_poll_interval_sec=config.confirm_poll_interval_sec,
    )
    async with ledger:
        return await GiveawayOrchestrator(ledger, config).run()


def main() -> int:
    try:
        config = get_settings()
    except ValueError as e:
        logger.error("giveaway_config_error", error=str(e))
        print("ERROR:", e, file=sys.stderr)
        return 1
    bind_run_context(rpc_url=config.rpc_url, commitment=config.commitment)
    logger.info(
        "giveaway_starting",
        participants=config.participant_count,
        winners=config.winner_count,
        transfer_amount=config.transfer_amount,
    )
    try:
        asyncio.run(run_giveaway(config))
    except KeyboardInterrupt:
        logger.info("giveaway_interrupted")
        return 1
    except Exception as e:
        logger.exception("giveaway_failed", error=str(e))
        print("ERROR:", e, file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
