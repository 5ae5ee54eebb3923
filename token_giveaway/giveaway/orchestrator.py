"""
Giveaway workflow: fund → mint → select winners → build transfers → compare
compressed vs direct transaction sizes.

Winner token accounts are resolved concurrently over a bounded pool and put
back into winner order before instructions are built, so instruction order
always matches selection order.
"""

from __future__ import annotations

import asyncio
import random
from dataclasses import dataclass, field

from solders.keypair import Keypair
from solders.pubkey import Pubkey

from token_giveaway.config.settings import LAMPORTS_PER_SOL, GiveawayConfig
from token_giveaway.giveaway.selection import generate_participants, select_winners
from token_giveaway.giveaway_logging import bind_identity, get_logger
from token_giveaway.ledger.assembler import TransactionAssembler
from token_giveaway.ledger.block_waiter import BlockWaiter
from token_giveaway.ledger.client import LedgerClient
from token_giveaway.ledger.lookup_table import LookupTableManager
from token_giveaway.ledger.models import InstructionBatch
from token_giveaway.ledger.token import TokenIssuer, build_transfer_instruction

logger = get_logger(__name__)


@dataclass
class GiveawaySetup:
    """Distributor identity, its token mint, and its funded source token account."""

    distributor: Keypair
    mint: Pubkey
    source_account: Pubkey


@dataclass
class GiveawayResult:
    """Outcome of one run. compressed_size is None when the lookup table never became visible."""

    mint: Pubkey
    source_account: Pubkey
    winners: list[Pubkey]
    winner_accounts: list[Pubkey]
    lookup_table: Pubkey | None = None
    compressed_size: int | None = None
    direct_size: int | None = None
    addresses: list[Pubkey] = field(default_factory=list)

    @property
    def size_saving(self) -> int | None:
        if self.compressed_size is None or self.direct_size is None:
            return None
        return self.direct_size - self.compressed_size


class GiveawayOrchestrator:
    """Drive one giveaway end to end against a ledger."""

    def __init__(
        self,
        ledger: LedgerClient,
        config: GiveawayConfig,
        *,
        rng: random.Random | None = None,
    ) -> None:
        self._ledger = ledger
        self._config = config
        self._rng = rng or random.Random(config.random_seed)
        self._assembler = TransactionAssembler(ledger, commitment=config.commitment)
        self._token = TokenIssuer(ledger, self._assembler)
        self._tables = LookupTableManager(ledger, self._assembler, lookback_slots=config.lookback_slots)
        self._waiter = BlockWaiter(
            ledger,
            poll_interval_sec=config.block_poll_interval_sec,
            timeout_sec=config.block_wait_timeout_sec,
        )

    async def fund(self, identity: Keypair) -> int:
        """Airdrop the configured amount, wait for finality, return the new balance (lamports)."""
        signature = await self._ledger.request_airdrop(identity.pubkey(), self._config.airdrop_lamports)
        reference = await self._ledger.latest_block_reference()
        await self._ledger.confirm_transaction(reference, signature, "finalized")
        balance = await self._ledger.get_balance(identity.pubkey())
        bind_identity(identity.pubkey()).info("identity_funded", balance_lamports=balance)
        print(f"New balance of {identity.pubkey()} is {balance / LAMPORTS_PER_SOL}")
        return balance

    async def create_giveaway(self) -> GiveawaySetup:
        """Fund a fresh distributor, create the token, mint the supply to the distributor's account."""
        distributor = Keypair()
        await self.fund(distributor)
        mint = await self._token.create_mint(distributor, self._config.token_decimals)
        print(f"Created giveaway token, mint address: {mint}")
        source = await self._token.get_or_create_token_account(distributor, mint, distributor.pubkey())
        await self._token.mint_to(mint, source, distributor, self._config.token_supply)
        return GiveawaySetup(distributor=distributor, mint=mint, source_account=source)

    def pick_winners(self) -> list[Pubkey]:
        participants = generate_participants(self._config.participant_count)
        winners = select_winners(participants, self._config.winner_count, self._rng)
        logger.info(
            "winners_selected",
            participant_count=len(participants),
            winner_count=len(winners),
        )
        return winners

    async def resolve_winner_accounts(self, setup: GiveawaySetup, winners: list[Pubkey]) -> list[Pubkey]:
        """Token account per winner, in winner order; at most resolve_concurrency requests in flight."""
        sem = asyncio.Semaphore(self._config.resolve_concurrency)

        async def _resolve(index: int, owner: Pubkey) -> tuple[int, Pubkey]:
            async with sem:
                account = await self._token.get_or_create_token_account(setup.distributor, setup.mint, owner)
            return index, account

        tasks = [asyncio.ensure_future(_resolve(i, w)) for i, w in enumerate(winners)]
        resolved: list[tuple[int, Pubkey]] = []
        try:
            for finished in asyncio.as_completed(tasks):
                resolved.append(await finished)
        except BaseException:
            for task in tasks:
                task.cancel()
            raise
        resolved.sort(key=lambda item: item[0])
        return [account for _, account in resolved]

    def build_batch(self, setup: GiveawaySetup, winner_accounts: list[Pubkey]) -> InstructionBatch:
        """Transfers of transfer_amount to each winner account; addresses seeded with distributor, mint, source."""
        batch = InstructionBatch()
        batch.add_addresses([setup.distributor.pubkey(), setup.mint, setup.source_account])
        for account in winner_accounts:
            batch.add_instruction(
                build_transfer_instruction(
                    setup.source_account,
                    account,
                    setup.distributor.pubkey(),
                    self._config.transfer_amount,
                )
            )
        return batch

    async def run(self) -> GiveawayResult:
        setup = await self.create_giveaway()
        winners = self.pick_winners()
        winner_accounts = await self.resolve_winner_accounts(setup, winners)
        batch = self.build_batch(setup, winner_accounts)
        result = GiveawayResult(
            mint=setup.mint,
            source_account=setup.source_account,
            winners=winners,
            winner_accounts=winner_accounts,
            addresses=batch.addresses,
        )

        result.lookup_table = await self._tables.create_and_extend(setup.distributor, batch.addresses)
        await self._waiter.wait_for_blocks(self._config.wait_blocks)
        table = await self._tables.resolve(result.lookup_table)
        if table is None:
            logger.error("lookup_table_not_found", lookup_table=str(result.lookup_table))
            print("Couldn't find the lookup table")
            return result

        compressed = await self._assembler.build_and_submit(setup.distributor, batch.instructions, table)
        result.compressed_size = len(compressed)
        print(f"Transferring tokens with ALT: {result.compressed_size} bytes")

        direct = await self._assembler.build_and_submit(setup.distributor, batch.instructions)
        result.direct_size = len(direct)
        print(f"Transferring tokens without ALT: {result.direct_size} bytes")

        logger.info(
            "giveaway_completed",
            mint=str(setup.mint),
            lookup_table=str(result.lookup_table),
            compressed_size=result.compressed_size,
            direct_size=result.direct_size,
            size_saving=result.size_saving,
        )
        return result
