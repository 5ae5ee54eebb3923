"""
Versioned (v0) transaction assembly, submission and confirmation.

- Fetches a fresh block reference right before compiling, so the transaction is
  bound to the newest blockhash available.
- With a lookup table, non-signer account keys found in the table are encoded
  as table indexes; everything else stays in the static key list.
- Submits once (no resubmission) and polls for finality bounded by the
  reference's last valid block height.
"""

from __future__ import annotations

from typing import Sequence

from solders.address_lookup_table_account import AddressLookupTableAccount
from solders.instruction import Instruction
from solders.keypair import Keypair
from solders.message import MessageV0
from solders.transaction import VersionedTransaction

from token_giveaway.giveaway_logging import get_logger
from token_giveaway.ledger.client import LedgerClient
from token_giveaway.ledger.models import BlockReference

logger = get_logger(__name__)


def build_transaction(
    payer: Keypair,
    instructions: Sequence[Instruction],
    reference: BlockReference,
    table: AddressLookupTableAccount | None = None,
    signers: Sequence[Keypair] = (),
) -> VersionedTransaction:
    """Compile and sign a v0 transaction. No network access."""
    tables = [table] if table is not None else []
    message = MessageV0.try_compile(
        payer.pubkey(),
        list(instructions),
        tables,
        reference.blockhash,
    )
    keypairs = [payer]
    for signer in signers:
        if signer.pubkey() != payer.pubkey():
            keypairs.append(signer)
    return VersionedTransaction(message, keypairs)


class TransactionAssembler:
    """Build, sign, submit and confirm v0 transactions for a fee payer."""

    def __init__(self, ledger: LedgerClient, *, commitment: str = "finalized") -> None:
        self._ledger = ledger
        self._commitment = commitment

    async def submit(
        self,
        payer: Keypair,
        instructions: Sequence[Instruction],
        table: AddressLookupTableAccount | None = None,
        *,
        signers: Sequence[Keypair] = (),
    ) -> VersionedTransaction:
        """Build against a fresh block reference, send, confirm; return the signed transaction."""
        if not instructions:
            raise ValueError("transaction needs at least one instruction")
        reference = await self._ledger.latest_block_reference()
        transaction = build_transaction(payer, instructions, reference, table, signers)
        signature = await self._ledger.send_transaction(transaction)
        await self._ledger.confirm_transaction(reference, signature, self._commitment)
        logger.info(
            "transaction_finalized",
            signature=str(signature),
            instruction_count=len(instructions),
            lookup_table=str(table.key) if table is not None else None,
            size_bytes=len(bytes(transaction)),
        )
        print(f"Transaction id: {signature}")
        return transaction

    async def build_and_submit(
        self,
        payer: Keypair,
        instructions: Sequence[Instruction],
        table: AddressLookupTableAccount | None = None,
        *,
        signers: Sequence[Keypair] = (),
    ) -> bytes:
        """Same as submit(); returns the serialized transaction (for size comparison only)."""
        transaction = await self.submit(payer, instructions, table, signers=signers)
        return bytes(transaction)
