"""
SPL token operations used by the giveaway: create mint, associated token
accounts, mint_to, and transfer instructions.

Instructions come from spl.token (solana-py); every transaction goes through
TransactionAssembler so it is a v0 transaction confirmed like all the others.
"""

from __future__ import annotations

from solders.instruction import Instruction
from solders.keypair import Keypair
from solders.pubkey import Pubkey
from solders.system_program import CreateAccountParams, create_account
from spl.token.constants import MINT_LEN, TOKEN_PROGRAM_ID
from spl.token.instructions import (
    InitializeMintParams,
    MintToParams,
    TransferParams,
    create_associated_token_account,
    get_associated_token_address,
    initialize_mint,
    mint_to,
    transfer,
)

from token_giveaway.giveaway_logging import get_logger
from token_giveaway.ledger.assembler import TransactionAssembler
from token_giveaway.ledger.client import LedgerClient

logger = get_logger(__name__)


def build_transfer_instruction(source: Pubkey, dest: Pubkey, authority: Pubkey, amount: int) -> Instruction:
    """SPL Transfer of `amount` base units from source to dest, signed by authority."""
    return transfer(
        TransferParams(
            program_id=TOKEN_PROGRAM_ID,
            source=source,
            dest=dest,
            owner=authority,
            amount=amount,
        )
    )


class TokenIssuer:
    """Mint and distribute an SPL token on behalf of a payer identity."""

    def __init__(self, ledger: LedgerClient, assembler: TransactionAssembler) -> None:
        self._ledger = ledger
        self._assembler = assembler

    async def create_mint(self, authority: Keypair, decimals: int) -> Pubkey:
        """Create and initialize a mint with authority as mint and freeze authority."""
        mint = Keypair()
        lamports = await self._ledger.get_minimum_balance_for_rent_exemption(MINT_LEN)
        instructions = [
            create_account(
                CreateAccountParams(
                    from_pubkey=authority.pubkey(),
                    to_pubkey=mint.pubkey(),
                    lamports=lamports,
                    space=MINT_LEN,
                    owner=TOKEN_PROGRAM_ID,
                )
            ),
            initialize_mint(
                InitializeMintParams(
                    decimals=decimals,
                    program_id=TOKEN_PROGRAM_ID,
                    mint=mint.pubkey(),
                    mint_authority=authority.pubkey(),
                    freeze_authority=authority.pubkey(),
                )
            ),
        ]
        await self._assembler.build_and_submit(authority, instructions, signers=[mint])
        logger.info("token_mint_created", mint=str(mint.pubkey()), decimals=decimals)
        return mint.pubkey()

    async def get_or_create_token_account(self, payer: Keypair, mint: Pubkey, owner: Pubkey) -> Pubkey:
        """Associated token account of owner for mint; created (paid by payer) when missing."""
        address = get_associated_token_address(owner, mint)
        if await self._ledger.get_account_info(address) is not None:
            return address
        ix = create_associated_token_account(payer.pubkey(), owner, mint)
        await self._assembler.build_and_submit(payer, [ix])
        logger.debug("token_account_created", token_account=str(address), owner=str(owner))
        return address

    async def mint_to(self, mint: Pubkey, account: Pubkey, authority: Keypair, amount: int) -> None:
        ix = mint_to(
            MintToParams(
                program_id=TOKEN_PROGRAM_ID,
                mint=mint,
                dest=account,
                mint_authority=authority.pubkey(),
                amount=amount,
            )
        )
        await self._assembler.build_and_submit(authority, [ix])
        logger.info("token_minted", mint=str(mint), token_account=str(account), amount=amount)
