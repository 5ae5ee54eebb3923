"""
Solana RPC access for the giveaway: the narrow surface the workflow consumes.

Wraps solana-py's AsyncClient and unwraps `.value` from every response so
callers work with solders types (Hash, Signature, Pubkey) and plain ints.
confirm_transaction implements the block-height-bounded confirmation poll:
a signature is confirmed once its status reaches the requested commitment,
and dropped once the block height passes the reference's last valid height.
"""

from __future__ import annotations

import asyncio
from typing import Any

from solana.rpc.async_api import AsyncClient
from solana.rpc.commitment import Commitment, Finalized
from solana.rpc.types import TxOpts
from solders.address_lookup_table_account import AddressLookupTableAccount
from solders.pubkey import Pubkey
from solders.signature import Signature
from solders.transaction import VersionedTransaction

from token_giveaway.core.exceptions import TransactionDroppedError, TransactionFailedError
from token_giveaway.giveaway_logging import get_logger
from token_giveaway.ledger.lookup_table_layout import lookup_table_account
from token_giveaway.ledger.models import BlockReference

logger = get_logger(__name__)

DEFAULT_CONFIRM_POLL_INTERVAL_SEC = 1.0

_COMMITMENT_RANK = {"processed": 0, "confirmed": 1, "finalized": 2}


def commitment_level(status: Any) -> int:
    """
    Rank a confirmation status: processed=0, confirmed=1, finalized=2, unknown=-1.

    Accepts plain strings and solders TransactionConfirmationStatus values
    (whose str() is e.g. "TransactionConfirmationStatus.Finalized").
    """
    if status is None:
        return -1
    name = str(status).rsplit(".", 1)[-1].strip().lower()
    return _COMMITMENT_RANK.get(name, -1)


class LedgerClient:
    """
    Async Solana RPC client used by the assembler, lookup-table manager,
    block waiter and token issuer. Owns the underlying AsyncClient.
    """

    def __init__(
        self,
        client: AsyncClient,
        *,
        commitment: Commitment = Finalized,
        confirm_poll_interval_sec: float = DEFAULT_CONFIRM_POLL_INTERVAL_SEC,
    ) -> None:
        self._client = client
        self._commitment = commitment
        self._confirm_poll_interval = confirm_poll_interval_sec

    @classmethod
    def from_url(
        cls,
        rpc_url: str,
        *,
        commitment: str = "finalized",
        confirm_poll_interval_sec: float = DEFAULT_CONFIRM_POLL_INTERVAL_SEC,
    ) -> "LedgerClient":
        level = Commitment(commitment)
        return cls(
            AsyncClient(rpc_url, commitment=level),
            commitment=level,
            confirm_poll_interval_sec=confirm_poll_interval_sec,
        )

    @property
    def commitment(self) -> Commitment:
        return self._commitment

    async def close(self) -> None:
        await self._client.close()

    async def __aenter__(self) -> "LedgerClient":
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.close()

    async def latest_block_reference(self) -> BlockReference:
        resp = await self._client.get_latest_blockhash(self._commitment)
        value = resp.value
        return BlockReference(
            blockhash=value.blockhash,
            last_valid_block_height=int(value.last_valid_block_height),
        )

    async def get_slot(self) -> int:
        resp = await self._client.get_slot(self._commitment)
        return int(resp.value)

    async def get_block_height(self) -> int:
        resp = await self._client.get_block_height(self._commitment)
        return int(resp.value)

    async def get_blocks(self, start_slot: int, end_slot: int | None = None) -> list[int]:
        """Confirmed block slots from start_slot (inclusive) up to end_slot or the latest block."""
        resp = await self._client.get_blocks(start_slot, end_slot)
        return [int(slot) for slot in (resp.value or [])]

    async def get_balance(self, pubkey: Pubkey) -> int:
        resp = await self._client.get_balance(pubkey, self._commitment)
        return int(resp.value)

    async def get_token_balance(self, token_account: Pubkey) -> int:
        """Raw token amount (base units) held by an SPL token account."""
        resp = await self._client.get_token_account_balance(token_account, self._commitment)
        return int(resp.value.amount)

    async def get_minimum_balance_for_rent_exemption(self, size: int) -> int:
        resp = await self._client.get_minimum_balance_for_rent_exemption(size, self._commitment)
        return int(resp.value)

    async def get_account_info(self, pubkey: Pubkey) -> Any | None:
        """Account (with raw `.data` bytes) or None when the account does not exist."""
        resp = await self._client.get_account_info(pubkey, self._commitment, encoding="base64")
        return resp.value

    async def request_airdrop(self, pubkey: Pubkey, lamports: int) -> Signature:
        resp = await self._client.request_airdrop(pubkey, lamports, self._commitment)
        return resp.value

    async def send_transaction(self, transaction: VersionedTransaction) -> Signature:
        """Submit a signed transaction once; RPC/preflight errors propagate."""
        opts = TxOpts(skip_confirmation=True, preflight_commitment=self._commitment)
        resp = await self._client.send_raw_transaction(bytes(transaction), opts=opts)
        signature = resp.value
        logger.debug("transaction_sent", signature=str(signature))
        return signature

    async def get_signature_status(self, signature: Signature) -> Any | None:
        resp = await self._client.get_signature_statuses([signature])
        statuses = resp.value or []
        return statuses[0] if statuses else None

    async def confirm_transaction(
        self,
        reference: BlockReference,
        signature: Signature,
        commitment: str = "finalized",
    ) -> Any:
        """
        Poll until `signature` reaches `commitment`; return its status.

        Raises TransactionFailedError if the status carries an execution error and
        TransactionDroppedError once the block height exceeds the reference's
        last_valid_block_height without the signature reaching `commitment`.
        """
        target = _COMMITMENT_RANK[str(commitment)]
        while True:
            status = await self.get_signature_status(signature)
            if status is not None:
                err = getattr(status, "err", None)
                if err is not None:
                    logger.warning("transaction_failed", signature=str(signature), err=str(err))
                    raise TransactionFailedError(signature, err)
                if commitment_level(getattr(status, "confirmation_status", None)) >= target:
                    logger.info("transaction_confirmed", signature=str(signature), commitment=str(commitment))
                    return status
            block_height = await self.get_block_height()
            if reference.is_expired(block_height):
                logger.warning(
                    "transaction_dropped",
                    signature=str(signature),
                    block_height=block_height,
                    last_valid_block_height=reference.last_valid_block_height,
                )
                raise TransactionDroppedError(signature, reference.last_valid_block_height, block_height)
            await asyncio.sleep(self._confirm_poll_interval)

    async def get_address_lookup_table(self, address: Pubkey) -> AddressLookupTableAccount | None:
        """Fetch and decode a lookup table account; None when it does not exist (yet)."""
        account = await self.get_account_info(address)
        if account is None or not getattr(account, "data", None):
            return None
        return lookup_table_account(address, bytes(account.data))
