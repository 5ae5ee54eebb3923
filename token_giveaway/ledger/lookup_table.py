"""
Address lookup table lifecycle: create, extend, resolve.

The table address is derived from (authority, recent slot) before anything is
sent, so it is known even though the table's contents are not readable until
a few blocks after the creating transaction (see block_waiter).
"""

from __future__ import annotations

from typing import Iterable

from solders.address_lookup_table_account import AddressLookupTableAccount
from solders.keypair import Keypair
from solders.pubkey import Pubkey

from token_giveaway.core.exceptions import EmptySlotHistoryError, LookupTableNotFoundError
from token_giveaway.giveaway_logging import get_logger
from token_giveaway.ledger.assembler import TransactionAssembler
from token_giveaway.ledger.client import LedgerClient
from token_giveaway.ledger.lookup_table_layout import (
    LOOKUP_TABLE_MAX_ADDRESSES,
    MAX_ADDRESSES_PER_EXTEND,
    create_lookup_table_instruction,
    extend_lookup_table_instruction,
)

logger = get_logger(__name__)

DEFAULT_LOOKBACK_SLOTS = 200


def _dedupe(addresses: Iterable[Pubkey]) -> list[Pubkey]:
    seen: set[Pubkey] = set()
    out: list[Pubkey] = []
    for address in addresses:
        if address not in seen:
            seen.add(address)
            out.append(address)
    return out


def _chunks(addresses: list[Pubkey], size: int) -> list[list[Pubkey]]:
    return [addresses[i : i + size] for i in range(0, len(addresses), size)]


class LookupTableManager:
    """Create, extend and resolve address lookup tables owned by an authority."""

    def __init__(
        self,
        ledger: LedgerClient,
        assembler: TransactionAssembler,
        *,
        lookback_slots: int = DEFAULT_LOOKBACK_SLOTS,
    ) -> None:
        self._ledger = ledger
        self._assembler = assembler
        self._lookback_slots = lookback_slots

    async def recent_slot(self) -> int:
        """Oldest block slot within the lookback window; anchors table creation."""
        current_slot = await self._ledger.get_slot()
        start_slot = max(0, current_slot - self._lookback_slots)
        slots = await self._ledger.get_blocks(start_slot)
        if not slots:
            logger.error("lookup_table_no_recent_slot", current_slot=current_slot, start_slot=start_slot)
            raise EmptySlotHistoryError(start_slot)
        return slots[0]

    async def create_and_extend(self, authority: Keypair, addresses: Iterable[Pubkey]) -> Pubkey:
        """
        Create a table and fill it with `addresses` (deduplicated, first-seen order).

        Create and the first extend go out in one uncompressed transaction; any
        addresses beyond MAX_ADDRESSES_PER_EXTEND follow in extend-only transactions.
        Returns the table address. Contents may not be readable yet.
        """
        unique = _dedupe(addresses)
        if len(unique) > LOOKUP_TABLE_MAX_ADDRESSES:
            raise ValueError(f"lookup table holds at most {LOOKUP_TABLE_MAX_ADDRESSES} addresses, got {len(unique)}")
        slot = await self.recent_slot()
        create_ix, table = create_lookup_table_instruction(authority.pubkey(), authority.pubkey(), slot)
        chunks = _chunks(unique, MAX_ADDRESSES_PER_EXTEND)
        instructions = [create_ix]
        if chunks:
            instructions.append(extend_lookup_table_instruction(table, authority.pubkey(), authority.pubkey(), chunks[0]))
        await self._assembler.build_and_submit(authority, instructions)
        for chunk in chunks[1:]:
            ix = extend_lookup_table_instruction(table, authority.pubkey(), authority.pubkey(), chunk)
            await self._assembler.build_and_submit(authority, [ix])
        logger.info("lookup_table_created", lookup_table=str(table), recent_slot=slot, address_count=len(unique))
        print(f"Created and extended the lookup table, address: {table}")
        return table

    async def extend(self, authority: Keypair, table: Pubkey, addresses: Iterable[Pubkey]) -> int:
        """
        Append addresses not already stored in `table`; return how many were added.

        Re-extending with addresses already present is a no-op, so index
        assignment stays that of first insertion.
        """
        current = await self.require(table)
        existing = set(current.addresses)
        missing = [a for a in _dedupe(addresses) if a not in existing]
        if not missing:
            logger.info("lookup_table_extend_noop", lookup_table=str(table))
            return 0
        if len(existing) + len(missing) > LOOKUP_TABLE_MAX_ADDRESSES:
            raise ValueError(f"lookup table holds at most {LOOKUP_TABLE_MAX_ADDRESSES} addresses")
        for chunk in _chunks(missing, MAX_ADDRESSES_PER_EXTEND):
            ix = extend_lookup_table_instruction(table, authority.pubkey(), authority.pubkey(), chunk)
            await self._assembler.build_and_submit(authority, [ix])
        logger.info("lookup_table_extended", lookup_table=str(table), added=len(missing))
        return len(missing)

    async def resolve(self, table: Pubkey) -> AddressLookupTableAccount | None:
        """Table account ready for message compilation, or None when not visible."""
        account = await self._ledger.get_address_lookup_table(table)
        if account is None:
            logger.warning("lookup_table_unresolved", lookup_table=str(table))
        return account

    async def require(self, table: Pubkey) -> AddressLookupTableAccount:
        account = await self.resolve(table)
        if account is None:
            raise LookupTableNotFoundError(table)
        return account
