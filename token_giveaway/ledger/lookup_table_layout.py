"""
Address lookup table program: instruction encoding and account decoding.

solders provides the program id, the table address derivation and the
account layout (AddressLookupTable). It has no builders for the program's
instructions, so CreateLookupTable and ExtendLookupTable are packed here:
bincode, a u32 little-endian variant tag followed by the variant's fields.
"""

from __future__ import annotations

import struct

from solders.address_lookup_table_account import (
    ID as ADDRESS_LOOKUP_TABLE_PROGRAM_ID,
    LOOKUP_TABLE_MAX_ADDRESSES,
    AddressLookupTable,
    AddressLookupTableAccount,
    derive_lookup_table_address,
)
from solders.instruction import AccountMeta, Instruction
from solders.pubkey import Pubkey
from solders.system_program import ID as SYSTEM_PROGRAM_ID

from token_giveaway.core.exceptions import InvalidAccountDataError

__all__ = [
    "ADDRESS_LOOKUP_TABLE_PROGRAM_ID",
    "LOOKUP_TABLE_MAX_ADDRESSES",
    "MAX_ADDRESSES_PER_EXTEND",
    "create_lookup_table_instruction",
    "derive_lookup_table_address",
    "extend_lookup_table_instruction",
    "lookup_table_account",
]

CREATE_LOOKUP_TABLE_TAG = 0
EXTEND_LOOKUP_TABLE_TAG = 2

# Max addresses a single extend instruction can carry and still fit one transaction
MAX_ADDRESSES_PER_EXTEND = 30


def _table_accounts(table: Pubkey, authority: Pubkey, payer: Pubkey) -> list[AccountMeta]:
    return [
        AccountMeta(pubkey=table, is_signer=False, is_writable=True),
        AccountMeta(pubkey=authority, is_signer=True, is_writable=False),
        AccountMeta(pubkey=payer, is_signer=True, is_writable=True),
        AccountMeta(pubkey=SYSTEM_PROGRAM_ID, is_signer=False, is_writable=False),
    ]


def create_lookup_table_instruction(
    authority: Pubkey,
    payer: Pubkey,
    recent_slot: int,
) -> tuple[Instruction, Pubkey]:
    """Build CreateLookupTable. Returns (Instruction, lookup_table_address)."""
    table, bump = derive_lookup_table_address(authority, recent_slot)
    data = struct.pack("<IQB", CREATE_LOOKUP_TABLE_TAG, recent_slot, bump)
    ix = Instruction(
        program_id=ADDRESS_LOOKUP_TABLE_PROGRAM_ID,
        data=data,
        accounts=_table_accounts(table, authority, payer),
    )
    return ix, table


def extend_lookup_table_instruction(
    table: Pubkey,
    authority: Pubkey,
    payer: Pubkey,
    addresses: list[Pubkey],
) -> Instruction:
    """Build ExtendLookupTable appending `addresses` (order preserved) to `table`."""
    if not addresses:
        raise ValueError("extend requires at least one address")
    data = bytearray(struct.pack("<IQ", EXTEND_LOOKUP_TABLE_TAG, len(addresses)))
    for address in addresses:
        data.extend(bytes(address))
    return Instruction(
        program_id=ADDRESS_LOOKUP_TABLE_PROGRAM_ID,
        data=bytes(data),
        accounts=_table_accounts(table, authority, payer),
    )


def lookup_table_account(address: Pubkey, data: bytes) -> AddressLookupTableAccount:
    """Decode raw table account data into the form MessageV0.try_compile accepts."""
    try:
        table = AddressLookupTable.deserialize(data)
    except Exception as e:
        raise InvalidAccountDataError(f"lookup table {address}: {e}") from e
    return AddressLookupTableAccount(address, list(table.addresses))
