"""
Tests for lookup table instruction encoding and account decoding.
"""

from __future__ import annotations

import struct

import pytest
from solders.keypair import Keypair
from solders.pubkey import Pubkey
from solders.system_program import ID as SYSTEM_PROGRAM_ID

from token_giveaway.core.exceptions import InvalidAccountDataError
from token_giveaway.ledger.lookup_table_layout import (
    ADDRESS_LOOKUP_TABLE_PROGRAM_ID,
    create_lookup_table_instruction,
    derive_lookup_table_address,
    extend_lookup_table_instruction,
    lookup_table_account,
)

AUTHORITY = Keypair().pubkey()


def test_create_lookup_table_instruction_layout():
    """CreateLookupTable: tag 0, u64 slot, u8 bump; table w, authority s, payer s+w, system program."""
    ix, table = create_lookup_table_instruction(AUTHORITY, AUTHORITY, 812)
    expected_table, bump = Pubkey.find_program_address(
        [bytes(AUTHORITY), (812).to_bytes(8, "little")], ADDRESS_LOOKUP_TABLE_PROGRAM_ID
    )
    assert table == expected_table
    assert ix.program_id == ADDRESS_LOOKUP_TABLE_PROGRAM_ID
    assert bytes(ix.data) == struct.pack("<IQB", 0, 812, bump)
    metas = ix.accounts
    assert [m.pubkey for m in metas] == [table, AUTHORITY, AUTHORITY, SYSTEM_PROGRAM_ID]
    assert metas[0].is_writable and not metas[0].is_signer
    assert metas[1].is_signer
    assert metas[2].is_signer and metas[2].is_writable


def test_create_lookup_table_address_depends_on_slot():
    _, a = create_lookup_table_instruction(AUTHORITY, AUTHORITY, 812)
    _, b = create_lookup_table_instruction(AUTHORITY, AUTHORITY, 813)
    assert a != b


def test_extend_lookup_table_instruction_layout():
    """ExtendLookupTable: tag 2, u64 count, packed addresses in order."""
    table, _ = derive_lookup_table_address(AUTHORITY, 5)
    addresses = [Keypair().pubkey() for _ in range(3)]
    ix = extend_lookup_table_instruction(table, AUTHORITY, AUTHORITY, addresses)
    data = bytes(ix.data)
    assert data[:12] == struct.pack("<IQ", 2, 3)
    assert data[12:] == b"".join(bytes(a) for a in addresses)
    assert ix.accounts[0].pubkey == table


def test_extend_lookup_table_instruction_rejects_empty():
    table, _ = derive_lookup_table_address(AUTHORITY, 5)
    with pytest.raises(ValueError):
        extend_lookup_table_instruction(table, AUTHORITY, AUTHORITY, [])


def test_lookup_table_account_keeps_insertion_order(table_data):
    """Decoded addresses keep their stored positions (index = position)."""
    addresses = [Keypair().pubkey() for _ in range(4)]
    table, _ = derive_lookup_table_address(AUTHORITY, 1)
    account = lookup_table_account(table, table_data(addresses, authority=AUTHORITY))
    assert account.key == table
    assert list(account.addresses) == addresses


def test_lookup_table_account_frozen_authority(table_data):
    table, _ = derive_lookup_table_address(AUTHORITY, 1)
    account = lookup_table_account(table, table_data([], authority=None))
    assert list(account.addresses) == []


def test_lookup_table_account_too_short():
    table, _ = derive_lookup_table_address(AUTHORITY, 1)
    with pytest.raises(InvalidAccountDataError):
        lookup_table_account(table, b"\x01\x00\x00\x00")


def test_lookup_table_account_uninitialized(table_data):
    table, _ = derive_lookup_table_address(AUTHORITY, 1)
    with pytest.raises(InvalidAccountDataError):
        lookup_table_account(table, table_data([], authority=AUTHORITY, type_tag=0))
