"""
Pytest fixtures for giveaway tests.

FakeRpc stands in for solana-py's AsyncClient: it decodes every submitted v0
transaction (resolving lookup-table indexes) and applies the handful of
system, SPL token, associated-token and lookup-table instructions the
giveaway sends, so the real assembler/manager/orchestrator code runs end to end.
"""

from __future__ import annotations

import struct
from types import SimpleNamespace
from typing import Any

import pytest
from solders.hash import Hash
from solders.keypair import Keypair
from solders.pubkey import Pubkey
from solders.system_program import ID as SYSTEM_PROGRAM_ID
from solders.transaction import VersionedTransaction
from spl.token.constants import ASSOCIATED_TOKEN_PROGRAM_ID, TOKEN_PROGRAM_ID

from token_giveaway.config.settings import GiveawayConfig
from token_giveaway.ledger.client import LedgerClient
from token_giveaway.ledger.lookup_table_layout import ADDRESS_LOOKUP_TABLE_PROGRAM_ID

BLOCKHASH_VALIDITY = 150

# Table account header: u32 type tag | u64 deactivation_slot | u64 last_extended_slot |
#                       u8 start_index | Option<Pubkey> authority | u16 padding
LOOKUP_TABLE_META_SIZE = 56
ACTIVE_DEACTIVATION_SLOT = 2**64 - 1


def encode_lookup_table(addresses: list[Pubkey], *, authority: Pubkey | None = None, type_tag: int = 1) -> bytes:
    """Raw account data of an active lookup table holding `addresses`, as the ledger stores it."""
    data = bytearray(struct.pack("<IQQB", type_tag, ACTIVE_DEACTIVATION_SLOT, 0, 0))
    if authority is None:
        data.extend(b"\x00" * 33)
    else:
        data.append(1)
        data.extend(bytes(authority))
    data.extend(b"\x00" * (LOOKUP_TABLE_META_SIZE - len(data)))
    for address in addresses:
        data.extend(bytes(address))
    return bytes(data)


def _resp(value: Any) -> SimpleNamespace:
    return SimpleNamespace(value=value)


class FakeRpc:
    """In-memory ledger with the AsyncClient method surface LedgerClient uses."""

    def __init__(self, *, slot: int = 1_000, block_height: int = 100) -> None:
        self.slot = slot
        self.block_height = block_height
        self.empty_history = False
        self.hide_tables = False
        self.lamports: dict[Pubkey, int] = {}
        self.token_balances: dict[Pubkey, int] = {}
        self.accounts: set[Pubkey] = set()
        self.tables: dict[Pubkey, list[Pubkey]] = {}
        self.table_authority: dict[Pubkey, Pubkey] = {}
        self.signatures: set[Any] = set()
        self.sent: list[VersionedTransaction] = []
        self.snapshots: list[dict[Pubkey, int]] = []
        self.closed = False

    # -- reads -----------------------------------------------------------------

    async def get_latest_blockhash(self, commitment: Any = None) -> SimpleNamespace:
        # Each read observes one more block
        self.block_height += 1
        return _resp(
            SimpleNamespace(
                blockhash=Hash.default(),
                last_valid_block_height=self.block_height + BLOCKHASH_VALIDITY,
            )
        )

    async def get_block_height(self, commitment: Any = None) -> SimpleNamespace:
        return _resp(self.block_height)

    async def get_slot(self, commitment: Any = None) -> SimpleNamespace:
        return _resp(self.slot)

    async def get_blocks(self, start_slot: int, end_slot: int | None = None, commitment: Any = None) -> SimpleNamespace:
        if self.empty_history:
            return _resp([])
        end = self.slot if end_slot is None else end_slot
        return _resp(list(range(start_slot, end + 1)))

    async def get_balance(self, pubkey: Pubkey, commitment: Any = None) -> SimpleNamespace:
        return _resp(self.lamports.get(pubkey, 0))

    async def get_token_account_balance(self, pubkey: Pubkey, commitment: Any = None) -> SimpleNamespace:
        return _resp(SimpleNamespace(amount=str(self.token_balances[pubkey])))

    async def get_minimum_balance_for_rent_exemption(self, size: int, commitment: Any = None) -> SimpleNamespace:
        return _resp(1_461_600)

    async def get_account_info(self, pubkey: Pubkey, commitment: Any = None, encoding: str = "base64") -> SimpleNamespace:
        if pubkey in self.tables:
            if self.hide_tables:
                return _resp(None)
            data = encode_lookup_table(self.tables[pubkey], authority=self.table_authority[pubkey])
            return _resp(SimpleNamespace(data=data))
        if pubkey in self.accounts:
            return _resp(SimpleNamespace(data=b"\x00" * 165))
        return _resp(None)

    async def get_signature_statuses(self, signatures: list[Any], search_transaction_history: bool = False) -> SimpleNamespace:
        return _resp(
            [
                SimpleNamespace(err=None, confirmation_status="finalized") if sig in self.signatures else None
                for sig in signatures
            ]
        )

    # -- writes ----------------------------------------------------------------

    async def request_airdrop(self, pubkey: Pubkey, lamports: int, commitment: Any = None) -> SimpleNamespace:
        self.lamports[pubkey] = self.lamports.get(pubkey, 0) + lamports
        signature = Keypair().sign_message(b"airdrop")
        self.signatures.add(signature)
        return _resp(signature)

    async def send_raw_transaction(self, txn: bytes, opts: Any = None) -> SimpleNamespace:
        tx = VersionedTransaction.from_bytes(txn)
        self._apply(tx)
        signature = tx.signatures[0]
        self.signatures.add(signature)
        self.sent.append(tx)
        self.snapshots.append(dict(self.token_balances))
        return _resp(signature)

    async def close(self) -> None:
        self.closed = True

    # -- execution -------------------------------------------------------------

    def _apply(self, tx: VersionedTransaction) -> None:
        message = tx.message
        keys = list(message.account_keys)
        writable: list[Pubkey] = []
        readonly: list[Pubkey] = []
        for lookup in getattr(message, "address_table_lookups", None) or []:
            stored = self.tables[lookup.account_key]
            writable.extend(stored[i] for i in lookup.writable_indexes)
            readonly.extend(stored[i] for i in lookup.readonly_indexes)
        keys.extend(writable)
        keys.extend(readonly)
        for ix in message.instructions:
            program = keys[ix.program_id_index]
            accounts = [keys[i] for i in ix.accounts]
            self._execute(program, accounts, bytes(ix.data))

    def _execute(self, program: Pubkey, accounts: list[Pubkey], data: bytes) -> None:
        if program == SYSTEM_PROGRAM_ID:
            self.accounts.add(accounts[1])
        elif program == TOKEN_PROGRAM_ID:
            tag = data[0]
            if tag == 0:  # InitializeMint
                self.accounts.add(accounts[0])
            elif tag == 7:  # MintTo
                amount = int.from_bytes(data[1:9], "little")
                self.token_balances[accounts[1]] = self.token_balances.get(accounts[1], 0) + amount
            elif tag == 3:  # Transfer
                amount = int.from_bytes(data[1:9], "little")
                source, dest = accounts[0], accounts[1]
                if self.token_balances.get(source, 0) < amount:
                    raise ValueError("insufficient funds")
                self.token_balances[source] -= amount
                self.token_balances[dest] = self.token_balances.get(dest, 0) + amount
            else:
                raise NotImplementedError(f"token instruction {tag}")
        elif program == ASSOCIATED_TOKEN_PROGRAM_ID:
            self.accounts.add(accounts[1])
            self.token_balances.setdefault(accounts[1], 0)
        elif program == ADDRESS_LOOKUP_TABLE_PROGRAM_ID:
            (tag,) = struct.unpack_from("<I", data, 0)
            table = accounts[0]
            if tag == 0:
                self.tables[table] = []
                self.table_authority[table] = accounts[1]
            elif tag == 2:
                (count,) = struct.unpack_from("<Q", data, 4)
                self.tables[table].extend(
                    Pubkey.from_bytes(data[12 + 32 * i : 12 + 32 * (i + 1)]) for i in range(count)
                )
            else:
                raise NotImplementedError(f"lookup table instruction {tag}")
        else:
            raise NotImplementedError(f"program {program}")


@pytest.fixture
def fake_rpc():
    return FakeRpc()


@pytest.fixture
def ledger(fake_rpc):
    """LedgerClient over FakeRpc with no polling delay."""
    return LedgerClient(fake_rpc, confirm_poll_interval_sec=0.0)


@pytest.fixture
def config():
    """Reference run: 500 supply, 20 participants, 10 winners, 2 tokens each; seeded, no delays."""
    return GiveawayConfig(
        rpc_url="http://127.0.0.1:8899",
        commitment="finalized",
        airdrop_sol=2.0,
        token_decimals=0,
        token_supply=500,
        participant_count=20,
        winner_count=10,
        transfer_amount=2,
        lookback_slots=200,
        wait_blocks=1,
        block_wait_timeout_sec=5.0,
        block_poll_interval_sec=0.0,
        confirm_poll_interval_sec=0.0,
        resolve_concurrency=4,
        random_seed=7,
    )


@pytest.fixture
def table_data():
    """Encoder for raw lookup table account bytes."""
    return encode_lookup_table
