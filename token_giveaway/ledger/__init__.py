"""
Ledger layer: RPC client, v0 transaction assembly, lookup tables, block waits, SPL token ops.
"""

from token_giveaway.ledger.assembler import TransactionAssembler, build_transaction
from token_giveaway.ledger.block_waiter import BlockWaiter
from token_giveaway.ledger.client import LedgerClient
from token_giveaway.ledger.lookup_table import LookupTableManager
from token_giveaway.ledger.models import BlockReference, InstructionBatch
from token_giveaway.ledger.token import TokenIssuer

__all__ = [
    "BlockReference",
    "BlockWaiter",
    "InstructionBatch",
    "LedgerClient",
    "LookupTableManager",
    "TokenIssuer",
    "TransactionAssembler",
    "build_transaction",
]
