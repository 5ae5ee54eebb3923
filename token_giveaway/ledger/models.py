"""
Data models for transaction assembly.

BlockReference is the freshness window a transaction is bound to.
InstructionBatch keeps an ordered instruction list together with every
account address the instructions touch, in first-seen order, which is the
order the addresses are written into a lookup table.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable

from solders.hash import Hash
from solders.instruction import Instruction
from solders.pubkey import Pubkey


@dataclass(frozen=True)
class BlockReference:
    """
    Recent blockhash plus the last block height at which it is still accepted.

    A transaction signed over `blockhash` can only land while the ledger's
    block height is <= last_valid_block_height.
    """

    blockhash: Hash
    last_valid_block_height: int

    def is_expired(self, block_height: int) -> bool:
        return block_height > self.last_valid_block_height


@dataclass
class InstructionBatch:
    """Ordered instructions plus the deduplicated set of addresses they reference."""

    instructions: list[Instruction] = field(default_factory=list)
    _addresses: list[Pubkey] = field(default_factory=list, init=False, repr=False)
    _seen: set[Pubkey] = field(default_factory=set, init=False, repr=False)

    def __post_init__(self) -> None:
        initial, self.instructions = self.instructions, []
        for instruction in initial:
            self.add_instruction(instruction)

    def add_address(self, address: Pubkey) -> bool:
        """Record address; return False when it was already present (position unchanged)."""
        if address in self._seen:
            return False
        self._seen.add(address)
        self._addresses.append(address)
        return True

    def add_addresses(self, addresses: Iterable[Pubkey]) -> None:
        for address in addresses:
            self.add_address(address)

    def add_instruction(self, instruction: Instruction) -> None:
        """
        Append instruction and record each of its account keys.

        The invoked program id is not recorded: program ids must stay in the
        static key list of a v0 message and can never be loaded from a table.
        """
        self.instructions.append(instruction)
        for meta in instruction.accounts:
            self.add_address(meta.pubkey)

    @property
    def addresses(self) -> list[Pubkey]:
        return list(self._addresses)
