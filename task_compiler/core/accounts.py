"""
Account References and Deduplication

Every instruction declares the accounts it touches upfront, each with a
signer flag and a writable flag. Before a batch of instructions can share
one account table, those declarations have to be folded together:

- Each identity gets exactly one slot, no matter how often it appears
- Flags of repeated occurrences merge by logical OR, nothing more
- The program an instruction invokes is an account too (never signer, never writable)
- First-seen order is kept, since the sorter breaks ties with it

Identities are opaque: anything hashable works (solders Pubkeys, strings).
"""

from dataclasses import dataclass
from typing import Dict, Hashable, Iterable

from loguru import logger

from .errors import EmptyInputError


Identity = Hashable


@dataclass(frozen=True)
class AccountMeta:
    """
    How an instruction wants to access one account.

    Declaring access patterns upfront is what lets the compiler order
    accounts by privilege and the executor replay them later.
    """
    pubkey: Identity     # Account identity
    is_signer: bool      # Must authorize the instruction
    is_writable: bool    # Can be modified

    def merge(self, other: 'AccountMeta') -> 'AccountMeta':
        """OR the flags of another occurrence of the same account into this one."""
        if other.pubkey != self.pubkey:
            raise ValueError(f"Cannot merge {other.pubkey} into {self.pubkey}")
        return AccountMeta(
            pubkey=self.pubkey,
            is_signer=self.is_signer or other.is_signer,
            is_writable=self.is_writable or other.is_writable,
        )

    def __str__(self) -> str:
        flags = []
        if self.is_signer:
            flags.append("signer")
        if self.is_writable:
            flags.append("writable")
        flag_str = f"({', '.join(flags)})" if flags else "(readonly)"
        return f"{str(self.pubkey)[:8]}...{flag_str}"


def collect_accounts(instructions: Iterable) -> Dict[Identity, AccountMeta]:
    """
    Fold every account of every instruction into one flag-merged mapping.

    The program id of each instruction is visited first, then its account
    metas in declaration order. The returned dict iterates in first-seen
    order, which the priority sort relies on for tie-breaking.

    Raises:
        EmptyInputError: if no instructions were given
    """
    merged: Dict[Identity, AccountMeta] = {}
    count = 0

    for instruction in instructions:
        count += 1
        if instruction.program_id not in merged:
            merged[instruction.program_id] = AccountMeta(
                instruction.program_id, is_signer=False, is_writable=False
            )

        for account in instruction.accounts:
            existing = merged.get(account.pubkey)
            if existing is None:
                merged[account.pubkey] = AccountMeta(
                    account.pubkey, account.is_signer, account.is_writable
                )
            else:
                merged[account.pubkey] = existing.merge(account)

    if count == 0:
        raise EmptyInputError("Cannot compile an empty instruction list")

    logger.debug("Collected {} unique accounts from {} instructions", len(merged), count)
    return merged
