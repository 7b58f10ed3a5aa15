"""
Account Table Ordering

The compiled account table is laid out in four contiguous classes:

1. Read-write signers
2. Read-only signers
3. Read-write non-signers
4. Read-only non-signers

Only the sizes of the first three classes are recorded; the fourth is
whatever remains. Within a class, accounts keep the order in which they
were first seen, so the same input always produces the same table.
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import Dict, List, Mapping

from loguru import logger

from .accounts import AccountMeta, Identity
from .errors import CompileOverflowError, DuplicateIdentityError


MAX_CLASS_COUNT = 255   # Class counts are u8 on the wire
MAX_ACCOUNTS = 256      # Indices are u8, so 0..255


class PriorityClass(IntEnum):
    RW_SIGNER = 0
    RO_SIGNER = 1
    RW = 2
    RO_OR_NONE = 3


def priority_of(is_signer: bool, is_writable: bool) -> PriorityClass:
    if is_signer:
        return PriorityClass.RW_SIGNER if is_writable else PriorityClass.RO_SIGNER
    return PriorityClass.RW if is_writable else PriorityClass.RO_OR_NONE


def sort_accounts(merged: Mapping[Identity, AccountMeta]) -> List[AccountMeta]:
    """
    Order merged accounts by priority class.

    sorted() is stable, so entries of equal priority stay in the mapping's
    iteration order (first-seen order from collect_accounts). Nothing here
    depends on how identities hash.
    """
    return sorted(
        merged.values(),
        key=lambda meta: priority_of(meta.is_signer, meta.is_writable)
    )


@dataclass(frozen=True)
class ClassCounts:
    """
    Sizes of the first three priority classes in a sorted account table.

    Read-only non-signers are implicit: everything after rw_end.
    """
    num_rw_signers: int
    num_ro_signers: int
    num_rw: int

    @property
    def rw_signers_end(self) -> int:
        return self.num_rw_signers

    @property
    def ro_signers_end(self) -> int:
        return self.num_rw_signers + self.num_ro_signers

    @property
    def rw_end(self) -> int:
        return self.ro_signers_end + self.num_rw

    def is_signer(self, index: int) -> bool:
        return index < self.ro_signers_end

    def is_writable(self, index: int) -> bool:
        return index < self.rw_signers_end or self.ro_signers_end <= index < self.rw_end

    def priority_at(self, index: int) -> PriorityClass:
        return priority_of(self.is_signer(index), self.is_writable(index))


def count_classes(sorted_accounts: List[AccountMeta]) -> ClassCounts:
    """
    Count the read-write signers, read-only signers and read-write accounts.

    Raises:
        CompileOverflowError: if any count, or the table itself, is too
            large to be addressed with u8 values
    """
    counts = {
        PriorityClass.RW_SIGNER: 0,
        PriorityClass.RO_SIGNER: 0,
        PriorityClass.RW: 0,
        PriorityClass.RO_OR_NONE: 0,
    }
    for meta in sorted_accounts:
        counts[priority_of(meta.is_signer, meta.is_writable)] += 1

    fields = [
        ("num_rw_signers", counts[PriorityClass.RW_SIGNER]),
        ("num_ro_signers", counts[PriorityClass.RO_SIGNER]),
        ("num_rw", counts[PriorityClass.RW]),
    ]
    for name, value in fields:
        if value > MAX_CLASS_COUNT:
            logger.error("Class count {}={} exceeds {}", name, value, MAX_CLASS_COUNT)
            raise CompileOverflowError(name, value, MAX_CLASS_COUNT)

    if len(sorted_accounts) > MAX_ACCOUNTS:
        logger.error("Account table of {} entries exceeds {}", len(sorted_accounts), MAX_ACCOUNTS)
        raise CompileOverflowError("accounts", len(sorted_accounts), MAX_ACCOUNTS)

    return ClassCounts(*(value for _, value in fields))


def assign_indices(sorted_accounts: List[AccountMeta]) -> Dict[Identity, int]:
    """
    Map each identity to its 0-based position in the account table.

    Raises:
        DuplicateIdentityError: if an identity shows up twice, which
            collect_accounts should have made impossible
    """
    account_index: Dict[Identity, int] = {}
    for i, meta in enumerate(sorted_accounts):
        if meta.pubkey in account_index:
            logger.error("Duplicate identity {} at {} and {}", meta.pubkey, account_index[meta.pubkey], i)
            raise DuplicateIdentityError(meta.pubkey, account_index[meta.pubkey], i)
        account_index[meta.pubkey] = i
    return account_index
