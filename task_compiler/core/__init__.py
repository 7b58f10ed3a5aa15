"""
Task Compiler Core Components

Compiles a batch of instructions into the deduplicated, index-based
transaction format that a task queue executor replays later.
"""

from .accounts import AccountMeta, collect_accounts
from .errors import (
    CompileError,
    EmptyInputError,
    InvalidReferenceError,
    DuplicateIdentityError,
    CompileOverflowError
)
from .ordering import (
    PriorityClass,
    ClassCounts,
    priority_of,
    sort_accounts,
    count_classes,
    assign_indices,
    MAX_ACCOUNTS,
    MAX_CLASS_COUNT
)
from .transactions import (
    Instruction,
    CompiledInstruction,
    CompiledTransaction,
    RemainingAccountMeta,
    TransactionCompiler,
    compile_transaction,
    derive_remaining_accounts
)
from .pda import PDAGenerator, find_program_address, signer_seeds
from .keys import generate_keypair

__all__ = [
    'AccountMeta', 'collect_accounts',
    'CompileError', 'EmptyInputError', 'InvalidReferenceError',
    'DuplicateIdentityError', 'CompileOverflowError',
    'PriorityClass', 'ClassCounts', 'priority_of', 'sort_accounts',
    'count_classes', 'assign_indices', 'MAX_ACCOUNTS', 'MAX_CLASS_COUNT',
    'Instruction', 'CompiledInstruction', 'CompiledTransaction',
    'RemainingAccountMeta', 'TransactionCompiler', 'compile_transaction',
    'derive_remaining_accounts',
    'PDAGenerator', 'find_program_address', 'signer_seeds',
    'generate_keypair',
]
