"""
Compiled Transactions for Deferred Execution

A batch of instructions is compiled into a compact form that a separate
executor can replay later:
- All accounts referenced by any instruction are collected into one table
- The table is ordered by privilege: rw signers, ro signers, rw, ro
- Instructions reference accounts by table index instead of by identity
- Signer seed sets travel alongside, so the executor can sign for PDAs

The executor also needs the table as a plain list of accounts to attach
to its own call ("remaining accounts"). Those are derived from table
position alone and never marked as signers: signing authority is proven
with the seed sets at execution time.

Byte layout is not decided here. Callers hand the structures below to
whatever fixed-format codec the executor expects.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Sequence, Set, Tuple

from loguru import logger

from .accounts import AccountMeta, Identity, collect_accounts
from .buffers import BUFFER_TYPES, as_bytes
from .errors import CompileOverflowError, DuplicateIdentityError, InvalidReferenceError
from .ordering import ClassCounts, assign_indices, count_classes, sort_accounts


SeedSet = Tuple[bytes, ...]


@dataclass(frozen=True)
class Instruction:
    """
    High-level instruction before compilation to indices.

    This is the developer-friendly format for building a task. Accounts
    and data are snapshotted into immutable values on construction.
    """
    program_id: Identity                # Program to invoke
    accounts: Tuple[AccountMeta, ...]   # Accounts with access metadata
    data: bytes = b""                   # Opaque instruction payload

    def __post_init__(self):
        object.__setattr__(self, 'accounts', tuple(self.accounts))
        object.__setattr__(self, 'data', as_bytes(self.data, "Instruction data"))

    def __str__(self) -> str:
        return f"Instruction({str(self.program_id)[:8]}..., {len(self.accounts)} accounts, {len(self.data)} bytes)"


@dataclass(frozen=True)
class CompiledInstruction:
    """
    Instruction compiled to reference accounts by index.

    Instead of embedding full account keys, we reference them by their
    position in the compiled transaction's account table.
    """
    program_id_index: int           # Index into accounts for program
    accounts: Tuple[int, ...]       # Indices into accounts
    data: bytes                     # Program-specific instruction data

    def __str__(self) -> str:
        return f"CompiledInstruction(program_id_index={self.program_id_index}, accounts={list(self.accounts)}, data_len={len(self.data)})"


@dataclass(frozen=True)
class RemainingAccountMeta:
    """
    One entry of the account list an executor attaches when replaying.

    Writability comes from table position. There is no signer flag:
    these accounts are for data access only.
    """
    pubkey: Identity
    is_writable: bool

    @property
    def is_signer(self) -> bool:
        return False

    def to_account_meta(self) -> AccountMeta:
        return AccountMeta(self.pubkey, is_signer=False, is_writable=self.is_writable)


@dataclass(frozen=True)
class CompiledTransaction:
    """
    Deduplicated, index-based encoding of a batch of instructions.

    Field order follows what the executor deserializes: the three class
    counts, the account table, the compiled instructions, the signer seeds.
    """
    num_rw_signers: int
    num_ro_signers: int
    num_rw: int
    accounts: Tuple[Identity, ...]
    instructions: Tuple[CompiledInstruction, ...]
    signer_seeds: Tuple[SeedSet, ...] = field(default_factory=tuple)

    @property
    def counts(self) -> ClassCounts:
        return ClassCounts(self.num_rw_signers, self.num_ro_signers, self.num_rw)

    def validate(self) -> None:
        """
        Check the structural invariants an executor relies on.

        Raises:
            CompileOverflowError: class counts exceed the table length
            DuplicateIdentityError: an identity occupies two table slots
            InvalidReferenceError: an instruction index is out of range
        """
        counts = self.counts
        if counts.rw_end > len(self.accounts):
            raise CompileOverflowError("class counts", counts.rw_end, len(self.accounts))

        seen: Dict[Identity, int] = {}
        for i, pubkey in enumerate(self.accounts):
            if pubkey in seen:
                raise DuplicateIdentityError(pubkey, seen[pubkey], i)
            seen[pubkey] = i

        for instruction in self.instructions:
            for index in (instruction.program_id_index, *instruction.accounts):
                if not 0 <= index < len(self.accounts):
                    raise InvalidReferenceError(
                        index, f"Index {index} out of range for {len(self.accounts)} accounts"
                    )

    def signer_accounts(self) -> Set[Identity]:
        """Accounts in the two signer classes."""
        return set(self.accounts[:self.counts.ro_signers_end])

    def writable_accounts(self) -> Set[Identity]:
        """
        Accounts this transaction can modify.

        Executors use this to detect conflicts between queued tasks:
        two tasks writing the same account cannot run side by side.
        """
        counts = self.counts
        return {
            pubkey for i, pubkey in enumerate(self.accounts)
            if counts.is_writable(i)
        }

    def readonly_accounts(self) -> Set[Identity]:
        """Accounts this transaction only reads from."""
        return set(self.accounts) - self.writable_accounts()

    def decompile(self) -> List[Instruction]:
        """
        Rebuild the instruction list the way an executor replays it.

        Flags come from each account's table position, i.e. the merged
        flags across the whole batch, not the flags of the individual
        occurrence that was compiled.
        """
        self.validate()
        counts = self.counts

        def meta(index: int) -> AccountMeta:
            return AccountMeta(
                self.accounts[index],
                is_signer=counts.is_signer(index),
                is_writable=counts.is_writable(index),
            )

        return [
            Instruction(
                program_id=self.accounts[instruction.program_id_index],
                accounts=tuple(meta(i) for i in instruction.accounts),
                data=instruction.data,
            )
            for instruction in self.instructions
        ]

    def to_dict(self) -> Dict[str, Any]:
        """Plain-JSON view, for display and debugging."""
        return {
            "num_rw_signers": self.num_rw_signers,
            "num_ro_signers": self.num_ro_signers,
            "num_rw": self.num_rw,
            "accounts": [str(pubkey) for pubkey in self.accounts],
            "instructions": [
                {
                    "program_id_index": instruction.program_id_index,
                    "accounts": list(instruction.accounts),
                    "data": instruction.data.hex(),
                }
                for instruction in self.instructions
            ],
            "signer_seeds": [[seed.hex() for seed in seed_set] for seed_set in self.signer_seeds],
        }


def derive_remaining_accounts(accounts: Sequence[Identity],
                              counts: ClassCounts) -> List[RemainingAccountMeta]:
    """
    Derive the trailing account list an executor must attach on replay.

    Writable iff the position falls in the rw-signer or rw range.
    """
    return [
        RemainingAccountMeta(pubkey, is_writable=counts.is_writable(i))
        for i, pubkey in enumerate(accounts)
    ]


class TransactionCompiler:
    """
    Builder for compiling a batch of instructions into one task transaction.

    This handles ordering accounts by privilege and rewriting
    instructions against the resulting account table.
    """

    def __init__(self):
        self.instructions: List[Instruction] = []
        self.signer_seeds: List[SeedSet] = []

    def add_instruction(self, instruction: Instruction) -> 'TransactionCompiler':
        """Add an instruction to the batch (fluent interface)."""
        self.instructions.append(instruction)
        return self

    def add_instructions(self, instructions: Iterable[Instruction]) -> 'TransactionCompiler':
        """Add multiple instructions at once."""
        self.instructions.extend(instructions)
        return self

    def add_signer_seeds(self, seeds: Iterable[bytes]) -> 'TransactionCompiler':
        """
        Add the seed set of one PDA signing authority.

        Which accounts a seed set authorizes is up to the caller; the
        compiler only carries the seed sets along in order.
        """
        if isinstance(seeds, BUFFER_TYPES):
            raise TypeError("Expected a sequence of seeds, got a single buffer")
        self.signer_seeds.append(tuple(as_bytes(seed, "Signer seed") for seed in seeds))
        return self

    def compile(self) -> Tuple[CompiledTransaction, List[RemainingAccountMeta]]:
        """
        Compile the batch.

        This performs the task of:
        1. Collecting all unique accounts, OR-merging their flags
        2. Ordering them by priority class, ties by first appearance
        3. Compiling instructions to use table indices
        4. Deriving the remaining accounts for the executor

        Raises:
            EmptyInputError: no instructions were added
            CompileOverflowError: too many accounts for u8 counts/indices
            InvalidReferenceError, DuplicateIdentityError: internal defects
        """
        instructions = tuple(self.instructions)

        merged = collect_accounts(instructions)
        sorted_accounts = sort_accounts(merged)
        counts = count_classes(sorted_accounts)
        account_index = assign_indices(sorted_accounts)

        compiled_instructions = []
        for instruction in instructions:
            try:
                compiled_instructions.append(CompiledInstruction(
                    program_id_index=account_index[instruction.program_id],
                    accounts=tuple(account_index[acc.pubkey] for acc in instruction.accounts),
                    data=instruction.data
                ))
            except KeyError as e:
                logger.error("Account {} missing from account table", e.args[0])
                raise InvalidReferenceError(e.args[0]) from e

        account_keys = tuple(meta.pubkey for meta in sorted_accounts)
        transaction = CompiledTransaction(
            num_rw_signers=counts.num_rw_signers,
            num_ro_signers=counts.num_ro_signers,
            num_rw=counts.num_rw,
            accounts=account_keys,
            instructions=tuple(compiled_instructions),
            signer_seeds=tuple(self.signer_seeds),
        )

        logger.debug(
            "Compiled {} instructions over {} accounts (rw_signers={}, ro_signers={}, rw={})",
            len(compiled_instructions), len(account_keys),
            counts.num_rw_signers, counts.num_ro_signers, counts.num_rw
        )
        return transaction, derive_remaining_accounts(account_keys, counts)


def compile_transaction(instructions: Iterable[Instruction],
                        signer_seeds: Iterable[Iterable[bytes]] = ()
                        ) -> Tuple[CompiledTransaction, List[RemainingAccountMeta]]:
    """
    Compile instructions and signer seed sets into a task transaction.

    Args:
        instructions: Instructions in execution order
        signer_seeds: One seed set per PDA signing authority

    Returns:
        Tuple of (compiled transaction, remaining accounts)
    """
    compiler = TransactionCompiler().add_instructions(instructions)
    for seeds in signer_seeds:
        compiler.add_signer_seeds(seeds)
    return compiler.compile()
