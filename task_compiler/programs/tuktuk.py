"""
Task Queue Requests

A compiled transaction becomes useful once it is queued as a task: the
task queue program stores it, and a cranker replays it when its trigger
fires. This module builds the queue_task_v0 instruction around a
compiled transaction:

- Fixed accounts of the queue call (payer, queue authority, queue, task...)
- The compiled transaction's remaining accounts appended after them
- Instruction data = discriminator + encoded QueueTaskArgsV0

Encoding the arguments is the job of an external fixed-format codec that
the caller passes in; only the argument shapes and their ranges live here.
"""

from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Tuple, Union

from loguru import logger
from solders.pubkey import Pubkey

from ..core.accounts import AccountMeta
from ..core.buffers import as_bytes
from ..core.pda import find_program_address
from ..core.transactions import CompiledTransaction, Instruction, RemainingAccountMeta


TUKTUK_PROGRAM_ID = Pubkey.from_string("tuktukUrfhXT6ZT77QTU8RQtvgL967uRuVagWF57zVA")
SYSTEM_PROGRAM_ID = Pubkey.from_string("11111111111111111111111111111111")

# queue_task_v0 discriminator from the task queue program's IDL
QUEUE_TASK_V0_DISCRIMINATOR = bytes([177, 95, 195, 252, 241, 2, 178, 88])

U8_MAX = 2**8 - 1
U16_MAX = 2**16 - 1
U64_MAX = 2**64 - 1
I64_MIN, I64_MAX = -2**63, 2**63 - 1


@dataclass(frozen=True)
class TriggerNow:
    """Run as soon as a cranker picks the task up."""


@dataclass(frozen=True)
class TriggerTimestamp:
    """Run at or after a unix timestamp."""
    unix_timestamp: int

    def __post_init__(self):
        if not I64_MIN <= self.unix_timestamp <= I64_MAX:
            raise ValueError(f"Timestamp {self.unix_timestamp} does not fit in i64")


TriggerV0 = Union[TriggerNow, TriggerTimestamp]


@dataclass(frozen=True)
class CompiledV0:
    """Task carries its transaction inline."""
    transaction: CompiledTransaction


@dataclass(frozen=True)
class RemoteV0:
    """Task transaction is fetched from a URL and must be signed by `signer`."""
    url: str
    signer: Pubkey


TransactionSourceV0 = Union[CompiledV0, RemoteV0]


@dataclass(frozen=True)
class QueueTaskArgsV0:
    """
    Arguments of queue_task_v0.

    Field order matches the program's IDL.
    """
    id: int                               # u16 task id within the queue
    trigger: TriggerV0
    transaction: TransactionSourceV0
    crank_reward: Optional[int] = None    # u64 lamports, queue default if None
    free_tasks: int = 0                   # u8 follow-up tasks the crank may queue
    description: str = ""

    def __post_init__(self):
        if not 0 <= self.id <= U16_MAX:
            raise ValueError(f"Task id {self.id} does not fit in u16")
        if self.crank_reward is not None and not 0 <= self.crank_reward <= U64_MAX:
            raise ValueError(f"Crank reward {self.crank_reward} does not fit in u64")
        if not 0 <= self.free_tasks <= U8_MAX:
            raise ValueError(f"free_tasks {self.free_tasks} does not fit in u8")


@dataclass(frozen=True)
class QueueTaskAccounts:
    """Fixed accounts of a queue_task_v0 call, in the order the program expects."""
    payer: Pubkey
    queue_authority: Pubkey
    task_queue_authority: Pubkey
    task_queue: Pubkey
    task: Pubkey
    system_program: Pubkey = SYSTEM_PROGRAM_ID

    def to_account_metas(self) -> List[AccountMeta]:
        return [
            AccountMeta(self.payer, is_signer=True, is_writable=True),
            AccountMeta(self.queue_authority, is_signer=True, is_writable=False),
            AccountMeta(self.task_queue_authority, is_signer=False, is_writable=False),
            AccountMeta(self.task_queue, is_signer=False, is_writable=True),
            AccountMeta(self.task, is_signer=False, is_writable=True),
            AccountMeta(self.system_program, is_signer=False, is_writable=False),
        ]


def task_key(task_queue: Pubkey, task_id: int,
             program_id: Pubkey = TUKTUK_PROGRAM_ID) -> Pubkey:
    """Task PDA: seeds ["task", task_queue, task_id as u16 little-endian]."""
    if not 0 <= task_id <= U16_MAX:
        raise ValueError(f"Task id {task_id} does not fit in u16")
    return find_program_address(
        [b"task", bytes(task_queue), task_id.to_bytes(2, 'little')], program_id
    )[0]


def task_queue_authority_key(task_queue: Pubkey, queue_authority: Pubkey,
                             program_id: Pubkey = TUKTUK_PROGRAM_ID) -> Pubkey:
    """Registration PDA proving queue_authority may queue on task_queue."""
    return find_program_address(
        [b"task_queue_authority", bytes(task_queue), bytes(queue_authority)], program_id
    )[0]


def build_queue_task_instruction(accounts: QueueTaskAccounts,
                                 args: QueueTaskArgsV0,
                                 remaining_accounts: Sequence[RemainingAccountMeta],
                                 encode: Callable[[QueueTaskArgsV0], bytes],
                                 program_id: Pubkey = TUKTUK_PROGRAM_ID) -> Instruction:
    """
    Build the queue_task_v0 instruction for a task.

    Args:
        accounts: Fixed accounts of the queue call
        args: Task arguments, usually wrapping a CompiledV0 transaction
        remaining_accounts: Accounts derived alongside the compiled transaction
        encode: External codec serializing args to the program's format
        program_id: Task queue program

    Returns:
        Instruction whose accounts are the fixed accounts followed by the
        remaining accounts
    """
    metas = accounts.to_account_metas()
    metas.extend(remaining.to_account_meta() for remaining in remaining_accounts)

    data = QUEUE_TASK_V0_DISCRIMINATOR + as_bytes(encode(args), "Encoded queue args")
    logger.debug(
        "Queue task {} ({!r}): {} accounts, {} bytes of data",
        args.id, args.description, len(metas), len(data)
    )
    return Instruction(program_id=program_id, accounts=tuple(metas), data=data)


def queue_compiled_task(accounts: QueueTaskAccounts,
                        task_id: int,
                        trigger: TriggerV0,
                        compiled: Tuple[CompiledTransaction, List[RemainingAccountMeta]],
                        encode: Callable[[QueueTaskArgsV0], bytes],
                        description: str = "",
                        crank_reward: Optional[int] = None,
                        free_tasks: int = 0) -> Instruction:
    """Wrap the output of compile_transaction into a queue_task_v0 instruction."""
    transaction, remaining_accounts = compiled
    args = QueueTaskArgsV0(
        id=task_id,
        trigger=trigger,
        transaction=CompiledV0(transaction),
        crank_reward=crank_reward,
        free_tasks=free_tasks,
        description=description,
    )
    return build_queue_task_instruction(accounts, args, remaining_accounts, encode)
