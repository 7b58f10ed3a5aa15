"""
Scheduled GPT Oracle Queries

A worked caller of the compiler: a program that periodically asks an LLM
oracle a stored prompt. Scheduling works in two steps:

1. Build the program's own ask_gpt instruction, which needs the program's
   payer PDA as a writable signer
2. Compile it together with the payer's seed set and queue it as a task

When the task fires, the executor replays ask_gpt and signs for the payer
PDA with the carried seeds.
"""

from typing import Callable, List, Optional, Tuple

from loguru import logger
from solders.pubkey import Pubkey

from ..core.accounts import AccountMeta
from ..core.pda import PDAGenerator, find_program_address
from ..core.transactions import (
    CompiledTransaction,
    Instruction,
    RemainingAccountMeta,
    compile_transaction
)
from .anchor import sighash
from .tuktuk import (
    TUKTUK_PROGRAM_ID,
    SYSTEM_PROGRAM_ID,
    QueueTaskAccounts,
    QueueTaskArgsV0,
    TriggerV0,
    queue_compiled_task,
    task_key,
    task_queue_authority_key
)


GPT_PROGRAM_ID = Pubkey.from_string("H8Tq9DAw82BcYzeeBpm3BLisK8sQn4Ntyj3AewhNTuvj")
ORACLE_PROGRAM_ID = Pubkey.from_string("LLMrieZMpbJFwN52WgmBNMxYojrpRVYXdC1RCweEbab")

GPT_CONFIG_SEED = b"gpt_config"
PAYER_SEED = b"payer"
QUEUE_AUTHORITY_SEED = b"queue_authority"
INTERACTION_SEED = b"interaction"


class GptProgram:
    """PDAs and instructions of the GPT oracle program."""

    def __init__(self, program_id: Pubkey = GPT_PROGRAM_ID,
                 oracle_program_id: Pubkey = ORACLE_PROGRAM_ID,
                 tuktuk_program_id: Pubkey = TUKTUK_PROGRAM_ID):
        self.program_id = program_id
        self.oracle_program_id = oracle_program_id
        self.tuktuk_program_id = tuktuk_program_id
        self.pdas = PDAGenerator(program_id)

    def gpt_config(self) -> Pubkey:
        return self.pdas.address(GPT_CONFIG_SEED)

    def payer(self) -> Pubkey:
        """System-owned PDA that pays for oracle interactions."""
        return self.pdas.address(PAYER_SEED)

    def queue_authority(self) -> Pubkey:
        """PDA that signs the queue_task_v0 call."""
        return self.pdas.address(QUEUE_AUTHORITY_SEED)

    def interaction(self, context_account: Pubkey) -> Pubkey:
        """Oracle-owned interaction PDA for our payer and a context account."""
        return find_program_address(
            [INTERACTION_SEED, bytes(self.payer()), bytes(context_account)],
            self.oracle_program_id
        )[0]

    def ask_gpt_instruction(self, context_account: Pubkey) -> Instruction:
        return Instruction(
            program_id=self.program_id,
            accounts=(
                AccountMeta(self.gpt_config(), is_signer=False, is_writable=False),
                AccountMeta(self.payer(), is_signer=True, is_writable=True),
                AccountMeta(self.interaction(context_account), is_signer=False, is_writable=True),
                AccountMeta(context_account, is_signer=False, is_writable=False),
                AccountMeta(self.oracle_program_id, is_signer=False, is_writable=False),
                AccountMeta(SYSTEM_PROGRAM_ID, is_signer=False, is_writable=False),
            ),
            data=sighash("ask_gpt"),
        )

    def compile_ask_gpt(self, context_account: Pubkey
                        ) -> Tuple[CompiledTransaction, List[RemainingAccountMeta]]:
        """Compile ask_gpt with the payer PDA's seed set so the executor can sign for it."""
        return compile_transaction(
            [self.ask_gpt_instruction(context_account)],
            [self.pdas.signer_seeds(PAYER_SEED)],
        )

    def queue_accounts(self, admin: Pubkey, task_queue: Pubkey, task_id: int) -> QueueTaskAccounts:
        queue_authority = self.queue_authority()
        return QueueTaskAccounts(
            payer=admin,
            queue_authority=queue_authority,
            task_queue_authority=task_queue_authority_key(
                task_queue, queue_authority, self.tuktuk_program_id
            ),
            task_queue=task_queue,
            task=task_key(task_queue, task_id, self.tuktuk_program_id),
        )

    def schedule_ask_gpt(self, admin: Pubkey, task_queue: Pubkey,
                         context_account: Pubkey, task_id: int,
                         trigger: TriggerV0,
                         encode: Callable[[QueueTaskArgsV0], bytes],
                         crank_reward: Optional[int] = None) -> Instruction:
        """
        Build the queue_task_v0 instruction that schedules one ask_gpt.

        The returned instruction must be signed by admin and, via
        queue_authority_seeds(), by the program's queue authority PDA.
        """
        instruction = queue_compiled_task(
            self.queue_accounts(admin, task_queue, task_id),
            task_id,
            trigger,
            self.compile_ask_gpt(context_account),
            encode,
            description="ask_gpt",
            crank_reward=crank_reward,
        )
        logger.info("Scheduled ask_gpt as task {} on queue {}", task_id, task_queue)
        return instruction

    def queue_authority_seeds(self) -> Tuple[bytes, ...]:
        return self.pdas.signer_seeds(QUEUE_AUTHORITY_SEED)
