"""
Program Bindings

Callers of the compiler that turn compiled transactions into queued tasks:
- Task queue program: queue_task_v0 arguments, accounts and PDAs
- GPT oracle program: a scheduled oracle query built on top of it
- Anchor discriminators shared by both
"""

from .anchor import sighash
from .tuktuk import (
    TUKTUK_PROGRAM_ID,
    QUEUE_TASK_V0_DISCRIMINATOR,
    TriggerNow,
    TriggerTimestamp,
    CompiledV0,
    RemoteV0,
    QueueTaskArgsV0,
    QueueTaskAccounts,
    build_queue_task_instruction,
    queue_compiled_task,
    task_key,
    task_queue_authority_key
)
from .gpt import GptProgram, GPT_PROGRAM_ID, ORACLE_PROGRAM_ID

__all__ = [
    'sighash',
    'TUKTUK_PROGRAM_ID',
    'QUEUE_TASK_V0_DISCRIMINATOR',
    'TriggerNow',
    'TriggerTimestamp',
    'CompiledV0',
    'RemoteV0',
    'QueueTaskArgsV0',
    'QueueTaskAccounts',
    'build_queue_task_instruction',
    'queue_compiled_task',
    'task_key',
    'task_queue_authority_key',
    'GptProgram',
    'GPT_PROGRAM_ID',
    'ORACLE_PROGRAM_ID',
]
