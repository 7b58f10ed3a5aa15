"""
Task Compiler for Deferred Solana Execution

Compiles a batch of instructions into the compact, index-based transaction
that a task queue stores and a cranker replays later.

Key Features:
- Deterministic account deduplication with OR-merged signer/writable flags
- Stable priority ordering: rw signers, ro signers, rw, ro
- Instructions rewritten against one shared account table
- Remaining-account derivation for the executor's replay call
- PDA signer seed sets carried alongside the compiled transaction
- Task queue request building and a scheduled GPT oracle example
"""

__version__ = "1.0.0"

from .core import *
from .core import __all__ as _core_all

__all__ = list(_core_all)
