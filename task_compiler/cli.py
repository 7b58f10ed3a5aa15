#!/usr/bin/env python3
"""
Task Compiler CLI

A command-line interface for compiling instruction batches into task
transactions and inspecting the pieces a task queue needs.

Usage:
    task-compiler compile batch.json              # Compile instructions from a JSON file
    task-compiler pda <program_id> <seed>...      # Derive a program address
    task-compiler keygen                          # Generate a fresh keypair
    task-compiler schedule-ask-gpt --task-id 1 --context-account <pubkey> --task-queue <pubkey>

Batch files look like:

    {
      "instructions": [
        {"program_id": "...", "data": "<hex>",
         "accounts": [{"pubkey": "...", "is_signer": true, "is_writable": true}]}
      ],
      "signer_seeds": [["<hex>", "<hex>"]]
    }
"""

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from loguru import logger
from solders.pubkey import Pubkey

from .config import Settings
from .core.accounts import AccountMeta
from .core.errors import CompileError
from .core.keys import generate_keypair
from .core.pda import find_program_address
from .core.transactions import Instruction, compile_transaction
from .logs import setup_logging
from .programs.gpt import GptProgram
from .programs.tuktuk import TriggerNow, TriggerTimestamp


def parse_pubkey(value: str) -> Pubkey:
    try:
        return Pubkey.from_string(value)
    except ValueError as exc:
        raise ValueError(f"{value!r} is not a valid pubkey: {exc}") from exc


def parse_instruction(raw: Dict[str, Any]) -> Instruction:
    """Build an Instruction from its JSON form."""
    return Instruction(
        program_id=parse_pubkey(raw["program_id"]),
        accounts=tuple(
            AccountMeta(
                parse_pubkey(acc["pubkey"]),
                is_signer=bool(acc.get("is_signer", False)),
                is_writable=bool(acc.get("is_writable", False)),
            )
            for acc in raw.get("accounts", [])
        ),
        data=bytes.fromhex(raw.get("data", "")),
    )


def parse_seed(text: str) -> bytes:
    """Seeds starting with 0x are hex, anything else is UTF-8 text."""
    if text.startswith("0x"):
        return bytes.fromhex(text[2:])
    return text.encode()


class TaskCompilerCLI:
    """Commands of the task compiler CLI. Each returns what it prints."""

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or Settings()

    def compile_file(self, path: Path) -> Dict[str, Any]:
        """Compile the batch in a JSON file."""
        with open(path, 'r') as f:
            batch = json.load(f)

        instructions = [parse_instruction(raw) for raw in batch.get("instructions", [])]
        signer_seeds = [
            [bytes.fromhex(seed) for seed in seed_set]
            for seed_set in batch.get("signer_seeds", [])
        ]
        logger.info("Compiling {} instructions from {}", len(instructions), path)

        transaction, remaining_accounts = compile_transaction(instructions, signer_seeds)
        return {
            "transaction": transaction.to_dict(),
            "remaining_accounts": [
                {"pubkey": str(meta.pubkey), "is_signer": meta.is_signer, "is_writable": meta.is_writable}
                for meta in remaining_accounts
            ],
        }

    def pda(self, program_id: str, seeds: List[str]) -> Dict[str, Any]:
        """Derive a program address from text or 0x-hex seeds."""
        address, bump = find_program_address(
            [parse_seed(seed) for seed in seeds], parse_pubkey(program_id)
        )
        return {"address": str(address), "bump": bump}

    def keygen(self) -> Dict[str, Any]:
        """Generate a keypair; only the public half is printed."""
        _, pubkey = generate_keypair()
        return {"pubkey": str(pubkey)}

    def schedule_ask_gpt(self, task_id: int, context_account: str, task_queue: str,
                         admin: Optional[str] = None, timestamp: Optional[int] = None) -> Dict[str, Any]:
        """
        Build the ask_gpt task offline.

        Prints the compiled transaction and the queue call's accounts; the
        queue arguments are left for the caller's codec to encode.
        """
        program = GptProgram(
            self.settings.gpt_program,
            self.settings.oracle_program,
            self.settings.tuktuk_program,
        )
        context = parse_pubkey(context_account)
        trigger = TriggerNow() if timestamp is None else TriggerTimestamp(timestamp)

        transaction, remaining_accounts = program.compile_ask_gpt(context)
        payer = parse_pubkey(admin) if admin else generate_keypair()[1]
        queue = program.queue_accounts(payer, parse_pubkey(task_queue), task_id)

        return {
            "task_id": task_id,
            "trigger": "now" if timestamp is None else {"timestamp": trigger.unix_timestamp},
            "transaction": transaction.to_dict(),
            "queue_accounts": [
                {"pubkey": str(meta.pubkey), "is_signer": meta.is_signer, "is_writable": meta.is_writable}
                for meta in queue.to_account_metas()
                + [remaining.to_account_meta() for remaining in remaining_accounts]
            ],
        }


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="task-compiler",
        description="Compile instruction batches into task queue transactions",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  task-compiler compile batch.json                   # Compile a batch
  task-compiler pda <program_id> payer               # Derive the payer PDA
  task-compiler keygen                               # Fresh pubkey
  task-compiler schedule-ask-gpt --task-id 7 --context-account <pubkey> --task-queue <pubkey>
        """
    )
    parser.add_argument('--log-level', default=None, help='Override LOG_LEVEL')

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    compile_parser = subparsers.add_parser('compile', help='Compile a JSON instruction batch')
    compile_parser.add_argument('path', type=Path, help='Batch file')

    pda_parser = subparsers.add_parser('pda', help='Derive a program address')
    pda_parser.add_argument('program_id', help='Program id (base58)')
    pda_parser.add_argument('seeds', nargs='*', help='Seeds, UTF-8 text or 0x-prefixed hex')

    subparsers.add_parser('keygen', help='Generate a keypair')

    schedule_parser = subparsers.add_parser('schedule-ask-gpt', help='Build the ask_gpt task offline')
    schedule_parser.add_argument('--task-id', type=int, required=True, help='u16 task id')
    schedule_parser.add_argument('--context-account', required=True, help='Oracle context account')
    schedule_parser.add_argument('--task-queue', required=True, help='Task queue account')
    schedule_parser.add_argument('--admin', default=None, help='Payer of the queue call (default: fresh key)')
    schedule_parser.add_argument('--timestamp', type=int, default=None, help='Run at unix time instead of now')

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    try:
        settings = Settings.load()
        setup_logging(args.log_level or settings.log_level)
        cli = TaskCompilerCLI(settings)

        if args.command == 'compile':
            result = cli.compile_file(args.path)
        elif args.command == 'pda':
            result = cli.pda(args.program_id, args.seeds)
        elif args.command == 'keygen':
            result = cli.keygen()
        else:
            result = cli.schedule_ask_gpt(
                args.task_id, args.context_account, args.task_queue, args.admin, args.timestamp
            )

    except CompileError as e:
        print(f"❌ Compile failed: {e}", file=sys.stderr)
        return 1

    except (ValueError, KeyError, OSError) as e:
        print(f"❌ Error: {e}", file=sys.stderr)
        return 1

    print(json.dumps(result, indent=2))
    return 0


if __name__ == '__main__':
    sys.exit(main())
