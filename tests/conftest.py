# tests/conftest.py
from __future__ import annotations

import pytest
from loguru import logger

from task_compiler.core import AccountMeta, Instruction


@pytest.fixture(autouse=True)
def disable_logger():
    logger.remove()
    logger.add(lambda msg: None)
    yield


def meta(pubkey, signer=False, writable=False) -> AccountMeta:
    return AccountMeta(pubkey, is_signer=signer, is_writable=writable)


@pytest.fixture
def program() -> str:
    return "Program1111"


@pytest.fixture
def shared_batch(program):
    """
    Two instructions sharing signer X and readonly Y, in opposite order.
    """
    return [
        Instruction(program, [meta("X", True, True), meta("Y")], b"\x01"),
        Instruction(program, [meta("Y"), meta("X", True, True)], b"\x02\x03"),
    ]
