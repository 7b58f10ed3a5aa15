import json

import pytest
from solders.pubkey import Pubkey

from task_compiler.cli import main, parse_seed
from task_compiler.config import ENV_FIELDS
from task_compiler.core import find_program_address
from task_compiler.programs import GPT_PROGRAM_ID


@pytest.fixture(autouse=True)
def isolated(monkeypatch, tmp_path):
    for env_name in ENV_FIELDS.values():
        monkeypatch.setenv(env_name, "")
        monkeypatch.delenv(env_name)
    monkeypatch.chdir(tmp_path)


def run(capsys, *argv):
    code = main(list(argv))
    captured = capsys.readouterr()
    return code, captured.out, captured.err


def test_parse_seed():
    assert parse_seed("payer") == b"payer"
    assert parse_seed("0x00ff") == b"\x00\xff"


def test_compile_command(tmp_path, capsys):
    program, signer, readonly = (str(Pubkey.new_unique()) for _ in range(3))
    batch = {
        "instructions": [
            {
                "program_id": program,
                "data": "0102",
                "accounts": [
                    {"pubkey": readonly},
                    {"pubkey": signer, "is_signer": True, "is_writable": True},
                ],
            }
        ],
        "signer_seeds": [["7061796572", "ff"]],
    }
    path = tmp_path / "batch.json"
    path.write_text(json.dumps(batch))

    code, out, _ = run(capsys, "--log-level", "ERROR", "compile", str(path))

    assert code == 0
    result = json.loads(out)
    tx = result["transaction"]
    assert tx["accounts"] == [signer, program, readonly]
    assert tx["num_rw_signers"] == 1
    assert tx["instructions"] == [{"program_id_index": 1, "accounts": [2, 0], "data": "0102"}]
    assert tx["signer_seeds"] == [["7061796572", "ff"]]
    assert [r["is_writable"] for r in result["remaining_accounts"]] == [True, False, False]
    assert not any(r["is_signer"] for r in result["remaining_accounts"])


def test_compile_empty_batch(tmp_path, capsys):
    path = tmp_path / "empty.json"
    path.write_text(json.dumps({"instructions": []}))

    code, out, err = run(capsys, "--log-level", "ERROR", "compile", str(path))

    assert code == 1
    assert out == ""
    assert "Compile failed" in err


def test_compile_bad_pubkey(tmp_path, capsys):
    path = tmp_path / "bad.json"
    path.write_text(json.dumps({"instructions": [{"program_id": "nope"}]}))

    code, _, err = run(capsys, "--log-level", "ERROR", "compile", str(path))

    assert code == 1
    assert "Error" in err


def test_pda_command(capsys):
    code, out, _ = run(capsys, "--log-level", "ERROR", "pda", str(GPT_PROGRAM_ID), "payer")

    address, bump = find_program_address([b"payer"], GPT_PROGRAM_ID)
    assert code == 0
    assert json.loads(out) == {"address": str(address), "bump": bump}


def test_keygen_command(capsys):
    code, out, _ = run(capsys, "--log-level", "ERROR", "keygen")

    assert code == 0
    assert len(bytes(Pubkey.from_string(json.loads(out)["pubkey"]))) == 32


def test_schedule_ask_gpt_command(capsys):
    context, queue, admin = (str(Pubkey.new_unique()) for _ in range(3))

    code, out, _ = run(
        capsys, "--log-level", "ERROR", "schedule-ask-gpt",
        "--task-id", "2", "--context-account", context,
        "--task-queue", queue, "--admin", admin, "--timestamp", "1700000000",
    )

    assert code == 0
    result = json.loads(out)
    assert result["trigger"] == {"timestamp": 1700000000}
    assert result["transaction"]["num_rw_signers"] == 1
    assert result["queue_accounts"][0] == {"pubkey": admin, "is_signer": True, "is_writable": True}
    assert len(result["queue_accounts"]) == 6 + len(result["transaction"]["accounts"])


def test_no_command_prints_help(capsys):
    code, out, _ = run(capsys)

    assert code == 0
    assert "task-compiler" in out
