import pytest

from task_compiler.core import AccountMeta, EmptyInputError, Instruction, collect_accounts


def m(pubkey, signer=False, writable=False):
    return AccountMeta(pubkey, is_signer=signer, is_writable=writable)


def test_empty_input_rejected():
    with pytest.raises(EmptyInputError):
        collect_accounts([])


def test_empty_generator_rejected():
    with pytest.raises(EmptyInputError):
        collect_accounts(ix for ix in [])


def test_program_id_is_a_readonly_account(program):
    merged = collect_accounts([Instruction(program, [m("A", writable=True)])])

    assert merged[program] == m(program)
    assert merged["A"] == m("A", writable=True)


def test_first_seen_order(program):
    merged = collect_accounts([
        Instruction(program, [m("B"), m("A")]),
        Instruction("Other", [m("C"), m("B")]),
    ])

    assert list(merged) == [program, "B", "A", "Other", "C"]


def test_repeat_identity_merges_writable():
    # Z is writable first, then readonly: stays writable
    merged = collect_accounts([
        Instruction("P", [m("Z", writable=True), m("Z", writable=False)])
    ])

    assert merged["Z"].is_writable is True
    assert merged["Z"].is_signer is False
    assert len(merged) == 2


def test_flags_or_across_instructions():
    merged = collect_accounts([
        Instruction("P", [m("K", signer=True)]),
        Instruction("P", [m("K", writable=True)]),
    ])

    assert merged["K"] == m("K", signer=True, writable=True)


def test_program_used_as_account_gets_flags():
    merged = collect_accounts([
        Instruction("P", [m("A")]),
        Instruction("Q", [m("P", writable=True)]),
    ])

    assert merged["P"].is_writable is True
    assert list(merged).index("P") == 0


def test_merge_refuses_other_identity():
    with pytest.raises(ValueError, match="Cannot merge"):
        m("A").merge(m("B"))


def test_str_shows_flags():
    assert str(m("ABCDEFGHIJ", signer=True, writable=True)) == "ABCDEFGH...(signer, writable)"
    assert str(m("ABCDEFGHIJ")) == "ABCDEFGH...(readonly)"
