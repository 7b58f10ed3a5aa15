import pytest

from task_compiler.core import (
    AccountMeta,
    ClassCounts,
    CompileOverflowError,
    DuplicateIdentityError,
    MAX_ACCOUNTS,
    MAX_CLASS_COUNT,
    PriorityClass,
    assign_indices,
    count_classes,
    priority_of,
    sort_accounts,
)


def m(pubkey, signer=False, writable=False):
    return AccountMeta(pubkey, is_signer=signer, is_writable=writable)


@pytest.mark.parametrize(
    "signer, writable, expected",
    [
        (True, True, PriorityClass.RW_SIGNER),
        (True, False, PriorityClass.RO_SIGNER),
        (False, True, PriorityClass.RW),
        (False, False, PriorityClass.RO_OR_NONE),
    ],
)
def test_priority_of(signer, writable, expected):
    assert priority_of(signer, writable) == expected


def test_sort_is_stable_within_class():
    merged = {
        "ro1": m("ro1"),
        "rw1": m("rw1", writable=True),
        "s1": m("s1", signer=True),
        "ro2": m("ro2"),
        "ws1": m("ws1", signer=True, writable=True),
        "rw2": m("rw2", writable=True),
        "ws2": m("ws2", signer=True, writable=True),
    }

    ordered = [meta.pubkey for meta in sort_accounts(merged)]

    assert ordered == ["ws1", "ws2", "s1", "rw1", "rw2", "ro1", "ro2"]


class SameHash:
    """Identities that all collide in a hash table."""

    def __init__(self, name):
        self.name = name

    def __hash__(self):
        return 1

    def __eq__(self, other):
        return isinstance(other, SameHash) and other.name == self.name


def test_sort_ignores_hashing():
    keys = [SameHash(name) for name in "dcba"]
    merged = {key: m(key, writable=True) for key in keys}

    assert [meta.pubkey.name for meta in sort_accounts(merged)] == list("dcba")


def test_count_classes():
    ordered = [
        m("a", True, True), m("b", True, True),
        m("c", True, False),
        m("d", False, True), m("e", False, True), m("f", False, True),
        m("g"),
    ]

    assert count_classes(ordered) == ClassCounts(2, 1, 3)


@pytest.mark.parametrize(
    "signer, writable, field",
    [
        (True, True, "num_rw_signers"),
        (True, False, "num_ro_signers"),
        (False, True, "num_rw"),
    ],
)
def test_class_count_overflow(signer, writable, field):
    ordered = [m(i, signer, writable) for i in range(MAX_CLASS_COUNT + 1)]

    with pytest.raises(CompileOverflowError) as exc_info:
        count_classes(ordered)

    assert exc_info.value.field == field
    assert exc_info.value.value == MAX_CLASS_COUNT + 1
    assert isinstance(exc_info.value, OverflowError)


@pytest.mark.parametrize("signer, writable", [(True, True), (True, False), (False, True)])
def test_class_count_at_limit_is_fine(signer, writable):
    ordered = [m(i, signer, writable) for i in range(MAX_CLASS_COUNT)]

    assert count_classes(ordered).rw_end == MAX_CLASS_COUNT


def test_table_overflow():
    ordered = [m(i) for i in range(MAX_ACCOUNTS + 1)]

    with pytest.raises(CompileOverflowError) as exc_info:
        count_classes(ordered)

    assert exc_info.value.field == "accounts"


def test_table_at_limit_is_fine():
    ordered = [m(i) for i in range(MAX_ACCOUNTS)]

    assert count_classes(ordered) == ClassCounts(0, 0, 0)
    assert max(assign_indices(ordered).values()) == 255


def test_assign_indices():
    ordered = [m("x"), m("y"), m("z")]

    assert assign_indices(ordered) == {"x": 0, "y": 1, "z": 2}


def test_assign_indices_rejects_duplicates():
    with pytest.raises(DuplicateIdentityError) as exc_info:
        assign_indices([m("x"), m("y"), m("x", writable=True)])

    assert exc_info.value.first_index == 0
    assert exc_info.value.second_index == 2


def test_class_counts_boundaries():
    counts = ClassCounts(num_rw_signers=2, num_ro_signers=1, num_rw=2)

    assert (counts.rw_signers_end, counts.ro_signers_end, counts.rw_end) == (2, 3, 5)
    assert [counts.is_writable(i) for i in range(7)] == [True, True, False, True, True, False, False]
    assert [counts.is_signer(i) for i in range(7)] == [True, True, True, False, False, False, False]
    assert counts.priority_at(2) == PriorityClass.RO_SIGNER
    assert counts.priority_at(6) == PriorityClass.RO_OR_NONE
