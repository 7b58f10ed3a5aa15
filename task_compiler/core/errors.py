"""
Compile Errors

Every failure of the compile pipeline is raised synchronously as one of
these types. Compilation is all-or-nothing: when any of them is raised,
no CompiledTransaction exists.

EmptyInputError is the only one a caller is expected to hit in normal use.
InvalidReferenceError and DuplicateIdentityError guard invariants that the
upstream stages already guarantee; seeing one means a bug, not bad input.
"""


class CompileError(ValueError):
    """Base class for all compile pipeline failures."""


class EmptyInputError(CompileError):
    """No instructions were supplied."""


class InvalidReferenceError(CompileError):
    """An identity could not be resolved against the account table."""

    def __init__(self, pubkey, message: str = None):
        self.pubkey = pubkey
        super().__init__(message or f"Account not found in account table: {pubkey}")


class DuplicateIdentityError(CompileError):
    """Index assignment saw the same identity twice."""

    def __init__(self, pubkey, first_index: int, second_index: int):
        self.pubkey = pubkey
        self.first_index = first_index
        self.second_index = second_index
        super().__init__(
            f"Account {pubkey} assigned to both index {first_index} and {second_index}"
        )


class CompileOverflowError(CompileError, OverflowError):
    """A class count or account index does not fit the u8 wire width."""

    def __init__(self, field: str, value: int, limit: int):
        self.field = field
        self.value = value
        self.limit = limit
        super().__init__(f"{field}={value} exceeds limit {limit}")
