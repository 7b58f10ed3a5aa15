"""
Program Derived Addresses

A PDA is an address with no private key, derived from a program id and a
list of seeds. The owning program "signs" for it by presenting the same
seeds plus the bump byte that pushed the address off the ed25519 curve.

Those seed lists are exactly what a compiled transaction carries in its
signer seeds, so the executor can sign for the PDA when it replays the task.
"""

from typing import Dict, Sequence, Tuple

from solders.pubkey import Pubkey

from .buffers import as_bytes


MAX_SEEDS = 16       # Including the bump seed
MAX_SEED_LEN = 32


def _check_seeds(seeds: Sequence[bytes]) -> None:
    if len(seeds) >= MAX_SEEDS:
        raise ValueError(f"Too many seeds: {len(seeds)} (max {MAX_SEEDS - 1} plus bump)")
    for seed in seeds:
        if len(seed) > MAX_SEED_LEN:
            raise ValueError(f"Seed of {len(seed)} bytes exceeds {MAX_SEED_LEN}")


def find_program_address(seeds: Sequence[bytes], program_id: Pubkey) -> Tuple[Pubkey, int]:
    """
    Find the canonical PDA and its bump for the given seeds.

    Returns:
        Tuple of (address, bump)
    """
    seeds = [as_bytes(seed, "Seed") for seed in seeds]
    _check_seeds(seeds)
    return Pubkey.find_program_address(seeds, program_id)


def signer_seeds(seeds: Sequence[bytes], bump: int) -> Tuple[bytes, ...]:
    """Seed set a program presents to sign for a PDA: the seeds followed by the bump."""
    if not 0 <= bump <= 255:
        raise ValueError(f"Bump must fit in a byte, got {bump}")
    return tuple(as_bytes(seed, "Seed") for seed in seeds) + (bytes([bump]),)


class PDAGenerator:
    """
    Derives PDAs for one program and remembers them.

    Finding a bump can take many hash attempts, so each seed path is
    derived once per generator.
    """

    def __init__(self, program_id: Pubkey):
        self.program_id = program_id
        self._cache: Dict[Tuple[bytes, ...], Tuple[Pubkey, int]] = {}

    def derive(self, *seeds: bytes) -> Tuple[Pubkey, int]:
        """Address and bump for a seed path."""
        key = tuple(as_bytes(seed, "Seed") for seed in seeds)
        if key not in self._cache:
            self._cache[key] = find_program_address(key, self.program_id)
        return self._cache[key]

    def address(self, *seeds: bytes) -> Pubkey:
        return self.derive(*seeds)[0]

    def signer_seeds(self, *seeds: bytes) -> Tuple[bytes, ...]:
        """Seed set (with bump) for signing as the PDA at this seed path."""
        _, bump = self.derive(*seeds)
        return signer_seeds(seeds, bump)
