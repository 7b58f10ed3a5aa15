"""
Keypair generation for task authorities and test accounts.
"""

from typing import Tuple

from ecdsa import SigningKey
from ecdsa.curves import Ed25519
from solders.pubkey import Pubkey


def generate_keypair() -> Tuple[SigningKey, Pubkey]:
    """
    Generate a new Ed25519 keypair.

    Returns:
        Tuple of (private_key, public_key)
    """
    private_key = SigningKey.generate(curve=Ed25519)
    public_key = Pubkey(private_key.verifying_key.to_string())
    return private_key, public_key
