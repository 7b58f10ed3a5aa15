"""
Anchor instruction discriminators.
"""

import hashlib


def sighash(name: str, namespace: str = "global") -> bytes:
    """First 8 bytes of sha256("<namespace>:<name>"), prefixed to Anchor instruction data."""
    return hashlib.sha256(f"{namespace}:{name}".encode()).digest()[:8]
