"""
Byte payload checks.

bytes() turns an int into that many zero bytes, which would silently
corrupt seeds and instruction data. Only real buffers are accepted here.
"""

BUFFER_TYPES = (bytes, bytearray, memoryview)


def as_bytes(value, what: str = "value") -> bytes:
    """Copy a bytes-like value into immutable bytes, rejecting everything else."""
    if not isinstance(value, BUFFER_TYPES):
        raise TypeError(f"{what} must be bytes-like, got {type(value).__name__}")
    return bytes(value)
