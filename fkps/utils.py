"""
Utility Functions
=================

Byte-level helpers shared by the oracles and the commitment layer:
- Fixed-width big-endian encoding of group elements
- Splitting buffers into 32-byte blocks
- XOR of equal-length byte strings
"""

from typing import List

import gmpy2

from .errors import MalformedInputError
from .groups import GroupParams


BLOCK_SIZE = 32


def int_to_bytes(value, length: int) -> bytes:
    """Encode a non-negative integer as exactly ``length`` big-endian bytes."""
    value = int(value)
    if value < 0:
        raise MalformedInputError("cannot encode a negative integer")
    try:
        return value.to_bytes(length, 'big')
    except OverflowError:
        raise MalformedInputError(f"integer does not fit in {length} bytes") from None


def element_to_bytes(e, pp: GroupParams) -> bytes:
    """
    Serialize a group element to ``pp.element_bytes`` big-endian bytes.

    Raises
    ------
    MalformedInputError
        If e is negative or not reduced below the modulus.
    """
    e = gmpy2.mpz(e)
    if e < 0 or e >= pp.modulus:
        raise MalformedInputError("group element out of range [0, M)")
    return int_to_bytes(e, pp.element_bytes)


def element_from_bytes(data: bytes, pp: GroupParams) -> gmpy2.mpz:
    """
    Deserialize a group element; the buffer must have exactly ``pp.element_bytes`` bytes.
    """
    if len(data) != pp.element_bytes:
        raise MalformedInputError(
            f"expected {pp.element_bytes} bytes for a group element, got {len(data)}"
        )
    e = gmpy2.mpz(int.from_bytes(data, 'big'))
    if e >= pp.modulus:
        raise MalformedInputError("group element out of range [0, M)")
    return e


def split_blocks(data: bytes, block_size: int = BLOCK_SIZE) -> List[bytes]:
    """Split ``data`` into ``block_size`` chunks; the last one may be partial."""
    return [data[i:i + block_size] for i in range(0, len(data), block_size)]


def xor_bytes(a: bytes, b: bytes) -> bytes:
    """XOR two byte strings, truncating to the shorter one."""
    return bytes(x ^ y for x, y in zip(a, b))
