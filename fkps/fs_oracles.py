"""
Fiat-Shamir Random Oracles
===========================

This module implements the hash functions used by the scheme.

Random Oracles:
---------------
- H2P: Derive the PoE challenge integer from the transcript and a nonce
- KDF: Derive the symmetric key from the time-locked element z_hat
- KS:  Derive one 32-byte keystream block from the key and a block index

Domain Separation:
------------------
Each oracle uses a different prefix:
- H2P uses prefix b"H2P"
- KDF uses prefix b"KDF"
- KS uses prefix b"KS"

All oracles are SHA3-256 (hashlib.sha3_256).
"""

import hashlib

import gmpy2

from .errors import MalformedInputError, MessageTooLongError
from .groups import GroupParams, canonicalize
from .utils import BLOCK_SIZE, element_to_bytes, int_to_bytes


HASH_BITS = 256
NONCE_BYTES = 4
MAX_BLOCKS = 256

# 277 = 21 + 256: the first hash output supplies the top 21 bits (the highest
# one forced to 1), the second supplies the low 256 bits.
CHALLENGE_BITS = 277

# Smallest challenge a proof may use; shorter primes let a prover pick h to fit a
# forged quotient.
MIN_CHALLENGE_BITS = 256


def _hash(*parts: bytes) -> bytes:
    h = hashlib.sha3_256()
    for part in parts:
        h.update(part)
    return h.digest()


def _serialize_for_hash(pp: GroupParams, *args) -> bytes:
    """
    Serialize group elements, integers and bytes for hashing.

    Parameters
    ----------
    pp : GroupParams
        The group parameters (fixes the element width)
    *args : variable
        ``bytes`` are taken as-is, ``int`` values as 8-byte big-endian,
        ``mpz`` values as canonical group elements.

    Returns
    -------
    bytes
        Concatenated serialization of all arguments
    """
    result = b""
    for arg in args:
        if isinstance(arg, bytes):
            result += arg
        elif isinstance(arg, int):
            result += int_to_bytes(arg, 8)
        elif isinstance(arg, gmpy2.mpz):
            result += element_to_bytes(canonicalize(arg, pp), pp)
        else:
            raise MalformedInputError(f"cannot serialize {type(arg).__name__} for hashing")
    return result


def poe_transcript(x, y, t: int, pp: GroupParams) -> bytes:
    """
    Transcript bound into the PoE challenge: canonical x, canonical y, then t.

    Parameters
    ----------
    x, y : int or mpz
        The claimed base and result of y = x^(2^t)
    t : int
        The number of squarings
    pp : GroupParams
        The group parameters
    """
    if t < 0:
        raise MalformedInputError(f"t must be non-negative, got {t}")
    return _serialize_for_hash(pp, gmpy2.mpz(x), gmpy2.mpz(y), int(t))


def derive_challenge(transcript: bytes, nonce: int, bits: int = CHALLENGE_BITS) -> gmpy2.mpz:
    """
    Random oracle H2P: map (transcript, nonce) to an integer of exactly ``bits`` bits.

    Formula:
    --------
    seed = transcript || nonce (4 bytes, big-endian)
    H_i  = SHA3-256(b"H2P" || seed || i)      for i = 0, 1, ...
    h    = (H_0 || H_1 || ...) mod 2^(bits-1)  +  2^(bits-1)

    For bits = 277 this keeps the low 20 bits of H_0, forces the bit above
    them, and appends the whole of H_1 as the low 256 bits.

    Parameters
    ----------
    transcript : bytes
        Public transcript (see ``poe_transcript``)
    nonce : int
        Prover-chosen uint32 nonce
    bits : int, optional
        Bit length of the output. Default is 277.

    Returns
    -------
    mpz
        The challenge integer, with bit length exactly ``bits``

    Raises
    ------
    MalformedInputError
        If the nonce does not fit in 32 bits or ``bits`` < 2.
    """
    if not 0 <= nonce < (1 << (8 * NONCE_BYTES)):
        raise MalformedInputError(f"nonce must be a uint32, got {nonce}")
    if bits < 2:
        raise MalformedInputError(f"challenge must have at least 2 bits, got {bits}")

    seed = transcript + int_to_bytes(nonce, NONCE_BYTES)
    n_outputs = -(-bits // HASH_BITS)
    if n_outputs > 256:
        raise MalformedInputError(f"challenge of {bits} bits is too long")

    digest = b"".join(_hash(b"H2P", seed, bytes([i])) for i in range(n_outputs))
    value = gmpy2.mpz(int.from_bytes(digest, 'big'))
    top = gmpy2.mpz(1) << (bits - 1)
    return gmpy2.f_mod_2exp(value, bits - 1) | top


def derive_key(z_hat, pp: GroupParams) -> bytes:
    """Random oracle KDF: 32-byte symmetric key from the canonical z_hat."""
    return _hash(b"KDF", element_to_bytes(canonicalize(z_hat, pp), pp))


def keystream_block(key: bytes, index: int) -> bytes:
    """
    Random oracle KS: the 32-byte keystream block at ``index``.

    The index is hashed as a single byte, which caps a message at 256 blocks
    (8192 bytes).

    Raises
    ------
    MessageTooLongError
        If index is outside [0, 255]; the counter never wraps.
    """
    if not 0 <= index < MAX_BLOCKS:
        raise MessageTooLongError(
            f"block index {index} exceeds the {MAX_BLOCKS}-block keystream "
            f"({MAX_BLOCKS * BLOCK_SIZE} bytes)"
        )
    if len(key) != 32:
        raise MalformedInputError(f"key must be 32 bytes, got {len(key)}")
    return _hash(b"KS", key, bytes([index]))
