"""
Commitment Generation
=====================

This module implements the FKPS time-lock commitment:

    alpha <- random
    h_hat := h^alpha                 (published)
    z_hat := z^alpha = h_hat^(2^T)   (time-locked)
    key   := KDF(z_hat)
    ct    := m XOR KS(key, 0) || KS(key, 1) || ...

The committer knows alpha and can reach z_hat with one exponentiation; anyone
else reaches it from h_hat with T sequential squarings (``force_open``).

Keystream:
----------
Block i of the keystream is SHA3-256(b"KS" || key || i) with i a single byte,
so messages are limited to 256 blocks of 32 bytes (8192 bytes). Longer inputs
raise MessageTooLongError instead of reusing a keystream block.
"""

import logging
import secrets
from dataclasses import dataclass
from typing import List, Tuple

import gmpy2

from .errors import MessageTooLongError
from .fs_oracles import MAX_BLOCKS, derive_key, keystream_block
from .groups import canonicalize, power, square_repeatedly
from .params import SchemeParams
from .proofs import DEFAULT_MAX_NONCE, PoEProof, prove_poe
from .utils import BLOCK_SIZE, split_blocks, xor_bytes


logger = logging.getLogger(__name__)

MAX_MESSAGE_BYTES = MAX_BLOCKS * BLOCK_SIZE


@dataclass(frozen=True)
class Commitment:
    """
    A sealed message.

    Attributes
    ----------
    h_hat : mpz
        h^alpha in canonical form
    ct : bytes
        The keystream-encrypted message
    """
    h_hat: gmpy2.mpz
    ct: bytes


def check_message_length(data: bytes):
    """Raise MessageTooLongError if data needs more than 256 keystream blocks."""
    if len(data) > MAX_MESSAGE_BYTES:
        raise MessageTooLongError(
            f"{len(data)} bytes exceeds the {MAX_MESSAGE_BYTES}-byte keystream limit"
        )


def decrypt_blocks(key: bytes, ct: bytes) -> List[bytes]:
    """
    XOR each 32-byte ciphertext block with its keystream block.

    Parameters
    ----------
    key : bytes
        The 32-byte symmetric key
    ct : bytes
        The ciphertext (at most 8192 bytes)

    Returns
    -------
    List[bytes]
        The plaintext blocks; the last one keeps the partial length of the
        last ciphertext block.

    Raises
    ------
    MessageTooLongError
        If ct needs more than 256 keystream blocks.
    """
    check_message_length(ct)
    return [xor_bytes(block, keystream_block(key, i)) for i, block in enumerate(split_blocks(ct))]


def decrypt(key: bytes, ct: bytes) -> bytes:
    return b"".join(decrypt_blocks(key, ct))


def encrypt(key: bytes, message: bytes) -> bytes:
    """Encrypt ``message`` under ``key``; XOR keystream, so identical to ``decrypt``."""
    check_message_length(message)
    return b"".join(
        xor_bytes(block, keystream_block(key, i)) for i, block in enumerate(split_blocks(message))
    )


def commit(message: bytes, pp: SchemeParams, alpha=None) -> Tuple[Commitment, gmpy2.mpz]:
    """
    Seal ``message`` under a fresh secret exponent.

    Parameters
    ----------
    message : bytes
        The plaintext (at most 8192 bytes)
    pp : SchemeParams
        The public parameters
    alpha : int, optional
        The secret exponent. If None, drawn uniformly below M.

    Returns
    -------
    (Commitment, mpz)
        The commitment and alpha (the honest opening)

    Examples
    --------
    >>> comm, alpha = commit(b"bid: 42", pp)
    >>> verify_open(comm, alpha, b"bid: 42", pp)
    True
    """
    check_message_length(message)
    group = pp.group
    if alpha is None:
        alpha = secrets.randbelow(int(group.modulus) - 1) + 1
    alpha = gmpy2.mpz(alpha)

    h_hat = canonicalize(power(pp.h, alpha, group), group)
    z_hat = canonicalize(power(pp.z, alpha, group), group)
    ct = encrypt(derive_key(z_hat, group), message)
    return Commitment(h_hat=h_hat, ct=ct), alpha


def force_open(comm: Commitment, pp: SchemeParams,
               max_nonce: int = DEFAULT_MAX_NONCE) -> Tuple[bytes, gmpy2.mpz, PoEProof]:
    """
    Open ``comm`` without alpha by computing z_hat = h_hat^(2^T).

    Parameters
    ----------
    comm : Commitment
        The commitment to open
    pp : SchemeParams
        The public parameters
    max_nonce : int, optional
        Nonce budget for the PoE challenge search

    Returns
    -------
    (bytes, mpz, PoEProof)
        The recovered message, z_hat, and a proof that z_hat = h_hat^(2^T)
    """
    group = pp.group
    z_hat = square_repeatedly(comm.h_hat, pp.t, group)
    _, proof = prove_poe(comm.h_hat, pp.t, group, challenge_bits=pp.challenge_bits,
                         max_nonce=max_nonce, y=z_hat)
    message = decrypt(derive_key(z_hat, group), comm.ct)
    logger.info("Force-opened commitment after %d squarings", pp.t)
    return message, z_hat, proof
