"""
Verification
============

This module implements the three verifier entry points and the check of the
public time parameters:

- verify_poe:          y = x^(2^t) via a Wesolowski-style proof
- verify_open:         honest opening, the committer reveals alpha
- verify_force_open:   forced opening, anyone proves z_hat = h_hat^(2^T)
- verify_time_params:  z = h^(2^T) for the public bases

Every function returns a bool. A failed check is a rejection, never an
exception; exceptions are reserved for buffers that cannot be interpreted
(see ``fkps.errors``). Verification is pure and leaves no state behind.
"""

import logging

import gmpy2

from .commit import Commitment, check_message_length, decrypt_blocks
from .fs_oracles import (
    CHALLENGE_BITS, MIN_CHALLENGE_BITS, derive_challenge, derive_key, poe_transcript,
)
from .groups import GroupParams, canonicalize, combine, equals, power
from .params import SchemeParams
from .pocklington import verify_certificate
from .proofs import PoEProof
from .utils import split_blocks


logger = logging.getLogger(__name__)


def verify_poe(x, y, t: int, proof: PoEProof, pp: GroupParams,
               challenge_bits: int = CHALLENGE_BITS) -> bool:
    """
    Verify a proof that y = x^(2^t).

    Formula:
    --------
    h = H2P(x, y, t; proof.cert.nonce),  h certified prime by proof.cert
    r = 2^t mod h
    accept iff  y == canonical(q^h * x^r mod M)

    Parameters
    ----------
    x, y : int or mpz
        The claimed base and result
    t : int
        Number of squarings
    proof : PoEProof
        The proof (q and the challenge certificate)
    pp : GroupParams
        The group parameters
    challenge_bits : int, optional
        Bit length of the challenge. Default is 277. Values below 256 are
        always rejected.

    Returns
    -------
    bool
        True iff the proof is valid

    Notes
    -----
    An honest prover can produce q for any prime h, while a false claim
    satisfies the identity for a negligible fraction of primes; binding h to
    the transcript and certifying it prime is what makes the check sound.
    """
    if challenge_bits < MIN_CHALLENGE_BITS:
        logger.warning("PoE rejected: %d-bit challenges are below the %d-bit minimum",
                       challenge_bits, MIN_CHALLENGE_BITS)
        return False

    transcript = poe_transcript(x, y, t, pp)
    h = derive_challenge(transcript, proof.cert.nonce, challenge_bits)

    if not verify_certificate(h, proof.cert):
        logger.debug("PoE rejected: challenge certificate invalid")
        return False

    r = gmpy2.powmod(2, t, h)
    rhs = combine(power(proof.q, h, pp), power(x, r, pp), pp)
    if not equals(y, rhs, pp):
        logger.debug("PoE rejected: q^h * x^r != y")
        return False
    return True


def _plaintext_matches(key: bytes, ct: bytes, message: bytes) -> bool:
    """Compare the decryption of ct with message block by block."""
    check_message_length(message)
    check_message_length(ct)
    if len(message) != len(ct):
        logger.debug("Message length %d does not match ciphertext length %d",
                     len(message), len(ct))
        return False
    blocks = decrypt_blocks(key, ct)
    return all(got == want for got, want in zip(blocks, split_blocks(message)))


def verify_open(comm: Commitment, alpha, message: bytes, pp: SchemeParams) -> bool:
    """
    Verify an honest opening: the committer reveals alpha.

    Formula:
    --------
    z_hat = canonical(z^alpha),  key = KDF(z_hat)
    accept iff  canonical(h^alpha) == comm.h_hat  and  Dec(key, comm.ct) == message

    Parameters
    ----------
    comm : Commitment
        The commitment
    alpha : int
        The revealed secret exponent
    message : bytes
        The claimed plaintext
    pp : SchemeParams
        The public parameters

    Returns
    -------
    bool
        True iff both checks pass

    Raises
    ------
    MessageTooLongError
        If the ciphertext or message exceeds 8192 bytes.
    """
    group = pp.group
    alpha = gmpy2.mpz(alpha)
    if alpha < 0:
        logger.debug("Opening rejected: negative alpha")
        return False

    z_hat = canonicalize(power(pp.z, alpha, group), group)
    key = derive_key(z_hat, group)
    if not _plaintext_matches(key, comm.ct, message):
        logger.debug("Opening rejected: plaintext mismatch")
        return False

    if not equals(power(pp.h, alpha, group), comm.h_hat, group):
        logger.debug("Opening rejected: h^alpha != h_hat")
        return False
    return True


def verify_force_open(comm: Commitment, z_hat, proof: PoEProof, message: bytes,
                      pp: SchemeParams) -> bool:
    """
    Verify a forced opening, no knowledge of alpha needed.

    Formula:
    --------
    accept iff  verify_poe(comm.h_hat, z_hat, T, proof)
           and  Dec(KDF(z_hat), comm.ct) == message

    Since z = h^(2^T), h_hat^(2^T) = z^alpha, so the key matches the one the
    committer used.

    Parameters
    ----------
    comm : Commitment
        The commitment
    z_hat : int
        The claimed h_hat^(2^T)
    proof : PoEProof
        Proof of z_hat = h_hat^(2^T)
    message : bytes
        The claimed plaintext
    pp : SchemeParams
        The public parameters

    Returns
    -------
    bool
        True iff the proof and the decryption both check out
    """
    group = pp.group
    if not verify_poe(comm.h_hat, z_hat, pp.t, proof, group, pp.challenge_bits):
        logger.debug("Forced opening rejected: PoE invalid")
        return False

    key = derive_key(z_hat, group)
    if not _plaintext_matches(key, comm.ct, message):
        logger.debug("Forced opening rejected: plaintext mismatch")
        return False
    return True


def verify_time_params(pp: SchemeParams, proof: PoEProof) -> bool:
    """Check the public relation z = h^(2^T) using the proof from ``gen_time_params``."""
    return verify_poe(pp.h, pp.z, pp.t, proof, pp.group, pp.challenge_bits)
