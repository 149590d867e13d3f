"""
Proof Generation
================

This module implements the prover side of the Wesolowski-style proof of
exponentiation (PoE).

Proof:
------
Claim: y = x^(2^t) in QR_M^+.

1. h := H2P(x, y, t; nonce), searched over nonces until h has a
   Pocklington certificate
2. q := x^floor(2^t / h)

The verifier recomputes r = 2^t mod h and checks q^h * x^r = y, which costs
two short exponentiations instead of t squarings.
"""

import logging
from dataclasses import dataclass
from typing import Tuple

import gmpy2

from .fs_oracles import CHALLENGE_BITS, MIN_CHALLENGE_BITS, derive_challenge, poe_transcript
from .groups import GroupParams, canonicalize, power, square_repeatedly
from .errors import CertificateGenerationError, MalformedInputError
from .pocklington import SCAN_RHO_ITERATIONS, PrimalityCertificate, prove_prime


logger = logging.getLogger(__name__)

# A 277-bit challenge is found after a few hundred thousand nonces on average.
DEFAULT_MAX_NONCE = 1 << 22


@dataclass(frozen=True)
class PoEProof:
    """
    Succinct proof that y = x^(2^t).

    Attributes
    ----------
    q : mpz
        The quotient element x^floor(2^t / h)
    cert : PrimalityCertificate
        Certificate that the challenge h is prime (carries the nonce)
    """
    q: gmpy2.mpz
    cert: PrimalityCertificate


def hash_to_prime(transcript: bytes, bits: int = CHALLENGE_BITS,
                  max_nonce: int = DEFAULT_MAX_NONCE) -> Tuple[gmpy2.mpz, PrimalityCertificate]:
    """
    Search nonces until the derived challenge is a certifiable prime.

    Parameters
    ----------
    transcript : bytes
        The public transcript
    bits : int, optional
        Challenge bit length. Default is 277.
    max_nonce : int, optional
        Number of nonces to try before giving up

    Returns
    -------
    (mpz, PrimalityCertificate)
        The prime challenge and its certificate

    Raises
    ------
    CertificateGenerationError
        If no nonce below ``max_nonce`` yields a certifiable prime.

    Notes
    -----
    About one nonce in 190 gives a 277-bit prime, and roughly one such prime
    in a thousand has a chain that ``prove_prime`` can build. Each candidate
    gets only a short Pollard rho search at the top of its chain
    (``SCAN_RHO_ITERATIONS``); the factors below it get the full budget.
    """
    for nonce in range(max_nonce):
        h = derive_challenge(transcript, nonce, bits)
        if not gmpy2.is_prime(h):
            continue
        cert = prove_prime(h, nonce=nonce, rho_iterations=SCAN_RHO_ITERATIONS)
        if cert is not None:
            logger.info("Found certifiable %d-bit challenge at nonce %d (%d steps)",
                        bits, nonce, len(cert.steps))
            return h, cert
    raise CertificateGenerationError(
        f"no certifiable {bits}-bit prime challenge within {max_nonce} nonces"
    )


def prove_poe(x, t: int, pp: GroupParams, challenge_bits: int = CHALLENGE_BITS,
              max_nonce: int = DEFAULT_MAX_NONCE, y=None) -> Tuple[gmpy2.mpz, PoEProof]:
    """
    Compute y = x^(2^t) and a proof of correct exponentiation.

    Parameters
    ----------
    x : int or mpz
        The base element
    t : int
        Number of sequential squarings
    pp : GroupParams
        The group parameters
    challenge_bits : int, optional
        Bit length of the hash-to-prime challenge, at least 256
    max_nonce : int, optional
        Nonce budget for the challenge search
    y : int or mpz, optional
        A precomputed x^(2^t); skips the squarings when given

    Returns
    -------
    (mpz, PoEProof)
        The canonical result y and its proof

    Raises
    ------
    MalformedInputError
        If challenge_bits is below 256; verifiers reject such proofs.
    CertificateGenerationError
        If no certifiable challenge is found within the nonce budget.

    Examples
    --------
    >>> y, proof = prove_poe(x, 40, pp)
    >>> verify_poe(x, y, 40, proof, pp)
    True
    """
    if challenge_bits < MIN_CHALLENGE_BITS:
        raise MalformedInputError(
            f"challenges must have at least {MIN_CHALLENGE_BITS} bits, got {challenge_bits}"
        )

    x = canonicalize(x, pp)
    if y is None:
        y = square_repeatedly(x, t, pp)
    else:
        y = canonicalize(y, pp)

    transcript = poe_transcript(x, y, t, pp)
    h, cert = hash_to_prime(transcript, challenge_bits, max_nonce)

    # q = x^floor(2^t / h)
    q = canonicalize(power(x, (gmpy2.mpz(1) << t) // h, pp), pp)
    return y, PoEProof(q=q, cert=cert)
