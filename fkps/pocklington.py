"""
Pocklington Primality Certificates
==================================

This module verifies (and, for provers, builds) chained primality
certificates based on the Brillhart-Lehmer-Selfridge refinement of
Pocklington's criterion.

Step relation:
--------------
For a candidate p and an asserted prime f:

    p - 1 = u * v,   u = f^n * 2^n2,   v odd,   gcd(u, v) = 1
    v = s * 2u + r,  0 <= r < 2u

p is prime if
- (u + 1)(2u^2 + u(r - 1) + 1) > p                 (u exceeds p^(1/3))
- s = 0 or r^2 - 8s is not a perfect square         (sqrt witness)
- a^(p-1) = 1 (mod p)                               (Fermat witness)
- gcd(a^((p-1)/f) - 1, p) = gcd(a^((p-1)/2) - 1, p) = 1   (Bezout witnesses)

Each step's f becomes the next step's p. The chain ends at an integer below
2^32, which is settled by the deterministic Miller-Rabin test.

Every coprimality claim comes with Bezout coefficients, so the verifier only
checks linear identities and never runs an extended Euclid itself.

Prover:
-------
The prover factors p - 1 by trial division and Pollard rho (Brent). A step
works when everything in p - 1 except one prime f above the size bound can
be split off; f is usually the largest prime factor, and any unfactored
remainder stays in v. Candidates that cannot be certified further down are
abandoned and the next factor is tried.
"""

import logging
from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Tuple

import gmpy2

from .primality import MR_LIMIT, SMALL_PRIMES, is_prime_below_2_32


logger = logging.getLogger(__name__)

# Largest Fermat base the prover tries before giving up on a step.
MAX_FERMAT_BASE = 1000

# Each step of a large chain removes the 30 to 40 bits rho can split off, so a
# 277-bit prime takes six to eight steps.
DEFAULT_MAX_STEPS = 12

# Pollard rho: longest Brent cycle tried, the constants c of x^2 + c tried in turn
# when a cycle closes without a factor, and the number of steps per gcd.
RHO_ITERATIONS = 1 << 16
RHO_CONSTANTS = (1, 3, 5)
RHO_BATCH = 128

# Rho budget for hash_to_prime candidates themselves. Most candidates fail at the
# top level, and moving on to the next nonce costs less than a longer search.
SCAN_RHO_ITERATIONS = 1 << 12


@dataclass(frozen=True)
class PocklingtonStep:
    """
    Witnesses for one level of the certificate chain.

    Attributes
    ----------
    f : int
        Asserted prime factor of p - 1 (the next candidate)
    n, n2 : int
        Multiplicities of f and 2 in u = f^n * 2^n2
    a : int
        Fermat witness
    bu, bv : int
        Bezout pair with u*bu + v*bv = 1
    v : int
        Cofactor (p - 1) / u
    s : int
        v div 2u
    sqrt : int
        Witness that r^2 - 8s lies strictly between two consecutive squares
    p_less_one_div_f, p_less_one_div_two : int
        Exact quotients (p - 1)/f and (p - 1)/2
    b_p_div_f1, b_p_div_f2 : int
        Bezout pair for (a^((p-1)/f) - 1, p)
    b_p_div_two1, b_p_div_two2 : int
        Bezout pair for (a^((p-1)/2) - 1, p)
    """
    f: int
    n: int
    n2: int
    a: int
    bu: int
    bv: int
    v: int
    s: int
    sqrt: int
    p_less_one_div_f: int
    p_less_one_div_two: int
    b_p_div_f1: int
    b_p_div_f2: int
    b_p_div_two1: int
    b_p_div_two2: int


@dataclass(frozen=True)
class PrimalityCertificate:
    """
    Ordered chain of Pocklington steps plus the hash-to-prime nonce.

    The nonce is chosen by the prover so that hashing the transcript with it
    yields the integer certified by ``steps``.
    """
    steps: Tuple[PocklingtonStep, ...] = field(default_factory=tuple)
    nonce: int = 0


def _reject(p, reason: str) -> bool:
    logger.debug("Pocklington step rejected for p=%s: %s", p, reason)
    return False


def verify_step(p, step: PocklingtonStep) -> bool:
    """
    Check one application of Pocklington's criterion to p.

    Parameters
    ----------
    p : int
        The current candidate
    step : PocklingtonStep
        The witnesses for this level

    Returns
    -------
    bool
        True iff all seven checks pass
    """
    p = gmpy2.mpz(p)
    if p < 3:
        return _reject(p, "candidate too small")

    f = gmpy2.mpz(step.f)
    n, n2 = int(step.n), int(step.n2)
    bits = int(p.bit_length())
    if f < 2:
        return _reject(p, "factor below 2")
    if f >= p:
        return _reject(p, "factor not below p")
    if not (1 <= n <= bits and 1 <= n2 <= bits):
        return _reject(p, "multiplicity out of range")
    # f^n >= 2^(n * (|f| - 1)); past p - 1 the cofactor check fails anyway
    if n * (int(f.bit_length()) - 1) >= bits:
        return _reject(p, "f^n exceeds p")

    v = gmpy2.mpz(step.v)
    s = gmpy2.mpz(step.s)
    if v < 0 or s < 0:
        return _reject(p, "negative cofactor or quotient")

    p_less_one = p - 1
    u = (f ** n) << n2

    # 1. Cofactor exactness: p - 1 = u * v
    if u * v != p_less_one:
        return _reject(p, "p - 1 != u * v")

    # 2. Range split: v = s * 2u + r, 0 <= r < 2u
    two_u = 2 * u
    r = v - s * two_u
    if r < 0 or r >= two_u:
        return _reject(p, "v is not s * 2u + r with 0 <= r < 2u")

    # 3. Size bound
    if (u + 1) * (2 * u * u + u * (r - 1) + 1) <= p:
        return _reject(p, "size bound (u + 1)(2u^2 + u(r - 1) + 1) > p fails")

    # 4. r^2 - 8s is not a perfect square
    if s != 0:
        root = gmpy2.mpz(step.sqrt)
        disc = r * r - 8 * s
        if root < 0 or not (root * root < disc < (root + 1) * (root + 1)):
            return _reject(p, "square-root witness fails")

    # 5. Fermat witness
    a = gmpy2.mpz(step.a)
    if a < 0:
        return _reject(p, "negative Fermat witness")
    if gmpy2.powmod(a, p_less_one, p) != 1:
        return _reject(p, "a^(p-1) != 1 mod p")

    # 6. Euler coprimality witnesses
    p_less_one_div_f = gmpy2.mpz(step.p_less_one_div_f)
    p_less_one_div_two = gmpy2.mpz(step.p_less_one_div_two)
    if f * p_less_one_div_f != p_less_one:
        return _reject(p, "(p - 1)/f is not exact")
    if 2 * p_less_one_div_two != p_less_one:
        return _reject(p, "(p - 1)/2 is not exact")

    x_f = gmpy2.powmod(a, p_less_one_div_f, p)
    if x_f == 0 or (x_f - 1) * step.b_p_div_f1 + p * step.b_p_div_f2 != 1:
        return _reject(p, "gcd(a^((p-1)/f) - 1, p) != 1")
    x_two = gmpy2.powmod(a, p_less_one_div_two, p)
    if x_two == 0 or (x_two - 1) * step.b_p_div_two1 + p * step.b_p_div_two2 != 1:
        return _reject(p, "gcd(a^((p-1)/2) - 1, p) != 1")

    # 7. u even, v odd, gcd(u, v) = 1
    if gmpy2.is_odd(u) or gmpy2.is_even(v):
        return _reject(p, "u must be even and v odd")
    if u * step.bu + v * step.bv != 1:
        return _reject(p, "gcd(u, v) != 1")

    return True


def verify_certificate(h, cert: PrimalityCertificate, max_steps: Optional[int] = None) -> bool:
    """
    Verify that ``cert`` proves h prime.

    The candidate starts at h and moves to each step's f in turn; the final
    candidate must be below 2^32 and pass Miller-Rabin. Any failing check
    rejects the whole certificate.

    Parameters
    ----------
    h : int
        The integer claimed prime
    cert : PrimalityCertificate
        The certificate chain
    max_steps : int, optional
        Upper bound on the chain length

    Returns
    -------
    bool
        True iff the chain is valid
    """
    if max_steps is not None and len(cert.steps) > max_steps:
        logger.debug("Certificate has %d steps, limit is %d", len(cert.steps), max_steps)
        return False

    candidate = gmpy2.mpz(h)
    for i, step in enumerate(cert.steps):
        if not verify_step(candidate, step):
            logger.debug("Certificate rejected at step %d", i)
            return False
        candidate = gmpy2.mpz(step.f)

    if candidate < 0 or candidate >= MR_LIMIT:
        logger.debug("Final candidate %s is not below 2^32", candidate)
        return False
    if not is_prime_below_2_32(candidate):
        logger.debug("Final candidate %s failed Miller-Rabin", candidate)
        return False
    return True


# ============================================================================
# Prover side
# ============================================================================

def _trial_factor(w):
    """Split w into {small prime: multiplicity} and the unfactored cofactor."""
    factors = {}
    rest = gmpy2.mpz(w)
    for q in SMALL_PRIMES:
        if q * q > rest:
            break
        if rest % q == 0:
            e = 0
            while rest % q == 0:
                rest //= q
                e += 1
            factors[q] = e
    return factors, rest


def _pollard_rho(n, c, max_iterations=RHO_ITERATIONS):
    """
    Brent's variant of Pollard rho on the odd composite n.

    Returns a proper factor, n itself when the cycle closed without
    separating any factor (retry with another c), or None when the
    iteration budget ran out.
    """
    y = gmpy2.mpz(2)
    x = ys = y
    q = gmpy2.mpz(1)
    g = gmpy2.mpz(1)
    r = 1
    while g == 1:
        if r > max_iterations:
            return None
        x = y
        for _ in range(r):
            y = (y * y + c) % n
        k = 0
        while k < r and g == 1:
            ys = y
            for _ in range(min(RHO_BATCH, r - k)):
                y = (y * y + c) % n
                q = q * (x - y) % n
            g = gmpy2.gcd(q, n)
            k += RHO_BATCH
        r *= 2
    if g == n:
        # the batch product hit 0 mod n; step through it one gcd at a time
        while True:
            ys = (ys * ys + c) % n
            g = gmpy2.gcd(x - ys, n)
            if g > 1:
                break
    return g


def _factor(w, rho_iterations=RHO_ITERATIONS):
    """
    Partially factor w by trial division below 2^16 and then Pollard rho.

    Returns the prime factors found. Composite parts that rho cannot split
    within its budget are left out; they end up in the cofactor v, which
    the certificate never needs factored.
    """
    factors, rest = _trial_factor(w)
    stack = [rest] if rest > 1 else []
    while stack:
        m = stack.pop()
        if gmpy2.is_prime(m):
            factors[m] = factors.get(m, 0) + 1
            continue
        for c in RHO_CONSTANTS:
            d = _pollard_rho(m, c, rho_iterations)
            if d is None:
                break
            if d < m:
                stack.extend((d, m // d))
                break
    return factors


def _fermat_witness(p, p_less_one, p_less_one_div_f, p_less_one_div_two):
    for a in range(2, MAX_FERMAT_BASE):
        if gmpy2.powmod(a, p_less_one, p) != 1:
            return None  # p is composite
        g_f, b_f1, b_f2 = gmpy2.gcdext(gmpy2.powmod(a, p_less_one_div_f, p) - 1, p)
        g_two, b_two1, b_two2 = gmpy2.gcdext(gmpy2.powmod(a, p_less_one_div_two, p) - 1, p)
        if g_f == 1 and g_two == 1:
            return a, b_f1, b_f2, b_two1, b_two2
    return None


def _build_step(p, f, n2: int) -> Optional[PocklingtonStep]:
    """Witnesses for p with the prime factor f of p - 1, or None if f is too small."""
    p_less_one = p - 1
    f = gmpy2.mpz(f)
    v = p_less_one >> n2
    n = 0
    while v % f == 0:
        v //= f
        n += 1
    u = (f ** n) << n2

    s, r = gmpy2.t_divmod(v, 2 * u)
    if (u + 1) * (2 * u * u + u * (r - 1) + 1) <= p:
        return None

    root = gmpy2.mpz(0)
    if s != 0:
        disc = r * r - 8 * s
        if disc < 0:
            return None
        root = gmpy2.isqrt(disc)
        if root * root == disc:
            return None

    p_less_one_div_f = p_less_one // f
    p_less_one_div_two = p_less_one >> 1
    witness = _fermat_witness(p, p_less_one, p_less_one_div_f, p_less_one_div_two)
    if witness is None:
        return None
    a, b_f1, b_f2, b_two1, b_two2 = witness

    _, bu, bv = gmpy2.gcdext(u, v)
    return PocklingtonStep(
        f=int(f), n=n, n2=n2, a=a,
        bu=int(bu), bv=int(bv), v=int(v), s=int(s), sqrt=int(root),
        p_less_one_div_f=int(p_less_one_div_f),
        p_less_one_div_two=int(p_less_one_div_two),
        b_p_div_f1=int(b_f1), b_p_div_f2=int(b_f2),
        b_p_div_two1=int(b_two1), b_p_div_two2=int(b_two2),
    )


def _candidate_steps(p, rho_iterations=RHO_ITERATIONS) -> Iterator[PocklingtonStep]:
    """
    Every valid step for p, smallest factor first.

    A smaller f leaves a shorter chain below it, so the first step that
    passes the size bound is the one to try first.
    """
    p = gmpy2.mpz(p)
    p_less_one = p - 1
    n2 = int(gmpy2.bit_scan1(p_less_one))
    for f in sorted(_factor(p_less_one >> n2, rho_iterations)):
        step = _build_step(p, f, n2)
        if step is not None:
            yield step


def prove_step(p) -> Optional[PocklingtonStep]:
    """
    Build one certificate step for p, or return None.

    p - 1 is factored by trial division over primes below 2^16 followed by
    Pollard rho. The step uses the smallest prime factor f of p - 1 that
    satisfies the size bound; the rest of p - 1 goes into the cofactor v.
    """
    return next(_candidate_steps(p), None)


def _prove_chain(p, steps_left: int, rho_iterations=RHO_ITERATIONS) -> Optional[List[PocklingtonStep]]:
    if p < MR_LIMIT:
        return [] if is_prime_below_2_32(p) else None
    if steps_left == 0 or not gmpy2.is_prime(p):
        return None
    for step in _candidate_steps(p, rho_iterations):
        below = _prove_chain(gmpy2.mpz(step.f), steps_left - 1)
        if below is not None:
            return [step] + below
    return None


def prove_prime(p, nonce: int = 0, max_steps: int = DEFAULT_MAX_STEPS,
                rho_iterations: int = RHO_ITERATIONS) -> Optional[PrimalityCertificate]:
    """
    Build a full certificate chain for p, or return None.

    Each level tries every admissible factor of p - 1 and backtracks when
    the factor itself cannot be certified.

    Parameters
    ----------
    p : int
        The integer to certify
    nonce : int
        The hash-to-prime nonce to record in the certificate
    max_steps : int
        Give up on chains longer than this
    rho_iterations : int
        Pollard rho budget for factoring p - 1 itself; the levels below
        always use ``RHO_ITERATIONS``

    Returns
    -------
    PrimalityCertificate or None
        None when p is composite or p - 1 does not split far enough
    """
    candidate = gmpy2.mpz(p)
    if candidate < 2:
        return None
    steps = _prove_chain(candidate, max_steps, rho_iterations)
    if steps is None:
        return None
    return PrimalityCertificate(steps=tuple(steps), nonce=nonce)
