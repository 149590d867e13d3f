"""
Deterministic Miller-Rabin below 2^32
=====================================

The Pocklington chain bottoms out at an integer below 2^32. For that range the
Miller-Rabin test with the fixed bases {2, 7, 61} has no false positives
(Jaeschke 1993: the smallest strong pseudoprime to all three bases is
4759123141 > 2^32), so the test is exact, not probabilistic.

Test per base b:
----------------
Write n - 1 = 2^s * d with d odd and x = b^d mod n.
- x in {1, n-1}: b is not a witness
- otherwise square x up to s-1 times; reaching n-1 means b is not a witness
- never reaching n-1: n is composite
"""

from typing import List

import gmpy2


MR_BASES = (2, 7, 61)
MR_LIMIT = 1 << 32

# Trial-division bound used by the certificate prover.
SMALL_PRIME_BOUND = 1 << 16


def _passes_base(n: int, d: int, s: int, b: int) -> bool:
    x = gmpy2.powmod(b, d, n)
    if x == 1 or x == n - 1:
        return True
    for _ in range(s - 1):
        x = gmpy2.powmod(x, 2, n)
        if x == n - 1:
            return True
    return False


def is_prime_below_2_32(n) -> bool:
    """
    Exact primality test for 0 <= n < 2^32.

    Parameters
    ----------
    n : int
        The candidate

    Returns
    -------
    bool
        True iff n is prime

    Raises
    ------
    ValueError
        If n is outside [0, 2^32); the fixed base set is only exact there.
    """
    n = int(n)
    if n < 0 or n >= MR_LIMIT:
        raise ValueError(f"{n} is outside the deterministic range [0, 2^32)")
    if n < 2:
        return False
    if n in MR_BASES:
        return True
    if n % 2 == 0:
        return False

    d = n - 1
    s = 0
    while d % 2 == 0:
        d //= 2
        s += 1

    for b in MR_BASES:
        if b % n == 0:
            continue
        if not _passes_base(n, d, s, b):
            return False
    return True


def small_primes(bound: int = SMALL_PRIME_BOUND) -> List[int]:
    """Return all primes below ``bound`` (sieve of Eratosthenes)."""
    if bound < 3:
        return []
    sieve = bytearray([1]) * bound
    sieve[0] = sieve[1] = 0
    for i in range(2, int(bound ** 0.5) + 1):
        if sieve[i]:
            sieve[i * i::i] = bytearray(len(range(i * i, bound, i)))
    return [i for i, flag in enumerate(sieve) if flag]


SMALL_PRIMES = small_primes()
