"""
Test Suite for Deterministic Miller-Rabin
=========================================

is_prime_below_2_32 is compared against independent oracles: a sieve over
[0, 10^6] and trial division near the top of the 32-bit range.
"""

import pytest

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from fkps.primality import MR_LIMIT, is_prime_below_2_32, small_primes


def _trial_division(n):
    if n < 2:
        return False
    if n % 2 == 0:
        return n == 2
    d = 3
    while d * d <= n:
        if n % d == 0:
            return False
        d += 2
    return True


def _sieve(bound):
    flags = [True] * bound
    flags[0] = flags[1] = False
    i = 2
    while i * i < bound:
        if flags[i]:
            for j in range(i * i, bound, i):
                flags[j] = False
        i += 1
    return flags


# ============================================================================
# Exhaustive agreement on small inputs
# ============================================================================

def test_agrees_with_sieve_up_to_one_million():
    bound = 10 ** 6 + 1
    oracle = _sieve(bound)
    mismatches = [n for n in range(bound) if is_prime_below_2_32(n) != oracle[n]]
    assert mismatches == []


def test_agrees_with_trial_division_near_2_32():
    for n in range(MR_LIMIT - 400, MR_LIMIT):
        assert is_prime_below_2_32(n) == _trial_division(n), n


# ============================================================================
# Curated values
# ============================================================================

@pytest.mark.parametrize("n", [2, 3, 5, 7, 61, 65521, 65537, 2147483647, 4294967291])
def test_known_primes(n):
    assert is_prime_below_2_32(n)


@pytest.mark.parametrize("n", [
    0, 1, 4, 9, 49, 3721,         # trivial and squares of the bases
    561, 1105, 1729, 41041,       # Carmichael numbers
    2047,                         # strong pseudoprime to base 2
    1373653, 25326001,            # strong pseudoprimes to bases 2 and 3 (and 5)
    3215031751,                   # strong pseudoprime to bases 2, 3, 5, 7
    4294049777,                   # 65521 * 65537
    4294967295,                   # 2^32 - 1
])
def test_known_composites(n):
    assert not is_prime_below_2_32(n)


@pytest.mark.parametrize("n", [-1, MR_LIMIT, MR_LIMIT + 1, 4759123141])
def test_out_of_range_raises(n):
    with pytest.raises(ValueError):
        is_prime_below_2_32(n)


def test_small_primes_table():
    primes = small_primes(100)
    assert primes == [p for p in range(100) if _trial_division(p)]
    assert small_primes(2) == []
