"""
RSA Group Initialization and Element Arithmetic
================================================

This module handles the public RSA group description and the element
operations used by the proof-of-exponentiation and commitment layers.

The group is QR_M^+ := { |x| : x in QR_M }, i.e. residues modulo M taken up to
sign. Every element therefore has a canonical representative:

    canonical(e) = min(e mod M, M - (e mod M))

so that x and -x (mod M) compare equal.

Big-integer arithmetic is delegated to gmpy2:
- gmpy2.mpz holds arbitrary-precision integers
- gmpy2.powmod(b, e, m) computes b^e mod m
- gmpy2.gcdext(a, b) returns (g, s, t) with a*s + b*t = g
"""

import logging
from dataclasses import dataclass

import gmpy2

from .errors import MalformedInputError, NotInvertibleError


logger = logging.getLogger(__name__)


# RSA-2048 factoring challenge number; its factorization is unknown.
RSA_2048_MODULUS = gmpy2.mpz(
    "2519590847565789349402718324004839857142928212620403202777713783604366202070759555626401"
    "8525880784406918290641249515082189298559149176184502808489120072844992687392807287776735"
    "9714183472702618963750149718246911650776133798590957000973304597488084284017974291006424"
    "5869181719511874612151517265463228221686998754918242243363725908514186546204357679842338"
    "7184774447920739934236584823824281198163815010674810451660377306056201619676256133844143"
    "6038339044149526344321901146575444541784240209246165157233507787077498171257724679629263"
    "8635637328991215483143816789988504044536402352738195137863656439121201039712282212072035"
    "7"
)

DEFAULT_GENERATOR = gmpy2.mpz(2)


@dataclass(frozen=True)
class GroupParams:
    """
    Public, immutable description of the RSA group.

    Attributes
    ----------
    modulus : mpz
        The RSA modulus M (factorization unknown to everyone)
    generator : mpz
        The canonical generator g
    """
    modulus: gmpy2.mpz
    generator: gmpy2.mpz

    @property
    def element_bytes(self) -> int:
        """Fixed byte width used to serialize group elements."""
        return (int(self.modulus.bit_length()) + 7) // 8


def setup(modulus=None, generator=None) -> GroupParams:
    """
    Initialize the RSA group parameters.

    Parameters
    ----------
    modulus : int, optional
        The RSA modulus. Default is the RSA-2048 challenge number.
    generator : int, optional
        The group generator. Default is 2.

    Returns
    -------
    GroupParams
        The frozen group description, shared read-only by every operation.

    Examples
    --------
    >>> pp = setup()
    >>> pp.element_bytes
    256
    """
    m = gmpy2.mpz(RSA_2048_MODULUS if modulus is None else modulus)
    g = gmpy2.mpz(DEFAULT_GENERATOR if generator is None else generator)

    if m < 3 or m % 2 == 0:
        raise MalformedInputError(f"RSA modulus must be odd and at least 3, got {m}")
    if g <= 0 or g >= m:
        raise MalformedInputError("generator must lie in [1, M)")

    return GroupParams(modulus=m, generator=min(g, m - g))


def canonicalize(e, pp: GroupParams) -> gmpy2.mpz:
    """
    Return the canonical representative min(e mod M, M - (e mod M)).

    Parameters
    ----------
    e : int or mpz
        Any integer
    pp : GroupParams
        The group parameters

    Returns
    -------
    mpz
        The canonical form of e
    """
    m = pp.modulus
    a = gmpy2.f_mod(gmpy2.mpz(e), m)
    return min(a, m - a)


def combine(a, b, pp: GroupParams) -> gmpy2.mpz:
    """
    Multiply two elements: a * b mod M.

    The result is NOT canonicalized; use ``op`` for a canonical product.
    """
    return gmpy2.f_mod(gmpy2.mpz(a) * gmpy2.mpz(b), pp.modulus)


def power(base, exponent, pp: GroupParams) -> gmpy2.mpz:
    """
    Modular exponentiation base^exponent mod M.

    Parameters
    ----------
    base : int or mpz
        The base element
    exponent : int or mpz
        A non-negative arbitrary-precision exponent
    pp : GroupParams
        The group parameters

    Returns
    -------
    mpz
        base^exponent mod M (not canonicalized)
    """
    exponent = gmpy2.mpz(exponent)
    if exponent < 0:
        raise MalformedInputError("exponent must be non-negative")
    return gmpy2.powmod(gmpy2.mpz(base), exponent, pp.modulus)


def equals(a, b, pp: GroupParams) -> bool:
    """
    Compare two elements of QR_M^+.

    Both operands are canonicalized before comparison, so callers may pass
    raw residues without risking a wrong accept/reject.
    """
    return canonicalize(a, pp) == canonicalize(b, pp)


def from_nat(n, pp: GroupParams) -> gmpy2.mpz:
    """Return the canonical group element for a positive integer n."""
    n = gmpy2.mpz(n)
    if n <= 0:
        raise MalformedInputError("group elements are built from positive integers")
    return canonicalize(n, pp)


def op(a, b, pp: GroupParams) -> gmpy2.mpz:
    """Group operation: canonical(a * b mod M)."""
    return canonicalize(combine(a, b, pp), pp)


def identity() -> gmpy2.mpz:
    return gmpy2.mpz(1)


def generator(pp: GroupParams) -> gmpy2.mpz:
    return pp.generator


def inverse(a, pp: GroupParams) -> gmpy2.mpz:
    """
    Return the canonical inverse of a.

    Raises
    ------
    NotInvertibleError
        If gcd(a, M) != 1.
    """
    g, s, _ = gmpy2.gcdext(gmpy2.mpz(a), pp.modulus)
    if abs(g) != 1:
        raise NotInvertibleError("Group element not invertible")
    return canonicalize(s, pp)


def square_repeatedly(x, t: int, pp: GroupParams) -> gmpy2.mpz:
    """
    Compute canonical(x^(2^t)) by t sequential squarings.

    This is the delay function: there is no known shortcut without the
    factorization of M.
    """
    if t < 0:
        raise MalformedInputError(f"number of squarings must be non-negative, got {t}")
    m = pp.modulus
    y = gmpy2.mpz(x)
    for _ in range(t):
        y = gmpy2.powmod(y, 2, m)
    logger.debug("Computed %d sequential squarings", t)
    return canonicalize(y, pp)
