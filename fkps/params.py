"""
Public Scheme Parameters
========================

This module generates, validates and loads the FKPS public parameters.

The parameters consist of the RSA group (M, g) and two bases h, z with the
time-lock relation

    z = h^(2^T)

for a fixed delay parameter T (T = 40 by default). Anyone who spends T
sequential squarings on a commitment's h_hat obtains the same value the
committer derives as z^alpha, which is what makes forced opening possible.

Verifiers never recompute z: the relation is established once, either by
``gen_time_params`` (which also emits a PoE proof of it) or by loading a
parameter file, and the resulting frozen ``SchemeParams`` is passed by
reference into every operation.

Parameter file format (JSON):
-----------------------------
    {
        "modulus": "<hex>",
        "generator": "<hex>",
        "h": "<hex>",
        "z": "<hex>",
        "t": 40,
        "challenge_bits": 277
    }
"""

import json
import logging
import secrets
from dataclasses import dataclass
from functools import lru_cache
from typing import Tuple

import gmpy2

from .config import config
from .errors import MalformedInputError
from .fs_oracles import CHALLENGE_BITS, MIN_CHALLENGE_BITS
from .groups import GroupParams, canonicalize, power, setup
from .proofs import DEFAULT_MAX_NONCE, PoEProof, prove_poe


logger = logging.getLogger(__name__)

TIME_PARAM = 40


@dataclass(frozen=True)
class SchemeParams:
    """
    FKPS public parameters.

    Attributes
    ----------
    group : GroupParams
        The RSA group
    h : mpz
        Commitment base (canonical)
    z : mpz
        Time-locked base, z = h^(2^t) (canonical)
    t : int
        Delay parameter: number of squarings relating h and z
    challenge_bits : int
        Bit length of PoE challenges
    """
    group: GroupParams
    h: gmpy2.mpz
    z: gmpy2.mpz
    t: int = TIME_PARAM
    challenge_bits: int = CHALLENGE_BITS


def gen_time_params(group: GroupParams = None, t: int = None,
                    challenge_bits: int = None, h=None,
                    max_nonce: int = DEFAULT_MAX_NONCE) -> Tuple[SchemeParams, PoEProof]:
    """
    Generate (h, z = h^(2^t)) together with a PoE proof of the relation.

    Parameters
    ----------
    group : GroupParams, optional
        The RSA group. Default is ``setup()`` (RSA-2048, g = 2).
    t : int, optional
        Delay parameter. Default is ``config.time_param`` (40).
    challenge_bits : int, optional
        PoE challenge bit length, at least 256. Default is
        ``config.challenge_bits`` (277).
    h : int, optional
        The commitment base. If None, h = g^k for a random k.
    max_nonce : int, optional
        Nonce budget for the PoE challenge search

    Returns
    -------
    (SchemeParams, PoEProof)
        The parameters and a proof that z = h^(2^t)
    """
    if group is None:
        group = setup()
    if t is None:
        t = config.time_param
    if challenge_bits is None:
        challenge_bits = config.challenge_bits
    if t < 1:
        raise MalformedInputError(f"delay parameter must be at least 1, got {t}")

    if h is None:
        k = secrets.randbelow(int(group.modulus))
        h = power(group.generator, k, group)
    h = canonicalize(h, group)

    z, proof = prove_poe(h, t, group, challenge_bits=challenge_bits, max_nonce=max_nonce)
    logger.info("Generated time parameters with t=%d", t)
    pp = SchemeParams(group=group, h=h, z=z, t=t, challenge_bits=challenge_bits)
    return pp, proof


def validate_params(pp: SchemeParams) -> bool:
    """
    Structural checks on the parameters; z is never recomputed here.

    Checks:
    - h and z are canonical, non-zero elements below M
    - t >= 1 and challenge_bits >= 256
    """
    m = pp.group.modulus
    for name, e in (('h', pp.h), ('z', pp.z)):
        if not 0 < e < m:
            logger.debug("Parameter %s out of range", name)
            return False
        if canonicalize(e, pp.group) != e:
            logger.debug("Parameter %s is not canonical", name)
            return False
    if pp.t < 1:
        logger.debug("Delay parameter %d is below 1", pp.t)
        return False
    if pp.challenge_bits < MIN_CHALLENGE_BITS:
        logger.debug("Challenge size %d is below the %d-bit minimum",
                     pp.challenge_bits, MIN_CHALLENGE_BITS)
        return False
    return True


def _parse_hex(data: dict, key: str) -> gmpy2.mpz:
    try:
        return gmpy2.mpz(str(data[key]), 16)
    except KeyError:
        raise MalformedInputError(f"parameter file is missing '{key}'") from None
    except ValueError:
        raise MalformedInputError(f"parameter '{key}' is not a hex integer") from None


def load_scheme_params(path: str) -> SchemeParams:
    """
    Load and validate ``SchemeParams`` from a JSON parameter file.

    Raises
    ------
    MalformedInputError
        If the file is not valid JSON, a field is missing or malformed, or
        the parameters fail ``validate_params``.
    """
    try:
        with open(path, 'r') as fh:
            data = json.load(fh)
    except json.JSONDecodeError as e:
        raise MalformedInputError(f"parameter file {path} is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise MalformedInputError(f"parameter file {path} must hold a JSON object")

    group = setup(_parse_hex(data, 'modulus'), _parse_hex(data, 'generator'))
    pp = SchemeParams(
        group=group,
        h=_parse_hex(data, 'h'),
        z=_parse_hex(data, 'z'),
        t=int(data.get('t', TIME_PARAM)),
        challenge_bits=int(data.get('challenge_bits', CHALLENGE_BITS)),
    )
    if not validate_params(pp):
        raise MalformedInputError(f"parameter file {path} failed validation")

    logger.info("Loaded scheme parameters from %s", path)
    return pp


def dump_scheme_params(pp: SchemeParams, path: str):
    """Write ``pp`` in the format read by ``load_scheme_params``."""
    data = {
        'modulus': format(int(pp.group.modulus), 'x'),
        'generator': format(int(pp.group.generator), 'x'),
        'h': format(int(pp.h), 'x'),
        'z': format(int(pp.z), 'x'),
        't': pp.t,
        'challenge_bits': pp.challenge_bits,
    }
    with open(path, 'w') as fh:
        json.dump(data, fh, indent=2)


@lru_cache(maxsize=1)
def get_scheme_params() -> SchemeParams:
    """
    Return the process-wide parameters from ``config.params_file``, loaded once.

    Raises
    ------
    MalformedInputError
        If no parameter file is configured (set FKPS_PARAMS_FILE).
    """
    if not config.has_params_file:
        raise MalformedInputError("no parameter file configured; set FKPS_PARAMS_FILE")
    return load_scheme_params(config.params_file)
