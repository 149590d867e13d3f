"""
Test Suite for the Proof of Exponentiation
==========================================

prove_poe / verify_poe over the RSA-2048 group with the default 277-bit
challenges. The shared proof comes from the session time parameters
(x = h, y = z, t = 40); tests marked slow build their own.
"""

import dataclasses

import pytest

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from fkps.errors import CertificateGenerationError, MalformedInputError
from fkps.fs_oracles import derive_challenge, poe_transcript
from fkps.groups import canonicalize, combine, equals, op, power, square_repeatedly
from fkps.pocklington import PrimalityCertificate, verify_certificate
from fkps.proofs import PoEProof, hash_to_prime, prove_poe
from fkps.verify import verify_poe


@pytest.fixture(scope="module")
def group(time_params):
    pp, _ = time_params
    return pp.group


@pytest.fixture(scope="module")
def x(time_params):
    pp, _ = time_params
    return pp.h


@pytest.fixture(scope="module")
def poe(time_params):
    """(y, proof) for y = x^(2^40)."""
    pp, proof = time_params
    return pp.z, proof


def test_correctness(x, poe, group):
    y, proof = poe
    assert y == square_repeatedly(x, 40, group)
    assert verify_poe(x, y, 40, proof, group)


@pytest.mark.slow
@pytest.mark.parametrize("t", [1, 300])
def test_correctness_other_delays(x, group, t):
    y, proof = prove_poe(x, t, group)
    assert verify_poe(x, y, t, proof, group)


def test_accepts_non_canonical_representatives(x, poe, group):
    y, proof = poe
    m = group.modulus
    assert verify_poe(m - x, y, 40, proof, group)
    assert verify_poe(x, m - y, 40, proof, group)


def test_rejects_wrong_delay(x, poe, group):
    y, proof = poe
    assert not verify_poe(x, y, 39, proof, group)
    assert not verify_poe(x, y, 41, proof, group)


def test_rejects_wrong_result(x, poe, group):
    y, proof = poe
    assert not verify_poe(x, op(y, 2, group), 40, proof, group)
    assert not verify_poe(x, canonicalize(y + 1, group), 40, proof, group)


def test_rejects_wrong_base(x, poe, group):
    y, proof = poe
    assert not verify_poe(op(x, 2, group), y, 40, proof, group)


def test_rejects_forged_quotient(x, poe, group):
    y, proof = poe
    for forged in (op(proof.q, 2, group), canonicalize(proof.q + 1, group)):
        bad = dataclasses.replace(proof, q=forged)
        assert not verify_poe(x, y, 40, bad, group)


def test_rejects_changed_nonce(x, poe, group):
    y, proof = poe
    cert = dataclasses.replace(proof.cert, nonce=proof.cert.nonce + 1)
    bad = dataclasses.replace(proof, cert=cert)
    assert not verify_poe(x, y, 40, bad, group)


def test_rejects_mismatched_challenge_length(x, poe, group):
    y, proof = poe
    assert not verify_poe(x, y, 40, proof, group, challenge_bits=278)


def test_challenge_certificate_is_full_size(x, poe, group):
    y, proof = poe
    h = derive_challenge(poe_transcript(x, y, 40, group), proof.cert.nonce)
    assert h.bit_length() == 277
    assert len(proof.cert.steps) >= 2
    assert verify_certificate(h, proof.cert)


@pytest.mark.slow
def test_precomputed_result_is_reused(x, poe, group):
    y, proof = poe
    y2, proof2 = prove_poe(x, 40, group, y=y)
    assert y2 == y
    assert proof2 == proof


def test_hash_to_prime_budget_exhausted():
    with pytest.raises(CertificateGenerationError):
        hash_to_prime(b"no budget", max_nonce=0)


# ============================================================================
# Short challenges
# ============================================================================

def test_prover_refuses_short_challenges(x, group):
    with pytest.raises(MalformedInputError):
        prove_poe(x, 40, group, challenge_bits=255)


def test_rejects_forgery_with_two_bit_challenge(x, poe, group):
    """
    With 2-bit challenges h is 2 or 3, so a prover can aim for h = 3.

    fake_y = y * 5^3 and q = x^floor(2^40 / 3) * 5 satisfy
    q^3 * x^(2^40 mod 3) = fake_y, and 3 needs no certificate steps.
    """
    y, _ = poe
    fake_y = op(y, power(5, 3, group), group)
    q = op(power(x, (1 << 40) // 3, group), 5, group)
    transcript = poe_transcript(x, fake_y, 40, group)
    nonce = next(n for n in range(64) if derive_challenge(transcript, n, 2) == 3)
    forged = PoEProof(q=q, cert=PrimalityCertificate(steps=(), nonce=nonce))

    assert not equals(fake_y, y, group)
    assert equals(combine(power(q, 3, group), power(x, pow(2, 40, 3), group), group), fake_y, group)
    assert verify_certificate(3, forged.cert)

    assert not verify_poe(x, fake_y, 40, forged, group, challenge_bits=2)
    assert not verify_poe(x, fake_y, 40, forged, group, challenge_bits=255)
