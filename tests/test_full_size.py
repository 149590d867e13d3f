"""
End-to-End Test at Full Size
============================

One auction-style life cycle with every default in place: the RSA-2048
group, T from the configuration, 277-bit PoE challenges and a random base h.
Both PoE proofs are built from scratch, so the module is marked slow.
"""

import pytest
import gmpy2

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from fkps.commit import commit, force_open
from fkps.config import config
from fkps.fs_oracles import CHALLENGE_BITS, derive_challenge, poe_transcript
from fkps.groups import RSA_2048_MODULUS, op
from fkps.params import gen_time_params, validate_params
from fkps.pocklington import verify_certificate
from fkps.verify import verify_force_open, verify_open, verify_poe, verify_time_params


pytestmark = pytest.mark.slow


@pytest.fixture(scope="module")
def defaults():
    return gen_time_params()


@pytest.fixture(scope="module")
def bid(defaults):
    pp, _ = defaults
    message = b"bid #7: 4200 units"
    comm, alpha = commit(message, pp)
    return message, comm, alpha


@pytest.fixture(scope="module")
def forced(defaults, bid):
    pp, _ = defaults
    _, comm, _ = bid
    return force_open(comm, pp)


def test_defaults(defaults):
    pp, _ = defaults
    assert pp.group.modulus == RSA_2048_MODULUS
    assert pp.t == config.time_param
    assert pp.challenge_bits == CHALLENGE_BITS == 277
    assert validate_params(pp)


def test_time_params_proof(defaults):
    pp, proof = defaults
    assert verify_time_params(pp, proof)
    assert verify_poe(pp.h, pp.z, pp.t, proof, pp.group)


def test_honest_opening(defaults, bid):
    pp, _ = defaults
    message, comm, alpha = bid
    assert verify_open(comm, alpha, message, pp)


def test_forced_opening(defaults, bid, forced):
    pp, _ = defaults
    message, comm, _ = bid
    recovered, z_hat, proof = forced
    assert recovered == message
    assert verify_poe(comm.h_hat, z_hat, pp.t, proof, pp.group)
    assert verify_force_open(comm, z_hat, proof, message, pp)
    assert not verify_force_open(comm, op(z_hat, 2, pp.group), proof, message, pp)


def test_forced_opening_challenge_is_certified(defaults, bid, forced):
    pp, _ = defaults
    _, comm, _ = bid
    _, z_hat, proof = forced
    h = derive_challenge(poe_transcript(comm.h_hat, z_hat, pp.t, pp.group), proof.cert.nonce)
    assert h.bit_length() == 277
    assert gmpy2.is_prime(h)
    assert verify_certificate(h, proof.cert)
