"""
FKPS Forced-Opening Commitments over RSA Groups
===============================================

Verifier (and reference prover) for a time-lock commitment scheme in the
hidden-order group QR_M^+. A committer seals a message under a key derived
from h^alpha and z^alpha, where z = h^(2^T) is fixed in the public
parameters. The committer can later reveal alpha (honest opening); anyone who
performs T sequential squarings on the commitment can recover the message
and prove it did so correctly (forced opening), using a Wesolowski proof of
exponentiation whose prime challenge is certified by a Pocklington chain.

Modules:
--------
- groups: RSA group parameters and element arithmetic
- primality: Deterministic Miller-Rabin below 2^32
- pocklington: Pocklington certificate verification and generation
- fs_oracles: Hash-to-prime, key derivation and keystream oracles
- proofs: Proof-of-exponentiation generation
- params: Public parameter generation, validation and loading
- commit: Commitment generation, keystream encryption and forced opening
- verify: verify_poe, verify_open, verify_force_open
- config: Environment configuration and logging setup

Usage:
------
    from fkps import setup, gen_time_params, commit, verify_open
    from fkps.commit import force_open
    from fkps.verify import verify_force_open

    pp, _ = gen_time_params(setup(), t=40)
    comm, alpha = commit(b"sealed bid", pp)
    assert verify_open(comm, alpha, b"sealed bid", pp)

    message, z_hat, proof = force_open(comm, pp)
    assert verify_force_open(comm, z_hat, proof, message, pp)
"""

__version__ = "0.1.0"

from .groups import setup
from .params import SchemeParams, gen_time_params, load_scheme_params
from .commit import Commitment, commit
from .verify import verify_force_open, verify_open, verify_poe

__all__ = [
    'setup', 'SchemeParams', 'gen_time_params', 'load_scheme_params',
    'Commitment', 'commit', 'verify_open', 'verify_force_open', 'verify_poe',
]
