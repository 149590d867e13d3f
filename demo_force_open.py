#!/usr/bin/env python3
"""
Forced Opening Demo
===================

Shows the full life cycle of an FKPS commitment:

1. Generate public parameters (h, z = h^(2^T)) with a proof of the relation
2. Commit to a sealed bid
3. Open it honestly by revealing alpha
4. Open it again without alpha, by T sequential squarings, and verify the
   forced opening with a proof of exponentiation

Set FKPS_LOG_LEVEL=INFO to see the challenge search.
"""

import sys
import os
import time

sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from fkps import commit, gen_time_params, setup, verify_force_open, verify_open
from fkps.commit import force_open
from fkps.config import configure_logging
from fkps.verify import verify_time_params


def main():
    configure_logging()

    print("=" * 70)
    print("FKPS forced-opening commitment demo")
    print("=" * 70)
    print()

    # 1. Parameters
    print("[1] Generating time parameters...")
    group = setup()
    start = time.time()
    pp, time_proof = gen_time_params(group)
    print(f"✅ z = h^(2^{pp.t}) computed in {time.time() - start:.2f}s")
    print(f"    - modulus: {group.modulus.bit_length()} bits")
    print(f"    - PoE challenges: {pp.challenge_bits} bits")
    print(f"    - time proof valid: {verify_time_params(pp, time_proof)}")
    print()

    # 2. Commit
    message = b"sealed bid: 1250 units at 17.5"
    print("[2] Committing to the bid...")
    comm, alpha = commit(message, pp)
    print(f"✅ Commitment created ({len(comm.ct)} ciphertext bytes)")
    print(f"    - h_hat: {hex(comm.h_hat)[:18]}...")
    print()

    # 3. Honest opening
    print("[3] Honest opening with alpha...")
    ok = verify_open(comm, alpha, message, pp)
    print(f"{'✅' if ok else '❌'} verify_open: {ok}")
    tampered = message.replace(b"1250", b"9250")
    print(f"    - tampered message accepted: {verify_open(comm, alpha, tampered, pp)}")
    print()

    # 4. Forced opening
    print(f"[4] Forced opening ({pp.t} sequential squarings)...")
    start = time.time()
    recovered, z_hat, proof = force_open(comm, pp)
    elapsed = time.time() - start
    ok = verify_force_open(comm, z_hat, proof, recovered, pp)
    print(f"{'✅' if ok else '❌'} verify_force_open: {ok} ({elapsed:.2f}s)")
    print(f"    - recovered: {recovered.decode()}")
    print(f"    - certificate steps: {len(proof.cert.steps)}, nonce: {proof.cert.nonce}")
    print()

    print("=" * 70)
    print("Demo complete")
    print("=" * 70)


if __name__ == "__main__":
    main()
