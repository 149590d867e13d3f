"""
Performance Benchmark
=====================

Timing and size measurements for the FKPS verifier and reference prover:
- Parameter generation and forced opening versus the delay T
- Commitment and opening versus message length
- PoE verification versus challenge bit length
- Memory peak of a forced opening
- Sizes of what a verifier receives (commitment, proof, certificate)

Usage:
    python doc/fkps_benchmark.py
"""

import json
import os
import sys
import time
import tracemalloc
from typing import List, Tuple

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from fkps import commit, gen_time_params, setup, verify_force_open, verify_open, verify_poe
from fkps.commit import force_open
from fkps.config import configure_logging
from fkps.fs_oracles import CHALLENGE_BITS, derive_challenge, poe_transcript
from fkps.pocklington import verify_certificate
from fkps.proofs import prove_poe
from fkps.groups import power
from fkps.utils import element_to_bytes



def _certificate_size(cert) -> int:
    """Bytes for the nonce plus every step field as a signed big-endian integer."""
    size = 4
    for step in cert.steps:
        for value in vars(step).values():
            size += abs(value).bit_length() // 8 + 1
    return size


class PerformanceBenchmark:
    """Collects timings (seconds) and sizes (bytes) into ``results``."""

    def __init__(self, challenge_bits: int = CHALLENGE_BITS):
        print(f"🔧 Initialising benchmark (challenge bits: {challenge_bits})...")
        self.group = setup()
        self.challenge_bits = challenge_bits
        self.results = {}
        self.memory_results = {}

    def measure_time(self, func, *args, num_runs=5, **kwargs) -> Tuple[float, float, object]:
        """Mean and standard deviation of ``num_runs`` calls, plus the last result."""
        times = []
        result = None
        for _ in range(num_runs):
            start = time.perf_counter()
            result = func(*args, **kwargs)
            times.append(time.perf_counter() - start)

        avg_time = sum(times) / len(times)
        std_dev = (sum((t - avg_time) ** 2 for t in times) / len(times)) ** 0.5
        return avg_time, std_dev, result

    def measure_memory(self, func, *args, **kwargs) -> Tuple[float, object]:
        """Peak traced memory of one call, in MB."""
        tracemalloc.start()
        result = func(*args, **kwargs)
        _, peak = tracemalloc.get_traced_memory()
        tracemalloc.stop()
        return peak / 1024 / 1024, result

    def _params(self, t: int):
        pp, _ = gen_time_params(self.group, t=t, challenge_bits=self.challenge_bits)
        return pp

    def benchmark_delay(self, delays: List[int], num_runs=3):
        """gen_time_params, force_open and verify_force_open for each T."""
        print(f"\n📊 Delay scaling ({num_runs} runs each)")
        print("=" * 60)

        results = {'gen_time_params': {}, 'force_open': {}, 'verify_force_open': {}}
        message = b"benchmark message"
        for t in delays:
            print(f"  T={t}...", end=" ", flush=True)
            t_gen, _, (pp, _) = self.measure_time(
                gen_time_params, self.group, t=t, challenge_bits=self.challenge_bits,
                num_runs=num_runs)
            comm, _ = commit(message, pp)
            t_force, _, (recovered, z_hat, proof) = self.measure_time(
                force_open, comm, pp, num_runs=num_runs)
            t_verify, _, ok = self.measure_time(
                verify_force_open, comm, z_hat, proof, recovered, pp, num_runs=num_runs)
            assert ok

            results['gen_time_params'][t] = t_gen
            results['force_open'][t] = t_force
            results['verify_force_open'][t] = t_verify
            print(f"✓ force {t_force*1000:.1f} ms, verify {t_verify*1000:.2f} ms")

        self.results['delay'] = results
        return results

    def benchmark_message_length(self, lengths: List[int], num_runs=5):
        """commit and verify_open for each message length."""
        print(f"\n📊 Message length scaling ({num_runs} runs each)")
        print("=" * 60)

        pp = self._params(40)
        results = {'commit': {}, 'verify_open': {}}
        for length in lengths:
            print(f"  {length} bytes...", end=" ", flush=True)
            message = bytes(i % 256 for i in range(length))
            t_commit, _, (comm, alpha) = self.measure_time(commit, message, pp, num_runs=num_runs)
            t_open, _, ok = self.measure_time(verify_open, comm, alpha, message, pp, num_runs=num_runs)
            assert ok

            results['commit'][length] = t_commit
            results['verify_open'][length] = t_open
            print(f"✓ commit {t_commit*1000:.2f} ms, open {t_open*1000:.2f} ms")

        self.results['message_length'] = results
        return results

    def benchmark_challenge_bits(self, bit_lengths: List[int], num_runs=5):
        """prove_poe, verify_poe and certificate verification per challenge size."""
        print(f"\n📊 Challenge size scaling ({num_runs} runs each)")
        print("=" * 60)

        x = power(self.group.generator, 0xBE5C, self.group)
        results = {'prove_poe': {}, 'verify_poe': {}, 'verify_certificate': {}, 'cert_steps': {}}
        for bits in bit_lengths:
            print(f"  {bits} bits...", end=" ", flush=True)
            t_prove, _, (y, proof) = self.measure_time(
                prove_poe, x, 40, self.group, challenge_bits=bits, num_runs=1)
            t_verify, _, ok = self.measure_time(
                verify_poe, x, y, 40, proof, self.group, challenge_bits=bits, num_runs=num_runs)
            assert ok
            h = derive_challenge(poe_transcript(x, y, 40, self.group), proof.cert.nonce, bits)
            t_cert, _, _ = self.measure_time(verify_certificate, h, proof.cert, num_runs=num_runs)

            results['prove_poe'][bits] = t_prove
            results['verify_poe'][bits] = t_verify
            results['verify_certificate'][bits] = t_cert
            results['cert_steps'][bits] = len(proof.cert.steps)
            print(f"✓ verify {t_verify*1000:.2f} ms, {len(proof.cert.steps)} certificate steps")

        self.results['challenge_bits'] = results
        return results

    def benchmark_memory(self, delays: List[int]):
        """Peak memory of force_open for each T."""
        print("\n📊 Memory usage")
        print("=" * 60)

        results = {}
        for t in delays:
            pp = self._params(t)
            comm, _ = commit(b"memory", pp)
            mem, _ = self.measure_memory(force_open, comm, pp)
            results[t] = mem
            print(f"  T={t}: ✓ {mem:.2f} MB")

        self.memory_results['force_open'] = results
        return results

    def benchmark_bandwidth(self, lengths: List[int]):
        """
        Bytes a verifier receives.

        The commitment is one group element plus the ciphertext; the forced
        opening adds z_hat, q and one certificate, independent of T.
        """
        print("\n📊 Bandwidth")
        print("=" * 60)

        pp = self._params(40)
        element = pp.group.element_bytes
        results = {'commitment_size': {}, 'force_open_size': {}}
        for length in lengths:
            comm, _ = commit(bytes(length), pp)
            _, z_hat, proof = force_open(comm, pp)
            comm_size = len(element_to_bytes(comm.h_hat, pp.group)) + len(comm.ct)
            cert_size = _certificate_size(proof.cert)
            open_size = 2 * element + cert_size

            results['commitment_size'][length] = comm_size
            results['force_open_size'][length] = open_size
            print(f"  {length} bytes: ✓ commitment {comm_size}B, forced opening {open_size}B")

        self.results['bandwidth'] = results
        return results

    def run_all_benchmarks(self, delays: List[int] = None, lengths: List[int] = None,
                           bit_lengths: List[int] = None, num_runs: int = 3):
        if delays is None:
            delays = [10, 100, 1000, 10000]
        if lengths is None:
            lengths = [32, 256, 1024, 8192]
        if bit_lengths is None:
            bit_lengths = [256, 277, 320]

        print("\n" + "=" * 60)
        print("🚀 Running FKPS benchmarks")
        print("=" * 60)

        self.benchmark_delay(delays, num_runs)
        self.benchmark_message_length(lengths, num_runs)
        self.benchmark_challenge_bits(bit_lengths, num_runs)
        self.benchmark_memory(delays)
        self.benchmark_bandwidth(lengths)

        print("\n" + "=" * 60)
        print("✅ Benchmarks complete")
        print("=" * 60)

    def save_results(self, filename='benchmark_results.json'):
        os.makedirs(os.path.dirname(filename) or '.', exist_ok=True)
        data = {
            'timing': self.results,
            'memory': self.memory_results,
        }
        with open(filename, 'w') as f:
            json.dump(data, f, indent=2)
        print(f"\n💾 Results saved to {filename}")

    def print_summary(self):
        print("\n" + "=" * 60)
        print("📈 Summary")
        print("=" * 60)
        for category, data in self.results.items():
            print(f"\n{category.upper()}:")
            for key, values in data.items():
                print(f"  {key}:")
                for n, v in values.items():
                    unit = f"{v*1000:.2f} ms" if isinstance(v, float) else f"{v}"
                    print(f"    {n}: {unit}")


if __name__ == '__main__':
    configure_logging()
    benchmark = PerformanceBenchmark()
    benchmark.run_all_benchmarks()
    benchmark.save_results('benchmark_results.json')
    benchmark.print_summary()
