"""
Performance Analysis and Visualization
======================================

Plots the results written by ``fkps_benchmark.py``:
- Forced opening versus verification cost as T grows
- Commitment and honest opening versus message length
- PoE verification versus challenge size
- Bandwidth of commitments and forced openings

Usage:
    python doc/fkps_benchmark.py
    python doc/fkps_analysis.py
"""

import json
import sys

import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt
from matplotlib import rcParams
import numpy as np

rcParams['font.sans-serif'] = ['DejaVu Sans', 'Arial']
rcParams['axes.unicode_minus'] = False

COLORS = ['#2E86AB', '#A23B72', '#F18F01', '#C73E1D', '#6A994E']


class PerformanceAnalyzer:

    def __init__(self, results_file='benchmark_results.json'):
        try:
            with open(results_file, 'r') as f:
                data = json.load(f)
        except FileNotFoundError:
            print(f"❌ Results file not found: {results_file}")
            print("Run first: python doc/fkps_benchmark.py")
            sys.exit(1)
        self.timing_results = data.get('timing', {})
        self.memory_results = data.get('memory', {})

    @staticmethod
    def _series(data, name):
        keys = sorted(int(k) for k in data[name].keys())
        return keys, np.array([data[name][str(k)] for k in keys])

    def _save(self, fig, filename):
        fig.tight_layout()
        fig.savefig(filename, dpi=300, bbox_inches='tight')
        print(f"✅ Saved: {filename}")
        plt.close(fig)

    def plot_delay(self):
        """Log-log plot: forced opening grows with T, verification does not."""
        print("📊 Plotting delay scaling...")
        data = self.timing_results.get('delay', {})
        if not data:
            print("⚠️  No delay data")
            return

        fig, ax = plt.subplots(figsize=(10, 6))
        for name, color in zip(['gen_time_params', 'force_open', 'verify_force_open'], COLORS):
            t_values, times = self._series(data, name)
            ax.loglog(t_values, times * 1000, 'o-', linewidth=2, markersize=8, label=name, color=color)

        t_values, times = self._series(data, 'force_open')
        slope = np.polyfit(np.log(t_values), np.log(times), 1)[0]
        ax.set_xlabel('Delay T (squarings)', fontsize=12, fontweight='bold')
        ax.set_ylabel('Time (ms)', fontsize=12, fontweight='bold')
        ax.set_title(f'Delay Scaling (force_open slope {slope:.2f})', fontsize=14, fontweight='bold')
        ax.grid(True, alpha=0.3, which='both')
        ax.legend(fontsize=10)
        self._save(fig, 'perf_delay.png')

    def plot_message_length(self):
        print("📊 Plotting message length scaling...")
        data = self.timing_results.get('message_length', {})
        if not data:
            print("⚠️  No message length data")
            return

        fig, ax = plt.subplots(figsize=(10, 6))
        for name, color in zip(['commit', 'verify_open'], COLORS):
            lengths, times = self._series(data, name)
            ax.plot(lengths, times * 1000, 'o-', linewidth=2, markersize=8, label=name, color=color)
        ax.set_xlabel('Message length (bytes)', fontsize=12, fontweight='bold')
        ax.set_ylabel('Time (ms)', fontsize=12, fontweight='bold')
        ax.set_title('Commit and Honest Opening', fontsize=14, fontweight='bold')
        ax.grid(True, alpha=0.3)
        ax.legend(fontsize=10)
        self._save(fig, 'perf_message_length.png')

    def plot_challenge_bits(self):
        print("📊 Plotting challenge size scaling...")
        data = self.timing_results.get('challenge_bits', {})
        if not data:
            print("⚠️  No challenge size data")
            return

        bits, verify_times = self._series(data, 'verify_poe')
        _, cert_times = self._series(data, 'verify_certificate')
        _, steps = self._series(data, 'cert_steps')

        x = np.arange(len(bits))
        width = 0.35
        fig, ax = plt.subplots(figsize=(10, 6))
        ax.bar(x - width / 2, verify_times * 1000, width, label='verify_poe', color=COLORS[0])
        ax.bar(x + width / 2, cert_times * 1000, width, label='verify_certificate', color=COLORS[1])
        for i, n_steps in enumerate(steps):
            ax.text(x[i], max(verify_times[i], cert_times[i]) * 1000, f'{int(n_steps)} steps',
                    ha='center', va='bottom', fontsize=9)
        ax.set_xticks(x)
        ax.set_xticklabels([str(b) for b in bits])
        ax.set_xlabel('Challenge bits', fontsize=12, fontweight='bold')
        ax.set_ylabel('Time (ms)', fontsize=12, fontweight='bold')
        ax.set_title('PoE Verification Cost', fontsize=14, fontweight='bold')
        ax.grid(True, alpha=0.3, axis='y')
        ax.legend(fontsize=10)
        self._save(fig, 'perf_challenge_bits.png')

    def plot_bandwidth(self):
        print("📊 Plotting bandwidth...")
        data = self.timing_results.get('bandwidth', {})
        if not data:
            print("⚠️  No bandwidth data")
            return

        lengths, comm_sizes = self._series(data, 'commitment_size')
        _, open_sizes = self._series(data, 'force_open_size')
        x = np.arange(len(lengths))
        fig, ax = plt.subplots(figsize=(10, 6))
        ax.bar(x, comm_sizes, label='commitment', color=COLORS[2])
        ax.bar(x, open_sizes, bottom=comm_sizes, label='forced opening', color=COLORS[3])
        ax.set_xticks(x)
        ax.set_xticklabels([str(n) for n in lengths])
        ax.set_xlabel('Message length (bytes)', fontsize=12, fontweight='bold')
        ax.set_ylabel('Bytes', fontsize=12, fontweight='bold')
        ax.set_title('Verifier Bandwidth', fontsize=14, fontweight='bold')
        ax.grid(True, alpha=0.3, axis='y')
        ax.legend(fontsize=10)
        self._save(fig, 'perf_bandwidth.png')

    def generate_all_plots(self):
        print("\n" + "=" * 60)
        print("🎨 Generating plots")
        print("=" * 60 + "\n")

        self.plot_delay()
        self.plot_message_length()
        self.plot_challenge_bits()
        self.plot_bandwidth()

        print("\n" + "=" * 60)
        print("✅ All plots generated")
        print("=" * 60)


if __name__ == '__main__':
    analyzer = PerformanceAnalyzer(sys.argv[1] if len(sys.argv) > 1 else 'benchmark_results.json')
    analyzer.generate_all_plots()
