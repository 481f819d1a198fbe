#!/usr/bin/env python3
"""
Element Magnitude Sweep.

Runs a batch of seeded conv2D trials for each value of maxInt and reports how
the RMS error of the int8 multiplier grows with the magnitude of the inputs.

With small magnitudes every dot product fits in 8 bits and the simulated
result is exact. As maxInt grows, partial sums wrap around and the RMS error
climbs quickly toward the size of the reference results themselves.

Usage:
    python 01_maxint_sweep.py [options]

Examples:
    # Default sweep on a 4-vector, 3 x 3 multiplier
    python 01_maxint_sweep.py

    # Larger multiplier, more trials per point
    python 01_maxint_sweep.py --hwN 16 --hwP 16 --trials 10
"""

import argparse
import sys
from dataclasses import replace
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent.parent / "src"))

import numpy as np

from convsim.config import SMALL_TRIAL_CONFIG, HWConfig
from convsim.trial import run_trial

DEFAULT_MAX_INTS = [2, 4, 8, 16, 32, 64, 127]


def run_sweep(max_ints, hw: HWConfig, trials: int, seed: int, verbose: bool = True) -> list:
    """
    Run `trials` trials at each maxInt value.

    Returns:
        List of (max_int, mean rms error, worst rms error, mean seconds)
    """
    rows = []
    for max_int in max_ints:
        config = replace(SMALL_TRIAL_CONFIG, max_int=max_int, hw=hw)
        # Same seed at every point so each point sees the same tensor shapes
        rng = np.random.default_rng(seed)
        results = [run_trial(config, rng=rng) for _ in range(trials)]

        errors = [r.rms_error for r in results]
        elapsed = [r.elapsed for r in results]
        max_int = config.normalized().max_int
        rows.append((max_int, np.mean(errors), np.max(errors), np.mean(elapsed)))

        if verbose:
            for r in results:
                print(f"  {r.summary()}")

    return rows


def print_table(rows, hw: HWConfig) -> None:
    print()
    print("=" * 60)
    print(f"RMS error vs maxInt, HW MM: {hw.describe()}")
    print("=" * 60)
    print(f"{'maxInt':>8} {'mean rms':>12} {'worst rms':>12} {'mean time':>14}")
    print("-" * 60)
    for max_int, mean_err, worst_err, mean_time in rows:
        print(
            f"{max_int:>8} {mean_err * 100:>11.2f}% {worst_err * 100:>11.2f}% "
            f"{mean_time * 1e3:>10.3f} msec"
        )


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="RMS error of the int8 multiplier as a function of maxInt",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument(
        "--hwN",
        type=int,
        default=4,
        help="HW multiplier vector width (default: 4)",
    )
    parser.add_argument(
        "--hwP",
        type=int,
        default=3,
        help="HW multiplier MM dimensions (default: 3)",
    )
    parser.add_argument(
        "--max-int",
        type=int,
        nargs="+",
        default=DEFAULT_MAX_INTS,
        help=f"maxInt values to sweep (default: {' '.join(map(str, DEFAULT_MAX_INTS))})",
    )
    parser.add_argument(
        "--trials",
        type=int,
        default=5,
        help="Trials per maxInt value (default: 5)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=0,
        help="Random seed (default: 0)",
    )
    parser.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="Only print the summary table",
    )

    args = parser.parse_args()

    hw = HWConfig(n=max(1, args.hwN), p=max(1, args.hwP)).clamped()
    rows = run_sweep(args.max_int, hw, max(1, args.trials), args.seed, verbose=not args.quiet)
    print_table(rows, hw)
    return 0


if __name__ == "__main__":
    sys.exit(main())
