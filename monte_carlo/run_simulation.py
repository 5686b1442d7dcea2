#!/usr/bin/env python3
"""
Run-Length Simulator CLI

Compares the exact longest-run PMF with its Monte Carlo estimate for one
per-slot success probability, and prints the median run-length tallies.

Usage:
    python monte_carlo/run_simulation.py --p 0.3
    python monte_carlo/run_simulation.py --p 0.3 --n-simulations 100000
    python monte_carlo/run_simulation.py --p 0.3 --target-epoch 225 --target-slot random
    python monte_carlo/run_simulation.py --p 0.3 --seed 42
"""

import argparse
import sys
import time
from pathlib import Path

# Add monte_carlo and src to path
sys.path.insert(0, str(Path(__file__).parent.parent))
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from blocktuple.distribution import SLOTS_PER_EPOCH, run_length_distribution
from blocktuple.errors import BlocktupleError
from monte_carlo.simulation import (
    RANDOM_SLOT,
    SimulationConfig,
    empirical_pmf,
    run_simulation,
)


def parse_slot(value: str):
    """Parse a 1-indexed slot number or the random-slot sentinel."""
    if value == RANDOM_SLOT:
        return RANDOM_SLOT
    try:
        return int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(
            f"expected a slot number or '{RANDOM_SLOT}', got {value!r}"
        )


def print_results(result, exact_pmf, mc_pmf, elapsed_time: float):
    """Print simulation results."""
    config = result.config

    print("=" * 60)
    print("RUN-LENGTH SIMULATION")
    print("=" * 60)
    print(f"p:            {config.p}")
    print(f"Simulations:  {config.n_simulations:,}")
    print(f"Epochs:       {config.n_epochs}")
    print(f"Target epoch: {config.target_epoch if config.target_epoch else 'all'}")
    print(f"Target slot:  {config.target_slot if config.target_slot else 'none'}")
    print(f"Seed:         {config.seed if config.seed is not None else 'random'}")
    print(f"Time:         {elapsed_time:.2f}s")
    print("=" * 60)

    print("\nLongest run PMF (exact vs Monte Carlo):")
    print("-" * 60)
    print(f"  {'k':>3}  {'Exact':>12}  {'Monte Carlo':>12}  {'Median N_k':>10}  {'Odds':>10}")
    print("-" * 60)
    for k in range(config.epoch_length + 1):
        print(
            f"  {k:>3}  {exact_pmf[k]:>12.6g}  {mc_pmf[k]:>12.6g}  "
            f"{result.median_counts[k]:>10g}  {result.odds[k]:>10.6f}"
        )
    print("-" * 60)

    if result.median_target_slot_hits is not None:
        print(f"\nMedian target slot hits: {result.median_target_slot_hits:g}")
    print("=" * 60)


def main():
    parser = argparse.ArgumentParser(
        description="Run-Length Simulator - Monte Carlo blocktuple statistics",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    # Daily horizon (225 epochs) for a 30% stake
    python monte_carlo/run_simulation.py --p 0.3

    # Only the last epoch, stopping at a random slot
    python monte_carlo/run_simulation.py --p 0.3 --target-epoch 225 --target-slot random

    # Reproducible results on 4 threads
    python monte_carlo/run_simulation.py --p 0.3 --seed 42 --workers 4
""",
    )

    parser.add_argument(
        "--p", type=float, required=True,
        help="Per-slot success probability (stake fraction)"
    )
    parser.add_argument(
        "--n-simulations", type=int, default=50_000,
        help="Number of Monte Carlo simulations (default: 50,000)"
    )
    parser.add_argument(
        "--n-epochs", type=int, default=225,
        help="Epochs per simulation (default: 225)"
    )
    parser.add_argument(
        "--target-epoch", type=int, default=None,
        help="Restrict tallying to this 1-indexed epoch (default: all)"
    )
    parser.add_argument(
        "--target-slot", type=parse_slot, default=None,
        help=f"1-indexed slot in the target epoch, or '{RANDOM_SLOT}'"
    )
    parser.add_argument(
        "--epoch-length", type=int, default=SLOTS_PER_EPOCH,
        help=f"Slots per epoch (default: {SLOTS_PER_EPOCH})"
    )
    parser.add_argument(
        "--pmf-samples", type=int, default=1_000_000,
        help="Epochs sampled for the Monte Carlo PMF (default: 1,000,000)"
    )
    parser.add_argument(
        "--seed", type=int, default=None,
        help="Random seed for reproducibility (default: None)"
    )
    parser.add_argument(
        "--workers", type=int, default=1,
        help="Threads used for simulation batches (default: 1)"
    )

    args = parser.parse_args()

    config = SimulationConfig(
        n_simulations=args.n_simulations,
        p=args.p,
        n_epochs=args.n_epochs,
        target_epoch=args.target_epoch,
        target_slot=args.target_slot,
        epoch_length=args.epoch_length,
        seed=args.seed,
        workers=args.workers,
    )

    print(f"Running {config.n_simulations:,} simulations of {config.n_epochs} epochs...")
    start_time = time.time()
    try:
        exact = run_length_distribution(config.epoch_length, config.p)
        mc_pmf = empirical_pmf(
            args.pmf_samples, config.p, config.epoch_length,
            seed=args.seed, workers=args.workers,
        )
        result = run_simulation(config)
    except BlocktupleError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    elapsed = time.time() - start_time

    print_results(result, exact.pmf, mc_pmf, elapsed)

    return result


if __name__ == "__main__":
    main()
