#!/usr/bin/env python3
"""Entry point for the blocktuple statistics run.

Fetches validator pool stakes from the Rated API, computes the exact and
Monte Carlo run-length statistics for the configured pool and stores the
tables in SQLite.

Usage:
    python scripts/run.py
    python scripts/run.py --pool-id Lido --num-simulations 10000
    python scripts/run.py --config config/blocktuple.json --db results.db
"""

import argparse
import asyncio
import logging
import sys
from dataclasses import replace
from pathlib import Path

# Add src and project root to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))
sys.path.insert(0, str(Path(__file__).parent.parent))

from dotenv import load_dotenv

from blocktuple.config import Config
from blocktuple.errors import BlocktupleError
from blocktuple.pipeline import run_pipeline
from blocktuple.project_config import get_simulation_settings, get_storage_settings
from blocktuple.storage import SQLiteWriter
from blocktuple.utils import setup_logging, survival_probability


def print_summary(result) -> None:
    """Print the headline numbers of a run."""
    print("\n" + "=" * 50)
    print(f"Pool: {result.pool_id}  p={result.p:.6f}")
    print("=" * 50)
    print(f"P(longest run = 0) = {result.distribution.pmf[0]:.6g}")
    most_likely = int(result.distribution.pmf.argmax())
    print(f"Most likely longest run: {most_likely} "
          f"(p={result.distribution.pmf[most_likely]:.6g})")

    if result.target is not None and result.target.median_target_slot_hits is not None:
        print(f"Median target slot hits: {result.target.median_target_slot_hits:g}")
    if result.epoch_probabilities:
        print(f"Epochs projected: {len(result.epoch_probabilities)}")
        print(f"Survival probability: {survival_probability(result.epoch_probabilities):.6g}")
    print("=" * 50 + "\n")


async def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Blocktuple statistics run")
    parser.add_argument("--config", default=None, help="Path to JSON config file")
    parser.add_argument("--db", default=None, help="SQLite output path")
    parser.add_argument("--pool-id", default=None, help="Validator pool to analyze")
    parser.add_argument("--num-simulations", type=int, default=None,
                        help="Monte Carlo simulations per statistic")
    parser.add_argument("--seed", type=int, default=None, help="Random seed")
    parser.add_argument("--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args()

    # Load environment variables
    load_dotenv()

    # Setup logging
    setup_logging(logging.DEBUG if args.verbose else logging.INFO)
    logger = logging.getLogger(__name__)

    # Load configuration
    config = Config.from_env_optional()
    if not config:
        logger.error(
            "No API credentials found.\n"
            "Set RATED_API_BEARER_TOKEN or create a .env file."
        )
        sys.exit(1)

    settings = get_simulation_settings(args.config)
    overrides = {
        "pool_id": args.pool_id,
        "num_simulations": args.num_simulations,
        "seed": args.seed,
    }
    settings = replace(settings, **{k: v for k, v in overrides.items() if v is not None})

    db_path = args.db or get_storage_settings(args.config).sqlite_path
    with SQLiteWriter(db_path) as writer:
        try:
            result = await run_pipeline(config, settings, writer)
        except BlocktupleError as e:
            logger.error(f"Run failed: {e}")
            sys.exit(1)

        print_summary(result)
        logger.info(f"Row counts: {writer.get_stats()}")


if __name__ == "__main__":
    asyncio.run(main())
