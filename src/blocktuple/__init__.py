"""Blocktuple statistics for validator slot assignments.

Package structure:
    blocktuple.combinatorics - Exact counts of sequences with capped runs
    blocktuple.distribution  - Exact longest-run CDF/PMF
    blocktuple.projection    - Per-epoch terms up to a target slot
    blocktuple.api           - Validator pool source (Rated API)
    blocktuple.storage       - Result tables (SQLite)
    blocktuple.pipeline      - Fetch, compute and persist in one run

The Monte Carlo sampler lives in the top-level ``monte_carlo`` package.

Quick usage:
    from blocktuple import run_length_distribution, calculate_epoch_probabilities
    from monte_carlo import sample_run_lengths
"""

__version__ = "0.1.0"

from .combinatorics import binomial_coefficient, count_restricted
from .distribution import (
    SLOTS_PER_EPOCH,
    RunLengthDistribution,
    calculate_cdf,
    calculate_pmf,
    run_length_distribution,
)
from .errors import (
    BlocktupleError,
    InvalidProbability,
    InvalidTrialCount,
    InvalidSimulationParameters,
    UpstreamDataUnavailable,
)
from .projection import calculate_epoch_probabilities
from .utils import setup_logging, survival_probability

__all__ = [
    "binomial_coefficient",
    "count_restricted",
    "SLOTS_PER_EPOCH",
    "RunLengthDistribution",
    "calculate_cdf",
    "calculate_pmf",
    "run_length_distribution",
    "BlocktupleError",
    "InvalidProbability",
    "InvalidTrialCount",
    "InvalidSimulationParameters",
    "UpstreamDataUnavailable",
    "calculate_epoch_probabilities",
    "setup_logging",
    "survival_probability",
]
