"""Row-oriented result tables handed to the storage layer."""

from typing import Sequence

import numpy as np


def transpose(columns: Sequence[Sequence]) -> list[list]:
    """Turn a list of equal-length columns into a list of rows."""
    if not columns:
        return []
    lengths = {len(column) for column in columns}
    if len(lengths) != 1:
        raise ValueError(f"Columns must have equal lengths, got {sorted(lengths)}")
    return [list(row) for row in zip(*columns)]


def pmf_table(exact_pmf: np.ndarray, monte_carlo_pmf: np.ndarray) -> list[list]:
    """Rows of (run length k, exact PMF, Monte Carlo PMF) for k = 0..n."""
    run_lengths = list(range(len(exact_pmf)))
    return transpose([
        run_lengths,
        [float(v) for v in exact_pmf],
        [float(v) for v in monte_carlo_pmf],
    ])


def run_length_table(median_counts: np.ndarray, odds: np.ndarray) -> list[list]:
    """Rows of (run length k, median tally, odds) for k = 0..n."""
    run_lengths = list(range(len(median_counts)))
    return transpose([
        run_lengths,
        [float(v) for v in median_counts],
        [float(v) for v in odds],
    ])


def projection_table(epoch_probabilities: Sequence[float]) -> list[list]:
    """Rows of (1-indexed epoch, probability)."""
    return transpose([
        list(range(1, len(epoch_probabilities) + 1)),
        [float(v) for v in epoch_probabilities],
    ])
