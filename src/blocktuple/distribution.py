"""Exact distribution of the longest run of successes within an epoch."""

import math
from dataclasses import dataclass

import numpy as np

from .combinatorics import count_restricted
from .errors import InvalidTrialCount, validate_probability

SLOTS_PER_EPOCH = 32

# Integers below 2**FLOAT_SAFE_BITS convert to float without overflow
FLOAT_SAFE_BITS = 1000


@dataclass
class RunLengthDistribution:
    """Distribution of the longest run in an epoch of ``n`` independent slots.

    Attributes:
        n: Slots per epoch
        p: Per-slot success probability
        cdf: Array of length n+1, cdf[x] = P(longest run <= x)
        pmf: Array of length n+1, pmf[x] = P(longest run == x)
    """
    n: int
    p: float
    cdf: np.ndarray
    pmf: np.ndarray

    def prob_at_most(self, x: int) -> float:
        """P(longest run <= x), clamped to the epoch length."""
        if x < 0:
            raise InvalidTrialCount(f"Run threshold must be non-negative, got {x}")
        return float(self.cdf[min(x, self.n)])


def calculate_cdf(n: int, p: float) -> np.ndarray:
    """Compute P(longest run <= x) for x = 0..n.

    cdf[x] = sum_k C_n^k(x) * p^k * (1 - p)^(n - k), where C_n^k(x) counts the
    sequences with k successes whose runs are all at most x long.

    Args:
        n: Slots per epoch
        p: Per-slot success probability

    Returns:
        cdf: np.ndarray of shape (n + 1,)
    """
    p = validate_probability(p)
    if n < 0:
        raise InvalidTrialCount(f"Trial count must be non-negative, got n={n}")

    cdf = np.empty(n + 1, dtype=float)
    for x in range(n + 1):
        cdf[x] = math.fsum(
            weighted_count(count_restricted(n, k, x), k, n, p) for k in range(n + 1)
        )
    return cdf


def weighted_count(count: int, k: int, n: int, p: float) -> float:
    """count * p^k * (1 - p)^(n - k) as a float, for counts of any size.

    Counts too large for a float are combined with the weight in log space.
    """
    q = 1.0 - p
    if count.bit_length() < FLOAT_SAFE_BITS:
        return count * (p ** k * q ** (n - k))
    # Large counts only occur for 0 < k < n, where a degenerate p zeroes the weight
    if p == 0.0 or q == 0.0:
        return 0.0
    return math.exp(math.log(count) + k * math.log(p) + (n - k) * math.log(q))


def calculate_pmf(cdf: np.ndarray) -> np.ndarray:
    """First-difference a longest-run CDF into its PMF."""
    pmf = np.empty_like(cdf)
    pmf[0] = cdf[0]
    pmf[1:] = np.diff(cdf)
    return pmf


def run_length_distribution(n: int, p: float) -> RunLengthDistribution:
    """Compute the exact CDF and PMF of the longest run for ``n`` slots."""
    cdf = calculate_cdf(n, p)
    return RunLengthDistribution(n=n, p=float(p), cdf=cdf, pmf=calculate_pmf(cdf))
