"""Exact counting of binary sequences with a capped longest run.

A sequence of ``n`` slots holds ``k`` successes; ``count_restricted(n, k, x)``
returns how many such sequences keep every run of consecutive successes at
length ``x`` or less. Summed against binomial weights this gives the exact
distribution of the longest run in :mod:`blocktuple.distribution`.
"""

from functools import lru_cache

from .errors import InvalidTrialCount


def binomial_coefficient(n: int, k: int) -> int:
    """Compute C(n, k) with the multiplicative recurrence.

    Every partial product is itself a binomial coefficient, so the integer
    division is exact at each step.
    """
    if k > n or k < 0:
        return 0
    if k == 0 or k == n:
        return 1

    coefficient = 1
    for i in range(1, k + 1):
        coefficient = coefficient * (n - i + 1) // i
    return coefficient


@lru_cache(maxsize=None)
def _count_row(n: int, x: int) -> tuple[int, ...]:
    """Counts for every k = 0..n at length n and cap x, built row by row.

    row[j] holds the count for m slots and j successes. diagonals[m][j]
    accumulates the counts for m - i slots and j - i successes over i >= 0, so
    the sum over the opening run is the difference of two diagonal entries.
    """
    diagonals: list[list[int]] = []

    def diagonal(m: int, j: int) -> int:
        if m < 0 or j < 0:
            return 0
        return diagonals[m][j]

    for m in range(n + 1):
        row = [0] * (m + 1)
        coefficient = 1
        for j in range(m + 1):
            if j > 0:
                coefficient = coefficient * (m - j + 1) // j

            # All-failure sequence, or the all-success sequence under a cap it respects
            if j == 0 or (j == m and x >= j):
                row[j] = 1
            # No run can be longer than j, so the cap never bites
            elif x >= j:
                row[j] = coefficient
            # Case on the run opening the sequence: i further successes, then a failure
            elif j < m:
                row[j] = diagonal(m - 1, j) - diagonal(m - 2 - x, j - 1 - x)

        diagonals.append([row[j] + diagonal(m - 1, j - 1) for j in range(m + 1)])

    return tuple(row)


def count_restricted(n: int, k: int, x: int) -> int:
    """Count length-``n`` sequences with ``k`` successes and no run longer than ``x``.

    Args:
        n: Sequence length (number of slots).
        k: Number of successes. Values outside 0..n yield 0.
        x: Maximum allowed run length. Values above ``n`` behave like ``n``.

    Returns:
        Number of qualifying sequences.

    Raises:
        InvalidTrialCount: If ``n`` or ``x`` is negative.
    """
    if n < 0:
        raise InvalidTrialCount(f"Trial count must be non-negative, got n={n}")
    if x < 0:
        raise InvalidTrialCount(f"Run cap must be non-negative, got x={x}")
    if k < 0 or k > n:
        return 0
    return _count_row(n, min(x, n))[k]
