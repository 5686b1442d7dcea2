"""Tests for the exact longest-run distribution."""

import math

import numpy as np
import pytest

from blocktuple.distribution import (
    SLOTS_PER_EPOCH,
    calculate_cdf,
    calculate_pmf,
    run_length_distribution,
    weighted_count,
)
from blocktuple.errors import InvalidProbability, InvalidTrialCount

PROBABILITIES = [0.0, 0.01, 0.1, 0.3, 0.5, 0.7, 0.99, 1.0]


def cdf_by_recursion(n: int, p: float, x: int) -> float:
    """P(longest run <= x) via a slot-by-slot state recursion."""
    # state[c] = P(current trailing run has length c, no run exceeded x)
    state = [1.0] + [0.0] * x
    for _ in range(n):
        nxt = [0.0] * (x + 1)
        nxt[0] = sum(state) * (1 - p)
        for c in range(x):
            nxt[c + 1] = state[c] * p
        state = nxt
    return sum(state)


class TestDistributionProperties:
    """Invariants holding for every (n, p)."""

    @pytest.mark.parametrize("n", [0, 1, 2, 7, 16, SLOTS_PER_EPOCH])
    @pytest.mark.parametrize("p", PROBABILITIES)
    def test_cdf_monotone_and_complete(self, n, p):
        dist = run_length_distribution(n, p)
        assert len(dist.cdf) == n + 1
        assert np.all(np.diff(dist.cdf) >= 0)
        assert dist.cdf[n] == pytest.approx(1.0, abs=1e-9)

    @pytest.mark.parametrize("n", [0, 1, 2, 7, 16, SLOTS_PER_EPOCH])
    @pytest.mark.parametrize("p", PROBABILITIES)
    def test_pmf_is_a_distribution(self, n, p):
        dist = run_length_distribution(n, p)
        assert dist.pmf.sum() == pytest.approx(1.0, abs=1e-9)
        assert np.all(dist.pmf >= -1e-9)

    @pytest.mark.parametrize("p", PROBABILITIES)
    def test_cdf_zero_is_no_success(self, p):
        dist = run_length_distribution(SLOTS_PER_EPOCH, p)
        assert dist.cdf[0] == pytest.approx((1 - p) ** 32, rel=1e-9, abs=1e-300)

    @pytest.mark.parametrize("p", [0.05, 0.3, 0.5, 0.8])
    def test_matches_state_recursion(self, p):
        dist = run_length_distribution(12, p)
        for x in range(13):
            assert dist.cdf[x] == pytest.approx(cdf_by_recursion(12, p, x), rel=1e-9, abs=1e-12)


class TestDistributionEdgeCases:
    """Degenerate probabilities and known values."""

    def test_always_assigned(self):
        dist = run_length_distribution(32, 1.0)
        assert np.allclose(dist.cdf[:32], 0.0)
        assert dist.cdf[32] == pytest.approx(1.0)
        assert dist.pmf[32] == pytest.approx(1.0)

    def test_never_assigned(self):
        dist = run_length_distribution(32, 0.0)
        assert dist.pmf[0] == pytest.approx(1.0)
        assert np.allclose(dist.pmf[1:], 0.0)

    def test_fair_coin_no_run(self):
        dist = run_length_distribution(32, 0.5)
        assert dist.cdf[0] == pytest.approx(0.5 ** 32, rel=1e-9)
        assert dist.cdf[0] == pytest.approx(2.328e-10, rel=1e-3)

    def test_single_slot(self):
        dist = run_length_distribution(1, 0.25)
        assert dist.pmf.tolist() == pytest.approx([0.75, 0.25])

    def test_prob_at_most_clamps(self):
        dist = run_length_distribution(8, 0.4)
        assert dist.prob_at_most(100) == pytest.approx(1.0)
        assert dist.prob_at_most(3) == dist.cdf[3]
        with pytest.raises(InvalidTrialCount):
            dist.prob_at_most(-1)

    def test_pmf_first_difference(self):
        cdf = np.array([0.1, 0.4, 1.0])
        assert calculate_pmf(cdf).tolist() == pytest.approx([0.1, 0.3, 0.6])


class TestLongEpochs:
    """Epochs longer than the recursion limit or the float range of the counts."""

    def test_long_epoch_distribution(self):
        dist = run_length_distribution(120, 0.5)
        assert np.all(np.diff(dist.cdf) >= 0)
        assert dist.cdf[-1] == pytest.approx(1.0, abs=1e-9)
        assert dist.pmf.sum() == pytest.approx(1.0, abs=1e-9)

    def test_weighted_count_beyond_float_range(self):
        n = 1100
        count = math.comb(n, n // 2)
        expected = count / 2 ** n
        assert weighted_count(count, n // 2, n, 0.5) == pytest.approx(expected, rel=1e-9)

    def test_weighted_count_small_counts_exact_product(self):
        assert weighted_count(10, 2, 5, 0.5) == 10 * 0.5 ** 5

    @pytest.mark.parametrize("p", [0.0, 1.0])
    def test_weighted_count_degenerate_probability(self, p):
        assert weighted_count(math.comb(1100, 550), 550, 1100, p) == 0.0


class TestDistributionValidation:
    """Caller errors are rejected before computing."""

    @pytest.mark.parametrize("p", [-0.01, 1.01, math.nan, "high"])
    def test_invalid_probability(self, p):
        with pytest.raises(InvalidProbability):
            calculate_cdf(32, p)

    def test_invalid_probability_is_value_error(self):
        with pytest.raises(ValueError):
            run_length_distribution(32, 2.0)

    def test_negative_length(self):
        with pytest.raises(InvalidTrialCount):
            calculate_cdf(-1, 0.5)
