"""Tests for restricted run counting."""

import math
from itertools import product

import pytest

from blocktuple.combinatorics import binomial_coefficient, count_restricted
from blocktuple.errors import InvalidTrialCount


def longest_run(bits) -> int:
    longest = current = 0
    for bit in bits:
        current = current + 1 if bit else 0
        longest = max(longest, current)
    return longest


def brute_force_count(n: int, k: int, x: int) -> int:
    return sum(
        1
        for bits in product((0, 1), repeat=n)
        if sum(bits) == k and longest_run(bits) <= x
    )


class TestBinomialCoefficient:
    """Tests for binomial_coefficient."""

    @pytest.mark.parametrize("n", [0, 1, 5, 12, 32])
    def test_matches_math_comb(self, n):
        for k in range(n + 1):
            assert binomial_coefficient(n, k) == math.comb(n, k)

    def test_out_of_range_is_zero(self):
        assert binomial_coefficient(5, 6) == 0
        assert binomial_coefficient(5, -1) == 0

    def test_central_coefficient_of_epoch(self):
        assert binomial_coefficient(32, 16) == 601080390


class TestCountRestricted:
    """Tests for count_restricted."""

    @pytest.mark.parametrize("n", range(0, 11))
    def test_matches_enumeration(self, n):
        """Every (k, x) agrees with brute-force enumeration."""
        for k in range(n + 1):
            for x in range(n + 1):
                assert count_restricted(n, k, x) == brute_force_count(n, k, x), (n, k, x)

    def test_full_epoch_run_against_cap(self):
        assert count_restricted(32, 32, 31) == 0
        assert count_restricted(32, 32, 32) == 1

    def test_no_successes_always_one(self):
        assert count_restricted(32, 0, 0) == 1
        assert count_restricted(0, 0, 0) == 1

    def test_uncapped_is_binomial(self):
        assert count_restricted(32, 5, 5) == math.comb(32, 5)
        assert count_restricted(32, 5, 40) == math.comb(32, 5)

    def test_cap_of_one_is_non_adjacent_choice(self):
        """With runs capped at 1, successes can't touch: C(n - k + 1, k)."""
        assert count_restricted(32, 10, 1) == math.comb(23, 10)

    def test_impossible_compositions(self):
        assert count_restricted(4, 5, 4) == 0
        assert count_restricted(4, -1, 4) == 0
        assert count_restricted(4, 4, 3) == 0

    def test_counts_sum_to_all_sequences(self):
        """Summed over k with no effective cap, every sequence is counted once."""
        assert sum(count_restricted(32, k, 32) for k in range(33)) == 2 ** 32

    def test_negative_trial_count_rejected(self):
        with pytest.raises(InvalidTrialCount):
            count_restricted(-1, 0, 0)

    def test_negative_cap_rejected(self):
        with pytest.raises(InvalidTrialCount):
            count_restricted(5, 2, -1)

    def test_long_sequences_count_without_recursion_limit(self):
        """Sequences far longer than the interpreter's recursion limit still count exactly."""
        n = 1100
        assert count_restricted(n, n, n) == 1
        assert count_restricted(n, 2, 1) == math.comb(n - 1, 2)
        assert count_restricted(n, 3, 2) == math.comb(n, 3) - (n - 2)
