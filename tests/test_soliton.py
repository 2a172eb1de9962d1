"""
Ideal Soliton degree sampling and distinct index selection.
"""
import random
from collections import Counter

import pytest

from qrfountain.fountain.soliton import (
    ideal_soliton_cdf,
    ideal_soliton_pmf,
    sample_degree,
    sample_indices,
)


class _FixedRandom:
    """Stand-in randomness source that always draws the same value."""

    def __init__(self, value):
        self.value = value

    def random(self):
        return self.value


def test_k_of_one_always_yields_degree_one():
    rng = random.Random(1)
    assert {sample_degree(1, rng) for _ in range(100)} == {1}


def test_pmf_matches_ideal_soliton():
    pmf = ideal_soliton_pmf(5)
    assert pmf[0] == pytest.approx(1 / 5)
    assert pmf[1] == pytest.approx(1 / 2)
    assert pmf[4] == pytest.approx(1 / 20)
    assert sum(pmf) == pytest.approx(1.0)
    assert ideal_soliton_cdf(5)[-1] == pytest.approx(1.0)


def test_degree_always_in_range():
    rng = random.Random(7)
    for k in (2, 3, 17, 100):
        for _ in range(500):
            assert 1 <= sample_degree(k, rng) <= k


def test_empirical_degree_frequencies_converge():
    k = 10
    draws = 20_000
    rng = random.Random(2024)
    counts = Counter(sample_degree(k, rng) for _ in range(draws))
    for d, p in enumerate(ideal_soliton_pmf(k), start=1):
        assert counts[d] / draws == pytest.approx(p, abs=0.02)


def test_draw_past_final_cumulative_saturates_to_k():
    largest_below_one = 1.0 - 2 ** -53
    assert sample_degree(3, _FixedRandom(largest_below_one)) == 3
    assert sample_degree(50, _FixedRandom(largest_below_one)) == 50


def test_zero_draw_picks_degree_one():
    assert sample_degree(4, _FixedRandom(0.0)) == 1


@pytest.mark.parametrize("k, degree", [(1, 1), (5, 1), (5, 3), (8, 8), (64, 64)])
def test_indices_are_distinct_sorted_and_in_range(k, degree):
    rng = random.Random(k * 31 + degree)
    for _ in range(50):
        idxs = sample_indices(k, degree, rng)
        assert len(idxs) == degree
        assert len(set(idxs)) == degree
        assert list(idxs) == sorted(idxs)
        assert all(0 <= i < k for i in idxs)


def test_full_degree_returns_every_index():
    assert sample_indices(12, 12, random.Random(3)) == tuple(range(12))


@pytest.mark.parametrize("k, degree", [(4, 0), (4, 5), (0, 1)])
def test_invalid_degree_rejected(k, degree):
    with pytest.raises(ValueError):
        sample_indices(k, degree, random.Random())


def test_invalid_k_rejected():
    with pytest.raises(ValueError):
        sample_degree(0, random.Random())
