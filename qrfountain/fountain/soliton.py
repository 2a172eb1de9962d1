"""
Ideal Soliton degree sampling and index selection for LT encoding.

Both samplers take the randomness source explicitly so streams can be
reproduced from a seeded ``random.Random``.
"""

from __future__ import annotations

import random
from bisect import bisect_right
from functools import lru_cache
from typing import Tuple


def ideal_soliton_pmf(k: int) -> Tuple[float, ...]:
    """P(1) = 1/k, P(d) = 1/(d(d-1)) for 2 <= d <= k."""
    if k < 1:
        raise ValueError(f"k must be >= 1, got {k}")
    rho = [0.0] * k
    rho[0] = 1.0 / k
    for d in range(2, k + 1):
        rho[d - 1] = 1.0 / (d * (d - 1))
    return tuple(rho)


@lru_cache(maxsize=64)
def ideal_soliton_cdf(k: int) -> Tuple[float, ...]:
    """Pre-compute the cumulative distribution; entry ``d-1`` is P(<= d)."""
    cumulative = []
    running = 0.0
    for p in ideal_soliton_pmf(k):
        running += p
        cumulative.append(running)
    return tuple(cumulative)


def sample_degree(k: int, rng: random.Random) -> int:
    """
    Draw a degree in ``[1, k]`` from the Ideal Soliton Distribution.

    Returns the smallest ``d`` whose cumulative probability exceeds a uniform
    draw from ``[0, 1)``. Rounding can leave the last cumulative value just
    under 1.0; a draw above it saturates to ``k``.
    """
    if k <= 1:
        if k < 1:
            raise ValueError(f"k must be >= 1, got {k}")
        return 1

    r = rng.random()
    idx = bisect_right(ideal_soliton_cdf(k), r)
    return min(idx + 1, k)


def sample_indices(k: int, degree: int, rng: random.Random) -> Tuple[int, ...]:
    """
    Pick ``degree`` distinct slice indices from ``[0, k)``, sorted ascending.

    Draw-and-reject: collisions only become frequent once most of the pool is
    taken, so ``degree == k`` still finishes in expected O(k log k) draws.
    """
    if not 1 <= degree <= k:
        raise ValueError(f"degree must be in [1, {k}], got {degree}")

    chosen: set[int] = set()
    while len(chosen) < degree:
        chosen.add(rng.randrange(k))
    return tuple(sorted(chosen))


__all__ = [
    "ideal_soliton_pmf",
    "ideal_soliton_cdf",
    "sample_degree",
    "sample_indices",
]
