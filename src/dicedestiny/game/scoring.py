"""Score a player's distribution against the target.

The score is the Euclidean (L2) distance between the two probability
vectors after zero-padding both onto the union of their bucket values.  It
is a game heuristic, not a statistical divergence: it depends on the bucket
resolution and should not be reused for other comparisons.
"""

from __future__ import annotations

import math

import numpy as np

from dicedestiny.game.distribution import OutcomeDistribution

__all__ = ["SOLVE_TOLERANCE", "aligned_probabilities", "distance", "is_match"]

# distances below this count as an exact match
SOLVE_TOLERANCE: float = 1e-4


def aligned_probabilities(
    a: OutcomeDistribution, b: OutcomeDistribution
) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Return ``(values, pa, pb)`` over the sorted union of both supports."""
    a_map = a.as_dict()
    b_map = b.as_dict()
    values = np.array(sorted(set(a_map) | set(b_map)), dtype=np.float64)
    pa = np.array([a_map.get(v, 0.0) for v in values.tolist()], dtype=np.float64)
    pb = np.array([b_map.get(v, 0.0) for v in values.tolist()], dtype=np.float64)
    return values, pa, pb


def distance(a: OutcomeDistribution, b: OutcomeDistribution) -> float:
    """L2 distance between two distributions; symmetric and ``>= 0``.

    Zero exactly when both have the same buckets with the same
    probabilities.  An empty distribution is simply all zeros, so comparing
    it with a non-empty one gives that one's norm instead of an error.
    """
    _, pa, pb = aligned_probabilities(a, b)
    if pa.size == 0:
        return 0.0
    return math.sqrt(float(np.sum(np.square(pa - pb))))


def is_match(a: OutcomeDistribution, b: OutcomeDistribution, tol: float = SOLVE_TOLERANCE) -> bool:
    return distance(a, b) < tol
