"""distribution.py
=================
Exhaustive outcome distributions for dice expressions.

High-level flow
---------------
* :func:`evaluate` walks every combination of faces depth first (one level
  per die, so recursion depth equals the die count) and folds the running
  value through the operators left to right.
* Each leaf is *admitted* only if it is finite and within ``max_abs``;
  rejected leaves vanish from both the counts and the normalisation.
* Admitted values are rounded to ``decimals`` digits and bucketed; a bucket's
  probability is its count over the admitted total.

The default 5-die puzzle has at most ``2*4*6*8*12 = 4608`` leaves, but no
shortcut is taken that would break for other dice.  Expressions with more
than :data:`MAX_ENUMERATION_LEAVES` leaves are refused instead of hanging
the caller.
"""

from __future__ import annotations

import functools
import logging
import math
from collections import Counter
from dataclasses import dataclass
from typing import Callable, Iterator, Mapping

import numpy as np
import pandas as pd

from dicedestiny.game.errors import EnumerationTooLarge
from dicedestiny.game.expression import Expression
from dicedestiny.utils.types import Bucket, Float64Array1D

LOGGER = logging.getLogger(__name__)

__all__ = [
    "MAX_ABS_OUTCOME",
    "DECIMALS",
    "MAX_ENUMERATION_LEAVES",
    "OutcomeDistribution",
    "enumeration_size",
    "evaluate",
    "comparison_frame",
]

MAX_ABS_OUTCOME: float = 100.0
DECIMALS: int = 2
# a few seconds of pure-Python enumeration
MAX_ENUMERATION_LEAVES: int = 5_000_000
# consecutive chart values further apart than this get a midpoint row
SMOOTHING_GAP: float = 0.5


# ---------------------------------------------------------------------------
# Result type
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class OutcomeDistribution:
    """Normalised histogram of an expression's admitted outcomes.

    ``buckets`` is strictly ascending by value.  ``total_outcomes`` counts
    every enumerated leaf, ``admitted_outcomes`` only those that were kept.
    """

    buckets: tuple[Bucket, ...] = ()
    total_outcomes: int = 0
    admitted_outcomes: int = 0

    @classmethod
    def from_counts(cls, counts: Mapping[float, int], total_outcomes: int) -> "OutcomeDistribution":
        admitted = sum(counts.values())
        if admitted == 0:
            return cls((), total_outcomes, 0)
        buckets = tuple((float(v), counts[v] / admitted) for v in sorted(counts))
        return cls(buckets, total_outcomes, admitted)

    # ----------------------------- views --------------------------------
    @property
    def values(self) -> Float64Array1D:
        return np.fromiter((v for v, _ in self.buckets), dtype=np.float64, count=len(self.buckets))

    @property
    def probabilities(self) -> Float64Array1D:
        return np.fromiter((p for _, p in self.buckets), dtype=np.float64, count=len(self.buckets))

    @property
    def rejected_outcomes(self) -> int:
        return self.total_outcomes - self.admitted_outcomes

    def as_dict(self) -> dict[float, float]:
        return dict(self.buckets)

    def probability_of(self, value: float) -> float:
        return self.as_dict().get(value, 0.0)

    def mean(self) -> float:
        """Expected value over the admitted outcomes (``nan`` when empty)."""
        if not self.buckets:
            return math.nan
        return float(np.dot(self.values, self.probabilities))

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame({"value": self.values, "probability": self.probabilities})

    def __len__(self) -> int:
        return len(self.buckets)

    def __iter__(self) -> Iterator[Bucket]:
        return iter(self.buckets)

    def __bool__(self) -> bool:
        return bool(self.buckets)


# ---------------------------------------------------------------------------
# Enumeration
# ---------------------------------------------------------------------------


def enumeration_size(expression: Expression) -> int:
    """Number of leaves :func:`evaluate` visits: the product of face counts."""
    return math.prod(expression.dice)


def _bucket(value: float, scale: int) -> float:
    # half-up toward +inf: 0.375 -> 0.38, -0.375 -> -0.37
    return math.floor(value * scale + 0.5) / scale


def _walk(
    dice: tuple[int, ...],
    ops: tuple[Callable[[float, float], float], ...],
    index: int,
    value: float,
    emit: Callable[[float], None],
) -> None:
    if index == len(dice):
        emit(value)
        return
    combine = ops[index - 1]
    for face in range(1, dice[index] + 1):
        _walk(dice, ops, index + 1, combine(value, face), emit)


@functools.lru_cache(maxsize=4096)
def _evaluate_cached(
    expression: Expression,
    max_abs: float,
    decimals: int,
    max_leaves: int,
) -> OutcomeDistribution:
    n_leaves = enumeration_size(expression)
    if n_leaves > max_leaves:
        raise EnumerationTooLarge(
            f"{expression.text!r} has {n_leaves} outcomes; the limit is {max_leaves}"
        )

    scale = 10**decimals
    counts: Counter[float] = Counter()
    seen = 0

    def emit(value: float) -> None:
        nonlocal seen
        seen += 1
        if math.isfinite(value) and abs(value) <= max_abs:
            counts[_bucket(value, scale)] += 1

    ops = tuple(op.func for op in expression.operators)
    for face in range(1, expression.dice[0] + 1):
        _walk(expression.dice, ops, 1, float(face), emit)

    dist = OutcomeDistribution.from_counts(counts, seen)
    if dist.rejected_outcomes:
        LOGGER.debug(
            "Dropped out-of-range outcomes",
            extra={
                "stage": "distribution",
                "expression": expression.text,
                "rejected": dist.rejected_outcomes,
                "total": seen,
            },
        )
    return dist


def evaluate(
    expression: Expression,
    *,
    max_abs: float = MAX_ABS_OUTCOME,
    decimals: int = DECIMALS,
    max_leaves: int = MAX_ENUMERATION_LEAVES,
) -> OutcomeDistribution:
    """Enumerate every roll of *expression* and return its distribution.

    Parameters
    ----------
    expression
        Expression to enumerate.
    max_abs
        Outcomes with a larger magnitude (or non-finite ones) are dropped.
    decimals
        Rounding applied to outcomes before bucketing.
    max_leaves
        Refuse expressions with more face combinations than this.

    Returns
    -------
    OutcomeDistribution
        Empty if no outcome was admitted.

    Raises
    ------
    EnumerationTooLarge
        If the face-count product exceeds ``max_leaves``.
    """
    return _evaluate_cached(expression, float(max_abs), int(decimals), int(max_leaves))


# ---------------------------------------------------------------------------
# Chart data
# ---------------------------------------------------------------------------


def comparison_frame(
    target: OutcomeDistribution,
    current: OutcomeDistribution,
    *,
    smooth: bool = True,
) -> pd.DataFrame:
    """Side-by-side probabilities for plotting target against the player.

    Columns are ``value``, ``target`` and ``current`` over the union of both
    supports (missing buckets are 0).  With ``smooth`` a midpoint row is
    interpolated between neighbouring values more than
    :data:`SMOOTHING_GAP` apart.
    """
    target_map = target.as_dict()
    current_map = current.as_dict()
    values = sorted(set(target_map) | set(current_map))
    frame = pd.DataFrame(
        {
            "value": values,
            "target": [target_map.get(v, 0.0) for v in values],
            "current": [current_map.get(v, 0.0) for v in values],
        },
        columns=["value", "target", "current"],
        dtype=np.float64,
    )
    if not smooth or len(frame) < 2:
        return frame

    gaps = frame["value"].diff().shift(-1) > SMOOTHING_GAP
    mids = ((frame + frame.shift(-1)) / 2)[gaps]
    smoothed = pd.concat([frame, mids]).sort_values("value", kind="mergesort")
    return smoothed.reset_index(drop=True)
