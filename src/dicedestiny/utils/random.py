"""Seed helpers for daily and practice puzzles.

Daily puzzles are seeded with the calendar date written as ``YYYYMMDD``;
the largest such value is ``99991231``.  Practice seeds are drawn from a
range that starts above every possible date seed so the two never collide,
which also lets a seed alone tell a daily puzzle from a practice one.
"""

from __future__ import annotations

import datetime as _dt

import numpy as np

# Max unsigned 32-bit integer; seeds are reduced modulo 2**32 by the RNG.
MAX_UINT32 = 2**32 - 1

MAX_DATE_SEED = 99_991_231
PRACTICE_SEED_MIN = 100_000_000
PRACTICE_SEED_MAX = 999_999_999


def make_rng(seed: int | None = None) -> np.random.Generator:
    """Return a :class:`numpy.random.Generator` seeded with *seed*."""

    return np.random.default_rng(seed)


def date_seed(day: _dt.date | None = None) -> int:
    """Return the daily seed for *day* (today, local time, when omitted).

    >>> date_seed(_dt.date(2024, 1, 1))
    20240101
    """
    day = day or _dt.date.today()
    return int(f"{day.year:04d}{day.month:02d}{day.day:02d}")


def practice_seed(
    rng: np.random.Generator | None = None,
    *,
    low: int = PRACTICE_SEED_MIN,
    high: int = PRACTICE_SEED_MAX,
) -> int:
    """Draw a practice seed uniformly from ``[low, high)``.

    Raises
    ------
    ValueError
        If the range is empty or could overlap the date-seed range.
    """
    if low <= MAX_DATE_SEED:
        raise ValueError(f"practice seeds must start above {MAX_DATE_SEED}, got {low}")
    if high <= low:
        raise ValueError(f"empty practice seed range [{low}, {high})")
    rng = rng if rng is not None else make_rng()
    return int(rng.integers(low, high))


def is_daily_seed(seed: int) -> bool:
    """``True`` when *seed* comes from the date range rather than practice."""
    return seed < PRACTICE_SEED_MIN


def player_id(client_id: str) -> str:
    """Derive an anonymous player identifier from a stable client string.

    Uses the 31-multiplier string hash wrapped to a signed 32-bit integer,
    so the same client string always maps to the same id.
    """
    h = 0
    for ch in client_id:
        h = (h * 31 + ord(ch)) & 0xFFFFFFFF
    if h >= 2**31:
        h -= 2**32
    return f"player_{abs(h)}"


__all__ = [
    "MAX_UINT32",
    "MAX_DATE_SEED",
    "PRACTICE_SEED_MIN",
    "PRACTICE_SEED_MAX",
    "make_rng",
    "date_seed",
    "practice_seed",
    "is_daily_seed",
    "player_id",
]
