"""Utility subpackage for Dice Destiny.

Small helpers shared by the game core, the configuration layer and the
CLI.  Nothing in here touches puzzle state; the most commonly used helpers
are re-exported for convenience.
"""

from __future__ import annotations

from .logging import configure_logging
from .random import (
    PRACTICE_SEED_MAX,
    PRACTICE_SEED_MIN,
    date_seed,
    is_daily_seed,
    make_rng,
    player_id,
    practice_seed,
)

__all__ = [
    "configure_logging",
    "PRACTICE_SEED_MIN",
    "PRACTICE_SEED_MAX",
    "date_seed",
    "is_daily_seed",
    "make_rng",
    "player_id",
    "practice_seed",
]
