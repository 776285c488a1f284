"""session.py
============
One player's puzzle: target, working arrangement, attempts and solve state.

High-level flow
---------------
* :meth:`PuzzleSession.generate_new_puzzle` shuffles the canonical dice with
  the seed and the operators with ``seed + 1``; the result is the hidden
  target.  The player always starts from the canonical order.
* Every swap re-evaluates the working expression and is recorded as an
  attempt, scored by its distance to the target.
* The first attempt closer than the solve tolerance flips the session to
  ``SOLVED``.  For daily seeds that also fires exactly one hiscore
  submission.

The session keeps no module-level state.  :class:`PuzzleState` is immutable;
every mutator replaces it and returns the new value.
"""

from __future__ import annotations

import datetime as _dt
import enum
import functools
import logging
import threading
import time
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Callable, Sequence, Union

import numpy as np
import pandas as pd

from dicedestiny.game.distribution import (
    DECIMALS,
    MAX_ABS_OUTCOME,
    MAX_ENUMERATION_LEAVES,
    OutcomeDistribution,
    comparison_frame,
    evaluate,
)
from dicedestiny.game.expression import (
    DICE,
    OPERATORS,
    Expression,
    Operator,
    build_expression,
    parse_expression,
)
from dicedestiny.game.rng import seeded_shuffle
from dicedestiny.game.scoring import SOLVE_TOLERANCE, distance
from dicedestiny.hiscore import HiscoreEntry, NullSubmitter, Submitter
from dicedestiny.utils.random import (
    PRACTICE_SEED_MAX,
    PRACTICE_SEED_MIN,
    date_seed,
    is_daily_seed,
    make_rng,
    practice_seed,
)
from dicedestiny.utils.types import DiceSizes, ItemType, normalize_item_type

if TYPE_CHECKING:  # pragma: no cover
    from dicedestiny.config import AppConfig

LOGGER = logging.getLogger(__name__)

__all__ = [
    "SessionStatus",
    "Attempt",
    "NoneSelected",
    "ItemSelected",
    "Selection",
    "PuzzleState",
    "PuzzleSession",
]


class SessionStatus(enum.Enum):
    UNINITIALIZED = "uninitialized"
    ACTIVE = "active"
    SOLVED = "solved"


@dataclass(frozen=True, slots=True)
class Attempt:
    """One scored arrangement, keyed by its expression text."""

    expression: str
    distance: float
    timestamp: float


# ---------------------------------------------------------------------------
# Tap-to-swap selection
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class NoneSelected:
    pass


@dataclass(frozen=True, slots=True)
class ItemSelected:
    index: int
    item_type: ItemType


Selection = Union[NoneSelected, ItemSelected]
NONE_SELECTED = NoneSelected()


@dataclass(frozen=True, slots=True)
class PuzzleState:
    """Everything about the puzzle in play.  Replaced, never mutated."""

    seed: int
    target_expression: Expression
    target_distribution: OutcomeDistribution
    current_expression: Expression
    current_distribution: OutcomeDistribution
    attempts: tuple[Attempt, ...] = ()
    status: SessionStatus = SessionStatus.ACTIVE
    hiscore_requested: bool = False
    hiscore_submitted: bool = False
    selection: Selection = field(default=NONE_SELECTED)

    @property
    def current_dice(self) -> DiceSizes:
        return self.current_expression.dice

    @property
    def current_operators(self) -> tuple[Operator, ...]:
        return self.current_expression.operators

    @property
    def solved(self) -> bool:
        return self.status is SessionStatus.SOLVED

    @property
    def is_daily(self) -> bool:
        return is_daily_seed(self.seed)

    @property
    def best_attempt(self) -> Attempt | None:
        return self.attempts[0] if self.attempts else None

    def attempt_for(self, expression_text: str) -> Attempt | None:
        for attempt in self.attempts:
            if attempt.expression == expression_text:
                return attempt
        return None


def _check_index(index: int, length: int, kind: str) -> None:
    if not 0 <= index < length:
        raise IndexError(f"{kind} index {index} out of range 0..{length - 1}")


# ---------------------------------------------------------------------------
# Session
# ---------------------------------------------------------------------------


class PuzzleSession:
    """Owns the :class:`PuzzleState` of a single player.

    Parameters
    ----------
    dice, operators
        Canonical pieces; the target is a shuffle of these.
    submitter
        Receives the hiscore entry on a daily solve.  Defaults to dropping it.
    player_id
        Identifier sent with hiscores.
    clock
        Source of attempt timestamps (seconds).
    today
        Source of the date used for daily seeds.
    """

    def __init__(
        self,
        *,
        dice: Sequence[int] = DICE,
        operators: Sequence[str | Operator] = OPERATORS,
        max_abs: float = MAX_ABS_OUTCOME,
        decimals: int = DECIMALS,
        max_leaves: int = MAX_ENUMERATION_LEAVES,
        solve_tolerance: float = SOLVE_TOLERANCE,
        practice_seed_range: tuple[int, int] = (PRACTICE_SEED_MIN, PRACTICE_SEED_MAX),
        submitter: Submitter | None = None,
        player_id: str = "player_0",
        clock: Callable[[], float] = time.time,
        today: Callable[[], _dt.date] = _dt.date.today,
        rng: np.random.Generator | None = None,
    ) -> None:
        # validates arity once up front
        self.canonical = build_expression(dice, operators)
        self.max_abs = max_abs
        self.decimals = decimals
        self.max_leaves = max_leaves
        self.solve_tolerance = solve_tolerance
        self.practice_seed_range = practice_seed_range
        self.submitter: Submitter = submitter if submitter is not None else NullSubmitter()
        self.player_id = player_id
        self._clock = clock
        self._today = today
        self._rng = rng if rng is not None else make_rng()
        self._state: PuzzleState | None = None
        # bumped per generated puzzle; hiscore results carry the value they were issued under
        self._generation = 0
        self._confirmed_generation: int | None = None
        self._lock = threading.Lock()

    @classmethod
    def from_config(
        cls,
        cfg: "AppConfig",
        *,
        submitter: Submitter | None = None,
        player_id: str = "player_0",
        **kwargs,
    ) -> "PuzzleSession":
        return cls(
            dice=cfg.game.dice,
            operators=cfg.game.operators,
            max_abs=cfg.game.max_abs_outcome,
            decimals=cfg.game.decimals,
            max_leaves=cfg.game.max_enumeration_leaves,
            solve_tolerance=cfg.scoring.solve_tolerance,
            practice_seed_range=(cfg.game.practice_seed_min, cfg.game.practice_seed_max),
            submitter=submitter,
            player_id=player_id,
            **kwargs,
        )

    # ----------------------------- helpers -----------------------------
    @property
    def status(self) -> SessionStatus:
        return self._state.status if self._state is not None else SessionStatus.UNINITIALIZED

    @property
    def state(self) -> PuzzleState:
        if self._state is None:
            raise RuntimeError("No puzzle yet; call generate_new_puzzle() first")
        return self._state

    @property
    def hiscore_submitted(self) -> bool:
        """Whether the leaderboard confirmed a submission for the puzzle in play."""
        return self._state is not None and self._state.hiscore_submitted

    def _commit(self, state: PuzzleState) -> PuzzleState:
        with self._lock:
            if self._confirmed_generation == self._generation and not state.hiscore_submitted:
                state = replace(state, hiscore_submitted=True)
            self._state = state
        return state

    def distribution_of(self, expression: Expression) -> OutcomeDistribution:
        return evaluate(
            expression,
            max_abs=self.max_abs,
            decimals=self.decimals,
            max_leaves=self.max_leaves,
        )

    def target_for_seed(self, seed: int) -> Expression:
        """The hidden expression a given seed produces."""
        dice = seeded_shuffle(self.canonical.dice, seed)
        ops = seeded_shuffle(self.canonical.operators, seed + 1)
        return build_expression(dice, ops)

    def chart_frame(self, *, smooth: bool = True) -> pd.DataFrame:
        state = self.state
        return comparison_frame(state.target_distribution, state.current_distribution, smooth=smooth)

    # ----------------------------- lifecycle ----------------------------
    def generate_new_puzzle(self, seed: int | None = None) -> PuzzleState:
        """Start a fresh puzzle; the daily one when *seed* is ``None``."""
        puzzle_seed = date_seed(self._today()) if seed is None else int(seed)
        target = self.target_for_seed(puzzle_seed)
        state = PuzzleState(
            seed=puzzle_seed,
            target_expression=target,
            target_distribution=self.distribution_of(target),
            current_expression=self.canonical,
            current_distribution=self.distribution_of(self.canonical),
        )
        with self._lock:
            self._generation += 1
            self._state = state
        LOGGER.info(
            "New puzzle",
            extra={
                "stage": "session",
                "seed": puzzle_seed,
                "mode": "daily" if is_daily_seed(puzzle_seed) else "practice",
            },
        )
        return state

    def new_practice_puzzle(self) -> PuzzleState:
        low, high = self.practice_seed_range
        return self.generate_new_puzzle(practice_seed(self._rng, low=low, high=high))

    # ------------------------------ moves -------------------------------
    def swap(self, index_a: int, index_b: int, item_type: str) -> PuzzleState:
        """Exchange two dice or two operators and record the result.

        Raises
        ------
        IndexError
            If either index is outside the chosen row.
        """
        state = self.state
        kind = normalize_item_type(item_type)
        dice = list(state.current_dice)
        ops = list(state.current_operators)
        row: list = dice if kind == "dice" else ops
        for idx in (index_a, index_b):
            _check_index(idx, len(row), kind)
        row[index_a], row[index_b] = row[index_b], row[index_a]

        expression = build_expression(dice, ops)
        dist = self.distribution_of(expression)
        self._commit(
            replace(
                state,
                current_expression=expression,
                current_distribution=dist,
                selection=NONE_SELECTED,
            )
        )
        return self.record_attempt(expression, dist)

    def select(self, index: int, item_type: str) -> PuzzleState:
        """Tap handling: first tap selects, second swaps same-type items or cancels.

        An out-of-range first tap raises ``IndexError`` and selects nothing;
        the second tap always leaves the selection empty, even when it raises.
        """
        state = self.state
        kind = normalize_item_type(item_type)
        selected = state.selection
        if isinstance(selected, NoneSelected):
            row_len = len(state.current_dice) if kind == "dice" else len(state.current_operators)
            _check_index(index, row_len, kind)
            return self._commit(replace(state, selection=ItemSelected(index, kind)))
        if selected.item_type != kind:
            # cross-type second tap only clears the selection
            return self._commit(replace(state, selection=NONE_SELECTED))
        try:
            return self.swap(selected.index, index, kind)
        finally:
            if self.state.selection != NONE_SELECTED:
                self._commit(replace(self.state, selection=NONE_SELECTED))

    def record_attempt(
        self, expression: Expression | str, distribution: OutcomeDistribution | None = None
    ) -> PuzzleState:
        """Score *expression* against the target and store it.

        An expression already in the history is replaced in place (fresh
        distance and timestamp) before the stable re-sort, so equal
        distances keep their earlier relative order.
        """
        state = self.state
        if isinstance(expression, str):
            expression = parse_expression(expression)
        if distribution is None:
            distribution = self.distribution_of(expression)

        score = distance(distribution, state.target_distribution)
        attempt = Attempt(expression.text, score, self._clock())

        attempts = list(state.attempts)
        for i, existing in enumerate(attempts):
            if existing.expression == attempt.expression:
                attempts[i] = attempt
                break
        else:
            attempts.append(attempt)
        attempts.sort(key=lambda a: a.distance)

        new_state = replace(state, attempts=tuple(attempts))
        if score < self.solve_tolerance and not state.solved:
            new_state = replace(new_state, status=SessionStatus.SOLVED)
            LOGGER.info(
                "Puzzle solved",
                extra={
                    "stage": "session",
                    "seed": state.seed,
                    "attempts": len(attempts),
                    "expression": attempt.expression,
                },
            )
            if new_state.is_daily and not new_state.hiscore_requested:
                self._commit(replace(new_state, hiscore_requested=True))
                self._submit_hiscore(
                    HiscoreEntry(state.seed, len(attempts), attempt.expression, self.player_id)
                )
                return self.state
        return self._commit(new_state)

    def load_expression(self, expression_text: str) -> PuzzleState:
        """Make a previously tried arrangement current without a new attempt."""
        state = self.state
        expression = parse_expression(expression_text)
        return self._commit(
            replace(
                state,
                current_expression=expression,
                current_distribution=self.distribution_of(expression),
                selection=NONE_SELECTED,
            )
        )

    # ------------------------------ hiscore -----------------------------
    def _submit_hiscore(self, entry: HiscoreEntry) -> None:
        LOGGER.info(
            "Submitting hiscore",
            extra={"stage": "session", "seed": entry.seed, "guess_count": entry.guess_count},
        )
        self.submitter.submit(entry, functools.partial(self._on_hiscore_result, self._generation))

    def _on_hiscore_result(self, generation: int, entry: HiscoreEntry, ok: bool) -> None:
        # only the puzzle the entry was issued for is marked; later puzzles stay untouched
        if ok:
            with self._lock:
                if generation != self._generation or self._state is None:
                    return
                self._confirmed_generation = generation
                self._state = replace(self._state, hiscore_submitted=True)
        else:
            LOGGER.warning(
                "Hiscore not recorded",
                extra={"stage": "session", "seed": entry.seed},
            )
