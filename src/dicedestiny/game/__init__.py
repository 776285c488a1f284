"""Game core: seeded generation, expression enumeration and scoring."""

from __future__ import annotations

from .distribution import OutcomeDistribution, comparison_frame, enumeration_size, evaluate
from .errors import DiceDestinyError, EnumerationTooLarge, InvalidArity, MalformedExpression
from .expression import DICE, OPERATORS, Expression, Operator, build_expression, parse_expression
from .rng import SeededRng, seeded_shuffle
from .scoring import distance
from .session import Attempt, PuzzleSession, PuzzleState, SessionStatus

__all__ = [
    "OutcomeDistribution",
    "comparison_frame",
    "enumeration_size",
    "evaluate",
    "DiceDestinyError",
    "EnumerationTooLarge",
    "InvalidArity",
    "MalformedExpression",
    "DICE",
    "OPERATORS",
    "Expression",
    "Operator",
    "build_expression",
    "parse_expression",
    "SeededRng",
    "seeded_shuffle",
    "distance",
    "Attempt",
    "PuzzleSession",
    "PuzzleState",
    "SessionStatus",
]
