"""Exceptions raised by the game core.

All of them signal broken caller contracts.  They subclass
:class:`ValueError` so callers that only care about "bad input" can catch
one type.
"""

from __future__ import annotations

__all__ = [
    "DiceDestinyError",
    "InvalidArity",
    "MalformedExpression",
    "EnumerationTooLarge",
]


class DiceDestinyError(ValueError):
    """Base class for game-core errors."""


class InvalidArity(DiceDestinyError):
    """Operator count is not exactly one less than the dice count."""

    def __init__(self, n_dice: int, n_operators: int) -> None:
        super().__init__(
            f"expected {max(n_dice - 1, 0)} operators for {n_dice} dice, got {n_operators}"
        )
        self.n_dice = n_dice
        self.n_operators = n_operators


class MalformedExpression(DiceDestinyError):
    """Expression text does not alternate ``die op die ... die``."""


class EnumerationTooLarge(DiceDestinyError):
    """Exhaustive enumeration would visit more leaves than allowed."""
