"""Dice expressions evaluated strictly left to right.

An expression alternates dice and binary operators, ``d0 op0 d1 op1 d2``,
and is evaluated as ``((d0 op0 d1) op1 d2)`` with no precedence.  Its text
form is the space separated token list ``"6 + 4 * 2"``, which is also the
key under which attempts are stored.
"""

from __future__ import annotations

import operator as _op
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterable, Sequence

from dicedestiny.game.errors import InvalidArity, MalformedExpression
from dicedestiny.utils.types import DiceSizes

__all__ = [
    "DICE",
    "OPERATORS",
    "Operator",
    "Expression",
    "build_expression",
    "parse_expression",
]


def _divide(a: float, b: float) -> float:
    # dice faces start at 1, so this only triggers for hand-built inputs
    if b == 0:
        return float("nan")
    return a / b


class Operator(Enum):
    """The four binary operators a puzzle can use."""

    ADD = "+"
    SUB = "-"
    MUL = "*"
    DIV = "/"

    @property
    def func(self) -> Callable[[float, float], float]:
        return _FUNCS[self]

    def apply(self, a: float, b: float) -> float:
        return _FUNCS[self](a, b)

    @classmethod
    def from_symbol(cls, symbol: "str | Operator") -> "Operator":
        if isinstance(symbol, Operator):
            return symbol
        try:
            return cls(symbol)
        except ValueError:
            raise MalformedExpression(f"unknown operator {symbol!r}") from None

    def __str__(self) -> str:  # pragma: no cover - trivial
        return self.value


_FUNCS: dict[Operator, Callable[[float, float], float]] = {
    Operator.ADD: _op.add,
    Operator.SUB: _op.sub,
    Operator.MUL: _op.mul,
    Operator.DIV: _divide,
}

# Canonical (unshuffled) puzzle pieces; the player always starts from these.
DICE: DiceSizes = (2, 4, 6, 8, 12)
OPERATORS: tuple[Operator, ...] = (Operator.ADD, Operator.SUB, Operator.MUL, Operator.DIV)


@dataclass(frozen=True, slots=True)
class Expression:
    """Immutable dice expression.

    Use :func:`build_expression` rather than the constructor so that dice and
    operators are validated.
    """

    dice: DiceSizes
    operators: tuple[Operator, ...]

    @property
    def text(self) -> str:
        tokens = [str(self.dice[0])]
        for op, die in zip(self.operators, self.dice[1:]):
            tokens.append(op.value)
            tokens.append(str(die))
        return " ".join(tokens)

    @property
    def n_dice(self) -> int:
        return len(self.dice)

    def grouped(self) -> str:
        """Render the evaluation order explicitly, e.g. ``"((d2 + d4) - d6) * d8"``."""
        out = "(" * max(self.n_dice - 2, 0) + f"d{self.dice[0]}"
        last = len(self.operators) - 1
        for i, (op, die) in enumerate(zip(self.operators, self.dice[1:])):
            out += f" {op.value} d{die}"
            if i != last:
                out += ")"
        return out

    def evaluate_faces(self, faces: Sequence[int]) -> float:
        """Value of the expression for one concrete roll ``faces``."""
        if len(faces) != self.n_dice:
            raise ValueError(f"expected {self.n_dice} faces, got {len(faces)}")
        value = float(faces[0])
        for op, face in zip(self.operators, faces[1:]):
            value = op.apply(value, face)
        return value

    def __str__(self) -> str:
        return self.text


def _coerce_die(raw: object) -> int:
    die = int(raw)  # type: ignore[call-overload]
    if die < 1:
        raise ValueError(f"a die needs at least one face, got {raw!r}")
    return die


def build_expression(dice: Iterable[int], operators: Iterable[str | Operator]) -> Expression:
    """Compose dice and operators into an :class:`Expression`.

    Raises
    ------
    InvalidArity
        If there is not exactly one operator fewer than dice.
    ValueError
        If a die has fewer than one face.
    """
    dice_t = tuple(_coerce_die(d) for d in dice)
    ops_t = tuple(Operator.from_symbol(o) for o in operators)
    if not dice_t or len(ops_t) != len(dice_t) - 1:
        raise InvalidArity(len(dice_t), len(ops_t))
    return Expression(dice_t, ops_t)


def parse_expression(text: str) -> Expression:
    """Inverse of :attr:`Expression.text`.

    Tokens at even positions are dice, odd positions operators.  Anything
    else is a bug in the caller, so it fails loudly.
    """
    tokens = text.split()
    if len(tokens) % 2 == 0:
        raise MalformedExpression(f"expected an odd number of tokens in {text!r}")
    try:
        dice = [int(tok) for tok in tokens[0::2]]
    except ValueError:
        raise MalformedExpression(f"non-integer die in {text!r}") from None
    if any(d < 1 for d in dice):
        raise MalformedExpression(f"die with no faces in {text!r}")
    return build_expression(dice, tokens[1::2])
