"""rng.py
=========
Deterministic randomness for puzzle generation.

Every player must get the same puzzle for the same seed on every platform,
so the generator is a hand-specified 32-bit mixer (Mulberry32) rather than
NumPy's or the stdlib's.  Python ints are unbounded, hence every
intermediate is masked back to 32 unsigned bits explicitly.
"""

from __future__ import annotations

from typing import Iterator, Sequence, TypeVar

from dicedestiny.utils.random import MAX_UINT32

__all__ = ["SeededRng", "seeded_shuffle"]

T = TypeVar("T")

_INCREMENT = 0x6D2B79F5
_TWO_32 = 4294967296.0


def _imul(a: int, b: int) -> int:
    """32-bit wrapping multiply, returned as unsigned."""
    return (a * b) & MAX_UINT32


class SeededRng:
    """Mulberry32 stream of floats in ``[0, 1)``.

    Instances are callable; each call advances the state once.

    >>> rng = SeededRng(1)
    >>> a = [rng() for _ in range(3)]
    >>> b = SeededRng(1)
    >>> a == [b() for _ in range(3)]
    True
    """

    __slots__ = ("_state", "seed")

    def __init__(self, seed: int) -> None:
        self.seed = int(seed)
        self._state = self.seed & MAX_UINT32

    def next_uint32(self) -> int:
        self._state = (self._state + _INCREMENT) & MAX_UINT32
        t = self._state
        t = _imul(t ^ (t >> 15), t | 1)
        t ^= (t + _imul(t ^ (t >> 7), t | 61)) & MAX_UINT32
        return (t ^ (t >> 14)) & MAX_UINT32

    def __call__(self) -> float:
        return self.next_uint32() / _TWO_32

    def __iter__(self) -> Iterator[float]:
        while True:
            yield self()

    def __repr__(self) -> str:  # pragma: no cover - trivial
        return f"SeededRng(seed={self.seed})"


def seeded_shuffle(items: Sequence[T], seed: int) -> list[T]:
    """Return a Fisher-Yates permutation of *items* driven by *seed*.

    A fresh :class:`SeededRng` is built for every call and consumed from the
    last index down, so equal seeds give equal permutations for inputs of
    equal length.  *items* itself is never modified.
    """
    rng = SeededRng(seed)
    shuffled = list(items)
    for i in range(len(shuffled) - 1, 0, -1):
        j = int(rng() * (i + 1))
        shuffled[i], shuffled[j] = shuffled[j], shuffled[i]
    return shuffled
