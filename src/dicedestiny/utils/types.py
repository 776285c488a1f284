"""Shared type aliases for the Dice Destiny project."""

from __future__ import annotations

from typing import Literal, Tuple, TypeAlias

import numpy as np
import numpy.typing as npt

DiceSizes: TypeAlias = Tuple[int, ...]  # face counts, in expression order
ItemType: TypeAlias = Literal["dice", "operator"]
Bucket: TypeAlias = Tuple[float, float]  # (value, probability)
Float64Array1D: TypeAlias = npt.NDArray[np.float64]


def normalize_item_type(value: str) -> ItemType:
    """Accept ``dice``/``die`` and ``operator``/``op`` spellings."""
    normalized = value.strip().lower()
    if normalized in {"die", "dice"}:
        return "dice"
    if normalized in {"op", "ops", "operator", "operators"}:
        return "operator"
    raise ValueError(f"Unknown item type: {value!r}")


__all__ = ["DiceSizes", "ItemType", "Bucket", "Float64Array1D", "normalize_item_type"]
