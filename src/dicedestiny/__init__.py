# src/dicedestiny/__init__.py
"""Dice Destiny - rearrange dice and operators to match a hidden distribution.

The friendly surface below is loaded lazily so that light helpers such as
:mod:`dicedestiny.utils.random` import without pulling in pandas.
"""

from __future__ import annotations

import tomllib
from importlib import import_module
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as _v
from pathlib import Path

# Path to the project's pyproject.toml for local version fallback
PYPROJECT_TOML = Path(__file__).resolve().parent.parent.parent / "pyproject.toml"

__all__ = [  # loads lazily, that's why reportUnsupportedDunderAll is triggered
    "PuzzleSession",  # pyright: ignore[reportUnsupportedDunderAll]
    "Expression",  # pyright: ignore[reportUnsupportedDunderAll]
    "build_expression",  # pyright: ignore[reportUnsupportedDunderAll]
    "parse_expression",  # pyright: ignore[reportUnsupportedDunderAll]
    "evaluate",  # pyright: ignore[reportUnsupportedDunderAll]
    "distance",  # pyright: ignore[reportUnsupportedDunderAll]
    "seeded_shuffle",  # pyright: ignore[reportUnsupportedDunderAll]
]

_LAZY_IMPORTS = {
    "PuzzleSession": "dicedestiny.game.session",
    "Expression": "dicedestiny.game.expression",
    "build_expression": "dicedestiny.game.expression",
    "parse_expression": "dicedestiny.game.expression",
    "evaluate": "dicedestiny.game.distribution",
    "distance": "dicedestiny.game.scoring",
    "seeded_shuffle": "dicedestiny.game.rng",
}


def __getattr__(name: str):  # pragma: no cover - simple dynamic loader
    module_name = _LAZY_IMPORTS.get(name)
    if module_name is None:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
    attr = getattr(import_module(module_name), name)
    globals()[name] = attr
    return attr


def _read_version_from_toml() -> str:
    """Return the version declared in ``pyproject.toml`` at the repo root."""
    with PYPROJECT_TOML.open("rb") as fh:
        data = tomllib.load(fh)
    return data["project"]["version"]


try:
    __version__ = _v("dicedestiny")
except PackageNotFoundError:
    __version__ = _read_version_from_toml()
