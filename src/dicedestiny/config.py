"""Configuration schemas and helpers for Dice Destiny.

Defines dataclasses describing the puzzle pieces, scoring, hiscore and
logging settings, plus utilities for loading YAML overlays and applying
``section.option=value`` overrides from the command line.
"""
from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field, is_dataclass
from pathlib import Path
from typing import Any, Mapping, get_args, get_origin, get_type_hints

import yaml  # type: ignore[import-untyped]

from dicedestiny.game.distribution import DECIMALS, MAX_ABS_OUTCOME, MAX_ENUMERATION_LEAVES
from dicedestiny.game.expression import DICE, OPERATORS
from dicedestiny.game.scoring import SOLVE_TOLERANCE
from dicedestiny.utils.random import PRACTICE_SEED_MAX, PRACTICE_SEED_MIN
from dicedestiny.utils.yaml_helpers import deep_merge, expand_dotted_keys

# ─────────────────────────────────────────────────────────────────────────────
# Dataclasses (schema)
# ─────────────────────────────────────────────────────────────────────────────


@dataclass
class GameConfig:
    """Puzzle pieces and enumeration limits."""

    dice: list[int] = field(default_factory=lambda: list(DICE))
    operators: list[str] = field(default_factory=lambda: [op.value for op in OPERATORS])
    max_abs_outcome: float = MAX_ABS_OUTCOME
    decimals: int = DECIMALS
    max_enumeration_leaves: int = MAX_ENUMERATION_LEAVES
    practice_seed_min: int = PRACTICE_SEED_MIN
    practice_seed_max: int = PRACTICE_SEED_MAX


@dataclass
class ScoringConfig:
    """Distance scoring."""

    solve_tolerance: float = SOLVE_TOLERANCE


@dataclass
class HiscoreConfig:
    """Remote leaderboard settings.  Disabled unless switched on."""

    enabled: bool = False
    base_url: str = "https://biscuitverse-api-production.up.railway.app"
    endpoint: str = "/api/v1/record-dice-match"
    auth_token: str | None = None
    timeout_sec: float = 5.0
    background: bool = True
    client_id: str | None = None
    """Stable client string hashed into the player id; defaults to host info."""


@dataclass
class LoggingConfig:
    level: str = "INFO"
    log_file: Path | None = None


@dataclass
class AppConfig:
    """Top-level configuration."""

    game: GameConfig = field(default_factory=GameConfig)
    scoring: ScoringConfig = field(default_factory=ScoringConfig)
    hiscore: HiscoreConfig = field(default_factory=HiscoreConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def to_dict(self) -> dict[str, Any]:
        return _stringify_paths(dataclasses.asdict(self))  # type: ignore[return-value]

    def to_yaml(self) -> str:
        return yaml.safe_dump(self.to_dict(), sort_keys=True)


def _stringify_paths(obj: object) -> object:
    if isinstance(obj, Path):
        return str(obj)
    if isinstance(obj, dict):
        return {k: _stringify_paths(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [_stringify_paths(v) for v in obj]
    return obj


# ─────────────────────────────────────────────────────────────────────────────
# Loader (one or more YAML overlays; dotted keys allowed)
# ─────────────────────────────────────────────────────────────────────────────

_SECTIONS: dict[str, type] = {
    "game": GameConfig,
    "scoring": ScoringConfig,
    "hiscore": HiscoreConfig,
    "logging": LoggingConfig,
}


def _annotation_contains(annotation: Any, target: type) -> bool:
    if annotation is target:
        return True
    return any(_annotation_contains(arg, target) for arg in get_args(annotation))


def _build(cls: type, section: Mapping[str, Any]) -> Any:
    """Instantiate dataclass ``cls`` from a mapping, rejecting unknown keys."""
    known = {f.name for f in dataclasses.fields(cls)}
    unknown = set(section) - known
    if unknown:
        raise KeyError(f"Unknown option(s) for {cls.__name__}: {sorted(unknown)}")
    obj = cls()
    type_hints = get_type_hints(cls)
    for name, val in section.items():
        annotation = type_hints.get(name)
        if annotation is not None and is_dataclass(annotation) and isinstance(val, Mapping):
            val = _build(annotation, val)  # type: ignore[arg-type]
        if _annotation_contains(annotation, Path) and isinstance(val, str):
            val = Path(val)
        setattr(obj, name, val)
    return obj


def load_app_config(*overlays: Path) -> AppConfig:
    """Merge YAML overlays, in order, into an :class:`AppConfig`.

    Later overlays win.  Unknown sections or options raise ``KeyError`` so
    typos do not silently fall back to defaults.
    """
    data: dict[str, Any] = {}
    for path in overlays:
        with Path(path).open("r", encoding="utf-8") as fh:
            overlay = yaml.safe_load(fh) or {}
        if not isinstance(overlay, Mapping):
            raise TypeError(f"Config file {path} must contain a mapping")
        data = deep_merge(data, expand_dotted_keys(overlay))

    unknown = set(data) - set(_SECTIONS)
    if unknown:
        raise KeyError(f"Unknown config section(s): {sorted(unknown)}")
    return AppConfig(**{name: _build(cls, data.get(name, {})) for name, cls in _SECTIONS.items()})


def _coerce(value: str, current: Any, annotation: Any | None = None) -> Any:
    """Convert CLI override text to the type of the field it replaces."""
    if value.lower() in {"none", "null"} and (
        current is None or annotation is None or type(None) in get_args(annotation)
    ):
        return None
    if isinstance(current, bool) or annotation is bool:
        lowered = value.lower()
        if lowered in {"1", "true", "yes", "on"}:
            return True
        if lowered in {"0", "false", "no", "off"}:
            return False
        raise ValueError(f"Cannot interpret {value!r} as a boolean")
    if isinstance(current, int) or annotation is int:
        return int(value)
    if isinstance(current, float) or annotation is float:
        return float(value)
    if isinstance(current, Path) or _annotation_contains(annotation, Path):
        return Path(value)
    if isinstance(current, list) or get_origin(annotation) is list:
        items = [item.strip() for item in value.split(",") if item.strip()]
        args = get_args(annotation)
        if args and args[0] is int:
            return [int(item) for item in items]
        return items
    return value


def apply_dot_overrides(cfg: AppConfig, pairs: list[str]) -> AppConfig:
    """Apply ``section.option=value`` overrides to *cfg* in place."""
    for pair in pairs:
        if "=" not in pair:
            raise ValueError(f"Invalid override {pair!r}")
        key, raw = pair.split("=", 1)
        if "." not in key:
            raise ValueError(f"Invalid override {pair!r}")
        section_name, option = key.split(".", 1)
        section = getattr(cfg, section_name, None)
        if section is None or section_name not in _SECTIONS:
            raise AttributeError(f"Unknown config section {section_name!r}")
        if not hasattr(section, option):
            raise AttributeError(f"Unknown option {option!r} in section {section_name!r}")
        annotation = get_type_hints(type(section)).get(option)
        setattr(section, option, _coerce(raw, getattr(section, option), annotation))
    return cfg


__all__ = [
    "GameConfig",
    "ScoringConfig",
    "HiscoreConfig",
    "LoggingConfig",
    "AppConfig",
    "load_app_config",
    "apply_dot_overrides",
]
