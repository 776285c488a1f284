"""
YAML parsing helpers for configuration overlays.

``expand_dotted_keys`` turns ``{"game.decimals": 3}`` into
``{"game": {"decimals": 3}}`` and ``deep_merge`` layers one overlay on
another.
"""
from __future__ import annotations

from collections.abc import Mapping
from typing import Any


def deep_merge(base: Mapping[str, Any], overlay: Mapping[str, Any]) -> dict[str, Any]:
    """Recursively merge ``overlay`` onto ``base`` and return a new dict."""
    merged: dict[str, Any] = dict(base)
    for key, value in overlay.items():
        current = merged.get(key)
        if isinstance(current, Mapping) and isinstance(value, Mapping):
            merged[key] = deep_merge(current, value)
        else:
            merged[key] = value
    return merged


def expand_dotted_keys(mapping: Mapping[str, Any]) -> dict[str, Any]:
    """Return a nested dict from *mapping* that may contain dotted keys.

    Raises
    ------
    TypeError
        If a dotted key descends through a value that is not a mapping,
        e.g. ``{"a": 1, "a.b": 2}``.
    """
    result: dict[str, Any] = {}
    for raw_key, raw_value in mapping.items():
        value = expand_dotted_keys(raw_value) if isinstance(raw_value, Mapping) else raw_value
        parts = [p for p in raw_key.split(".") if p] if isinstance(raw_key, str) else [raw_key]
        if not parts:
            continue
        # wrap the leaf so the merge below handles plain and dotted keys alike
        nested: Any = value
        for part in reversed(parts[1:]):
            nested = {part: nested}
        head = parts[0]
        existing = result.get(head)
        if head in result and len(parts) > 1 and not isinstance(existing, dict):
            raise TypeError(
                f"Cannot expand dotted key {raw_key!r}; {head!r} is already set to a non-mapping value"
            )
        if isinstance(existing, dict) and isinstance(nested, dict):
            result[head] = _merge_checked(existing, nested, raw_key)
        else:
            result[head] = nested
    return result


def _merge_checked(base: dict[str, Any], overlay: dict[str, Any], raw_key: str) -> dict[str, Any]:
    merged = dict(base)
    for key, value in overlay.items():
        current = merged.get(key)
        if isinstance(value, dict):
            if key in merged and not isinstance(current, dict):
                raise TypeError(
                    f"Cannot expand dotted key {raw_key!r}; {key!r} is already set to a non-mapping value"
                )
            merged[key] = _merge_checked(current or {}, value, raw_key)
        else:
            merged[key] = value
    return merged


__all__ = ["deep_merge", "expand_dotted_keys"]
