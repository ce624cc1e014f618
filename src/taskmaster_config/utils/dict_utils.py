"""Helpers for dotted key paths over nested mappings.

Configuration fragments are flat (``{"models.main": ...}``) while the
persisted document is nested (``{"models": {"main": ...}}``). These helpers
convert between the two and edit nested documents in place without
touching unrelated keys.
"""

from collections.abc import Mapping
from typing import Any


def split_path(key: str) -> list[str]:
    """Split a dotted key path into its parts."""
    return key.split(".")


def flatten(data: Mapping[str, Any], prefix: str = "") -> dict[str, Any]:
    """Flatten nested mappings into dotted keys.

    Lists and scalars are leaves. Empty nested mappings produce no keys.

    Args:
        data: Nested mapping.
        prefix: Path prefix for recursion.

    Returns:
        Flat mapping of dotted key paths to leaf values.
    """
    flat: dict[str, Any] = {}
    for key, value in data.items():
        path = f"{prefix}{key}"
        if isinstance(value, Mapping):
            flat.update(flatten(value, f"{path}."))
        else:
            flat[path] = value
    return flat


def unflatten(flat: Mapping[str, Any]) -> dict[str, Any]:
    """Build a nested dict from dotted keys."""
    nested: dict[str, Any] = {}
    for key, value in flat.items():
        set_nested(nested, key, value)
    return nested


def get_nested(data: Mapping[str, Any], key: str, default: Any = None) -> Any:
    """Read a dotted key from a nested mapping."""
    current: Any = data
    for part in split_path(key):
        if not isinstance(current, Mapping) or part not in current:
            return default
        current = current[part]
    return current


def set_nested(data: dict[str, Any], key: str, value: Any) -> None:
    """Set a dotted key in a nested dict, creating parents as needed.

    Existing keys keep their position; new keys are appended. A non-mapping
    value sitting where a parent mapping is needed is replaced.
    """
    parts = split_path(key)
    current = data
    for part in parts[:-1]:
        child = current.get(part)
        if not isinstance(child, dict):
            child = {}
            current[part] = child
        current = child
    current[parts[-1]] = value


def delete_nested(data: dict[str, Any], key: str) -> bool:
    """Delete a dotted key, pruning parents left empty.

    Returns:
        True if the key existed and was removed.
    """
    parts = split_path(key)
    trail: list[tuple[dict[str, Any], str]] = []
    current: Any = data
    for part in parts[:-1]:
        if not isinstance(current, dict) or not isinstance(current.get(part), dict):
            return False
        trail.append((current, part))
        current = current[part]

    if not isinstance(current, dict) or parts[-1] not in current:
        return False
    del current[parts[-1]]

    for parent, part in reversed(trail):
        if parent[part]:
            break
        del parent[part]
    return True

