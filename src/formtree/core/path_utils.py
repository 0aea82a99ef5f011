"""
Field path utilities for formtree.

Paths address fields inside a container tree. Both dotted
(``sender.address.city``) and bracket (``sender[address][city]``) notations
are accepted on input; dotted notation is always produced on output.
"""

import re
from typing import Any

_BRACKET_PATTERN = re.compile(r"\[([^\[\]]*)\]")


def split_path_components(path: str) -> list[str]:
    """
    Split a dotted or bracket path into all its components.

    Params:
        path: Path to split

    Returns:
        List of path components, empty for an empty path

    Raises:
        ValueError: If the path contains an empty component

    Examples:
        "sender.address.city" -> ["sender", "address", "city"]
        "sender[address][city]" -> ["sender", "address", "city"]
    """
    if not path:
        return []
    normalized = _BRACKET_PATTERN.sub(r".\1", path)
    parts = normalized.split(".")
    if any(part == "" for part in parts):
        raise ValueError(f"Path '{path}' contains an empty component")
    return parts


def join_path(parts: list[str] | tuple[str, ...], name: str | None = None) -> str:
    """Join path components (and an optional trailing name) with dots."""
    if name is not None:
        parts = [*parts, name]
    return ".".join(parts)


def get_nested(data: dict, path: str, default: Any = None) -> Any:
    """
    Look up a value in nested dictionaries by path.

    Params:
        data: Nested dictionaries to search
        path: Dotted or bracket path
        default: Value returned when any component is missing

    Returns:
        The value at path, or default
    """
    current: Any = data
    for part in split_path_components(path):
        if not isinstance(current, dict) or part not in current:
            return default
        current = current[part]
    return current


def set_nested(data: dict, path: str, value: Any) -> None:
    """Set a value in nested dictionaries, creating intermediate levels."""
    parts = split_path_components(path)
    current = data
    for part in parts[:-1]:
        current = current.setdefault(part, {})
    current[parts[-1]] = value
