from __future__ import annotations
from typing import Any
from collections.abc import Mapping

__all__ = ["getByPath"]



def _splitPath(path: str) -> list[str]:
    """
    Splits a dotted path into segments. A backslash escapes the next
    character, so "scan\\.glob" addresses the single key "scan.glob".

    Raises ValueError for empty paths, empty segments and dangling escapes.
    """
    if not isinstance(path, str) or not path:
        raise ValueError("Path must be a non-empty string")

    parts: list[str] = []
    curr: list[str] = []
    esc = False
    for ch in path:
        if esc:
            curr.append(ch)
            esc = False
        elif ch == "\\":
            esc = True
        elif ch == ".":
            parts.append("".join(curr))
            curr = []
        else:
            curr.append(ch)
    if esc:
        raise ValueError(f"Path '{path}' ends with a dangling escape")
    parts.append("".join(curr))

    if any(part == "" for part in parts):
        raise ValueError(f"Path '{path}' contains empty segment(s)")
    return parts



def getByPath(obj: Any, path: str, default: Any | None = None) -> Any:
    """
    Returns the value at dotted `path` inside nested mappings, or `default`
    when any hop is missing, not a mapping, or the path itself is invalid.
    """
    try:
        parts = _splitPath(path)
    except ValueError:
        return default

    current: Any = obj
    for part in parts:
        if not isinstance(current, Mapping) or part not in current:
            return default
        current = current[part]
    return current
