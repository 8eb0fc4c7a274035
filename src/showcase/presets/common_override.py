"""Preset loaded last in every build; normalizes what users may write loosely."""
from __future__ import annotations

from typing import Any


def _as_list(value: Any) -> list[Any]:
    if value is None:
        return []
    if isinstance(value, (str, dict)):
        return [value]
    return list(value)


def static_dirs(value: Any, options: dict[str, Any]) -> list[Any]:
    return _as_list(value)


def stories(value: Any, options: dict[str, Any]) -> list[Any]:
    return _as_list(value)
