"""Preset loaded first in every build; supplies section defaults."""
from __future__ import annotations

from typing import Any

from showcase.indexing.indexers import json_indexer

DEFAULT_CORE: dict[str, Any] = {
    "disable_telemetry": False,
    "disable_project_json": False,
}

DEFAULT_FEATURES: dict[str, Any] = {
    "build_stories_json": True,
    "autodocs_from_tags": True,
}

DEFAULT_DOCS: dict[str, Any] = {
    "autodocs": "tag",
    "default_name": "Docs",
}


def core(value: dict[str, Any] | None, options: dict[str, Any]) -> dict[str, Any]:
    return {**DEFAULT_CORE, **(value or {})}


def features(value: dict[str, Any] | None, options: dict[str, Any]) -> dict[str, Any]:
    return {**DEFAULT_FEATURES, **(value or {})}


def docs(value: dict[str, Any] | None, options: dict[str, Any]) -> dict[str, Any]:
    return {**DEFAULT_DOCS, **(value or {})}


def experimental_indexers(value: list[Any] | None, options: dict[str, Any]) -> list[Any]:
    return [*(value or []), json_indexer]
