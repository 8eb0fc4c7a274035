"""Normalization of ``stories`` entries into scan specifiers."""
from __future__ import annotations

import os
import re
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from showcase.core.constants import DEFAULT_STORIES_GLOB
from showcase.core.exceptions import ConfigurationError

_GLOB_CHARS = set("*?[{")


@dataclass(frozen=True)
class NormalizedSpecifier:
    """Where to look for story files and how to title them.

    ``directory`` is relative to the working directory and always starts
    with ``./`` so that it lines up with ``import_path_matcher``.
    """

    directory: str
    files: str
    title_prefix: str
    import_path_matcher: re.Pattern[str]

    def matches(self, import_path: str) -> bool:
        return self.import_path_matcher.match(import_path) is not None


def glob_to_regex(pattern: str) -> str:
    """Translate a glob (``**``, ``*``, ``?``, ``{a,b}``) into a regex body."""
    out: list[str] = []
    i = 0
    depth = 0
    while i < len(pattern):
        char = pattern[i]
        if pattern.startswith("**/", i):
            out.append("(?:[^/]+/)*")
            i += 3
            continue
        if pattern.startswith("**", i):
            out.append(".*")
            i += 2
            continue
        if char == "*":
            out.append("[^/]*")
        elif char == "?":
            out.append("[^/]")
        elif char == "{":
            out.append("(?:")
            depth += 1
        elif char == "}" and depth:
            out.append(")")
            depth -= 1
        elif char == "," and depth:
            out.append("|")
        else:
            out.append(re.escape(char))
        i += 1
    return "".join(out)


def _split_glob(entry: str) -> tuple[str, str]:
    parts = Path(entry).as_posix().split("/")
    for index, part in enumerate(parts):
        if _GLOB_CHARS & set(part):
            return "/".join(parts[:index]) or ".", "/".join(parts[index:])
    if Path(entry).suffix:
        return "/".join(parts[:-1]) or ".", parts[-1]
    return entry, DEFAULT_STORIES_GLOB


def _relative_directory(directory: str, config_dir: Path, working_dir: Path) -> str:
    absolute = (config_dir / directory).resolve()
    relative = Path(os.path.relpath(absolute, working_dir)).as_posix()
    if relative == ".":
        return "."
    if relative.startswith("../"):
        return relative
    return f"./{relative}"


def normalize_story_specifier(
    entry: str | Mapping[str, Any],
    *,
    config_dir: Path,
    working_dir: Path,
) -> NormalizedSpecifier:
    if isinstance(entry, str):
        directory, files = _split_glob(entry)
        title_prefix = ""
    elif isinstance(entry, Mapping) and entry.get("directory"):
        directory = str(entry["directory"])
        files = str(entry.get("files") or DEFAULT_STORIES_GLOB)
        title_prefix = str(entry.get("title_prefix") or "")
    else:
        raise ConfigurationError(f"Invalid stories entry: {entry!r}")

    relative = _relative_directory(directory, config_dir, working_dir)
    matcher = re.compile(f"^{re.escape(relative)}/{glob_to_regex(files)}$")
    return NormalizedSpecifier(
        directory=relative,
        files=files,
        title_prefix=title_prefix,
        import_path_matcher=matcher,
    )


def normalize_stories(
    entries: list[str | Mapping[str, Any]],
    *,
    config_dir: str | Path,
    working_dir: str | Path,
) -> list[NormalizedSpecifier]:
    """Normalize the ``stories`` section.

    Raises:
        ConfigurationError: If *entries* is empty or an entry is malformed.
    """
    if not entries:
        raise ConfigurationError(
            "No stories configured. Add a 'stories' entry to your main configuration."
        )
    return [
        normalize_story_specifier(
            entry, config_dir=Path(config_dir), working_dir=Path(working_dir).resolve()
        )
        for entry in entries
    ]
