from __future__ import annotations

import asyncio
import os
import re
from pathlib import Path
from typing import Any

import structlog

from showcase.core.constants import INDEX_VERSION
from showcase.core.exceptions import IndexingError
from showcase.indexing.indexers import Indexer, IndexInput, start_case
from showcase.indexing.normalize import NormalizedSpecifier
from showcase.utils.async_helpers import maybe_await

logger = structlog.get_logger(__name__)

_SKIP_DIRS = {"node_modules", ".git", "__pycache__", ".venv"}
_STORIES_SUFFIX = re.compile(r"\.stories(\.[^/.]+)+$")


def sanitize(value: str) -> str:
    """Lower-case, dash-separated form used in entry ids."""
    value = value.lower()
    value = re.sub(r"[^a-z0-9]+", "-", value)
    return value.strip("-")


def to_id(title: str, name: str) -> str:
    return f"{sanitize(title)}--{sanitize(name)}"


def auto_title(import_path: str, specifier: NormalizedSpecifier) -> str:
    """Derive a title from a file's path below its specifier directory."""
    relative = import_path[len(specifier.directory):].lstrip("/")
    relative = _STORIES_SUFFIX.sub("", relative)
    parts = [part for part in relative.split("/") if part]
    # Button/Button.stories.json -> Button
    if len(parts) > 1 and parts[-1] == parts[-2]:
        parts.pop()
    if specifier.title_prefix:
        parts = [specifier.title_prefix.strip("/"), *parts]
    return "/".join(parts)


class StoryIndexGenerator:
    """Scans story files and builds the content index.

    Args:
        specifiers: Normalized ``stories`` entries.
        working_dir: Base directory for import paths.
        config_dir: The project's configuration directory.
        indexers: Indexers tried in order; the first match wins.
        docs: The resolved ``docs`` section.
        build: The resolved ``build`` section.
    """

    def __init__(
        self,
        specifiers: list[NormalizedSpecifier],
        *,
        working_dir: str | Path,
        config_dir: str | Path,
        indexers: list[Indexer],
        docs: dict[str, Any] | None = None,
        build: dict[str, Any] | None = None,
    ) -> None:
        self._specifiers = specifiers
        self._working_dir = Path(working_dir).resolve()
        self._config_dir = Path(config_dir)
        self._indexers = indexers
        self._docs = docs or {}
        self._build = build or {}
        self._entries: dict[str, dict[str, Any]] | None = None

    def __repr__(self) -> str:
        return f"StoryIndexGenerator(specifiers={len(self._specifiers)})"

    def _import_path(self, path: Path) -> str:
        relative = Path(os.path.relpath(path, self._working_dir)).as_posix()
        return relative if relative.startswith("../") else f"./{relative}"

    def _scan(self, specifier: NormalizedSpecifier) -> list[tuple[Path, str]]:
        root = (self._working_dir / specifier.directory).resolve()
        if not root.is_dir():
            logger.warning("stories directory not found", directory=specifier.directory)
            return []
        found: list[tuple[Path, str]] = []
        for dirpath, dirnames, filenames in os.walk(root):
            dirnames[:] = sorted(d for d in dirnames if d not in _SKIP_DIRS)
            for filename in sorted(filenames):
                path = Path(dirpath) / filename
                import_path = self._import_path(path)
                if specifier.matches(import_path):
                    found.append((path, import_path))
        return found

    def _indexer_for(self, import_path: str) -> Indexer:
        for indexer in self._indexers:
            if indexer.handles(import_path):
                return indexer
        raise IndexingError(
            f"No matching indexer found for {import_path!r}",
            details={"import_path": import_path},
        )

    def _wants_autodocs(self, tags: list[str]) -> bool:
        autodocs = self._docs.get("autodocs")
        if autodocs is True:
            return True
        return autodocs == "tag" and "autodocs" in tags

    async def _index_file(
        self,
        path: Path,
        import_path: str,
        specifier: NormalizedSpecifier,
    ) -> list[dict[str, Any]]:
        indexer = self._indexer_for(import_path)
        inputs: list[IndexInput] = await maybe_await(
            indexer.create_index(str(path), {"import_path": import_path})
        )
        default_title = auto_title(import_path, specifier)
        entries: list[dict[str, Any]] = []
        all_tags: list[str] = []
        title = default_title
        for item in inputs:
            title = item.get("title") or default_title
            if specifier.title_prefix and item.get("title"):
                title = f"{specifier.title_prefix.strip('/')}/{item['title']}"
            tags = list(item.get("tags") or [])
            all_tags.extend(tags)
            name = item.get("name") or (
                start_case(item["export_name"]) if item.get("export_name") else None
            )
            if not name:
                raise IndexingError(
                    f"Indexer reported an entry without a name in {import_path!r}",
                    details={"import_path": import_path},
                )
            entry_type = item.get("type", "story")
            entries.append(
                {
                    "id": to_id(title, name),
                    "title": title,
                    "name": name,
                    "import_path": import_path,
                    "type": entry_type,
                    "tags": [entry_type, *tags],
                    **({"export_name": item["export_name"]} if item.get("export_name") else {}),
                    **({"play": True} if item.get("play") else {}),
                }
            )
        if entries and self._wants_autodocs(all_tags):
            docs_name = self._docs.get("default_name", "Docs")
            entries.append(
                {
                    "id": to_id(title, docs_name),
                    "title": title,
                    "name": docs_name,
                    "import_path": import_path,
                    "type": "docs",
                    "tags": ["docs", "autodocs"],
                }
            )
        return entries

    async def initialize(self) -> None:
        """Scan every specifier and index the files found.

        Raises:
            IndexingError: If a file has no matching indexer, an indexer
                fails, or two entries share an id.
        """
        entries: dict[str, dict[str, Any]] = {}
        for specifier in self._specifiers:
            files = await asyncio.to_thread(self._scan, specifier)
            for path, import_path in files:
                for entry in await self._index_file(path, import_path, specifier):
                    existing = entries.get(entry["id"])
                    if existing is not None:
                        raise IndexingError(
                            f"Duplicate entry id {entry['id']!r} in "
                            f"{existing['import_path']!r} and {entry['import_path']!r}",
                            details={"id": entry["id"]},
                        )
                    entries[entry["id"]] = entry
        self._entries = entries
        logger.debug("content index initialized", entries=len(entries))

    async def get_index(self) -> dict[str, Any]:
        if self._entries is None:
            await self.initialize()
        assert self._entries is not None  # for mypy
        return {
            "v": INDEX_VERSION,
            "entries": {key: self._entries[key] for key in sorted(self._entries)},
        }
