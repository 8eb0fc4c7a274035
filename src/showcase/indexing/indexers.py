"""Indexer contract and the built-in JSON story indexer."""
from __future__ import annotations

import json
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Awaitable, Callable, Union

from showcase.core.exceptions import IndexingError

IndexInput = dict[str, Any]
"""One item an indexer reports: ``name`` or ``export_name``, optional
``title``, ``tags`` and ``type`` (``"story"`` or ``"docs"``)."""

CreateIndex = Callable[[str, dict[str, Any]], Union[list[IndexInput], Awaitable[list[IndexInput]]]]


@dataclass(frozen=True)
class Indexer:
    """Maps files whose path matches ``test`` to index inputs."""

    test: re.Pattern[str]
    create_index: CreateIndex

    def handles(self, path: str) -> bool:
        return self.test.search(path) is not None


def start_case(export_name: str) -> str:
    words = re.sub(r"([a-z0-9])([A-Z])", r"\1 \2", export_name).replace("_", " ")
    return " ".join(word[:1].upper() + word[1:] for word in words.split())


def _index_json(file_name: str, options: dict[str, Any]) -> list[IndexInput]:
    try:
        data = json.loads(Path(file_name).read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        raise IndexingError(f"Unable to index {file_name!r}: {exc}") from exc

    file_tags = list(data.get("tags") or [])
    inputs: list[IndexInput] = []
    for story in data.get("stories") or []:
        export_name = story.get("export_name") or story.get("name")
        if not export_name:
            raise IndexingError(f"Story without a name in {file_name!r}")
        inputs.append(
            {
                "type": "story",
                "title": data.get("title"),
                "name": story.get("name") or start_case(export_name),
                "export_name": export_name,
                "tags": [*file_tags, *(story.get("tags") or [])],
                "play": bool(story.get("play")),
            }
        )
    return inputs


json_indexer = Indexer(test=re.compile(r"\.stories\.json$"), create_index=_index_json)
