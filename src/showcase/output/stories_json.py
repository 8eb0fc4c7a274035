from __future__ import annotations

import asyncio
import json
from pathlib import Path

import structlog

from showcase.indexing.handle import IndexHandle

logger = structlog.get_logger(__name__)


async def extract_stories_json(path: str | Path, handle: IndexHandle) -> None:
    """Wait for the content index and write it to *path*.

    Raises:
        IndexingError: If the handle is absent or indexing failed.
    """
    generator = await handle.generator()
    index = await generator.get_index()
    target = Path(path)
    data = json.dumps(index, indent=2)

    def _write() -> None:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(data + "\n", encoding="utf-8")

    await asyncio.to_thread(_write)
    logger.debug("content index written", path=str(target), entries=len(index["entries"]))
