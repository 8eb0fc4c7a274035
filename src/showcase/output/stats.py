from __future__ import annotations

import asyncio
import json
from pathlib import Path

import structlog

from showcase.core.constants import STATS_FILENAME
from showcase.core.types import BuilderStats

logger = structlog.get_logger(__name__)


async def output_stats(directory: str | Path, stats: BuilderStats) -> Path:
    """Write *stats* as ``preview-stats.json`` into *directory*."""
    target = Path(directory) / STATS_FILENAME
    data = json.dumps(stats.model_dump(mode="json"), indent=2, sort_keys=True)

    def _write() -> None:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(data + "\n", encoding="utf-8")

    await asyncio.to_thread(_write)
    logger.info("preview stats written", path=str(target))
    return target
