from __future__ import annotations

import asyncio
import shutil
from pathlib import Path

import structlog

logger = structlog.get_logger(__name__)

BUNDLED_ASSETS_DIR = Path(__file__).resolve().parent.parent / "assets" / "browser"


async def copy_bundled_assets(output_dir: str | Path, source: Path = BUNDLED_ASSETS_DIR) -> None:
    """Copy the browser assets shipped with the package into *output_dir*."""
    logger.debug("copying bundled assets", source=str(source))
    await asyncio.to_thread(shutil.copytree, source, Path(output_dir), dirs_exist_ok=True)
