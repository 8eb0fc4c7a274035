"""Output directory guard.

Cleaning the output directory is the only destructive step of a build, so
the checks run in a fixed order and both textual rejections happen before
the filesystem is consulted:

1. empty string
2. resolution to an absolute path
3. filesystem root
4. existence / listing
5. removal and re-creation, only when the directory has contents
"""
from __future__ import annotations

import asyncio
import os
import shutil
from pathlib import Path

import structlog

from showcase.core.exceptions import OutputDirError

logger = structlog.get_logger(__name__)


def resolve_output_dir(output_dir: str) -> Path:
    """Validate and resolve *output_dir* without touching the filesystem.

    Raises:
        OutputDirError: If *output_dir* is empty or resolves to the
            filesystem root.
    """
    if output_dir == "":
        raise OutputDirError(
            "Won't remove current directory. Check your output_dir!",
            code="OUTPUT_DIR_EMPTY",
        )

    resolved = Path(os.path.abspath(output_dir))
    if resolved == Path(resolved.anchor):
        raise OutputDirError(
            f"Won't remove directory {str(resolved)!r}. Check your output_dir!",
            code="OUTPUT_DIR_ROOT",
            details={"output_dir": str(resolved)},
        )
    return resolved


def _is_non_empty_dir(path: Path) -> bool:
    if not path.exists():
        return False
    if not path.is_dir():
        raise OutputDirError(
            f"Output path {str(path)!r} exists and is not a directory. Check your output_dir!",
            code="OUTPUT_DIR_NOT_A_DIRECTORY",
            details={"output_dir": str(path)},
        )
    with os.scandir(path) as entries:
        return any(True for _ in entries)


def _clean(path: Path) -> None:
    shutil.rmtree(path)
    path.mkdir(parents=True, exist_ok=True)


async def prepare_output_dir(output_dir: str) -> Path:
    """Validate *output_dir* and empty it if it already has contents.

    A missing or already empty directory is left alone; writers further
    down the build create it as needed.

    Returns:
        The absolute output directory.

    Raises:
        OutputDirError: If *output_dir* is empty or the filesystem root,
            or an existing path that is not a directory.
    """
    resolved = resolve_output_dir(output_dir)

    try:
        display = os.path.relpath(resolved)
    except ValueError:
        display = str(resolved)
    logger.info("cleaning output directory", path=display)

    if await asyncio.to_thread(_is_non_empty_dir, resolved):
        await asyncio.to_thread(_clean, resolved)
    return resolved
