"""Copying of configured static directories into the output directory."""
from __future__ import annotations

import asyncio
import shutil
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import structlog

from showcase.core.exceptions import StaticDirError

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class StaticDir:
    source: Path
    target: Path


def parse_static_dir(
    entry: str | Mapping[str, Any],
    *,
    config_dir: Path,
    output_dir: Path,
) -> StaticDir:
    """Parse ``"from:to"``, ``"from"`` or ``{"from": ..., "to": ...}``.

    ``from`` is relative to the config directory, ``to`` to the output
    directory (default: the output root).

    Raises:
        StaticDirError: If the entry is malformed or ``to`` leaves the
            output directory.
    """
    if isinstance(entry, str):
        source, _, target = entry.partition(":")
    elif isinstance(entry, Mapping) and entry.get("from"):
        source, target = str(entry["from"]), str(entry.get("to") or "")
    else:
        raise StaticDirError(f"Invalid static_dirs entry: {entry!r}")

    resolved_target = (output_dir / target.lstrip("/")).resolve()
    if resolved_target != output_dir and output_dir not in resolved_target.parents:
        raise StaticDirError(
            f"Static dir target {target!r} is outside the output directory",
            details={"entry": str(entry)},
        )
    return StaticDir(source=(config_dir / source).resolve(), target=resolved_target)


def _copy(static_dir: StaticDir) -> None:
    if static_dir.source.is_dir():
        shutil.copytree(static_dir.source, static_dir.target, dirs_exist_ok=True)
    else:
        static_dir.target.mkdir(parents=True, exist_ok=True)
        shutil.copy2(static_dir.source, static_dir.target / static_dir.source.name)


async def copy_all_static_files(
    static_dirs: list[str | Mapping[str, Any]],
    output_dir: str | Path,
    config_dir: str | Path,
) -> None:
    """Copy every static directory to its mapped destination.

    Raises:
        StaticDirError: If an entry is invalid or its source does not exist.
    """
    output_dir = Path(output_dir).resolve()
    config_dir = Path(config_dir)
    parsed = [
        parse_static_dir(entry, config_dir=config_dir, output_dir=output_dir)
        for entry in static_dirs
    ]
    for static_dir in parsed:
        if not static_dir.source.exists():
            raise StaticDirError(
                f"Failed to load static files, no such directory: {str(static_dir.source)!r}",
                details={"source": str(static_dir.source)},
            )
        logger.debug(
            "copying static files",
            source=str(static_dir.source),
            target=str(static_dir.target),
        )

    await asyncio.gather(*(asyncio.to_thread(_copy, static_dir) for static_dir in parsed))
