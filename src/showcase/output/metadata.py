from __future__ import annotations

import asyncio
import json
import platform
import time
import tomllib
from pathlib import Path
from typing import Any

import structlog

from showcase.__version__ import __version__
from showcase.presets.loader import MainConfig, load_main_config

logger = structlog.get_logger(__name__)


def _reference_name(reference: Any) -> str | None:
    if isinstance(reference, str):
        return reference or None
    if isinstance(reference, dict):
        return reference.get("name") or None
    return None


def _project_info(working_dir: Path) -> dict[str, Any] | None:
    pyproject = working_dir / "pyproject.toml"
    if not pyproject.is_file():
        return None
    try:
        with pyproject.open("rb") as fh:
            project = tomllib.load(fh).get("project", {})
    except (OSError, tomllib.TOMLDecodeError):
        logger.debug("unreadable pyproject.toml", path=str(pyproject))
        return None
    return {
        "name": project.get("name"),
        "version": project.get("version"),
        "dependency_count": len(project.get("dependencies") or []),
    }


def compute_project_metadata(main_config: MainConfig, working_dir: Path) -> dict[str, Any]:
    """Describe the project for ``project.json``."""
    values = main_config.values
    core = values.get("core")
    if not isinstance(core, dict):
        core = {}
    addons: dict[str, Any] = {}
    for addon in main_config.addons:
        name = _reference_name(addon)
        if name:
            addons[name] = {"options": addon.get("options", {}) if isinstance(addon, dict) else {}}

    stories = values.get("stories") or []
    if isinstance(stories, (str, dict)):
        stories = [stories]
    elif not isinstance(stories, list):
        stories = []

    metadata: dict[str, Any] = {
        "generated_at": int(time.time() * 1000),
        "showcase_version": __version__,
        "language": "python",
        "python_version": platform.python_version(),
        "framework": {
            "name": main_config.framework_name,
            "options": main_config.framework_options,
        },
        "builder": _reference_name(core.get("builder")),
        "renderer": core.get("renderer"),
        "addons": addons,
        "stories_globs_count": len(stories),
        "has_static_dirs": bool(values.get("static_dirs")),
    }
    project = _project_info(working_dir)
    if project is not None:
        metadata["project"] = project
    return metadata


async def extract_project_metadata(
    path: str | Path,
    config_dir: str | Path,
    working_dir: str | Path | None = None,
) -> None:
    """Write project metadata derived from the main configuration to *path*."""
    main_config = await asyncio.to_thread(load_main_config, config_dir)
    metadata = compute_project_metadata(main_config, Path(working_dir or Path.cwd()))
    target = Path(path)
    data = json.dumps(metadata, indent=2, sort_keys=True, default=str)

    def _write() -> None:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(data + "\n", encoding="utf-8")

    await asyncio.to_thread(_write)
    logger.debug("project metadata written", path=str(target))
