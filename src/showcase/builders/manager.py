"""Default shell builder: writes the application chrome's entry page."""
from __future__ import annotations

import asyncio
import html
import json
from pathlib import Path
from string import Template
from typing import Any

import structlog

from showcase.core.constants import INDEX_FILENAME
from showcase.core.types import BuildContext, BuilderStats

logger = structlog.get_logger(__name__)

_PAGE = Template(
    """<!doctype html>
<html lang="en">
  <head>
    <meta charset="utf-8" />
    <title>$title</title>
    <link rel="icon" type="image/svg+xml" href="./favicon.svg" />
    <script>window.SHOWCASE_CONFIG = $config;</script>
  </head>
  <body>
    <div id="root" data-index="./$index"></div>
  </body>
</html>
"""
)


def _script_json(value: Any) -> str:
    # keep "</" from closing the surrounding script element
    return json.dumps(value, sort_keys=True).replace("</", "<\\/")


class ManagerBuilder:
    """Renders ``index.html`` for the shell into the output directory."""

    name = "manager"

    def __init__(self, options: dict[str, Any] | None = None) -> None:
        self._options = options or {}

    def __repr__(self) -> str:
        return f"ManagerBuilder(options={sorted(self._options)})"

    async def get_config(self, options: dict[str, Any]) -> dict[str, Any]:
        return {"title": self._title(options), "output_dir": options.get("output_dir")}

    def _title(self, options: dict[str, Any]) -> str:
        return str(self._options.get("title") or options.get("title") or "Showcase")

    async def build(self, context: BuildContext) -> BuilderStats:
        options = context.options
        output_dir = Path(options["output_dir"])
        features = options.get("features") or {}
        page = _PAGE.substitute(
            title=html.escape(self._title(options)),
            config=_script_json({"features": features}),
            index=INDEX_FILENAME,
        )

        def _write() -> Path:
            output_dir.mkdir(parents=True, exist_ok=True)
            target = output_dir / "index.html"
            target.write_text(page, encoding="utf-8")
            return target

        target = await asyncio.to_thread(_write)
        logger.debug("shell written", path=str(target))
        return BuilderStats(
            builder=self.name,
            duration_ms=context.elapsed_ms(),
            outputs=[target.name],
        )


builder = ManagerBuilder
