from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from showcase.core.constants import TELEMETRY_URL

_TRUTHY = {"1", "true", "yes", "on"}


def _env_flag(name: str) -> bool | None:
    value = os.environ.get(name)
    if not value:
        return None
    return value.strip().lower() in _TRUTHY


class Settings(BaseModel):
    """Process-level settings that do not belong to a single build."""

    telemetry_url: str = TELEMETRY_URL
    disable_telemetry: bool = False
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_json: bool = False
    cache_dir: Path = Field(default_factory=lambda: Path.home() / ".cache" / "showcase")

    @classmethod
    def from_env(cls) -> Settings:
        """Create :class:`Settings` from ``SHOWCASE_*`` environment variables.

        Reads the following env vars (all optional):

        * ``SHOWCASE_TELEMETRY_URL`` → ``telemetry_url``
        * ``SHOWCASE_DISABLE_TELEMETRY`` → ``disable_telemetry`` (``1``/``true``/``yes``/``on``)
        * ``SHOWCASE_LOG_LEVEL`` → ``log_level``
        * ``SHOWCASE_LOG_JSON`` → ``log_json``
        * ``SHOWCASE_CACHE_DIR`` → ``cache_dir``

        Any variable that is not set or is empty is left at its default value.
        """
        kwargs: dict[str, Any] = {}

        url = os.environ.get("SHOWCASE_TELEMETRY_URL")
        if url:
            kwargs["telemetry_url"] = url

        disabled = _env_flag("SHOWCASE_DISABLE_TELEMETRY")
        if disabled is not None:
            kwargs["disable_telemetry"] = disabled

        log_level = os.environ.get("SHOWCASE_LOG_LEVEL")
        if log_level:
            kwargs["log_level"] = log_level.upper()

        log_json = _env_flag("SHOWCASE_LOG_JSON")
        if log_json is not None:
            kwargs["log_json"] = log_json

        cache_dir = os.environ.get("SHOWCASE_CACHE_DIR")
        if cache_dir:
            kwargs["cache_dir"] = Path(cache_dir)

        return cls(**kwargs)


class BuildRequest(BaseModel):
    """Options for one static build.

    ``output_dir`` is kept as the raw string the user supplied so that the
    output guard can reject an empty value before anything resolves it.
    """

    model_config = ConfigDict(frozen=True)

    output_dir: str
    config_dir: str = ".showcase"
    ignore_preview: bool = False
    """Skip the preview build (and therefore the content index)."""
    stats_json: bool | str | None = None
    """``True`` writes preview stats into the output directory, a string names the target directory."""
    debug_config: bool = False
    disable_telemetry: bool = False
    quiet: bool = False
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] | None = None
    working_dir: str | None = None
    """Base for story globs; defaults to the current working directory."""

    def resolved(self, output_dir: Path) -> BuildRequest:
        """Return a copy with absolute ``output_dir``, ``config_dir`` and ``working_dir``."""
        working_dir = Path(self.working_dir or os.getcwd()).resolve()
        config_dir = Path(self.config_dir)
        if not config_dir.is_absolute():
            config_dir = working_dir / config_dir
        return self.model_copy(
            update={
                "output_dir": str(output_dir),
                "config_dir": str(config_dir.resolve()),
                "working_dir": str(working_dir),
            }
        )

    @property
    def config_path(self) -> Path:
        return Path(self.config_dir)

    @property
    def output_path(self) -> Path:
        return Path(self.output_dir)

    @property
    def working_path(self) -> Path:
        return Path(self.working_dir or os.getcwd())

    def preset_options(self) -> dict[str, Any]:
        """Options handed to preset contributions and builders."""
        return {
            "config_type": "PRODUCTION",
            "config_dir": self.config_dir,
            "output_dir": self.output_dir,
            "working_dir": self.working_dir,
            "ignore_preview": self.ignore_preview,
            "quiet": self.quiet,
        }
