from __future__ import annotations

import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field

from showcase.core.constants import ExitStatus

if TYPE_CHECKING:
    from showcase.presets.loader import Presets


class BuilderStats(BaseModel):
    """Statistics a builder reports back after a successful build.

    Builders may attach arbitrary extra fields; they are kept and exported
    verbatim by the stats writer.
    """

    model_config = ConfigDict(extra="allow")

    builder: str = ""
    duration_ms: int = 0
    outputs: list[str] = Field(default_factory=list)


@dataclass
class BuildContext:
    """What a builder receives when asked to build."""

    options: dict[str, Any]
    presets: Presets
    start_time: float = field(default_factory=time.monotonic)

    def elapsed_ms(self) -> int:
        return int((time.monotonic() - self.start_time) * 1000)


class BuildOutcome(BaseModel):
    """Result of a static build that ran to completion."""

    exit_status: ExitStatus = ExitStatus.SUCCESS
    output_dir: Path
    preview_stats: BuilderStats | None = None
    index_summary: dict[str, Any] | None = None
    latency_ms: int = 0
