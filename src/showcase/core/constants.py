from __future__ import annotations

from enum import StrEnum


class ExitStatus(StrEnum):
    SUCCESS = "success"
    FAILURE = "failure"

    @property
    def code(self) -> int:
        return 0 if self is ExitStatus.SUCCESS else 1


class EffectKind(StrEnum):
    STATIC_COPY = "static-copy"
    ASSET_COPY = "asset-copy"
    INDEX_EXPORT = "index-export"
    METADATA_EXPORT = "metadata-export"
    PREVIEW_BUILD = "preview-build"
    TELEMETRY = "telemetry"


class Criticality(StrEnum):
    FATAL = "fatal"
    BEST_EFFORT = "best-effort"


# Fixed file names written under the output directory
INDEX_FILENAME = "index.json"
PROJECT_FILENAME = "project.json"
STATS_FILENAME = "preview-stats.json"

INDEX_VERSION = 5

# Looked up in this order inside the config directory
MAIN_CONFIG_NAMES = ("main.py", "main.toml", "main.json")

COMMON_PRESET = "showcase.presets.common"
COMMON_OVERRIDE_PRESET = "showcase.presets.common_override"
DEFAULT_MANAGER_BUILDER = "showcase.builders.manager"

DEFAULT_STORIES_GLOB = "**/*.stories.*"

TELEMETRY_URL = "https://telemetry.showcase.dev/event-log"
