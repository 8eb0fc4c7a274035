"""Showcase static build orchestrator."""

from showcase.__version__ import __version__
from showcase.core.config import BuildRequest, Settings
from showcase.core.constants import Criticality, EffectKind, ExitStatus
from showcase.core.exceptions import (
    BuilderError,
    ConfigurationError,
    EffectError,
    IndexingError,
    OutputDirError,
    PresetError,
    ShowcaseError,
    StaticDirError,
    TelemetryError,
)
from showcase.core.types import BuildContext, BuilderStats, BuildOutcome
from showcase.orchestrator.build_static import StaticBuild, build_static_standalone

__all__ = [
    "__version__",
    # Config
    "BuildRequest",
    "Settings",
    # Constants
    "Criticality",
    "EffectKind",
    "ExitStatus",
    # Exceptions
    "BuilderError",
    "ConfigurationError",
    "EffectError",
    "IndexingError",
    "OutputDirError",
    "PresetError",
    "ShowcaseError",
    "StaticDirError",
    "TelemetryError",
    # Types
    "BuildContext",
    "BuildOutcome",
    "BuilderStats",
    # Orchestration
    "StaticBuild",
    "build_static_standalone",
]
