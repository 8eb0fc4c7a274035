from showcase.orchestrator.build_static import StaticBuild, build_static_standalone
from showcase.orchestrator.configuration import (
    Discovery,
    FinalConfiguration,
    discover,
    finalize,
)

__all__ = [
    "Discovery",
    "FinalConfiguration",
    "StaticBuild",
    "build_static_standalone",
    "discover",
    "finalize",
]
