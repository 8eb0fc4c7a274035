"""Builder contract shared by the shell (manager) and preview builders."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Protocol, TypeVar, runtime_checkable

import structlog

from showcase.core.exceptions import BuilderError, ShowcaseError
from showcase.core.types import BuildContext, BuilderStats

logger = structlog.get_logger(__name__)

_T = TypeVar("_T")


@runtime_checkable
class Builder(Protocol):
    """Minimal interface a builder must provide.

    Builders may additionally define ``core_presets`` / ``override_presets``
    (lists of preset identifiers merged into the second configuration
    pass) and ``get_config(options)`` for ``--debug-config`` output.
    """

    name: str

    async def build(self, context: BuildContext) -> BuilderStats | None: ...


def core_presets_of(builder: Builder) -> list[str]:
    return list(getattr(builder, "core_presets", None) or [])


def override_presets_of(builder: Builder) -> list[str]:
    return list(getattr(builder, "override_presets", None) or [])


@dataclass(frozen=True)
class BuilderPair:
    preview: Builder
    manager: Builder


async def build_or_throw(fn: Callable[[], Awaitable[_T]], *, builder: str) -> _T:
    """Await a build, turning any failure into a :class:`BuilderError`.

    Errors that are already :class:`ShowcaseError` instances are logged and
    re-raised unchanged.
    """
    try:
        return await fn()
    except ShowcaseError:
        logger.error("build failed", builder=builder)
        raise
    except Exception as exc:
        logger.error("build failed", builder=builder, error=str(exc))
        raise BuilderError(
            f"{builder} build failed: {exc}",
            code="BUILD_FAILED",
            details={"builder": builder},
        ) from exc


def describe(builder: Builder) -> dict[str, Any]:
    return {
        "name": getattr(builder, "name", type(builder).__name__),
        "core_presets": core_presets_of(builder),
        "override_presets": override_presets_of(builder),
    }
