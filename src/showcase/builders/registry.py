"""Resolution of builder references from the ``core`` section."""
from __future__ import annotations

import importlib
from collections.abc import Mapping
from typing import Any, Callable

import structlog

from showcase.builders.base import Builder, BuilderPair
from showcase.core.constants import DEFAULT_MANAGER_BUILDER
from showcase.core.exceptions import ConfigurationError

logger = structlog.get_logger(__name__)

BuilderFactory = Callable[[dict[str, Any]], Builder]

_REGISTRY: dict[str, BuilderFactory] = {}


def register_builder(name: str, factory: BuilderFactory) -> None:
    """Register *factory* under *name*; it receives the builder options."""
    _REGISTRY[name] = factory


def unregister_builder(name: str) -> None:
    _REGISTRY.pop(name, None)


def _split(reference: str | Mapping[str, Any] | None) -> tuple[str | None, dict[str, Any]]:
    if reference is None or isinstance(reference, str):
        return reference or None, {}
    if isinstance(reference, Mapping):
        return reference.get("name") or None, dict(reference.get("options") or {})
    raise ConfigurationError(f"Invalid builder reference: {reference!r}")


def _import_builder(name: str, options: dict[str, Any]) -> Builder:
    module_name, _, attribute = name.partition(":")
    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        raise ConfigurationError(f"Could not import builder {name!r}: {exc}") from exc

    target = getattr(module, attribute or "builder", None)
    if target is None:
        raise ConfigurationError(
            f"Builder module {module_name!r} has no {attribute or 'builder'!r} attribute"
        )
    # A class or factory function is called with the options
    if isinstance(target, type) or not isinstance(target, Builder):
        if not callable(target):
            raise ConfigurationError(f"{name!r} does not provide a builder")
        builder = target(options)
    else:
        builder = target
    if not isinstance(builder, Builder):
        raise ConfigurationError(f"{name!r} does not provide a builder")
    return builder


def resolve_builder(
    reference: str | Mapping[str, Any] | None,
    build: Mapping[str, Any] | None = None,
) -> Builder:
    """Resolve one builder reference.

    Registered names win over imports. ``module:attribute`` imports the
    attribute; a bare module name uses its ``builder`` attribute.
    """
    name, options = _split(reference)
    if name is None:
        raise ConfigurationError("Builder reference is empty")
    options = {"build": dict(build or {}), **options}
    if name in _REGISTRY:
        return _REGISTRY[name](options)
    return _import_builder(name, options)


def get_builders(core: Mapping[str, Any], build: Mapping[str, Any] | None = None) -> BuilderPair:
    """Resolve the preview and manager builders named in *core*.

    Each builder factory receives its own options plus the resolved
    ``build`` section under the ``"build"`` key.

    Raises:
        ConfigurationError: If no preview builder is configured or a
            builder reference cannot be resolved.
    """
    preview_ref = core.get("builder")
    if not _split(preview_ref)[0]:
        raise ConfigurationError(
            "No builder configured. Set core.builder in your main configuration.",
            code="MISSING_BUILDER",
        )
    manager_ref = core.get("manager_builder") or DEFAULT_MANAGER_BUILDER

    preview = resolve_builder(preview_ref, build)
    manager = resolve_builder(manager_ref, build)
    logger.debug(
        "builders resolved",
        preview=getattr(preview, "name", type(preview).__name__),
        manager=getattr(manager, "name", type(manager).__name__),
    )
    return BuilderPair(preview=preview, manager=manager)
