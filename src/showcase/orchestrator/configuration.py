"""Two-pass configuration loading.

Pass one (:func:`discover`) learns which framework, renderer and builders
are in play. Pass two (:func:`finalize`) reloads the presets with their
contributions and resolves the sections the build needs. ``finalize``
only accepts a :class:`Discovery`, so the passes cannot be reordered.
"""
from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any

import structlog

from showcase.builders.base import BuilderPair, core_presets_of, override_presets_of
from showcase.builders.registry import get_builders
from showcase.core.config import BuildRequest
from showcase.core.constants import COMMON_OVERRIDE_PRESET, COMMON_PRESET
from showcase.indexing.indexers import Indexer
from showcase.presets.loader import (
    MainConfig,
    Presets,
    framework_preset,
    load_all_presets,
    load_main_config,
    resolve_addon_name,
)

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class Discovery:
    main_config: MainConfig
    presets: Presets
    framework_presets: tuple[dict[str, Any], ...]
    core: dict[str, Any]
    build: dict[str, Any]
    builders: BuilderPair
    renderer: str | None


@dataclass(frozen=True)
class FinalConfiguration:
    discovery: Discovery
    presets: Presets
    features: dict[str, Any]
    core: dict[str, Any]
    static_dirs: list[Any]
    indexers: list[Indexer]
    stories: list[Any]
    docs: dict[str, Any]

    @property
    def build(self) -> dict[str, Any]:
        return self.discovery.build

    @property
    def builders(self) -> BuilderPair:
        return self.discovery.builders

    def full_options(self, request: BuildRequest) -> dict[str, Any]:
        """Options handed to both builders."""
        return {
            **request.preset_options(),
            "presets": self.presets,
            "features": self.features,
            "build": self.build,
            "core": self.core,
            "docs": self.docs,
        }


async def discover(request: BuildRequest) -> Discovery:
    """First configuration pass.

    A missing framework is only a warning; the build goes on without one.

    Raises:
        ConfigurationError: If the main configuration or a builder cannot
            be loaded.
        PresetError: If a core or framework preset cannot be resolved.
    """
    main_config = await asyncio.to_thread(load_main_config, request.config_dir)

    framework_presets: list[dict[str, Any]] = []
    framework_name = main_config.framework_name
    if framework_name:
        framework_presets.append(
            {
                "name": framework_preset(request.config_dir, framework_name),
                "options": main_config.framework_options,
            }
        )
    elif not request.ignore_preview:
        logger.warning(
            "no framework specified in main configuration",
            config=str(main_config.path),
        )

    logger.info("loading presets")
    presets = await load_all_presets(
        [COMMON_PRESET, *framework_presets],
        [COMMON_OVERRIDE_PRESET],
        config_dir=request.config_dir,
        options=request.preset_options(),
        main_config=main_config,
        is_critical=True,
    )

    core = await presets.apply("core", {})
    build = await presets.apply("build", {})
    builders = get_builders(core, build)

    renderer = core.get("renderer")
    resolved_renderer = resolve_addon_name(request.config_dir, renderer) if renderer else None

    return Discovery(
        main_config=main_config,
        presets=presets,
        framework_presets=tuple(framework_presets),
        core=core,
        build=build,
        builders=builders,
        renderer=resolved_renderer,
    )


async def finalize(discovery: Discovery, request: BuildRequest) -> FinalConfiguration:
    """Second configuration pass, including builder and renderer presets."""
    preview, manager = discovery.builders.preview, discovery.builders.manager
    presets = await load_all_presets(
        [
            COMMON_PRESET,
            *core_presets_of(manager),
            *core_presets_of(preview),
            *([discovery.renderer] if discovery.renderer else []),
            *discovery.framework_presets,
        ],
        [*override_presets_of(preview), COMMON_OVERRIDE_PRESET],
        config_dir=request.config_dir,
        options={**request.preset_options(), "build": discovery.build},
        main_config=discovery.main_config,
    )

    features, core, static_dirs, indexers, stories, docs = await asyncio.gather(
        presets.apply("features"),
        presets.apply("core"),
        presets.apply("static_dirs"),
        presets.apply("experimental_indexers", []),
        presets.apply("stories"),
        presets.apply("docs", {}),
    )

    return FinalConfiguration(
        discovery=discovery,
        presets=presets,
        features=features or {},
        core=core or {},
        static_dirs=list(static_dirs or []),
        indexers=list(indexers or []),
        stories=list(stories or []),
        docs=docs or {},
    )
