"""Static build orchestration.

Phases run in a fixed order:

1. clean the output directory (:func:`~showcase.output.guard.prepare_output_dir`)
2. configuration pass one, then pass two
3. shell (manager) build; any failure aborts the run. With ``debug_config``
   the preview builder configuration is logged next, before anything is
   queued
4. queue side effects: static copy, bundled assets, content index export,
   project metadata
5. preview build joined with the queued side effects
6. telemetry, queued only after step 5 succeeded, then drained

Any fatal failure marks the run's :class:`ExitStatus` as failed before the
exception propagates. The status is never reset.
"""
from __future__ import annotations

import time
from pathlib import Path
from typing import Any

import structlog

from showcase.builders.base import build_or_throw, describe
from showcase.core.config import BuildRequest, Settings
from showcase.core.constants import (
    INDEX_FILENAME,
    PROJECT_FILENAME,
    Criticality,
    EffectKind,
    ExitStatus,
)
from showcase.core.types import BuildContext, BuilderStats, BuildOutcome
from showcase.effects.models import SideEffectTask
from showcase.effects.runner import EffectSet
from showcase.indexing.generator import StoryIndexGenerator
from showcase.indexing.handle import IndexHandle
from showcase.indexing.normalize import normalize_stories
from showcase.indexing.summarize import summarize_index
from showcase.orchestrator.configuration import FinalConfiguration, discover, finalize
from showcase.output.assets import copy_bundled_assets
from showcase.output.guard import prepare_output_dir
from showcase.output.metadata import extract_project_metadata
from showcase.output.static_files import copy_all_static_files
from showcase.output.stats import output_stats
from showcase.output.stories_json import extract_stories_json
from showcase.telemetry.cache import get_preceding_upgrade
from showcase.telemetry.client import TelemetryClient

logger = structlog.get_logger(__name__)


class StaticBuild:
    """One static build run.

    Args:
        request: What to build and where.
        settings: Process settings; read from the environment when omitted.
        telemetry: Telemetry client; built from *settings* when omitted.
    """

    def __init__(
        self,
        request: BuildRequest,
        *,
        settings: Settings | None = None,
        telemetry: TelemetryClient | None = None,
    ) -> None:
        self._request = request
        self._settings = settings or Settings.from_env()
        self._telemetry = telemetry
        self._exit_status = ExitStatus.SUCCESS
        self._effects = EffectSet()
        self._preview_stats: BuilderStats | None = None
        self._index_summary: dict[str, Any] | None = None

    def __repr__(self) -> str:
        return f"StaticBuild(output_dir={self._request.output_dir!r}, status={self._exit_status})"

    @property
    def exit_status(self) -> ExitStatus:
        return self._exit_status

    @property
    def effects(self) -> EffectSet:
        return self._effects

    def _mark_failed(self) -> None:
        self._exit_status = ExitStatus.FAILURE

    async def run(self) -> BuildOutcome:
        """Run the build.

        Returns:
            The :class:`BuildOutcome` of a successful build.

        Raises:
            OutputDirError: If the output directory is empty or the root.
            ConfigurationError: If configuration cannot be resolved.
            BuilderError: If the shell or preview build fails.
            ShowcaseError: If a fatal side effect fails.
        """
        try:
            return await self._run()
        except Exception:
            self._mark_failed()
            raise

    async def _run(self) -> BuildOutcome:
        start = time.monotonic()
        output_dir = await prepare_output_dir(self._request.output_dir)
        request = self._request.resolved(output_dir)

        discovery = await discover(request)
        final = await finalize(discovery, request)
        options = final.full_options(request)
        manager, preview = final.builders.manager, final.builders.preview

        await build_or_throw(
            lambda: manager.build(BuildContext(options=options, presets=final.presets)),
            builder="manager",
        )

        if request.debug_config:
            await self._log_preview_config(preview, options)

        index = self._queue_effects(request, final)

        leading: list[SideEffectTask] = []
        if request.ignore_preview:
            logger.info("not building preview")
        else:
            logger.info("building preview")
            leading.append(
                SideEffectTask(
                    kind=EffectKind.PREVIEW_BUILD,
                    action=lambda: self._build_preview(preview, options, final, request),
                )
            )
        await self._effects.join(*leading)

        if self._telemetry_enabled(request, final):
            self._effects.add(
                EffectKind.TELEMETRY,
                lambda: self._send_telemetry(index, request),
                Criticality.BEST_EFFORT,
            )
        await self._effects.join()

        logger.info("output directory", path=str(output_dir))
        return BuildOutcome(
            exit_status=self._exit_status,
            output_dir=output_dir,
            preview_stats=self._preview_stats,
            index_summary=self._index_summary,
            latency_ms=int((time.monotonic() - start) * 1000),
        )

    async def _log_preview_config(self, preview: Any, options: dict[str, Any]) -> None:
        get_config = getattr(preview, "get_config", None)
        try:
            config = await get_config(options) if get_config is not None else describe(preview)
        except Exception as exc:
            logger.error("failed to read preview builder config", error=str(exc))
            raise
        logger.info("preview builder config", config=config)

    def _queue_effects(self, request: BuildRequest, final: FinalConfiguration) -> IndexHandle:
        """Queue the side effects of a built shell; return the content index handle."""
        output_dir = request.output_path

        if final.static_dirs:
            self._effects.add(
                EffectKind.STATIC_COPY,
                lambda: copy_all_static_files(final.static_dirs, output_dir, request.config_dir),
            )

        self._effects.add(EffectKind.ASSET_COPY, lambda: copy_bundled_assets(output_dir))

        index = IndexHandle.absent()
        if not request.ignore_preview:
            specifiers = normalize_stories(
                final.stories,
                config_dir=request.config_dir,
                working_dir=request.working_path,
            )
            generator = StoryIndexGenerator(
                specifiers,
                working_dir=request.working_path,
                config_dir=request.config_dir,
                indexers=final.indexers,
                docs=final.docs,
                build=final.build,
            )
            index = IndexHandle.initialize(generator)
            self._effects.add(
                EffectKind.INDEX_EXPORT,
                lambda: extract_stories_json(output_dir / INDEX_FILENAME, index),
            )

        if not final.core.get("disable_project_json"):
            self._effects.add(
                EffectKind.METADATA_EXPORT,
                lambda: extract_project_metadata(
                    output_dir / PROJECT_FILENAME,
                    request.config_dir,
                    request.working_path,
                ),
            )
        return index

    async def _build_preview(
        self,
        preview: Any,
        options: dict[str, Any],
        final: FinalConfiguration,
        request: BuildRequest,
    ) -> None:
        context = BuildContext(options=options, presets=final.presets)
        try:
            stats = await build_or_throw(lambda: preview.build(context), builder="preview")
        except Exception:
            logger.error("failed to build the preview")
            raise
        logger.debug("preview built", latency_ms=context.elapsed_ms())

        self._preview_stats = stats or BuilderStats(builder=getattr(preview, "name", ""))
        stats_option = request.stats_json
        if stats_option:
            target = request.output_path if stats_option is True else Path(stats_option)
            if not target.is_absolute():
                target = request.working_path / target
            await output_stats(target, self._preview_stats)

    def _telemetry_enabled(self, request: BuildRequest, final: FinalConfiguration) -> bool:
        if request.disable_telemetry or self._settings.disable_telemetry:
            return False
        if final.core.get("disable_telemetry"):
            return False
        return self._telemetry is None or not self._telemetry.disabled

    async def _send_telemetry(self, index: IndexHandle, request: BuildRequest) -> None:
        client = self._telemetry or TelemetryClient.from_settings(self._settings)
        payload: dict[str, Any] = {"preceding_upgrade": None}
        if client.cache is not None:
            payload["preceding_upgrade"] = await get_preceding_upgrade(client.cache)

        story_index = await index.get_index()
        if story_index is not None:
            self._index_summary = summarize_index(story_index)
            payload["story_index"] = self._index_summary

        await client.send("build", payload, config_dir=request.config_dir)


async def build_static_standalone(
    request: BuildRequest,
    *,
    settings: Settings | None = None,
    telemetry: TelemetryClient | None = None,
) -> BuildOutcome:
    """Build a static bundle for *request*; see :class:`StaticBuild`."""
    return await StaticBuild(request, settings=settings, telemetry=telemetry).run()
