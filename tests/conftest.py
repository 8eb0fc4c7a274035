"""Shared test fixtures."""
from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Iterator
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import httpx
import pytest
import structlog

from showcase.builders.registry import register_builder, unregister_builder
from showcase.core.config import BuildRequest, Settings
from showcase.core.types import BuildContext, BuilderStats
from showcase.presets.loader import register_preset, unregister_preset
from showcase.resilience.retry import RetryPolicy
from showcase.telemetry.cache import TelemetryCache
from showcase.telemetry.client import TelemetryClient


@pytest.fixture(autouse=True)
def _reset_structlog() -> Iterator[None]:
    structlog.reset_defaults()
    yield
    structlog.reset_defaults()


@pytest.fixture(autouse=True)
def _restore_root_logger() -> Iterator[None]:
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


class FakeBuilder:
    """Builder double that records calls and writes one marker file."""

    def __init__(
        self,
        name: str,
        *,
        marker: str,
        events: list[str],
        core_presets: list[str] | None = None,
    ) -> None:
        self.name = name
        self.marker = marker
        self.events = events
        self.core_presets = core_presets or []
        self.calls: list[BuildContext] = []
        self.error: Exception | None = None
        self.delay = 0.0

    async def get_config(self, options: dict[str, Any]) -> dict[str, Any]:
        return {"name": self.name}

    async def build(self, context: BuildContext) -> BuilderStats:
        self.calls.append(context)
        self.events.append(f"{self.name}:start")
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            self.events.append(f"{self.name}:error")
            raise self.error
        output_dir = Path(context.options["output_dir"])
        output_dir.mkdir(parents=True, exist_ok=True)
        (output_dir / self.marker).write_text(self.name, encoding="utf-8")
        self.events.append(f"{self.name}:done")
        return BuilderStats(builder=self.name, outputs=[self.marker], modules=3)


@dataclass
class Builders:
    preview: FakeBuilder
    manager: FakeBuilder
    events: list[str] = field(default_factory=list)


@pytest.fixture
def builders() -> Iterator[Builders]:
    events: list[str] = []
    pair = Builders(
        preview=FakeBuilder("preview", marker="iframe.html", events=events),
        manager=FakeBuilder("manager", marker="index.html", events=events),
        events=events,
    )
    register_builder("fake-preview", lambda options: pair.preview)
    register_builder("fake-manager", lambda options: pair.manager)
    register_preset("fake_framework.preset", {"features": {"framework_feature": True}})
    yield pair
    unregister_builder("fake-preview")
    unregister_builder("fake-manager")
    unregister_preset("fake_framework.preset")


STORIES = {
    "title": "Components/Button",
    "tags": ["autodocs"],
    "stories": [
        {"export_name": "Primary"},
        {"name": "With Play", "export_name": "WithPlay", "play": True},
    ],
}


@dataclass
class Project:
    root: Path
    config_dir: Path
    output_dir: Path

    def write_main(self, **overrides: Any) -> None:
        main: dict[str, Any] = {
            "framework": "fake_framework",
            "stories": ["../src/**/*.stories.json"],
            "static_dirs": ["../public:/static"],
            "core": {"builder": "fake-preview", "manager_builder": "fake-manager"},
        }
        main.update(overrides)
        (self.config_dir / "main.json").write_text(json.dumps(main), encoding="utf-8")

    def request(self, **overrides: Any) -> BuildRequest:
        values: dict[str, Any] = {
            "output_dir": str(self.output_dir),
            "config_dir": str(self.config_dir),
            "working_dir": str(self.root),
        }
        values.update(overrides)
        return BuildRequest(**values)


@pytest.fixture
def project(tmp_path: Path) -> Project:
    root = tmp_path / "project"
    config_dir = root / ".showcase"
    config_dir.mkdir(parents=True)
    (root / "src").mkdir()
    (root / "src" / "Button.stories.json").write_text(json.dumps(STORIES), encoding="utf-8")
    (root / "public").mkdir()
    (root / "public" / "robots.txt").write_text("User-agent: *\n", encoding="utf-8")
    proj = Project(root=root, config_dir=config_dir, output_dir=root / "showcase-static")
    proj.write_main()
    return proj


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(cache_dir=tmp_path / "cache", telemetry_url="https://telemetry.test/events")


@pytest.fixture
def telemetry_events() -> list[dict[str, Any]]:
    return []


@pytest.fixture
def telemetry(tmp_path: Path, telemetry_events: list[dict[str, Any]]) -> TelemetryClient:
    async def _handler(request: httpx.Request) -> httpx.Response:
        telemetry_events.append(json.loads(request.content))
        return httpx.Response(202, json={"ok": True})

    return TelemetryClient(
        "https://telemetry.test/events",
        cache=TelemetryCache(tmp_path / "cache"),
        retry_policy=RetryPolicy(max_retries=0),
        transport=httpx.MockTransport(_handler),
    )
