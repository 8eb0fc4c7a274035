"""Tests for the content indexer: normalization, generation, handles and summaries."""
from __future__ import annotations

import asyncio
import json
import re
from pathlib import Path
from typing import Any

import pytest

from showcase.core.exceptions import ConfigurationError, IndexingError
from showcase.indexing.generator import StoryIndexGenerator, auto_title, sanitize, to_id
from showcase.indexing.handle import IndexHandle
from showcase.indexing.indexers import Indexer, json_indexer
from showcase.indexing.normalize import glob_to_regex, normalize_stories
from showcase.indexing.summarize import summarize_index


def _write_stories(path: Path, data: dict[str, Any]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data), encoding="utf-8")


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    (tmp_path / ".showcase").mkdir()
    _write_stories(
        tmp_path / "src" / "Button" / "Button.stories.json",
        {"tags": ["autodocs"], "stories": [{"export_name": "Primary"}, {"export_name": "LargeSize"}]},
    )
    _write_stories(
        tmp_path / "src" / "forms" / "Input.stories.json",
        {"title": "Forms/Text Input", "stories": [{"name": "Empty", "play": True}]},
    )
    _write_stories(
        tmp_path / "src" / "node_modules" / "dep" / "Dep.stories.json",
        {"stories": [{"name": "Hidden"}]},
    )
    return tmp_path


def _generator(workspace: Path, stories: list[Any], **kwargs: Any) -> StoryIndexGenerator:
    config_dir = workspace / ".showcase"
    specifiers = normalize_stories(stories, config_dir=config_dir, working_dir=workspace)
    kwargs.setdefault("indexers", [json_indexer])
    kwargs.setdefault("docs", {"autodocs": "tag", "default_name": "Docs"})
    return StoryIndexGenerator(specifiers, working_dir=workspace, config_dir=config_dir, **kwargs)


# ---------------------------------------------------------------------------
# Normalization
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    ("pattern", "path", "expected"),
    [
        ("**/*.stories.json", "a/b/c.stories.json", True),
        ("**/*.stories.json", "c.stories.json", True),
        ("*.stories.json", "a/c.stories.json", False),
        ("*.stories.{json,yaml}", "c.stories.yaml", True),
        ("Button?.stories.json", "Button2.stories.json", True),
    ],
)
def test_glob_to_regex(pattern: str, path: str, expected: bool) -> None:
    assert (re.fullmatch(glob_to_regex(pattern), path) is not None) is expected


def test_normalize_string_entries(tmp_path: Path) -> None:
    config_dir = tmp_path / ".showcase"
    specifiers = normalize_stories(
        ["../src/**/*.stories.json", "../docs", "../lib/Only.stories.json"],
        config_dir=config_dir,
        working_dir=tmp_path,
    )
    assert [(s.directory, s.files) for s in specifiers] == [
        ("./src", "**/*.stories.json"),
        ("./docs", "**/*.stories.*"),
        ("./lib", "Only.stories.json"),
    ]
    assert specifiers[0].matches("./src/deep/A.stories.json")
    assert not specifiers[0].matches("./other/A.stories.json")


def test_normalize_mapping_entry(tmp_path: Path) -> None:
    (specifier,) = normalize_stories(
        [{"directory": "../src", "files": "*.stories.json", "title_prefix": "Design"}],
        config_dir=tmp_path / ".showcase",
        working_dir=tmp_path,
    )
    assert specifier.title_prefix == "Design"
    assert specifier.matches("./src/A.stories.json")


def test_normalize_rejects_empty_and_malformed(tmp_path: Path) -> None:
    with pytest.raises(ConfigurationError, match="No stories"):
        normalize_stories([], config_dir=tmp_path, working_dir=tmp_path)
    with pytest.raises(ConfigurationError, match="Invalid stories entry"):
        normalize_stories([{"files": "*.json"}], config_dir=tmp_path, working_dir=tmp_path)


# ---------------------------------------------------------------------------
# Ids and titles
# ---------------------------------------------------------------------------


def test_ids() -> None:
    assert sanitize("  Forms / Text Input!") == "forms-text-input"
    assert to_id("Forms/Text Input", "With Play") == "forms-text-input--with-play"


def test_auto_title(tmp_path: Path) -> None:
    (specifier,) = normalize_stories(
        [{"directory": "../src", "title_prefix": "Lib"}],
        config_dir=tmp_path / ".showcase",
        working_dir=tmp_path,
    )
    assert auto_title("./src/Button/Button.stories.json", specifier) == "Lib/Button"
    assert auto_title("./src/forms/Input.stories.json", specifier) == "Lib/forms/Input"


# ---------------------------------------------------------------------------
# Generator
# ---------------------------------------------------------------------------


async def test_generator_builds_sorted_index(workspace: Path) -> None:
    generator = _generator(workspace, ["../src/**/*.stories.json"])
    index = await generator.get_index()

    assert index["v"] == 5
    assert list(index["entries"]) == sorted(index["entries"])
    entries = index["entries"]
    assert set(entries) == {
        "button--primary",
        "button--large-size",
        "button--docs",
        "forms-text-input--empty",
    }
    primary = entries["button--primary"]
    assert primary["import_path"] == "./src/Button/Button.stories.json"
    assert primary["tags"] == ["story", "autodocs"]
    assert primary["export_name"] == "Primary"
    assert entries["button--large-size"]["name"] == "Large Size"
    assert entries["button--docs"]["type"] == "docs"
    assert entries["forms-text-input--empty"]["play"] is True


async def test_generator_autodocs_for_everything(workspace: Path) -> None:
    generator = _generator(workspace, ["../src"], docs={"autodocs": True, "default_name": "Overview"})
    index = await generator.get_index()
    assert "forms-text-input--overview" in index["entries"]


async def test_generator_no_autodocs(workspace: Path) -> None:
    generator = _generator(workspace, ["../src"], docs={"autodocs": False})
    index = await generator.get_index()
    assert not [e for e in index["entries"].values() if e["type"] == "docs"]


async def test_generator_requires_an_indexer(workspace: Path) -> None:
    generator = _generator(workspace, ["../src"], indexers=[])
    with pytest.raises(IndexingError, match="No matching indexer"):
        await generator.initialize()


async def test_generator_rejects_duplicate_ids(workspace: Path) -> None:
    _write_stories(
        workspace / "src" / "copy" / "Other.stories.json",
        {"title": "Button", "stories": [{"export_name": "Primary"}]},
    )
    generator = _generator(workspace, ["../src"])
    with pytest.raises(IndexingError, match="Duplicate entry id 'button--primary'"):
        await generator.initialize()


async def test_generator_accepts_async_indexers(workspace: Path) -> None:
    async def _create(file_name: str, options: dict[str, Any]) -> list[dict[str, Any]]:
        return [{"name": Path(file_name).name.split(".")[0], "type": "docs"}]

    indexer = Indexer(test=re.compile(r"\.json$"), create_index=_create)
    generator = _generator(workspace, ["../src/forms"], indexers=[indexer])
    index = await generator.get_index()
    assert index["entries"]["input--input"]["type"] == "docs"


async def test_generator_names_entries_from_export_name(workspace: Path) -> None:
    indexer = Indexer(
        test=re.compile(r"\.json$"),
        create_index=lambda file_name, options: [{"export_name": "LargeSize"}],
    )
    generator = _generator(workspace, ["../src/forms"], indexers=[indexer])
    entries = (await generator.get_index())["entries"]
    entry = entries["input--large-size"]
    assert entry["name"] == "Large Size"
    assert entry["export_name"] == "LargeSize"


async def test_generator_rejects_nameless_entries(workspace: Path) -> None:
    indexer = Indexer(test=re.compile(r"\.json$"), create_index=lambda file_name, options: [{}])
    generator = _generator(workspace, ["../src/forms"], indexers=[indexer])
    with pytest.raises(IndexingError, match="without a name"):
        await generator.initialize()


async def test_generator_missing_directory_is_empty(workspace: Path) -> None:
    generator = _generator(workspace, ["../missing"])
    assert (await generator.get_index())["entries"] == {}


def test_json_indexer_reports_bad_files(tmp_path: Path) -> None:
    broken = tmp_path / "Broken.stories.json"
    broken.write_text("{", encoding="utf-8")
    with pytest.raises(IndexingError, match="Unable to index"):
        json_indexer.create_index(str(broken), {})
    nameless = tmp_path / "Nameless.stories.json"
    nameless.write_text(json.dumps({"stories": [{}]}), encoding="utf-8")
    with pytest.raises(IndexingError, match="without a name"):
        json_indexer.create_index(str(nameless), {})


# ---------------------------------------------------------------------------
# Handle
# ---------------------------------------------------------------------------


async def test_absent_handle() -> None:
    handle = IndexHandle.absent()
    assert not handle.present
    assert await handle.get_index() is None
    with pytest.raises(IndexingError):
        await handle.generator()


async def test_handle_initializes_once(workspace: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    generator = _generator(workspace, ["../src"])
    calls = 0
    original = generator.initialize

    async def _counting() -> None:
        nonlocal calls
        calls += 1
        await original()

    monkeypatch.setattr(generator, "initialize", _counting)
    handle = IndexHandle.initialize(generator)

    first, second = await asyncio.gather(handle.get_index(), handle.get_index())
    assert first == second
    assert await handle.generator() is generator
    assert calls == 1
    assert handle.present


async def test_handle_propagates_initialization_errors(workspace: Path) -> None:
    handle = IndexHandle.initialize(_generator(workspace, ["../src"], indexers=[]))
    with pytest.raises(IndexingError):
        await handle.get_index()
    with pytest.raises(IndexingError):
        await handle.get_index()


# ---------------------------------------------------------------------------
# Summary
# ---------------------------------------------------------------------------


def test_summarize_index() -> None:
    index = {
        "v": 5,
        "entries": {
            "a--one": {"type": "story", "title": "A", "tags": ["story"], "play": True},
            "a--two": {"type": "story", "title": "A", "tags": ["story"]},
            "b--one": {"type": "story", "title": "B", "tags": ["story"]},
            "a--docs": {"type": "docs", "title": "A", "tags": ["docs", "autodocs"]},
            "intro--docs": {"type": "docs", "title": "Intro", "tags": ["docs"]},
            "example-button--one": {"type": "story", "title": "Example/Button", "tags": []},
            "example-intro--docs": {"type": "docs", "title": "Example/Intro", "tags": []},
        },
    }
    assert summarize_index(index) == {
        "story_count": 3,
        "component_count": 2,
        "play_story_count": 1,
        "autodocs_count": 1,
        "mdx_count": 1,
        "example_story_count": 1,
        "example_docs_count": 1,
        "version": 5,
    }
