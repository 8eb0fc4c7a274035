"""Tests for output/guard.py: output directory validation and cleaning."""
from __future__ import annotations

import os
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from showcase.core.exceptions import ConfigurationError, OutputDirError
from showcase.output import guard
from showcase.output.guard import prepare_output_dir, resolve_output_dir


@pytest.fixture
def fs_spies(monkeypatch: pytest.MonkeyPatch) -> tuple[MagicMock, MagicMock]:
    listing = MagicMock(wraps=guard._is_non_empty_dir)
    clean = MagicMock(wraps=guard._clean)
    monkeypatch.setattr(guard, "_is_non_empty_dir", listing)
    monkeypatch.setattr(guard, "_clean", clean)
    return listing, clean


# ---------------------------------------------------------------------------
# Rejections
# ---------------------------------------------------------------------------


async def test_empty_string_rejected_without_filesystem_access(fs_spies) -> None:
    listing, clean = fs_spies
    with pytest.raises(OutputDirError, match="current directory"):
        await prepare_output_dir("")
    listing.assert_not_called()
    clean.assert_not_called()


async def test_root_rejected_without_filesystem_access(fs_spies) -> None:
    listing, clean = fs_spies
    with pytest.raises(OutputDirError) as exc_info:
        await prepare_output_dir("/")
    assert exc_info.value.code == "OUTPUT_DIR_ROOT"
    listing.assert_not_called()
    clean.assert_not_called()


async def test_relative_path_resolving_to_root_rejected(
    fs_spies, monkeypatch: pytest.MonkeyPatch
) -> None:
    listing, _ = fs_spies
    monkeypatch.chdir("/")
    with pytest.raises(OutputDirError):
        await prepare_output_dir(".")
    depth = len(Path.cwd().parts) + 3
    with pytest.raises(OutputDirError):
        await prepare_output_dir("/".join([".."] * depth))
    listing.assert_not_called()


def test_output_dir_error_is_configuration_error() -> None:
    with pytest.raises(ConfigurationError):
        resolve_output_dir("")


# ---------------------------------------------------------------------------
# Resolution and cleaning
# ---------------------------------------------------------------------------


async def test_relative_path_is_resolved(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)
    resolved = await prepare_output_dir("out")
    assert resolved == tmp_path / "out"
    assert resolved.is_absolute()


async def test_non_empty_directory_is_emptied(tmp_path: Path, fs_spies) -> None:
    _, clean = fs_spies
    out = tmp_path / "out"
    (out / "nested").mkdir(parents=True)
    (out / "nested" / "file.txt").write_text("x", encoding="utf-8")
    (out / "top.txt").write_text("y", encoding="utf-8")

    resolved = await prepare_output_dir(str(out))

    assert resolved == out
    assert out.is_dir()
    assert os.listdir(out) == []
    clean.assert_called_once()


async def test_empty_directory_left_alone(tmp_path: Path, fs_spies) -> None:
    _, clean = fs_spies
    out = tmp_path / "out"
    out.mkdir()
    await prepare_output_dir(str(out))
    assert out.is_dir()
    clean.assert_not_called()


async def test_missing_directory_is_not_created(tmp_path: Path, fs_spies) -> None:
    _, clean = fs_spies
    out = tmp_path / "missing"
    resolved = await prepare_output_dir(str(out))
    assert resolved == out
    assert not out.exists()
    clean.assert_not_called()


async def test_existing_file_rejected_and_kept(tmp_path: Path, fs_spies) -> None:
    _, clean = fs_spies
    out = tmp_path / "out"
    out.write_text("not a directory", encoding="utf-8")

    with pytest.raises(OutputDirError) as exc_info:
        await prepare_output_dir(str(out))

    assert exc_info.value.code == "OUTPUT_DIR_NOT_A_DIRECTORY"
    assert out.read_text(encoding="utf-8") == "not a directory"
    clean.assert_not_called()
