"""Tests for the showcase-build command line."""
from __future__ import annotations

import pytest

from showcase.__version__ import __version__
from showcase.cli import _parse_arguments, build_request_from_args, main


@pytest.fixture(autouse=True)
def _offline(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    monkeypatch.setenv("SHOWCASE_DISABLE_TELEMETRY", "1")
    monkeypatch.setenv("SHOWCASE_CACHE_DIR", str(tmp_path / "cache"))


def test_arguments_map_to_request() -> None:
    args = _parse_arguments(
        ["-o", "dist", "-c", "conf", "--ignore-preview", "--stats-json", "--debug-config", "--quiet"]
    )
    request = build_request_from_args(args)
    assert request.output_dir == "dist"
    assert request.config_dir == "conf"
    assert request.ignore_preview is True
    assert request.stats_json is True
    assert request.debug_config is True
    assert request.quiet is True


def test_stats_json_directory_argument() -> None:
    request = build_request_from_args(_parse_arguments(["--stats-json", "reports"]))
    assert request.stats_json == "reports"
    assert build_request_from_args(_parse_arguments([])).stats_json is None


def test_version(capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit) as exc_info:
        _parse_arguments(["--version"])
    assert exc_info.value.code == 0
    assert __version__ in capsys.readouterr().out


def test_main_succeeds(project, builders, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(project.root)
    code = main(["-o", "showcase-static", "-c", ".showcase", "--quiet"])
    assert code == 0
    assert (project.output_dir / "index.html").is_file()
    assert (project.output_dir / "index.json").is_file()


def test_main_reports_preview_failure(project, builders, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(project.root)
    builders.preview.error = RuntimeError("preview exploded")
    assert main(["-o", "showcase-static", "-c", ".showcase", "--quiet"]) == 1


def test_main_rejects_empty_output_dir(
    project, builders, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.chdir(project.root)
    assert main(["-o", "", "--log-level", "ERROR"]) == 1
    assert builders.events == []
    assert "OUTPUT_DIR_EMPTY" in capsys.readouterr().err
