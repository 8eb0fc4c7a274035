"""Command line entry point for static builds."""
from __future__ import annotations

import sys
from argparse import ArgumentParser, Namespace
from typing import Iterable

import structlog

from showcase.__version__ import __version__
from showcase.core.config import BuildRequest, Settings
from showcase.core.exceptions import ShowcaseError
from showcase.orchestrator.build_static import StaticBuild
from showcase.utils.async_helpers import run_sync
from showcase.utils.logging import configure_logging

logger = structlog.get_logger(__name__)


def _parse_arguments(argv: Iterable[str]) -> Namespace:
    parser = ArgumentParser(prog="showcase-build", description="Build a static showcase bundle")
    parser.add_argument("-o", "--output-dir", default="showcase-static", help="Directory to write the bundle to")
    parser.add_argument("-c", "--config-dir", default=".showcase", help="Directory holding the main configuration")
    parser.add_argument("--ignore-preview", action="store_true", help="Build the shell only")
    parser.add_argument(
        "--stats-json",
        nargs="?",
        const=True,
        default=None,
        help="Write preview stats to the output directory, or to the given directory",
    )
    parser.add_argument("--debug-config", action="store_true", help="Log the preview builder configuration")
    parser.add_argument("--disable-telemetry", action="store_true", help="Do not send the build event")
    parser.add_argument("--quiet", action="store_true", help="Only log warnings and errors")
    parser.add_argument("--log-level", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser.parse_args(list(argv))


def build_request_from_args(args: Namespace) -> BuildRequest:
    return BuildRequest(
        output_dir=args.output_dir,
        config_dir=args.config_dir,
        ignore_preview=args.ignore_preview,
        stats_json=args.stats_json,
        debug_config=args.debug_config,
        disable_telemetry=args.disable_telemetry,
        quiet=args.quiet,
        log_level=args.log_level,
    )


def main(argv: Iterable[str] | None = None) -> int:
    args = _parse_arguments(sys.argv[1:] if argv is None else argv)
    settings = Settings.from_env()
    request = build_request_from_args(args)

    level = request.log_level or ("WARNING" if request.quiet else settings.log_level)
    configure_logging(level, json=settings.log_json)

    build = StaticBuild(request, settings=settings)
    try:
        run_sync(build.run())
    except ShowcaseError as exc:
        logger.error("build failed", error=str(exc), code=exc.code)
    except Exception:
        logger.exception("build failed")
    return build.exit_status.code


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
