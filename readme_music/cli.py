"""Command-line entry point for the README music updater."""

from __future__ import annotations

import argparse
import logging
import signal
import sys
import threading
from functools import partial
from pathlib import Path
from types import FrameType
from typing import Sequence

from readme_music.config.settings import Settings, load_settings
from readme_music.errors import ConfigurationError
from readme_music.jobs.poll import PollDriver
from readme_music.patching.patcher import DocumentPatcher
from readme_music.providers.github import GitHubContentsClient
from readme_music.providers.lastfm import fetch_recent_track
from readme_music.schemas.document import DocumentLocator

logger = logging.getLogger("readme_music.cli")


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Keep a README music snippet in sync with Last.fm",
    )
    parser.add_argument(
        "--once",
        action="store_true",
        help="Run a single poll cycle and exit",
    )
    parser.add_argument(
        "--env-file",
        type=Path,
        default=None,
        help="Read settings from this .env file instead of ./.env",
    )
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose logging",
    )
    verbosity.add_argument(
        "--quiet",
        "-q",
        action="store_true",
        help="Only log warnings and errors",
    )
    return parser.parse_args(list(sys.argv[1:] if argv is None else argv))


def _configure_logging(args: argparse.Namespace) -> None:
    level = logging.INFO
    if args.verbose:
        level = logging.DEBUG
    elif args.quiet:
        level = logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        force=True,
    )


def build_driver(settings: Settings) -> PollDriver:
    host = GitHubContentsClient(settings)
    return PollDriver(
        settings=settings,
        fetch_status=partial(fetch_recent_track, settings),
        patcher=DocumentPatcher(host, settings.placeholder),
        locator=DocumentLocator.from_settings(settings),
    )


def install_signal_handlers(stop: threading.Event) -> None:
    def _handle(signum: int, frame: FrameType | None) -> None:
        logger.info("Received %s, exiting", signal.Signals(signum).name)
        stop.set()
        raise SystemExit(0)

    signal.signal(signal.SIGINT, _handle)
    signal.signal(signal.SIGTERM, _handle)


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)
    _configure_logging(args)

    try:
        settings = load_settings(env_file=args.env_file)
    except ConfigurationError as exc:
        logger.error("%s", exc)
        return 1

    driver = build_driver(settings)
    if args.once:
        driver.run_cycle()
        return 0

    stop = threading.Event()
    install_signal_handlers(stop)
    driver.run(stop)
    return 0


if __name__ == "__main__":
    sys.exit(main())
