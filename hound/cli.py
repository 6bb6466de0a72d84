"""Hound command line entrypoint.

Usage:
    hound                              # Show the activity history
    hound -c stats                     # List repositories, projects and issues
    hound -c setup                     # Create the configuration file interactively
    hound -ghu plouc -ju jdoe          # Override configured users
"""

from __future__ import annotations

import argparse
import asyncio
import sys
import time
from datetime import datetime
from pathlib import Path
from typing import List, Optional, TextIO

from hound.core.config import CONFIG_FILE_PATH, Settings, load_settings
from hound.core.errors import AggregationTimeoutError, ConfigurationError
from hound.core.logging import configure_logging, get_logger
from hound.services import (
    Renderer,
    StatsService,
    TimelineService,
    build_sources,
    history_operations,
    render_timeline,
    stats_operations,
)
from hound.wizard import run_setup

logger = get_logger("cli")

COMMANDS = ("history", "stats", "setup")
VERSION = "0.1"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="hound",
        description="Display a developer's activity stream from GitHub, GitLab and Jira",
    )
    parser.add_argument(
        "--command", "-c",
        choices=COMMANDS,
        default="history",
        help="the command to run (default: history)",
    )
    parser.add_argument("--github-user", "-ghu", default=None, help="the github user")
    parser.add_argument("--jira-user", "-ju", default=None, help="the jira user name")
    parser.add_argument(
        "--jira-feed-user", "-jfu",
        default=None,
        help="the jira user name to filter activity feed",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=CONFIG_FILE_PATH,
        help=f"configuration file (default: {CONFIG_FILE_PATH})",
    )
    parser.add_argument("--no-color", action="store_true", help="disable colored output")
    return parser


def apply_overrides(settings: Settings, args: argparse.Namespace) -> Settings:
    """Command line users take precedence over configured ones."""
    update = {}
    if args.github_user:
        update["GITHUB"] = settings.GITHUB.model_copy(update={"user": args.github_user})
    jira = {}
    if args.jira_user:
        jira["user"] = args.jira_user
    if args.jira_feed_user:
        jira["activity_user"] = args.jira_feed_user
    if jira:
        update["JIRA"] = settings.JIRA.model_copy(update=jira)
    return settings.model_copy(update=update) if update else settings


def check_config(config_path: Path, args: argparse.Namespace) -> Settings:
    settings = apply_overrides(load_settings(config_path), args)
    if not config_path.exists() and not settings.any_active:
        raise ConfigurationError(f"Config file {config_path} doesn't exist")
    missing = settings.missing()
    if missing:
        raise ConfigurationError(f"Missing configuration keys: {', '.join(missing)}", missing)
    return settings


async def run_history(settings: Settings, renderer: Renderer, out: TextIO) -> None:
    operations = history_operations(build_sources(settings))
    service = TimelineService(
        operations,
        fetch_timeout=settings.FETCH_TIMEOUT_SECONDS,
        aggregation_timeout=settings.AGGREGATION_TIMEOUT_SECONDS,
    )
    timeline = await service.build()
    for line in render_timeline(timeline.events, renderer, datetime.now().astimezone()):
        print(line, file=out)
    if not timeline.complete:
        print(renderer.error(str(AggregationTimeoutError(timeline.received, timeline.expected))), file=out)


async def run_stats(settings: Settings, renderer: Renderer, out: TextIO) -> None:
    service = StatsService(
        stats_operations(build_sources(settings)),
        fetch_timeout=settings.FETCH_TIMEOUT_SECONDS,
        aggregation_timeout=settings.AGGREGATION_TIMEOUT_SECONDS,
    )
    for stat in await service.collect():
        for line in renderer.stat(stat):
            print(line, file=out)


def main(argv: Optional[List[str]] = None, out: Optional[TextIO] = None) -> int:
    """Main entry point; configuration problems stop before any fetch and exit 0."""
    args = build_parser().parse_args(argv)
    out = out or sys.stdout
    configure_logging()
    renderer = Renderer(color=not args.no_color and out.isatty())

    print(renderer.banner(VERSION), file=out)
    started_at = time.monotonic()
    try:
        if args.command == "setup":
            print(renderer.notice("hound interactive setup"), file=out)
            run_setup(args.config)
            print(renderer.notice("Config file successfully created!"), file=out)
            return 0

        try:
            settings = check_config(args.config, args)
        except ConfigurationError as exc:
            logger.info(f"Configuration check failed: {exc}")
            print(renderer.error(str(exc)), file=out)
            if not exc.missing and not exc.invalid:
                print(renderer.notice("please run hound setup"), file=out)
            return 0
        configure_logging(settings.LOG_LEVEL, settings.LOG_FILE)

        if args.command == "stats":
            asyncio.run(run_stats(settings, renderer, out))
        else:
            asyncio.run(run_history(settings, renderer, out))
        return 0
    finally:
        elapsed = time.monotonic() - started_at
        print(f"\n{renderer.notice(f'processed in {elapsed:.3f}s')}", file=out)


if __name__ == "__main__":
    sys.exit(main())
