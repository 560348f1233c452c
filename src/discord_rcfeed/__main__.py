"""CLI entry point for Discord RC Feed.

This module formats wiki recent changes read from a file or stdin and posts
them to the configured Discord webhook.

Usage:
    python -m discord_rcfeed [options] [input]
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import logging.config
import sys
from typing import NoReturn, TextIO

from pydantic import ValidationError

from discord_rcfeed import __version__
from discord_rcfeed.channels.discord import DiscordWebhookChannel
from discord_rcfeed.config import Settings, clear_settings_cache, get_settings
from discord_rcfeed.pipeline import FeedResult, build_formatter, read_events, run_feed

# Application info
APP_NAME = "Discord RC Feed"
APP_VERSION = __version__

# Exit codes
EXIT_SUCCESS = 0
EXIT_ERROR = 1
EXIT_CONFIG_ERROR = 2
EXIT_INTERRUPTED = 130


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the CLI.

    Returns:
        Configured ArgumentParser instance.
    """
    parser = argparse.ArgumentParser(
        prog="discord-rcfeed",
        description="Format wiki recent changes as Discord webhook messages.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m discord_rcfeed changes.json          Post changes to the webhook
  python -m discord_rcfeed --dry-run < rc.jsonl  Print payloads instead
  python -m discord_rcfeed --config-check        Validate config and exit
        """,
    )

    parser.add_argument(
        "input",
        nargs="?",
        type=argparse.FileType("r", encoding="utf-8"),
        default=sys.stdin,
        help="Recent changes as JSON list, API response or JSON lines (default: stdin)",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {APP_VERSION}",
    )

    parser.add_argument(
        "--config-check",
        action="store_true",
        help="Validate configuration and exit",
    )

    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default=None,
        help="Override logging level (default: from settings)",
    )

    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print payloads to stdout instead of posting them",
    )

    return parser


def configure_logging(level: str) -> None:
    """Configure logging for the application.

    Logs go to stderr so that payloads printed in dry-run mode stay clean.

    Args:
        level: Logging level string (DEBUG, INFO, etc.)
    """
    config = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "standard": {
                "format": "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
            "detailed": {
                "format": (
                    "%(asctime)s [%(levelname)s] %(name)s (%(filename)s:%(lineno)d): %(message)s"
                ),
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "level": level,
                "formatter": "detailed" if level == "DEBUG" else "standard",
                "stream": "ext://sys.stderr",
            },
        },
        "root": {
            "level": level,
            "handlers": ["console"],
        },
        # Quieter logging for noisy libraries
        "loggers": {
            "httpx": {"level": "WARNING"},
            "httpcore": {"level": "WARNING"},
        },
    }
    logging.config.dictConfig(config)


def print_config_summary(settings: Settings, dry_run: bool) -> None:
    """Print a summary of the configuration to stderr.

    Args:
        settings: Application settings.
        dry_run: Whether dry-run mode is enabled.
    """
    summary = settings.redacted_summary()
    print("Configuration:", file=sys.stderr)
    print(f"  Site: {summary['sitename']} ({summary['server']})", file=sys.stderr)
    print(f"  Webhook: {summary['webhook_url']}", file=sys.stderr)
    print(f"  Omitted types: {summary['omit_types']}", file=sys.stderr)
    print(f"  Log Level: {summary['log_level']}", file=sys.stderr)
    print(f"  Dry Run: {dry_run}", file=sys.stderr)


def validate_config() -> Settings | None:
    """Validate and load configuration.

    Returns:
        Settings instance if valid, None if invalid.
    """
    try:
        # Clear cache to force reload
        clear_settings_cache()
        return get_settings()
    except ValidationError as e:
        print("Configuration validation failed:", file=sys.stderr)
        for error in e.errors():
            field = ".".join(str(loc) for loc in error["loc"])
            msg = error["msg"]
            print(f"  {field}: {msg}", file=sys.stderr)
        return None


def run_config_check(settings: Settings) -> int:
    """Run configuration check and exit.

    Args:
        settings: Validated settings.

    Returns:
        Exit code (0 for success).
    """
    print("Configuration is valid!")
    print_config_summary(settings, dry_run=settings.dry_run)
    if settings.discord.enabled:
        print("  Discord webhook: configured")
    else:
        print("  Discord webhook: not configured (dry-run only)")
    return EXIT_SUCCESS


async def run(settings: Settings, source: TextIO, dry_run: bool, out: TextIO) -> int:
    """Format and deliver all events from ``source``.

    Args:
        settings: Application settings.
        source: Input stream of change records.
        dry_run: Whether to print payloads instead of posting them.
        out: Output stream for printed payloads.

    Returns:
        Exit code.
    """
    logger = logging.getLogger(__name__)

    channel = None
    if not dry_run:
        if settings.discord.webhook_url is None:
            logger.error("DISCORD_WEBHOOK_URL is not set; use --dry-run to print payloads")
            return EXIT_CONFIG_ERROR
        channel = DiscordWebhookChannel(
            settings.discord.webhook_url.get_secret_value(),
            timeout=settings.discord.timeout,
        )

    formatter = build_formatter(settings)
    result = FeedResult()
    try:
        events = read_events(source, result)
        await run_feed(events, formatter, channel, out, result)
    except json.JSONDecodeError as e:
        logger.error(f"Input is not valid JSON: {e}")
        return EXIT_ERROR

    return EXIT_ERROR if result.failed else EXIT_SUCCESS


def main(argv: list[str] | None = None) -> NoReturn:
    """Main entry point for the CLI.

    Args:
        argv: Command line arguments (defaults to sys.argv[1:]).
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    # Validate configuration first
    settings = validate_config()
    if settings is None:
        sys.exit(EXIT_CONFIG_ERROR)

    log_level = args.log_level or settings.log_level
    configure_logging(log_level)

    if args.config_check:
        sys.exit(run_config_check(settings))

    dry_run = args.dry_run or settings.dry_run
    print_config_summary(settings, dry_run)

    try:
        exit_code = asyncio.run(run(settings, args.input, dry_run, sys.stdout))
    except KeyboardInterrupt:
        exit_code = EXIT_INTERRUPTED
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
