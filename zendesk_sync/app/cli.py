"""Command-line interface for synchronizing articles with Zendesk."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Callable, Sequence

from ..core.http_client import HttpClient
from ..services.article_models import ArticleAttributes, SyncReport
from ..services.attributes import AttributeLoader, discover_sources
from ..services.sync_workflow import SyncEngine
from ..settings import AppConfig, ConfigurationError, load_config
from ..utils.logging import configure_logging, get_logger
from ..zendesk import ZendeskApi
from .report import save_report

LOGGER = get_logger(__name__)

EXIT_CONFIGURATION_ERROR = 2


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(
        level=logging.DEBUG if args.verbose else logging.INFO,
        structured=not args.log_plain,
    )

    handler: Callable[[argparse.Namespace], int] | None = getattr(args, "handler", None)
    if handler is None:
        parser.print_help(sys.stderr)
        return 1
    return handler(args)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="zendesk-sync", description="Publish local HTML articles to a Zendesk Help Center"
    )
    parser.add_argument("--config", help="Path to configuration file", default=None)
    parser.add_argument(
        "--log-plain",
        action="store_true",
        help="Use plain-text logs instead of JSON",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command")

    sync_parser = subparsers.add_parser("sync", help="Create or update articles in the configured section")
    sync_parser.add_argument(
        "--source",
        action="append",
        default=None,
        metavar="PATH",
        help="HTML file or directory to publish; repeatable, overrides [paths].sources",
    )
    sync_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Compute decisions without issuing any write request",
    )
    sync_parser.add_argument("--report", default=None, help="Write a JSON report of the run to this path")
    sync_parser.set_defaults(handler=_handle_sync)

    return parser


def _handle_sync(args: argparse.Namespace) -> int:
    try:
        config = load_config(args.config)
    except (ConfigurationError, FileNotFoundError) as exc:
        LOGGER.error("%s", exc, extra={"event": "cli.error", "command": "sync"})
        return EXIT_CONFIGURATION_ERROR

    sources = [Path(item) for item in args.source] if args.source else config.paths.sources
    if not sources:
        LOGGER.error(
            "No source configured, use --source or [paths].sources",
            extra={"event": "cli.error", "command": "sync"},
        )
        return EXIT_CONFIGURATION_ERROR

    loader = AttributeLoader(comments_disabled_default=config.publish.comments_disabled)
    articles = loader.load(discover_sources(sources))
    LOGGER.info(
        "Loaded %d articles",
        len(articles),
        extra={"event": "cli.command", "command": "sync", "dry_run": args.dry_run},
    )

    report = _run_sync(config, articles, dry_run=args.dry_run)

    report_path = Path(args.report) if args.report else config.paths.report
    if report_path is not None:
        save_report(report, report_path, dry_run=args.dry_run)
        LOGGER.info("Report written to %s", report_path, extra={"event": "cli.report"})
    return 0


def _run_sync(config: AppConfig, articles: list[ArticleAttributes], *, dry_run: bool) -> SyncReport:
    client = HttpClient(connection=config.connection, http_settings=config.http)
    try:
        engine = SyncEngine(ZendeskApi(client, config.publish), config.publish, dry_run=dry_run)
        return engine.run(articles)
    finally:
        client.close()


__all__ = ["main"]
