#!/usr/bin/env python3
"""HitExport CLI — export all hits of one site to a published CSV.gz.

Usage:
    python scripts/run_export.py --tenant-id 1 --tenant-code example --sqlite-db hits.sqlite3
    python scripts/run_export.py --tenant-id 1 --tenant-code example \
        --source-url https://stats.example.com/api/hits --resume-cursor 48211
    python scripts/run_export.py ... --webhook-url https://hooks.example.com/export-done
"""

from __future__ import annotations

import argparse
import logging
import signal
import sys
import threading
from pathlib import Path

# Ensure project root is on sys.path for consistent import resolution
_ROOT = Path(__file__).resolve().parent.parent
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

from config.defaults import (  # noqa: E402
    DEFAULT_LOG_LEVEL,
    PACING_DELAY_SECONDS,
    PAGE_SIZE,
    START_CURSOR,
)
from config.settings import ExportConfig  # noqa: E402
from hitexport.models.hits import Tenant  # noqa: E402
from hitexport.notifiers import BaseNotifier, LogNotifier, WebhookNotifier  # noqa: E402
from hitexport.pipeline import ExportPipeline  # noqa: E402
from hitexport.sources import BaseHitSource, HTTPHitSource, SQLiteHitSource  # noqa: E402
from hitexport.utils.logging_utils import configure_logging  # noqa: E402


def build_arg_parser() -> argparse.ArgumentParser:
    """Build the argparse argument parser for a single export run."""
    parser = argparse.ArgumentParser(
        prog="run_export",
        description="HitExport — stream a site's hits into a gzip-compressed CSV",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )

    # ── Tenant ──────────────────────────────────────────────────────────────────
    parser.add_argument("--tenant-id", type=int, required=True, help="Numeric site id")
    parser.add_argument(
        "--tenant-code",
        type=str,
        required=True,
        help="Site code; the artifact is written to export-<code>.csv.gz",
    )
    parser.add_argument(
        "--contact",
        type=str,
        default=None,
        help="Address the completion notice is meant for (passed to the notifier)",
    )
    parser.add_argument(
        "--resume-cursor",
        type=int,
        default=START_CURSOR,
        help="Export only hits with an id greater than this value",
    )

    # ── Source (exactly one) ────────────────────────────────────────────────────
    source = parser.add_mutually_exclusive_group()
    source.add_argument(
        "--source-url",
        type=str,
        default=None,
        help="HTTP endpoint returning pages of hits (default: $EXPORT_SOURCE_URL)",
    )
    source.add_argument(
        "--sqlite-db",
        type=str,
        default=None,
        help="SQLite database with a 'hits' table",
    )
    parser.add_argument(
        "--api-token",
        type=str,
        default=None,
        help="Bearer token for --source-url (default: $EXPORT_API_TOKEN)",
    )

    # ── Paging and output ───────────────────────────────────────────────────────
    parser.add_argument("--page-size", type=int, default=PAGE_SIZE, help="Hits per page fetch")
    parser.add_argument(
        "--pacing-delay",
        type=float,
        default=PACING_DELAY_SECONDS,
        help="Seconds to pause between pages; 0 disables pacing",
    )
    parser.add_argument(
        "--export-dir",
        type=str,
        default=None,
        help="Directory for published artifacts (default: $EXPORT_DIR or system temp dir)",
    )

    # ── Notification and logging ───────────────────────────────────────────────
    parser.add_argument(
        "--webhook-url",
        type=str,
        default=None,
        help="POST the completion notice here (default: $EXPORT_WEBHOOK_URL, else log it)",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=DEFAULT_LOG_LEVEL,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity level",
    )

    return parser


def args_to_config(args: argparse.Namespace) -> ExportConfig:
    """Convert parsed CLI arguments to an ExportConfig instance.

    Flags left unset keep the environment-derived defaults.
    """
    config = ExportConfig(
        page_size=args.page_size,
        pacing_delay=args.pacing_delay,
        log_level=args.log_level,
    )
    if args.export_dir:
        config.export_dir = args.export_dir
    if args.source_url:
        config.source_url = args.source_url
    if args.api_token:
        config.api_token = args.api_token
    if args.webhook_url:
        config.webhook_url = args.webhook_url
    return config


def build_source(args: argparse.Namespace, config: ExportConfig) -> BaseHitSource:
    """Build the hit source selected on the command line."""
    if args.sqlite_db:
        return SQLiteHitSource(args.sqlite_db, site_id=args.tenant_id)
    if config.source_url:
        return HTTPHitSource(
            config.source_url,
            api_token=config.api_token,
            max_retries=config.http_max_retries,
            backoff_base=config.http_backoff_base,
            request_timeout=config.http_request_timeout,
        )
    raise SystemExit("run_export: one of --source-url, --sqlite-db or $EXPORT_SOURCE_URL is required")


def build_notifier(config: ExportConfig) -> BaseNotifier:
    if config.webhook_url:
        return WebhookNotifier(config.webhook_url, timeout=config.notify_timeout)
    return LogNotifier()


def main() -> None:
    """CLI entrypoint — parse arguments, build config, run one export."""
    parser = build_arg_parser()
    args = parser.parse_args()

    configure_logging(log_level=args.log_level)
    logger = logging.getLogger("hitexport.run_export")

    config = args_to_config(args)
    tenant = Tenant(id=args.tenant_id, code=args.tenant_code, contact=args.contact)

    # SIGTERM/SIGINT stop the export before the next page fetch
    cancel = threading.Event()

    def _request_stop(signum: int, frame: object) -> None:  # pragma: no cover
        logger.warning("Signal %d received; export will stop before the next page", signum)
        cancel.set()

    signal.signal(signal.SIGTERM, _request_stop)
    signal.signal(signal.SIGINT, _request_stop)

    with build_source(args, config) as source:
        pipeline = ExportPipeline(source, notifier=build_notifier(config), config=config)
        outcome = pipeline.run(tenant, args.resume_cursor, cancel=cancel)

    if outcome.ok:
        logger.info(
            "Export complete: %s (%d rows, %s MiB, sha256=%s)",
            outcome.path,
            outcome.rows,
            outcome.size,
            outcome.digest,
        )
        return

    if outcome.published:
        logger.error("Export published to %s but unverified: %s", outcome.path, outcome.cause)
    else:
        logger.error("Export failed during %s: %s", outcome.stage, outcome.cause)
    sys.exit(1)


if __name__ == "__main__":
    main()
