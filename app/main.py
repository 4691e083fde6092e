"""
Release Watchman - Main Entry Point

Polls an FTP drop for release manifests and mails one summary per build
day. Runs forever at the configured period, or once with ``--once``.
"""

import argparse
import signal
import sys
import threading
from pathlib import Path
from typing import Optional

import yaml
from loguru import logger
from pydantic import ValidationError

from app.utils.config import Settings, load_settings
from app.utils.ftp_client import FtpClient
from app.utils.mailer import SmtpTransport
from domains.release_notify.ledger import SentLedger
from domains.release_notify.watcher import ReleaseWatcher

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>"
)


def configure_logging(level: str, log_file: Optional[Path] = None):
    """Send logs to stdout and, optionally, a rotating file."""
    logger.remove()
    logger.add(sys.stdout, format=LOG_FORMAT, level=level)
    if log_file is not None:
        logger.add(log_file, format=LOG_FORMAT, level=level, rotation="10 MB", retention=5)


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    """Parse CLI arguments."""
    parser = argparse.ArgumentParser(
        description="Watch an FTP drop for release manifests and email a summary per day.",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="YAML configuration file (default: ./config.yaml).",
    )
    parser.add_argument(
        "--once",
        action="store_true",
        help="Run a single polling cycle and exit.",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Override the configured log level (e.g. DEBUG).",
    )
    return parser.parse_args(argv)


def build_watcher(settings: Settings) -> ReleaseWatcher:
    """Wire the watcher to its FTP, SMTP and ledger collaborators."""
    return ReleaseWatcher(
        settings=settings,
        source=FtpClient(settings.remote),
        transport=SmtpTransport(settings.notify),
        ledger=SentLedger(settings.ledger_path),
    )


def main(argv: Optional[list[str]] = None) -> int:
    """Entry point for the CLI."""
    args = parse_args(argv)
    configure_logging(args.log_level.upper() if args.log_level else "INFO")

    try:
        settings = load_settings(args.config)
    except (OSError, ValidationError, yaml.YAMLError) as e:
        logger.error(f"Failed to load config: {e}")
        return 1

    configure_logging(args.log_level.upper() if args.log_level else settings.log_level, settings.log_file)
    watcher = build_watcher(settings)

    if args.once:
        report = watcher.run_cycle()
        return 1 if report.aborted else 0

    stop_event = threading.Event()

    def _signal_handler(signum, frame):  # noqa: D401
        logger.info(f"Received signal {signum}, shutting down.")
        stop_event.set()

    signal.signal(signal.SIGINT, _signal_handler)
    signal.signal(signal.SIGTERM, _signal_handler)

    watcher.run(stop_event)
    return 0


if __name__ == "__main__":  # pragma: no cover - CLI bridge
    sys.exit(main())
