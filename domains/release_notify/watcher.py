"""
Release watcher: one polling cycle and the loop that repeats it.

A cycle selects new manifests, groups them by day, and for each day
aggregates the records, sends one notification and, only after a
successful send, records the day's manifests in the ledger.
"""

import threading
import time
from typing import Optional

from loguru import logger

from app.models.schemas import CycleReport
from app.utils.config import Settings
from app.utils.errors import WatchmanError
from domains.release_notify.aggregator import aggregate_group
from domains.release_notify.grouper import group_by_day
from domains.release_notify.ledger import SentLedger
from domains.release_notify.notifier import Notifier, Transport
from domains.release_notify.selector import CandidateSelector


class ReleaseWatcher:
    """Release drop polling orchestrator."""

    def __init__(self, settings: Settings, source, transport: Transport, ledger: SentLedger):
        """
        Initialize release watcher.

        Args:
            settings: Application settings
            source: Remote listing/retrieval client
            transport: Notification transport
            ledger: Sent-files ledger
        """
        self.settings = settings
        self.source = source
        self.ledger = ledger
        self.selector = CandidateSelector(source, ledger, settings.remote.pattern)
        self.notifier = Notifier(settings.notify, source, transport)

    @property
    def period_seconds(self) -> float:
        return self.settings.remote.period * 60

    def run_cycle(self) -> CycleReport:
        """Run one full cycle; remote failures abort the cycle or a single group."""
        logger.info("Starting FTP file check...")
        report = CycleReport()

        try:
            candidates = self.selector.select()
        except WatchmanError as e:
            logger.error(f"Error fetching new files: {e}")
            report.aborted = True
            return report

        report.candidates = len(candidates)
        if not candidates:
            logger.info("No new files to send.")
            return report

        groups = group_by_day(candidates)

        for date_key in sorted(groups):
            entries = groups[date_key]

            try:
                records = aggregate_group(self.source, entries)
            except WatchmanError as e:
                logger.error(f"Error processing JSON files for date {date_key}: {e}")
                report.groups_failed += 1
                continue

            if not self.notifier.dispatch(records, date_key):
                report.groups_failed += 1
                continue

            report.groups_sent += 1
            committed = self.ledger.commit(entries)
            report.entries_committed += committed
            if committed == len(entries):
                logger.success(f"Marked {committed} file(s) for date {date_key} as sent")

        logger.info(
            f"Cycle complete: {report.groups_sent} group(s) sent, "
            f"{report.groups_failed} failed, {report.entries_committed} file(s) recorded"
        )
        return report

    def run(self, stop_event: Optional[threading.Event] = None):
        """
        Run cycles until ``stop_event`` is set.

        Cycles never overlap: the next one starts one period after the
        previous one started, or right away if it overran.
        """
        stop_event = stop_event or threading.Event()
        logger.info(f"Release watcher started (period: {self.settings.remote.period} min)")

        while not stop_event.is_set():
            started = time.monotonic()

            try:
                self.run_cycle()
            except Exception as e:
                logger.exception(f"Unexpected cycle failure: {e}")

            remaining = self.period_seconds - (time.monotonic() - started)
            if remaining > 0:
                stop_event.wait(remaining)

        logger.info("Release watcher stopped.")
