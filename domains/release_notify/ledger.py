"""Sent-files ledger: the only durable state of the watchman."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, Set

from loguru import logger

from app.models.schemas import RemoteEntry
from app.utils.errors import LedgerIOError
from app.utils.helpers import parse_ledger_line


class SentLedger:
    """
    Append-only record of ``<name>|<YYYY-MM-DD>`` lines.

    Lines that do not have that shape are never matched and never rewritten.
    """

    def __init__(self, path: Path):
        self.path = path

    def load(self) -> Set[str]:
        """
        Return every well-formed ledger line.

        A missing file is an empty ledger.

        Raises:
            LedgerIOError: if the file exists but cannot be read
        """
        try:
            with self.path.open("r", encoding="utf-8") as handle:
                lines = handle.read().splitlines()
        except FileNotFoundError:
            return set()
        except OSError as e:
            raise LedgerIOError("Failed to read sent files log", entity=str(self.path), cause=e) from e

        known: Set[str] = set()
        for number, line in enumerate(lines, 1):
            if parse_ledger_line(line) is None:
                if line:
                    logger.warning(f"Ignoring malformed ledger line {number} in {self.path}: {line!r}")
                continue
            known.add(line)
        return known

    def contains(self, entry: RemoteEntry) -> bool:
        """Whether ``entry`` (name and modification day) was already sent."""
        return entry.ledger_line in self.load()

    def commit(self, entries: Iterable[RemoteEntry]) -> int:
        """
        Append one line per entry, creating the file if needed.

        A write failure is logged and stops the append; lines written before
        it stay recorded.

        Returns:
            Number of lines written
        """
        written = 0
        try:
            with self.path.open("a", encoding="utf-8") as handle:
                for entry in entries:
                    handle.write(entry.ledger_line + "\n")
                    handle.flush()
                    written += 1
        except OSError as e:
            error = LedgerIOError("Failed to write to sent files log", entity=str(self.path), cause=e)
            logger.error(f"{error} (after {written} line(s))")
            return written

        return written
