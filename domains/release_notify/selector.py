"""
Candidate selection for the release drop.

Lists the remote directory and keeps entries that match the configured
name pattern and are not yet in the sent-files ledger.
"""

from typing import List, Protocol

from loguru import logger

from app.models.schemas import RemoteEntry
from app.utils.helpers import compile_name_pattern, format_rfc3339
from domains.release_notify.ledger import SentLedger


class RemoteLister(Protocol):
    def list_entries(self) -> List[RemoteEntry]: ...


class CandidateSelector:
    """Finds release manifests that have not been announced yet."""

    def __init__(self, source: RemoteLister, ledger: SentLedger, pattern: str):
        self.source = source
        self.ledger = ledger
        self.pattern = pattern

    def select(self) -> List[RemoteEntry]:
        """
        Return new candidates in listing order.

        Raises:
            RemoteConnectionError, AuthError, DirectoryError, ListError:
                the remote listing failed; the ledger is untouched
            LedgerIOError: the ledger exists but cannot be read
        """
        entries = self.source.list_entries()
        matcher = compile_name_pattern(self.pattern)
        already_sent = self.ledger.load()

        candidates = []
        for entry in entries:
            if not matcher.match(entry.name):
                continue
            if entry.ledger_line in already_sent:
                continue

            logger.info(f"Found new file: {entry.name} (Modified: {format_rfc3339(entry.modified)})")
            candidates.append(entry)

        return candidates
