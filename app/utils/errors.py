"""
Exception hierarchy for the release watchman.

Every error inherits from WatchmanError so the polling loop can catch
broadly while individual steps catch narrowly. Each exception carries the
entity it concerns (a remote file name or a group's date key) and the
underlying cause, so the log line always says what failed and why.
"""

from __future__ import annotations


class WatchmanError(Exception):
    """Base exception for all watchman errors."""

    def __init__(
        self,
        message: str,
        *,
        entity: str | None = None,
        cause: BaseException | None = None,
    ) -> None:
        self.entity = entity
        self.cause = cause
        super().__init__(message)

    def __str__(self) -> str:
        message = super().__str__()
        if self.cause is not None:
            return f"{message}: {self.cause}"
        return message


class RemoteConnectionError(WatchmanError):
    """Could not reach the FTP server."""


class AuthError(WatchmanError):
    """The FTP server rejected the credentials."""


class DirectoryError(WatchmanError):
    """Changing into the configured remote directory failed."""


class ListError(WatchmanError):
    """Listing the remote directory failed."""


class RetrieveError(WatchmanError):
    """Downloading a remote file failed."""


class ParseError(WatchmanError):
    """A manifest could not be parsed into release records."""


class SendError(WatchmanError):
    """The notification could not be delivered."""


class LedgerIOError(WatchmanError):
    """Reading or appending the sent-files ledger failed."""
