"""
FTP client for the release drop.

Provides:
- One short-lived connection per operation (no pooling)
- Directory listing via MLSD with a LIST fallback
- File retrieval into memory
- Translation of ftplib/socket failures into watchman errors
"""

import ftplib
import io
import re
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Iterator, List, Optional

from loguru import logger

from app.models.schemas import RemoteEntry
from app.utils.config import RemoteSettings
from app.utils.errors import (
    AuthError,
    DirectoryError,
    ListError,
    RemoteConnectionError,
    RetrieveError,
)
from app.utils.helpers import now_utc

_UNIX_LIST = re.compile(
    r"^(?P<kind>[-dlbcps])\S{9}\S*\s+\d+\s+\S+\s+\S+\s+(?P<size>\d+)\s+"
    r"(?P<month>[A-Za-z]{3})\s+(?P<day>\d{1,2})\s+(?P<when>\d{4}|\d{1,2}:\d{2})\s+(?P<name>.+)$"
)
_DOS_LIST = re.compile(
    r"^(?P<date>\d{2}-\d{2}-\d{2}(?:\d{2})?)\s+(?P<time>\d{1,2}:\d{2}[AP]M)\s+"
    r"(?P<size><DIR>|\d+)\s+(?P<name>.+)$"
)
_MONTHS = {
    name: number
    for number, name in enumerate(
        ["jan", "feb", "mar", "apr", "may", "jun", "jul", "aug", "sep", "oct", "nov", "dec"],
        start=1,
    )
}


def parse_mlsd_time(value: str) -> datetime:
    """Parse an MLSD ``modify`` fact (``YYYYMMDDHHMMSS[.fff]``, UTC)."""
    return datetime.strptime(value[:14], "%Y%m%d%H%M%S").replace(tzinfo=timezone.utc)


def parse_list_line(line: str, now: Optional[datetime] = None) -> Optional[RemoteEntry]:
    """
    Parse one ``LIST`` line in Unix or DOS format.

    Args:
        line: Raw listing line
        now: Reference time for year-less Unix dates

    Returns:
        RemoteEntry for regular files, None for directories, links and
        anything unrecognised
    """
    now = now or now_utc()

    match = _UNIX_LIST.match(line)
    if match:
        if match["kind"] != "-":
            return None
        month = _MONTHS.get(match["month"].lower())
        if month is None:
            return None
        day = int(match["day"])
        when = match["when"]
        try:
            if ":" in when:
                hour, minute = (int(part) for part in when.split(":"))
                modified = datetime(now.year, month, day, hour, minute, tzinfo=timezone.utc)
                # Year-less dates are within the last six months.
                if modified > now:
                    modified = modified.replace(year=now.year - 1)
            else:
                modified = datetime(int(when), month, day, tzinfo=timezone.utc)
        except ValueError:
            return None
        return RemoteEntry(name=match["name"], modified=modified, size=int(match["size"]))

    match = _DOS_LIST.match(line)
    if match:
        if match["size"] == "<DIR>":
            return None
        date_format = "%m-%d-%Y" if len(match["date"]) == 10 else "%m-%d-%y"
        modified = datetime.strptime(
            f"{match['date']} {match['time']}", f"{date_format} %I:%M%p"
        ).replace(tzinfo=timezone.utc)
        return RemoteEntry(name=match["name"], modified=modified, size=int(match["size"]))

    return None


class FtpClient:
    """Remote listing and retrieval over FTP."""

    def __init__(self, settings: RemoteSettings):
        """
        Initialize FTP client.

        Args:
            settings: Remote endpoint, credentials and directory
        """
        self.settings = settings

    @contextmanager
    def session(self, timeout: float) -> Iterator[ftplib.FTP]:
        """Connect, log in and change into the release directory."""
        server = f"{self.settings.server}:{self.settings.port}"
        conn = ftplib.FTP(timeout=timeout, encoding=self.settings.encoding)

        try:
            logger.debug(f"Connecting to FTP server {server}...")
            conn.connect(self.settings.server, self.settings.port)
        except (OSError, EOFError, ftplib.Error) as e:
            conn.close()
            raise RemoteConnectionError(
                "Failed to connect to FTP server", entity=server, cause=e
            ) from e

        try:
            try:
                conn.login(self.settings.user, self.settings.password)
            except (ftplib.Error, OSError, EOFError) as e:
                raise AuthError("Failed to login to FTP server", entity=server, cause=e) from e

            try:
                conn.cwd(self.settings.dir)
            except (ftplib.Error, OSError, EOFError) as e:
                raise DirectoryError(
                    "Failed to change directory", entity=self.settings.dir, cause=e
                ) from e

            yield conn
        finally:
            try:
                conn.quit()
            except (ftplib.Error, OSError, EOFError):
                conn.close()

    def list_entries(self) -> List[RemoteEntry]:
        """
        List regular files in the release directory.

        Returns:
            Entries in server order

        Raises:
            RemoteConnectionError, AuthError, DirectoryError, ListError
        """
        with self.session(self.settings.list_timeout) as conn:
            try:
                return self._list_mlsd(conn)
            except ftplib.error_perm as e:
                logger.debug(f"MLSD not supported ({e}), falling back to LIST")
            except (ftplib.Error, OSError, EOFError, UnicodeDecodeError) as e:
                raise ListError("Failed to list files", entity=self.settings.dir, cause=e) from e

            try:
                return self._list_plain(conn)
            except (ftplib.Error, OSError, EOFError, UnicodeDecodeError) as e:
                raise ListError("Failed to list files", entity=self.settings.dir, cause=e) from e

    def _list_mlsd(self, conn: ftplib.FTP) -> List[RemoteEntry]:
        entries = []
        for name, facts in conn.mlsd(facts=["type", "modify", "size"]):
            if facts.get("type", "file") != "file" or "modify" not in facts:
                continue
            try:
                modified = parse_mlsd_time(facts["modify"])
                size = int(facts["size"]) if facts.get("size") else None
            except ValueError:
                logger.warning(f"Skipping {name}: unreadable MLSD facts {facts}")
                continue
            entries.append(RemoteEntry(name=name, modified=modified, size=size))
        return entries

    def _list_plain(self, conn: ftplib.FTP) -> List[RemoteEntry]:
        lines: List[str] = []
        conn.retrlines("LIST", lines.append)

        now = now_utc()
        entries = []
        for line in lines:
            entry = parse_list_line(line, now)
            if entry is None:
                logger.debug(f"Skipping listing line: {line}")
                continue
            entries.append(entry)
        return entries

    def retrieve(self, remote_name: str) -> bytes:
        """
        Download ``remote_name`` (relative to the release directory).

        Raises:
            RemoteConnectionError, AuthError, DirectoryError, RetrieveError
        """
        buffer = io.BytesIO()
        with self.session(self.settings.retrieve_timeout) as conn:
            try:
                conn.retrbinary(f"RETR {remote_name}", buffer.write)
            except (ftplib.Error, OSError, EOFError, UnicodeError) as e:
                raise RetrieveError("Failed to retrieve file", entity=remote_name, cause=e) from e

        logger.debug(f"Retrieved {remote_name} ({buffer.tell()} bytes)")
        return buffer.getvalue()
