"""
Helper utilities for the release watchman.

Small pure functions shared by the pipeline and the FTP client.
"""

import re
from datetime import date, datetime, timezone
from typing import Optional, Pattern, Tuple

DAY_FORMAT = "%Y-%m-%d"
LEDGER_SEPARATOR = "|"


def compile_name_pattern(pattern: str) -> Pattern[str]:
    """
    Compile a glob-like file name pattern.

    Only ``*`` is special (any sequence, possibly empty); everything else
    matches literally and case-sensitively. The whole name must match.

    Older deployments of this tool matched the pattern as an unanchored
    regular expression, where ``.`` matched any character and a match
    anywhere in the name counted. Here ``rel_*.json`` no longer matches
    ``old_rel_x.json.bak`` or ``rel_1xjson``.

    Args:
        pattern: Pattern such as ``rel_*.json``

    Returns:
        Compiled regular expression
    """
    parts = (re.escape(part) for part in pattern.split("*"))
    return re.compile(r"\A" + ".*".join(parts) + r"\Z", re.DOTALL)


def day_key(moment: datetime) -> str:
    """Calendar day of ``moment`` as ``YYYY-MM-DD``, without timezone conversion."""
    return moment.strftime(DAY_FORMAT)


def format_ledger_line(name: str, moment: datetime) -> str:
    """Ledger record for a remote file: ``<name>|<YYYY-MM-DD>``."""
    return f"{name}{LEDGER_SEPARATOR}{day_key(moment)}"


def parse_ledger_line(line: str) -> Optional[Tuple[str, str]]:
    """
    Split a ledger line into ``(name, day)``.

    Returns None for anything that is not a non-empty name followed by a
    single separator and a valid ``YYYY-MM-DD`` day.
    """
    name, sep, day = line.rpartition(LEDGER_SEPARATOR)
    if not sep or not name:
        return None

    try:
        date.fromisoformat(day)
    except ValueError:
        return None

    if len(day) != 10:
        return None

    return name, day


def format_rfc3339(moment: Optional[datetime]) -> str:
    """
    Render a timestamp as RFC 3339.

    UTC is written with a ``Z`` suffix; naive timestamps are rendered as-is.
    A missing timestamp renders as an empty string.
    """
    if moment is None:
        return ""

    text = moment.isoformat(timespec="seconds")
    if moment.utcoffset() is not None and moment.utcoffset().total_seconds() == 0:
        text = text[: -len("+00:00")] + "Z"
    return text


def now_utc() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)
