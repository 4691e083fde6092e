"""Partitioning of candidates by modification day."""

from typing import Dict, Iterable, List

from loguru import logger

from app.models.schemas import RemoteEntry


def group_by_day(entries: Iterable[RemoteEntry]) -> Dict[str, List[RemoteEntry]]:
    """
    Group entries by the calendar day of their modification time.

    The timestamp is used as reported by the server. Entries keep their
    listing order within a day; callers wanting a stable day order should
    sort the keys.
    """
    groups: Dict[str, List[RemoteEntry]] = {}

    for entry in entries:
        logger.info(f"Grouping file {entry.name} by date: {entry.day}")
        groups.setdefault(entry.day, []).append(entry)

    return groups
