"""
Manifest aggregation for one day group.

Downloads every manifest of the group, parses each as a JSON array of
release records and concatenates them in file order. Any failure discards
the whole group.
"""

from typing import List, Protocol, Sequence

from loguru import logger
from pydantic import TypeAdapter, ValidationError

from app.models.schemas import ReleaseRecord, RemoteEntry
from app.utils.errors import ParseError, WatchmanError

_MANIFEST = TypeAdapter(List[ReleaseRecord])


class RemoteRetriever(Protocol):
    def retrieve(self, remote_name: str) -> bytes: ...


def parse_manifest(raw: bytes, name: str) -> List[ReleaseRecord]:
    """
    Parse manifest bytes into release records.

    Raises:
        ParseError: if the content is not a JSON array of records
    """
    try:
        return _MANIFEST.validate_json(raw)
    except ValidationError as e:
        raise ParseError("Failed to parse JSON from file", entity=name, cause=e) from e


def aggregate_group(source: RemoteRetriever, entries: Sequence[RemoteEntry]) -> List[ReleaseRecord]:
    """
    Collect the release records of every manifest in a group.

    Args:
        source: Remote file retriever
        entries: Manifests of one day, in listing order

    Returns:
        Records in file order, then in-file order

    Raises:
        WatchmanError: the first retrieval or parse failure; nothing partial
            is returned
    """
    records: List[ReleaseRecord] = []

    for entry in entries:
        try:
            raw = source.retrieve(entry.name)
        except WatchmanError as e:
            if e.entity is None:
                e.entity = entry.name
            raise

        parsed = parse_manifest(raw, entry.name)
        logger.debug(f"Parsed {len(parsed)} record(s) from {entry.name}")
        records.extend(parsed)

    return records
