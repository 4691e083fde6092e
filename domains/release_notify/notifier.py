"""
Release notification rendering and dispatch.

Turns the release records of one build day into a plain-text summary,
attaches change logs and hands the message to the mail transport.
"""

import posixpath
from typing import List, Protocol, Sequence, Tuple

from loguru import logger

from app.models.schemas import Attachment, ReleaseRecord
from app.utils.config import NotifySettings
from app.utils.errors import SendError, WatchmanError
from app.utils.helpers import format_rfc3339
from domains.release_notify.aggregator import RemoteRetriever

CHANGELOG_MARKER = "info"
PLATFORM_NOT_APPLICABLE = "Not applicable"

# First match wins.
DESCRIPTION_RULES: Tuple[Tuple[str, str], ...] = (
    ("info", "Change information"),
    ("web", "Web client"),
    ("any-cpu", "Cross-platform build for win, mac, debian (requires .NET)"),
)
DEFAULT_DESCRIPTION = "Services"


class Transport(Protocol):
    def send(
        self,
        sender: str,
        recipients: Sequence[str],
        subject: str,
        body: str,
        attachments: Sequence[Attachment] = (),
    ) -> None: ...


def describe_archive(zip_file_name: str) -> str:
    """Human label for an archive, chosen by substring in rule order."""
    for needle, label in DESCRIPTION_RULES:
        if needle in zip_file_name:
            return label
    return DEFAULT_DESCRIPTION


def platform_label(platform: str) -> str:
    """``none`` means the artifact is platform independent."""
    if platform == "none":
        return PLATFORM_NOT_APPLICABLE
    return platform


def has_changelog(record: ReleaseRecord) -> bool:
    return CHANGELOG_MARKER in record.target_file


def render_body(intro: str, records: Sequence[ReleaseRecord], date_key: str) -> str:
    """
    Build the message body for one build day.

    Args:
        intro: Introductory text from configuration
        records: Aggregated release records
        date_key: Day of the group (``YYYY-MM-DD``)

    Returns:
        Plain text body
    """
    lines = [f"{intro} from {date_key}"]

    for index, record in enumerate(records, 1):
        lines.extend(
            [
                f"  File {index}:",
                f"  Description: {describe_archive(record.zip_file_name)}",
                f"  Target folder: {record.target_folder}",
                f"  File: {record.target_file}",
                f"  Archive: {record.zip_file_name}",
                f"  Platform: {platform_label(record.platform)}",
                f"  Version: {record.display_version}",
                f"  Date: {format_rfc3339(record.when)}",
                f"  Build counter: {record.build_counter}",
                "",
            ]
        )
        if has_changelog(record):
            lines.append(f"Attached change log: {record.target_file}")

    return "\n".join(lines) + "\n"


def render_subject(prefix: str, records: Sequence[ReleaseRecord], date_key: str) -> str:
    """Subject carrying the build counter of the last record in the group."""
    counter = records[-1].build_counter if records else 0
    return f"{prefix} - {counter}  {date_key}"


class Notifier:
    """Sends one release summary per build day."""

    def __init__(self, settings: NotifySettings, source: RemoteRetriever, transport: Transport):
        self.settings = settings
        self.source = source
        self.transport = transport

    def collect_attachments(self, records: Sequence[ReleaseRecord]) -> List[Attachment]:
        """Download change logs; a failed download only skips that file."""
        attachments = []

        for record in records:
            if not has_changelog(record):
                continue

            try:
                content = self.source.retrieve(record.target_file)
            except WatchmanError as e:
                logger.warning(f"Failed to download TargetFile {record.target_file}: {e}")
                continue

            attachments.append(
                Attachment(filename=posixpath.basename(record.target_file), content=content)
            )

        return attachments

    def dispatch(self, records: Sequence[ReleaseRecord], date_key: str) -> bool:
        """
        Render and send the notification for one day.

        Returns:
            True if the transport accepted the message
        """
        body = render_body(self.settings.text, records, date_key)
        subject = render_subject(self.settings.subject, records, date_key)
        attachments = self.collect_attachments(records)

        try:
            self.transport.send(
                self.settings.from_address,
                self.settings.to,
                subject,
                body,
                attachments,
            )
        except SendError as e:
            logger.error(f"Error sending email for date {date_key}: {e}")
            return False

        logger.success(
            f"Email with data for date {date_key} sent successfully "
            f"({len(records)} record(s), {len(attachments)} attachment(s))"
        )
        return True
