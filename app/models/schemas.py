"""
Pydantic models for the release watchman.

Shared data models across the application.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from app.utils.helpers import day_key, format_ledger_line


# =====================================================
# Remote Models
# =====================================================

class RemoteEntry(BaseModel):
    """A file as listed by the remote directory."""
    model_config = ConfigDict(frozen=True)

    name: str
    modified: datetime
    size: Optional[int] = None

    @property
    def day(self) -> str:
        """Calendar day of the modification time."""
        return day_key(self.modified)

    @property
    def ledger_line(self) -> str:
        """Identity used by the sent-files ledger."""
        return format_ledger_line(self.name, self.modified)


# =====================================================
# Manifest Models
# =====================================================

class ReleaseRecord(BaseModel):
    """One build artifact described by a release manifest."""
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    target_folder: str = Field(default="", alias="TargetFolder")
    target_file: str = Field(default="", alias="TargetFile")
    zip_file_name: str = Field(default="", alias="ZipFileName")
    hash: str = Field(default="", alias="Hash")
    platform: str = Field(default="", alias="Platform")
    major: int = Field(default=0, alias="Major")
    minor: int = Field(default=0, alias="Minor")
    patch: int = Field(default=0, alias="Patch")
    build: int = Field(default=0, alias="Build")
    build_counter: int = Field(default=0, alias="TeamcityBuildCounter")
    tag: str = Field(default="", alias="Tag")
    sha: str = Field(default="", alias="Sha")
    short_sha: str = Field(default="", alias="ShortSha")
    branch_name: str = Field(default="", alias="BranchName")
    when: Optional[datetime] = Field(default=None, alias="When")
    version: str = Field(default="", alias="Version")
    full_version: str = Field(default="", alias="FullVersion")

    @property
    def display_version(self) -> str:
        """Published version string, or one assembled from the components."""
        if self.version:
            return self.version
        return f"{self.major}.{self.minor}.{self.patch}.{self.build}"


# =====================================================
# Notification Models
# =====================================================

class Attachment(BaseModel):
    """File attached to a notification."""
    filename: str
    content: bytes


class CycleReport(BaseModel):
    """Outcome of one polling cycle."""
    candidates: int = 0
    groups_sent: int = 0
    groups_failed: int = 0
    entries_committed: int = 0
    aborted: bool = False
