"""
Data models for filter synchronization.

Defines Pydantic models for resolved versions, per-source outcomes and the
overall result of a sync run.

Example:
    >>> from poe2filter.core.sync.models import VersionRecord
    >>> record = VersionRecord(
    ...     download_url="https://api.github.com/repos/o/r/zipball/v1",
    ...     watermark="v1",
    ...     note="First release",
    ... )
    >>> record.watermark
    'v1'
"""

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field


class VersionRecord(BaseModel):
    """
    The latest version of a source, as reported by the remote.

    Attributes:
        download_url: URL of the zip archive for this version
        watermark: Opaque version marker, only ever compared for equality
        note: Optional human-readable note (release body or commit message)
    """

    download_url: str = Field(..., min_length=1, description="Archive download URL")
    watermark: str = Field(..., min_length=1, description="Opaque version marker")
    note: str | None = Field(default=None, description="Release notes or commit message")

    model_config = ConfigDict(frozen=True)


class SourceStatus(str, Enum):
    """What happened to a source during a sync run."""

    UPDATED = "updated"
    UP_TO_DATE = "up_to_date"
    NO_ARTIFACT = "no_artifact"


class SourceOutcome(BaseModel):
    """
    Result of processing a single source.

    Attributes:
        descriptor: Canonical descriptor string
        status: Whether the source was installed, skipped or had nothing published
        previous: Watermark recorded before this run, if any
        watermark: Watermark resolved during this run (None if no artifact)
        note: Note from the resolved version, if any
        files_written: Number of filter files installed
    """

    descriptor: str
    status: SourceStatus
    previous: str | None = None
    watermark: str | None = None
    note: str | None = None
    files_written: int = 0


class SyncResult(BaseModel):
    """
    Result of a complete sync run.

    Only produced when every source was processed and the state file saved.

    Attributes:
        outcomes: Per-source outcomes, in processing order
        cleared: Whether the store was cleared before processing
        state_file: Path of the saved state file
    """

    outcomes: list[SourceOutcome] = Field(default_factory=list)
    cleared: bool = False
    state_file: Path | None = None

    @property
    def updated(self) -> list[SourceOutcome]:
        """Outcomes for sources that were installed during this run."""
        return [o for o in self.outcomes if o.status == SourceStatus.UPDATED]

    @property
    def files_written(self) -> int:
        """Total number of filter files written across all sources."""
        return sum(o.files_written for o in self.outcomes)


__all__ = ["VersionRecord", "SourceStatus", "SourceOutcome", "SyncResult"]
