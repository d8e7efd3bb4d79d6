"""Publisher data types.

Dataclasses recording the outcome of each edition, each object upload and
the run as a whole.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from pathlib import Path

from geolite_publisher.lib.maxmind.types import Edition


class PipelineStep(StrEnum):
    """Steps inside the per-edition failure boundary."""

    FETCH = "fetch"
    EXTRACT = "extract"
    PACKAGE = "package"
    PUBLISH = "publish"


@dataclass(frozen=True)
class UploadResult:
    """Outcome of a single object-store PUT.

    Attributes:
        key: Object key within the bucket.
        success: Whether the store answered with a 2xx status.
        status_code: HTTP status, or None if no response was received.
        error: Error description on failure.
    """

    key: str
    success: bool
    status_code: int | None = None
    error: str | None = None


@dataclass
class EditionResult:
    """Tracks the outcome of publishing one edition.

    Attributes:
        edition: The edition this result is for.
        success: True once the npm publish succeeded.
        failed_step: Step that failed, or None on success.
        error: Error message of the failure, or None.
        artifact: Extracted ``.mmdb`` path, once known.
        bundle_dir: npm bundle directory, once built.
        uploads: Object-store results; None when the secondary destination
            was skipped.
    """

    edition: Edition
    success: bool = False
    failed_step: PipelineStep | None = None
    error: str | None = None
    artifact: Path | None = None
    bundle_dir: Path | None = None
    uploads: list[UploadResult] | None = None

    @property
    def secondary_skipped(self) -> bool:
        """Whether no object-store upload was attempted."""
        return self.uploads is None

    @property
    def uploads_succeeded(self) -> int:
        """Number of successful object-store uploads."""
        return sum(1 for upload in self.uploads or [] if upload.success)


@dataclass
class RunSummary:
    """Result of one publish run across all editions."""

    version: str
    started_at: datetime
    finished_at: datetime | None = None
    results: list[EditionResult] = field(default_factory=list)

    @property
    def succeeded(self) -> int:
        return sum(1 for result in self.results if result.success)

    @property
    def failed(self) -> int:
        return sum(1 for result in self.results if not result.success)

    @property
    def duration_seconds(self) -> float:
        if self.finished_at is None:
            return 0.0
        return (self.finished_at - self.started_at).total_seconds()
