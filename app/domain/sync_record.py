"""
app/domain/sync_record.py

Domain models for record synchronization.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone


@dataclass(frozen=True)
class SyncRecord:
    """
    One upstream record in its internal shape.

    ``id`` is the store primary key and never changes once written.
    """

    id: int
    title: str
    created_at: datetime
    state: str
    source_url: str
    origin: str


@dataclass(frozen=True)
class WriteBatchResult:
    """
    Outcome of writing one batch through the dedup writer.

    ``skipped_count`` covers both duplicates and records whose insert failed.
    """

    inserted_records: list[SyncRecord] = field(default_factory=list)
    duplicate_count: int = 0
    failed_count: int = 0

    @property
    def inserted_count(self) -> int:
        return len(self.inserted_records)

    @property
    def skipped_count(self) -> int:
        return self.duplicate_count + self.failed_count


@dataclass(frozen=True)
class SyncOutcome:
    """
    Summary of one sync run.
    """

    origin: str
    fetched_count: int
    inserted_count: int
    skipped_count: int
    duplicate_count: int = 0
    failed_count: int = 0
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __post_init__(self) -> None:
        if self.fetched_count != self.inserted_count + self.skipped_count:
            raise ValueError(
                "fetched_count must equal inserted_count + skipped_count "
                f"(fetched={self.fetched_count}, inserted={self.inserted_count}, "
                f"skipped={self.skipped_count})."
            )
        if self.skipped_count != self.duplicate_count + self.failed_count:
            raise ValueError(
                "skipped_count must equal duplicate_count + failed_count "
                f"(skipped={self.skipped_count}, duplicates={self.duplicate_count}, "
                f"failed={self.failed_count})."
            )
