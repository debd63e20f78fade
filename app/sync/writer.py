"""
app/sync/writer.py

Check-then-insert writer that keeps the store append-only by record id.

The existence check and the insert are not atomic against other writers; the
store is assumed to have a single writer at a time. Duplicate ids inside one
batch are still collapsed locally.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Protocol

from app.domain.sync_record import SyncRecord, WriteBatchResult
from app.logging_utils import log_event
from app.sync.errors import RecordWriteError

logger = logging.getLogger(__name__)


class RecordStore(Protocol):
    """
    Persistent store interface consumed by the sync engine.

    ``exists`` and ``list_all`` raise StoreUnavailableError when the store is
    down. ``insert`` returns False when the id was already present, raises
    RecordWriteError for a single-record failure and StoreUnavailableError
    when the store is down.
    """

    def exists(self, record_id: int) -> bool:
        ...

    def insert(self, record: SyncRecord) -> bool:
        ...

    def list_all(self) -> list[SyncRecord]:
        ...


class DedupWriter:
    """
    Inserts only records whose id is not yet stored.
    """

    def __init__(self, store: RecordStore) -> None:
        self._store = store

    def write_batch(self, records: Sequence[SyncRecord]) -> WriteBatchResult:
        """
        Write ``records`` in input order, skipping ids that already exist.

        Single-record write failures are logged and counted; StoreUnavailableError
        aborts the batch.
        """

        inserted: list[SyncRecord] = []
        written_ids: set[int] = set()
        duplicates = 0
        failed = 0

        for record in records:
            if record.id in written_ids or self._store.exists(record.id):
                logger.info("Skipping duplicate record id=%s title=%r", record.id, record.title)
                duplicates += 1
                continue

            try:
                created = self._store.insert(record)
            except RecordWriteError as exc:
                failed += 1
                log_event(
                    logger,
                    logging.WARNING,
                    "record_write_failed",
                    record_id=record.id,
                    origin=record.origin,
                    error=str(exc),
                )
                continue

            if not created:
                logger.info("Record id=%s was inserted concurrently; skipping", record.id)
                duplicates += 1
                continue

            written_ids.add(record.id)
            inserted.append(record)
            logger.info("Saved new record id=%s title=%r", record.id, record.title)

        result = WriteBatchResult(
            inserted_records=inserted,
            duplicate_count=duplicates,
            failed_count=failed,
        )
        logger.info(
            "Batch write completed inserted=%d duplicates=%d failed=%d total=%d",
            result.inserted_count,
            duplicates,
            failed,
            len(records),
        )
        return result
