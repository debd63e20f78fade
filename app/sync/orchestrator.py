"""
app/sync/orchestrator.py

One sync run: fetch a batch, write it through the dedup writer, summarize.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, timezone

from app.domain.sync_record import SyncOutcome, SyncRecord, WriteBatchResult
from app.logging_utils import log_event
from app.sync.errors import (
    ParseError,
    RetryExhaustedError,
    StoreUnavailableError,
    SyncFailure,
    TransportError,
)
from app.sync.fetcher import SourceFetcher
from app.sync.writer import DedupWriter

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class SyncOrchestrator:
    """
    Composes SourceFetcher and DedupWriter into a single sequential run.

    There is no retry around the whole run; retries happen only inside the
    fetcher's transport call.
    """

    def __init__(
        self,
        fetcher: SourceFetcher,
        writer: DedupWriter,
        *,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._fetcher = fetcher
        self._writer = writer
        self._clock = clock or _utc_now

    def run_sync(self, origin: str, page_size: int) -> SyncOutcome:
        """
        Run one sync for ``origin``.

        Raises:
            SyncFailure: fetch or write stage failed; the cause is chained.
            SyncCancelledError: cancelled during a retry wait.
            ValueError: invalid origin or page size.
        """

        logger.info("Starting sync origin=%s page_size=%s", origin, page_size)

        try:
            records = self._fetcher.fetch_batch(origin, page_size)
        except (RetryExhaustedError, TransportError, ParseError) as exc:
            self._log_failure(origin, SyncFailure.FETCH, exc, fetched_count=0)
            raise SyncFailure(
                SyncFailure.FETCH,
                f"Sync for '{origin}' failed while fetching; no new data fetched: {exc}",
            ) from exc

        try:
            written = self._writer.write_batch(records)
        except StoreUnavailableError as exc:
            self._log_failure(origin, SyncFailure.WRITE, exc, fetched_count=len(records))
            raise SyncFailure(
                SyncFailure.WRITE,
                f"Sync for '{origin}' fetched {len(records)} record(s) but could not persist them: {exc}",
                fetched_count=len(records),
            ) from exc

        outcome = self._build_outcome(origin, records, written)
        log_event(
            logger,
            logging.INFO,
            "sync_completed",
            origin=origin,
            fetched=outcome.fetched_count,
            inserted=outcome.inserted_count,
            skipped=outcome.skipped_count,
            failed=outcome.failed_count,
        )
        return outcome

    def _build_outcome(
        self,
        origin: str,
        records: list[SyncRecord],
        written: WriteBatchResult,
    ) -> SyncOutcome:
        return SyncOutcome(
            origin=origin,
            fetched_count=len(records),
            inserted_count=written.inserted_count,
            skipped_count=written.skipped_count,
            duplicate_count=written.duplicate_count,
            failed_count=written.failed_count,
            timestamp=self._clock(),
        )

    @staticmethod
    def _log_failure(origin: str, stage: str, exc: Exception, *, fetched_count: int) -> None:
        log_event(
            logger,
            logging.ERROR,
            "sync_failed",
            origin=origin,
            stage=stage,
            fetched=fetched_count,
            error_type=type(exc).__name__,
            error=str(exc),
        )
