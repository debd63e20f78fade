"""
app/services/sync_service.py

Service-layer entry points for record synchronization.
"""

from __future__ import annotations

import logging
from functools import lru_cache

from sqlalchemy.orm import Session

from app.config import (
    RetrySettings,
    SyncSettings,
    get_github_settings,
    get_retry_settings,
    get_sync_settings,
)
from app.connectors import BaseSourceClient, GitHubIssuesClient
from app.domain.sync_record import SyncOutcome, SyncRecord
from app.repositories.synced_record_repository import SqlAlchemyRecordStore
from app.sync import (
    BackoffPolicy,
    CancellationToken,
    DedupWriter,
    RetryExecutor,
    SourceFetcher,
    SyncOrchestrator,
)

logger = logging.getLogger(__name__)


class RecordSyncService:
    """
    Wires the sync engine to a database session per call.
    """

    def __init__(
        self,
        *,
        client: BaseSourceClient,
        sync_settings: SyncSettings,
        retry_settings: RetrySettings,
    ) -> None:
        self._client = client
        self._sync_settings = sync_settings
        self._policy = BackoffPolicy(
            base_delay_ms=retry_settings.base_delay_ms,
            max_retries=retry_settings.max_retries,
        )

    def run_sync(
        self,
        *,
        db: Session,
        origin: str | None = None,
        page_size: int | None = None,
        cancellation: CancellationToken | None = None,
    ) -> SyncOutcome:
        """
        Run one sync against ``origin`` (defaults to the configured origin).
        """

        resolved_origin = (origin or self._sync_settings.origin or "").strip()
        if not resolved_origin:
            raise ValueError("No origin given and SYNC_ORIGIN is not configured.")
        resolved_page_size = page_size if page_size is not None else self._sync_settings.page_size

        token = cancellation or CancellationToken()
        fetcher = SourceFetcher(self._client, RetryExecutor(self._policy, sleep=token.sleep))
        writer = DedupWriter(SqlAlchemyRecordStore(db))
        return SyncOrchestrator(fetcher, writer).run_sync(resolved_origin, resolved_page_size)

    def list_records(self, *, db: Session) -> list[SyncRecord]:
        return SqlAlchemyRecordStore(db).list_all()

    def record_exists(self, *, db: Session, record_id: int) -> bool:
        return SqlAlchemyRecordStore(db).exists(record_id)


@lru_cache(maxsize=1)
def get_record_sync_service() -> RecordSyncService:
    """
    Build and cache the record sync service.
    """

    return RecordSyncService(
        client=GitHubIssuesClient(settings=get_github_settings()),
        sync_settings=get_sync_settings(),
        retry_settings=get_retry_settings(),
    )
