"""
app/sync package marker.
"""

from app.sync.backoff import BackoffPolicy
from app.sync.errors import (
    ParseError,
    RecordWriteError,
    RetryExhaustedError,
    StoreUnavailableError,
    SyncCancelledError,
    SyncError,
    SyncFailure,
    TransportError,
)
from app.sync.fetcher import SourceFetcher
from app.sync.orchestrator import SyncOrchestrator
from app.sync.retry import CancellationToken, RetryExecutor
from app.sync.writer import DedupWriter, RecordStore

__all__ = [
    "BackoffPolicy",
    "CancellationToken",
    "DedupWriter",
    "ParseError",
    "RecordStore",
    "RecordWriteError",
    "RetryExecutor",
    "RetryExhaustedError",
    "SourceFetcher",
    "StoreUnavailableError",
    "SyncCancelledError",
    "SyncError",
    "SyncFailure",
    "SyncOrchestrator",
    "TransportError",
]
