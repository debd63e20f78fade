"""
app/sync/errors.py

Error kinds raised by the sync engine.
"""

from __future__ import annotations


class SyncError(Exception):
    """
    Base class for all sync engine failures.
    """


class TransportError(SyncError):
    """
    Upstream source request failed before a usable payload arrived.

    Only errors flagged as retryable are re-attempted by the retry executor.
    """

    def __init__(self, message: str, *, retryable: bool = True, status_code: int | None = None) -> None:
        super().__init__(message)
        self.retryable = retryable
        self.status_code = status_code


class ParseError(SyncError):
    """
    Upstream payload was malformed; the whole batch is rejected.
    """


class RetryExhaustedError(SyncError):
    """
    Raised when every attempt of a retryable operation failed.

    Attributes:
        attempts: Total number of attempts made (initial + retries).
        last_error: The error raised by the final attempt.
    """

    def __init__(self, attempts: int, last_error: BaseException) -> None:
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(f"Operation failed after {attempts} attempt(s). Last error: {last_error}")


class StoreUnavailableError(SyncError):
    """
    Persistent store cannot be reached.
    """


class RecordWriteError(SyncError):
    """
    A single record could not be written while the store itself is reachable.
    """

    def __init__(self, record_id: int, message: str) -> None:
        self.record_id = record_id
        super().__init__(message)


class SyncCancelledError(SyncError):
    """
    Raised when a sync run is cancelled while waiting between retries.
    """


class SyncFailure(SyncError):
    """
    One sync run aborted at a stage; ``__cause__`` carries the original error.
    """

    FETCH = "fetch"
    WRITE = "write"

    def __init__(self, stage: str, message: str, *, fetched_count: int = 0) -> None:
        self.stage = stage
        self.fetched_count = fetched_count
        super().__init__(message)

    @property
    def data_fetched(self) -> bool:
        """
        True when records were fetched but could not be persisted.
        """

        return self.stage == self.WRITE
