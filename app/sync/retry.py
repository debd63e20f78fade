"""
app/sync/retry.py

Bounded retry loop around fallible upstream calls.

Only failures classified as retryable are re-attempted; everything else
propagates on the first occurrence. The wait between attempts goes through a
cancellable sleep so a cancelled run stops immediately instead of retrying.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from datetime import timedelta
from typing import TypeVar

from app.logging_utils import log_event
from app.sync.backoff import BackoffPolicy
from app.sync.errors import RetryExhaustedError, SyncCancelledError, TransportError

logger = logging.getLogger(__name__)

T = TypeVar("T")

_ONE_MS = timedelta(milliseconds=1)


def is_retryable_transport_error(exc: BaseException) -> bool:
    return isinstance(exc, TransportError) and exc.retryable


class CancellationToken:
    """
    Thread-safe cancellation flag with an interruptible sleep.
    """

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def sleep(self, seconds: float) -> None:
        """
        Wait for ``seconds`` or until cancelled, whichever comes first.

        Raises SyncCancelledError when cancellation arrives.
        """

        if self._event.wait(timeout=max(0.0, seconds)):
            raise SyncCancelledError("Sync cancelled while waiting to retry.")


class RetryExecutor:
    """
    Applies a BackoffPolicy across at most ``max_retries + 1`` attempts.
    """

    def __init__(
        self,
        policy: BackoffPolicy,
        *,
        sleep: Callable[[float], None] | None = None,
        is_retryable: Callable[[BaseException], bool] | None = None,
    ) -> None:
        self._policy = policy
        self._sleep = sleep or CancellationToken().sleep
        self._is_retryable = is_retryable or is_retryable_transport_error

    @property
    def policy(self) -> BackoffPolicy:
        return self._policy

    def execute_with_retry(self, operation: Callable[[], T], *, description: str = "operation") -> T:
        """
        Run ``operation`` until it succeeds or attempts run out.

        Raises:
            RetryExhaustedError: every attempt failed with a retryable error.
            SyncCancelledError: cancelled during a backoff wait.
            Exception: any non-retryable error, unchanged.
        """

        max_attempts = self._policy.max_attempts
        errors: list[Exception] = []

        for attempt in range(max_attempts):
            try:
                return operation()
            except SyncCancelledError:
                raise
            except Exception as exc:
                if not self._is_retryable(exc):
                    raise
                errors.append(exc)

            if attempt >= self._policy.max_retries:
                break

            delay = self._policy.delay(attempt)
            log_event(
                logger,
                logging.WARNING,
                "retry_scheduled",
                operation=description,
                attempt=attempt + 1,
                max_attempts=max_attempts,
                delay_ms=delay // _ONE_MS,
                error=str(errors[-1]),
            )
            self._sleep(delay.total_seconds())

        log_event(
            logger,
            logging.ERROR,
            "retry_exhausted",
            operation=description,
            attempts=max_attempts,
            error=str(errors[-1]),
        )
        raise RetryExhaustedError(max_attempts, errors[-1]) from errors[-1]
