"""
app/sync/backoff.py

Exponential backoff policy for retried upstream calls.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta


@dataclass(frozen=True)
class BackoffPolicy:
    """
    Delay schedule ``base_delay_ms * 2**attempt`` across a bounded number of retries.

    ``max_retries == 0`` means a single attempt with no retries.
    """

    base_delay_ms: int = 1000
    max_retries: int = 3

    def __post_init__(self) -> None:
        if self.base_delay_ms < 0:
            raise ValueError(f"base_delay_ms must be non-negative, got {self.base_delay_ms}.")
        if self.max_retries < 0:
            raise ValueError(f"max_retries must be non-negative, got {self.max_retries}.")

    @property
    def max_attempts(self) -> int:
        return self.max_retries + 1

    def delay(self, attempt_index: int) -> timedelta:
        if attempt_index < 0:
            raise ValueError(f"attempt_index must be non-negative, got {attempt_index}.")
        return timedelta(milliseconds=self.base_delay_ms * (2**attempt_index))
