"""
app/sync/fetcher.py

Pulls one bounded batch from the upstream source and maps it to SyncRecord.

Parsing is all-or-nothing: one malformed item rejects the whole batch so the
writer never sees a list with gaps.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Protocol

from app.domain.sync_record import SyncRecord
from app.sync.errors import ParseError
from app.sync.retry import RetryExecutor

logger = logging.getLogger(__name__)


class RawPageSource(Protocol):
    def fetch_raw_page(self, origin: str, page_size: int) -> Any:
        ...


class SourceFetcher:
    """
    Fetches raw pages through the retry executor and parses them strictly.
    """

    def __init__(self, client: RawPageSource, retry_executor: RetryExecutor) -> None:
        self._client = client
        self._retry_executor = retry_executor

    def fetch_batch(self, origin: str, page_size: int) -> list[SyncRecord]:
        """
        Return at most ``page_size`` records for ``origin``, newest first.

        Raises:
            ValueError: invalid origin or page size.
            RetryExhaustedError: transient transport failures outlasted retries.
            TransportError: non-retryable upstream failure.
            ParseError: malformed payload (never retried).
        """

        origin = (origin or "").strip()
        if not origin:
            raise ValueError("origin must be a non-empty identifier.")
        if page_size < 1:
            raise ValueError(f"page_size must be positive, got {page_size}.")

        raw = self._retry_executor.execute_with_retry(
            lambda: self._client.fetch_raw_page(origin, page_size),
            description=f"fetch_raw_page origin={origin}",
        )
        records = parse_records(raw, origin)
        logger.info("Fetched %d record(s) from upstream origin=%s", len(records), origin)
        return records


def parse_records(raw: Any, origin: str) -> list[SyncRecord]:
    if not isinstance(raw, list):
        raise ParseError(f"Expected a JSON array from upstream, got {type(raw).__name__}.")
    return [_parse_record(item, index, origin) for index, item in enumerate(raw)]


def parse_timestamp(value: str) -> datetime:
    """
    Parse an ISO-8601 timestamp into a zone-naive datetime.

    A trailing ``Z`` is stripped and any explicit offset is dropped without
    conversion.
    """

    normalized = value.strip()
    if normalized[-1:] in {"Z", "z"}:
        normalized = normalized[:-1]
    parsed = datetime.fromisoformat(normalized)
    return parsed.replace(tzinfo=None)


def _parse_record(item: Any, index: int, origin: str) -> SyncRecord:
    if not isinstance(item, dict):
        raise ParseError(f"Item {index}: expected an object, got {type(item).__name__}.")

    record_id = _require(item, "id", int, index)
    created_raw = _require(item, "created_at", str, index)
    try:
        created_at = parse_timestamp(created_raw)
    except ValueError as exc:
        raise ParseError(f"Item {index}: invalid created_at {created_raw!r}.") from exc

    return SyncRecord(
        id=record_id,
        title=_require(item, "title", str, index),
        created_at=created_at,
        state=_require(item, "state", str, index),
        source_url=_require(item, "html_url", str, index),
        origin=origin,
    )


def _require(item: dict[str, Any], field_name: str, expected: type, index: int) -> Any:
    if field_name not in item or item[field_name] is None:
        raise ParseError(f"Item {index}: missing required field '{field_name}'.")
    value = item[field_name]
    # bool is a subclass of int
    if isinstance(value, bool) or not isinstance(value, expected):
        raise ParseError(
            f"Item {index}: field '{field_name}' must be {expected.__name__}, "
            f"got {type(value).__name__}."
        )
    return value
