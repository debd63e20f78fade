"""
app/connectors/base.py

Base upstream client abstraction and shared HTTP mechanics.

A client performs exactly one HTTP attempt per call and classifies failures;
retrying is the caller's job.
"""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from typing import Any

import requests

from app.sync.errors import ParseError, TransportError

logger = logging.getLogger(__name__)

RETRYABLE_STATUS_CODES = {429, 500, 502, 503, 504}

# Connection dropped, timed out or cut off mid-body.
_TRANSIENT_REQUEST_ERRORS = (
    requests.Timeout,
    requests.ConnectionError,
    requests.exceptions.ChunkedEncodingError,
    requests.exceptions.ContentDecodingError,
)


class BaseSourceClient(ABC):
    """
    Client interface for reading raw record pages from an upstream source.
    """

    source: str

    def __init__(
        self,
        *,
        source: str,
        timeout_seconds: float,
        rate_limit_per_second: float = 0.0,
        session: requests.Session | None = None,
    ) -> None:
        self.source = source
        self._session = session or requests.Session()
        self._timeout_seconds = timeout_seconds
        self._min_request_interval_seconds = (
            1.0 / rate_limit_per_second if rate_limit_per_second > 0 else 0.0
        )
        self._last_request_monotonic: float = 0.0

    @abstractmethod
    def fetch_raw_page(self, origin: str, page_size: int) -> Any:
        """
        Return one raw JSON page of records for ``origin``.
        """

    def _request_json(
        self,
        *,
        method: str,
        url: str,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> Any:
        """
        Execute one HTTP request and return parsed JSON.
        """

        response = self._request(method=method, url=url, params=params, headers=headers)
        try:
            return response.json()
        except ValueError as exc:
            raise ParseError(f"{self.source}: response was not valid JSON.") from exc

    def _request(
        self,
        *,
        method: str,
        url: str,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> requests.Response:
        """
        Execute one HTTP request with rate limiting and failure classification.
        """

        self._apply_rate_limit()
        try:
            response = self._session.request(
                method=method,
                url=url,
                params=params,
                headers=headers,
                timeout=self._timeout_seconds,
            )
        except _TRANSIENT_REQUEST_ERRORS as exc:
            logger.warning("Upstream request failed source=%s url=%s error=%s", self.source, url, exc)
            raise TransportError(f"{self.source}: {type(exc).__name__} calling {url}.") from exc
        except requests.RequestException as exc:
            logger.error("Upstream request rejected source=%s url=%s error=%s", self.source, url, exc)
            raise TransportError(
                f"{self.source}: {type(exc).__name__} calling {url}.",
                retryable=False,
            ) from exc

        status_code = response.status_code
        if status_code in RETRYABLE_STATUS_CODES:
            logger.warning(
                "Upstream request returned retryable status source=%s status=%s url=%s",
                self.source,
                status_code,
                url,
            )
            raise TransportError(
                f"{self.source}: retryable HTTP status {status_code}.",
                status_code=status_code,
            )

        try:
            response.raise_for_status()
        except requests.HTTPError as exc:
            logger.error(
                "Upstream request failed source=%s status=%s url=%s error=%s",
                self.source,
                status_code,
                url,
                exc,
            )
            raise TransportError(
                f"{self.source}: non-retryable HTTP status {status_code}.",
                retryable=False,
                status_code=status_code,
            ) from exc
        return response

    def _apply_rate_limit(self) -> None:
        """
        Enforce minimum interval between outbound requests.
        """

        if self._min_request_interval_seconds <= 0:
            return

        now = time.monotonic()
        elapsed = now - self._last_request_monotonic
        remaining = self._min_request_interval_seconds - elapsed
        if remaining > 0:
            time.sleep(remaining)
        self._last_request_monotonic = time.monotonic()
