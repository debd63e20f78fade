"""
tests/test_github_client.py

GitHub issues client: request shape and failure classification.
"""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest
import requests

from app.config import GitHubSettings
from app.connectors.github_issues_client import GitHubIssuesClient
from app.sync.backoff import BackoffPolicy
from app.sync.errors import ParseError, SyncFailure, TransportError
from app.sync.fetcher import SourceFetcher
from app.sync.orchestrator import SyncOrchestrator
from app.sync.retry import RetryExecutor
from app.sync.writer import DedupWriter


def _response(status_code: int = 200, payload=None, *, invalid_json: bool = False) -> MagicMock:
    response = MagicMock(spec=requests.Response)
    response.status_code = status_code
    if invalid_json:
        response.json.side_effect = ValueError("Expecting value")
    else:
        response.json.return_value = payload if payload is not None else []
    if status_code >= 400:
        response.raise_for_status.side_effect = requests.HTTPError(f"{status_code} Client Error")
    else:
        response.raise_for_status.return_value = None
    return response


def _client(session: MagicMock, **overrides) -> GitHubIssuesClient:
    settings = GitHubSettings(
        base_url=overrides.pop("base_url", "https://api.github.test"),
        token=overrides.pop("token", None),
        timeout_seconds=5.0,
        rate_limit_per_second=0.0,
        user_agent="record-sync-tests",
    )
    return GitHubIssuesClient(settings=settings, session=session)


def test_fetch_raw_page_requests_newest_issues_for_origin() -> None:
    session = MagicMock(spec=requests.Session)
    session.request.return_value = _response(payload=[{"id": 1}])

    result = _client(session).fetch_raw_page("acme/widgets", 5)

    assert result == [{"id": 1}]
    kwargs = session.request.call_args.kwargs
    assert kwargs["method"] == "GET"
    assert kwargs["url"] == "https://api.github.test/repos/acme/widgets/issues"
    assert kwargs["params"] == {"per_page": 5, "sort": "created", "direction": "desc"}
    assert kwargs["timeout"] == 5.0
    assert kwargs["headers"]["Accept"] == "application/vnd.github+json"
    assert kwargs["headers"]["User-Agent"] == "record-sync-tests"
    assert "Authorization" not in kwargs["headers"]


def test_token_is_sent_as_bearer_header() -> None:
    session = MagicMock(spec=requests.Session)
    session.request.return_value = _response()

    _client(session, token="secret").fetch_raw_page("acme/widgets", 5)

    assert session.request.call_args.kwargs["headers"]["Authorization"] == "Bearer secret"


def test_origin_slashes_are_trimmed() -> None:
    session = MagicMock(spec=requests.Session)
    session.request.return_value = _response()

    _client(session).fetch_raw_page("/acme/widgets/", 5)

    assert session.request.call_args.kwargs["url"] == "https://api.github.test/repos/acme/widgets/issues"


@pytest.mark.parametrize("status_code", [429, 500, 502, 503, 504])
def test_server_side_statuses_are_retryable(status_code: int) -> None:
    session = MagicMock(spec=requests.Session)
    session.request.return_value = _response(status_code)

    with pytest.raises(TransportError) as ctx:
        _client(session).fetch_raw_page("acme/widgets", 5)

    assert ctx.value.retryable is True
    assert ctx.value.status_code == status_code


@pytest.mark.parametrize("status_code", [401, 403, 404, 422])
def test_client_errors_are_not_retryable(status_code: int) -> None:
    session = MagicMock(spec=requests.Session)
    session.request.return_value = _response(status_code)

    with pytest.raises(TransportError) as ctx:
        _client(session).fetch_raw_page("acme/widgets", 5)

    assert ctx.value.retryable is False
    assert ctx.value.status_code == status_code


@pytest.mark.parametrize(
    "exc",
    [
        requests.Timeout("read timed out"),
        requests.ConnectionError("connection reset"),
        requests.exceptions.ChunkedEncodingError("connection broken mid-body"),
        requests.exceptions.ContentDecodingError("incomplete gzip stream"),
    ],
)
def test_network_failures_are_retryable(exc: Exception) -> None:
    session = MagicMock(spec=requests.Session)
    session.request.side_effect = exc

    with pytest.raises(TransportError) as ctx:
        _client(session).fetch_raw_page("acme/widgets", 5)

    assert ctx.value.retryable is True
    assert ctx.value.__cause__ is exc


@pytest.mark.parametrize(
    "exc",
    [
        requests.TooManyRedirects("exceeded 30 redirects"),
        requests.exceptions.InvalidURL("invalid host"),
        requests.exceptions.MissingSchema("no scheme supplied"),
    ],
)
def test_malformed_request_failures_are_not_retryable(exc: Exception) -> None:
    session = MagicMock(spec=requests.Session)
    session.request.side_effect = exc

    with pytest.raises(TransportError) as ctx:
        _client(session).fetch_raw_page("acme/widgets", 5)

    assert ctx.value.retryable is False
    assert ctx.value.__cause__ is exc


def test_invalid_json_is_a_parse_error() -> None:
    session = MagicMock(spec=requests.Session)
    session.request.return_value = _response(invalid_json=True)

    with pytest.raises(ParseError):
        _client(session).fetch_raw_page("acme/widgets", 5)


def test_client_makes_exactly_one_attempt_per_call() -> None:
    session = MagicMock(spec=requests.Session)
    session.request.return_value = _response(503)

    with pytest.raises(TransportError):
        _client(session).fetch_raw_page("acme/widgets", 5)

    assert session.request.call_count == 1


# ---------------------------------------------------------------------------
# Client failures through a full sync run
# ---------------------------------------------------------------------------


def _orchestrator(client: GitHubIssuesClient, store, sleep) -> SyncOrchestrator:
    executor = RetryExecutor(BackoffPolicy(base_delay_ms=1000, max_retries=3), sleep=sleep)
    return SyncOrchestrator(SourceFetcher(client, executor), DedupWriter(store))


def test_body_cut_off_mid_stream_is_retried_during_sync(memory_store, recording_sleep, make_issue) -> None:
    session = MagicMock(spec=requests.Session)
    session.request.side_effect = [
        requests.exceptions.ChunkedEncodingError("connection broken mid-body"),
        requests.exceptions.ContentDecodingError("incomplete gzip stream"),
        _response(payload=[make_issue(1)]),
    ]

    outcome = _orchestrator(_client(session), memory_store, recording_sleep).run_sync("acme/widgets", 5)

    assert outcome.inserted_count == 1
    assert session.request.call_count == 3
    assert recording_sleep.delays == [1.0, 2.0]


def test_redirect_loop_fails_fetch_stage_without_retry(memory_store, recording_sleep) -> None:
    session = MagicMock(spec=requests.Session)
    session.request.side_effect = requests.TooManyRedirects("exceeded 30 redirects")

    with pytest.raises(SyncFailure) as ctx:
        _orchestrator(_client(session), memory_store, recording_sleep).run_sync("acme/widgets", 5)

    assert ctx.value.stage == SyncFailure.FETCH
    assert isinstance(ctx.value.__cause__, TransportError)
    assert session.request.call_count == 1
    assert recording_sleep.delays == []
    assert memory_store.insert_calls == []
