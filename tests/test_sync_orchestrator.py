"""
tests/test_sync_orchestrator.py

End-to-end sync runs over fakes: idempotence, conservation, stage failures.
"""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from app.domain.sync_record import SyncOutcome
from app.sync.backoff import BackoffPolicy
from app.sync.errors import (
    ParseError,
    RetryExhaustedError,
    StoreUnavailableError,
    SyncCancelledError,
    SyncFailure,
    TransportError,
)
from app.sync.fetcher import SourceFetcher
from app.sync.orchestrator import SyncOrchestrator
from app.sync.retry import CancellationToken, RetryExecutor
from app.sync.writer import DedupWriter

FIXED_NOW = datetime(2026, 1, 1, 9, 30, tzinfo=timezone.utc)
ORIGIN = "acme/widgets"


def _orchestrator(client, store, sleep, *, max_retries: int = 3) -> SyncOrchestrator:
    executor = RetryExecutor(BackoffPolicy(base_delay_ms=1000, max_retries=max_retries), sleep=sleep)
    return SyncOrchestrator(
        SourceFetcher(client, executor),
        DedupWriter(store),
        clock=lambda: FIXED_NOW,
    )


# ---------------------------------------------------------------------------
# Scenarios
# ---------------------------------------------------------------------------


def test_first_run_inserts_everything_second_run_skips_everything(
    make_client, make_issue, memory_store, recording_sleep
) -> None:
    client = make_client([[make_issue(i) for i in range(1, 6)]])
    orchestrator = _orchestrator(client, memory_store, recording_sleep)

    first = orchestrator.run_sync(ORIGIN, 5)
    second = orchestrator.run_sync(ORIGIN, 5)

    assert (first.fetched_count, first.inserted_count, first.skipped_count) == (5, 5, 0)
    assert (second.fetched_count, second.inserted_count, second.skipped_count) == (5, 0, 5)
    assert second.duplicate_count == 5
    assert len(memory_store.records) == 5


def test_outcome_carries_origin_and_timestamp(make_client, make_issue, memory_store, recording_sleep) -> None:
    outcome = _orchestrator(make_client([[make_issue(1)]]), memory_store, recording_sleep).run_sync(ORIGIN, 5)

    assert outcome.origin == ORIGIN
    assert outcome.timestamp == FIXED_NOW


def test_new_upstream_items_are_picked_up_on_next_run(make_client, make_issue, memory_store, recording_sleep) -> None:
    client = make_client([[make_issue(2), make_issue(1)], [make_issue(3), make_issue(2)]])
    orchestrator = _orchestrator(client, memory_store, recording_sleep)

    orchestrator.run_sync(ORIGIN, 2)
    second = orchestrator.run_sync(ORIGIN, 2)

    assert second.inserted_count == 1
    assert second.skipped_count == 1
    assert sorted(memory_store.records) == [1, 2, 3]


def test_transient_failures_are_retried_inside_the_run(make_client, make_issue, memory_store, recording_sleep) -> None:
    client = make_client([TransportError("timeout"), TransportError("reset"), [make_issue(1)]])

    outcome = _orchestrator(client, memory_store, recording_sleep).run_sync(ORIGIN, 5)

    assert outcome.inserted_count == 1
    assert recording_sleep.delays == [1.0, 2.0]


def test_partial_write_failure_keeps_conservation(make_client, make_issue, memory_store, recording_sleep) -> None:
    memory_store.fail_insert_ids = {2}
    client = make_client([[make_issue(1), make_issue(2), make_issue(3)]])

    outcome = _orchestrator(client, memory_store, recording_sleep).run_sync(ORIGIN, 3)

    assert outcome.fetched_count == 3
    assert outcome.inserted_count == 2
    assert outcome.failed_count == 1
    assert outcome.skipped_count == 1
    assert outcome.fetched_count == outcome.inserted_count + outcome.skipped_count


# ---------------------------------------------------------------------------
# Stage failures
# ---------------------------------------------------------------------------


def test_parse_failure_aborts_before_any_write(make_client, make_issue, memory_store, recording_sleep) -> None:
    broken = make_issue(2)
    del broken["id"]
    client = make_client([[make_issue(1), broken]])

    with pytest.raises(SyncFailure) as ctx:
        _orchestrator(client, memory_store, recording_sleep).run_sync(ORIGIN, 5)

    assert ctx.value.stage == SyncFailure.FETCH
    assert not ctx.value.data_fetched
    assert ctx.value.fetched_count == 0
    assert isinstance(ctx.value.__cause__, ParseError)
    assert memory_store.exists_calls == []
    assert memory_store.insert_calls == []


def test_exhausted_retries_abort_the_run(make_client, memory_store, recording_sleep) -> None:
    client = make_client([TransportError("down")])

    with pytest.raises(SyncFailure) as ctx:
        _orchestrator(client, memory_store, recording_sleep, max_retries=1).run_sync(ORIGIN, 5)

    assert ctx.value.stage == SyncFailure.FETCH
    assert isinstance(ctx.value.__cause__, RetryExhaustedError)
    assert len(client.calls) == 2
    assert memory_store.insert_calls == []


def test_non_retryable_transport_error_aborts_the_run(make_client, memory_store, recording_sleep) -> None:
    client = make_client([TransportError("not found", retryable=False, status_code=404)])

    with pytest.raises(SyncFailure) as ctx:
        _orchestrator(client, memory_store, recording_sleep).run_sync(ORIGIN, 5)

    assert isinstance(ctx.value.__cause__, TransportError)
    assert len(client.calls) == 1


def test_store_down_surfaces_write_stage_failure(make_client, make_issue, memory_store, recording_sleep) -> None:
    memory_store.unavailable = True
    client = make_client([[make_issue(1), make_issue(2)]])

    with pytest.raises(SyncFailure) as ctx:
        _orchestrator(client, memory_store, recording_sleep).run_sync(ORIGIN, 5)

    assert ctx.value.stage == SyncFailure.WRITE
    assert ctx.value.data_fetched
    assert ctx.value.fetched_count == 2
    assert isinstance(ctx.value.__cause__, StoreUnavailableError)


def test_run_is_not_retried_as_a_whole(make_client, make_issue, memory_store, recording_sleep) -> None:
    memory_store.unavailable = True
    client = make_client([[make_issue(1)]])

    with pytest.raises(SyncFailure):
        _orchestrator(client, memory_store, recording_sleep).run_sync(ORIGIN, 5)

    assert len(client.calls) == 1


def test_cancellation_propagates_unwrapped(make_client, memory_store) -> None:
    token = CancellationToken()
    token.cancel()
    client = make_client([TransportError("timeout")])

    with pytest.raises(SyncCancelledError):
        _orchestrator(client, memory_store, token.sleep).run_sync(ORIGIN, 5)

    assert memory_store.insert_calls == []


# ---------------------------------------------------------------------------
# SyncOutcome contract
# ---------------------------------------------------------------------------


def test_outcome_rejects_counts_that_do_not_add_up() -> None:
    with pytest.raises(ValueError):
        SyncOutcome(origin=ORIGIN, fetched_count=5, inserted_count=3, skipped_count=1, duplicate_count=1)


def test_outcome_rejects_skipped_breakdown_mismatch() -> None:
    with pytest.raises(ValueError):
        SyncOutcome(origin=ORIGIN, fetched_count=2, inserted_count=0, skipped_count=2, duplicate_count=1)


def test_outcome_timestamp_defaults_to_utc_now() -> None:
    outcome = SyncOutcome(origin=ORIGIN, fetched_count=0, inserted_count=0, skipped_count=0)
    assert outcome.timestamp.tzinfo is not None
