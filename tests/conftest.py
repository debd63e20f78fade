"""
Shared fakes for sync engine tests: in-memory store, scripted upstream
client, and a sleep recorder standing in for the backoff wait.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import pytest

from app.domain.sync_record import SyncRecord
from app.sync.errors import RecordWriteError, StoreUnavailableError


class InMemoryRecordStore:
    def __init__(self) -> None:
        self.records: dict[int, SyncRecord] = {}
        self.fail_insert_ids: set[int] = set()
        self.unavailable = False
        self.exists_calls: list[int] = []
        self.insert_calls: list[int] = []

    def exists(self, record_id: int) -> bool:
        self.exists_calls.append(record_id)
        if self.unavailable:
            raise StoreUnavailableError("store is down")
        return record_id in self.records

    def insert(self, record: SyncRecord) -> bool:
        self.insert_calls.append(record.id)
        if self.unavailable:
            raise StoreUnavailableError("store is down")
        if record.id in self.fail_insert_ids:
            raise RecordWriteError(record.id, f"write rejected for {record.id}")
        if record.id in self.records:
            return False
        self.records[record.id] = record
        return True

    def list_all(self) -> list[SyncRecord]:
        if self.unavailable:
            raise StoreUnavailableError("store is down")
        return list(self.records.values())


class ScriptedSourceClient:
    """
    Returns or raises the scripted outcomes in order; the last one repeats.
    """

    def __init__(self, outcomes: list[Any]) -> None:
        self._outcomes = outcomes
        self.calls: list[tuple[str, int]] = []

    def fetch_raw_page(self, origin: str, page_size: int) -> Any:
        self.calls.append((origin, page_size))
        index = min(len(self.calls) - 1, len(self._outcomes) - 1)
        outcome = self._outcomes[index]
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome


class RecordingSleep:
    def __init__(self) -> None:
        self.delays: list[float] = []

    def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


def raw_issue(issue_id: int, **overrides: Any) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "id": issue_id,
        "title": f"Issue {issue_id}",
        "created_at": f"2024-03-{issue_id % 28 + 1:02d}T10:15:30Z",
        "state": "open",
        "html_url": f"https://github.com/acme/widgets/issues/{issue_id}",
    }
    payload.update(overrides)
    return payload


@pytest.fixture()
def memory_store() -> InMemoryRecordStore:
    return InMemoryRecordStore()


@pytest.fixture()
def recording_sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture()
def make_client() -> Callable[[list[Any]], ScriptedSourceClient]:
    return ScriptedSourceClient


@pytest.fixture()
def make_issue() -> Callable[..., dict[str, Any]]:
    return raw_issue
