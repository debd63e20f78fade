"""
app/schemas/sync.py

Response schemas for sync, record query and health endpoints.
"""

from __future__ import annotations

from datetime import datetime
from typing import Generic, TypeVar

from pydantic import BaseModel, Field

from app.domain.sync_record import SyncOutcome, SyncRecord

DataT = TypeVar("DataT")


class ApiResponse(BaseModel, Generic[DataT]):
    """
    Uniform response envelope for every /api/v1 endpoint.
    """

    success: bool
    message: str
    data: DataT | None = None

    @classmethod
    def ok(cls, message: str, data: DataT) -> "ApiResponse[DataT]":
        return cls(success=True, message=message, data=data)

    @classmethod
    def error(cls, message: str) -> "ApiResponse[DataT]":
        return cls(success=False, message=message, data=None)


class SyncOutcomeResponse(BaseModel):
    origin: str
    fetched_count: int = Field(..., ge=0)
    inserted_count: int = Field(..., ge=0)
    skipped_count: int = Field(..., ge=0)
    duplicate_count: int = Field(..., ge=0)
    failed_count: int = Field(..., ge=0)
    timestamp: datetime

    @classmethod
    def from_outcome(cls, outcome: SyncOutcome) -> "SyncOutcomeResponse":
        return cls(
            origin=outcome.origin,
            fetched_count=outcome.fetched_count,
            inserted_count=outcome.inserted_count,
            skipped_count=outcome.skipped_count,
            duplicate_count=outcome.duplicate_count,
            failed_count=outcome.failed_count,
            timestamp=outcome.timestamp,
        )


class RecordResponse(BaseModel):
    id: int
    title: str
    created_at: datetime
    state: str
    source_url: str
    origin: str

    @classmethod
    def from_record(cls, record: SyncRecord) -> "RecordResponse":
        return cls(
            id=record.id,
            title=record.title,
            created_at=record.created_at,
            state=record.state,
            source_url=record.source_url,
            origin=record.origin,
        )


class HealthStatusResponse(BaseModel):
    status: str
    message: str
