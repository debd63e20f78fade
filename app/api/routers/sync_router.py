"""
app/api/routers/sync_router.py

Sync trigger, record query and health HTTP endpoints.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from app.schemas.sync import (
    ApiResponse,
    HealthStatusResponse,
    RecordResponse,
    SyncOutcomeResponse,
)
from app.services.sync_service import RecordSyncService, get_record_sync_service
from app.sync.errors import StoreUnavailableError, SyncFailure
from db.session import get_db

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["sync"])

_FAILURE_STATUS_BY_STAGE = {
    SyncFailure.FETCH: status.HTTP_502_BAD_GATEWAY,
    SyncFailure.WRITE: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def _error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ApiResponse.error(message).model_dump(mode="json"),
    )


@router.post("/sync", response_model=ApiResponse[SyncOutcomeResponse])
def run_sync(
    origin: str | None = Query(default=None, description="Upstream origin, e.g. owner/repo"),
    page_size: int | None = Query(default=None, ge=1, le=100, description="Max records to fetch"),
    db: Session = Depends(get_db),
    sync_service: RecordSyncService = Depends(get_record_sync_service),
):
    """
    Run one sync and return its outcome.
    """

    logger.info("REST API: starting sync origin=%s page_size=%s", origin, page_size)
    try:
        outcome = sync_service.run_sync(db=db, origin=origin, page_size=page_size)
    except ValueError as exc:
        return _error_response(status.HTTP_400_BAD_REQUEST, str(exc))
    except SyncFailure as exc:
        logger.error("REST API: sync failed stage=%s error=%s", exc.stage, exc)
        stage_message = (
            "data fetched but not persisted" if exc.data_fetched else "no new data fetched"
        )
        return _error_response(
            _FAILURE_STATUS_BY_STAGE.get(exc.stage, status.HTTP_500_INTERNAL_SERVER_ERROR),
            f"Sync failed at {exc.stage} stage ({stage_message}): {exc}",
        )

    return ApiResponse[SyncOutcomeResponse].ok(
        "Sync completed successfully",
        SyncOutcomeResponse.from_outcome(outcome),
    )


@router.get("/records", response_model=ApiResponse[list[RecordResponse]])
def list_records(
    db: Session = Depends(get_db),
    sync_service: RecordSyncService = Depends(get_record_sync_service),
):
    try:
        records = sync_service.list_records(db=db)
    except StoreUnavailableError as exc:
        return _error_response(status.HTTP_503_SERVICE_UNAVAILABLE, f"Failed to retrieve records: {exc}")

    return ApiResponse[list[RecordResponse]].ok(
        "Records retrieved successfully",
        [RecordResponse.from_record(record) for record in records],
    )


@router.get("/records/{record_id}/exists", response_model=ApiResponse[bool])
def record_exists(
    record_id: int,
    db: Session = Depends(get_db),
    sync_service: RecordSyncService = Depends(get_record_sync_service),
):
    try:
        exists = sync_service.record_exists(db=db, record_id=record_id)
    except StoreUnavailableError as exc:
        return _error_response(
            status.HTTP_503_SERVICE_UNAVAILABLE,
            f"Failed to check record existence: {exc}",
        )

    return ApiResponse[bool].ok("Record existence checked", exists)


@router.get("/health", response_model=ApiResponse[HealthStatusResponse])
def healthcheck() -> ApiResponse[HealthStatusResponse]:
    return ApiResponse[HealthStatusResponse].ok(
        "Health check completed",
        HealthStatusResponse(status="UP", message="Record sync service is running"),
    )
