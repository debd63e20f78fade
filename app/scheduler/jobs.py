"""
app/scheduler/jobs.py

APScheduler-based periodic sync.

Schedule
--------
  periodic_sync: every ``SYNC_SCHEDULE_INTERVAL_MINUTES`` minutes when
  ``SYNC_SCHEDULE_ENABLED`` is true.

The job runs with ``max_instances=1`` so at most one scheduled sync is active
at a time. ``shutdown_scheduler`` cancels a sync waiting between retries
before stopping the scheduler.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator

from apscheduler.schedulers.background import BackgroundScheduler
from sqlalchemy.orm import Session

from app.config import SyncSettings, get_sync_settings
from app.services.sync_service import get_record_sync_service
from app.sync.errors import SyncCancelledError, SyncFailure
from app.sync.retry import CancellationToken
from db.session import SessionLocal

logger = logging.getLogger(__name__)

PERIODIC_SYNC_JOB_ID = "periodic_sync"


@contextmanager
def _session_scope() -> Iterator[Session]:
    """Yield a fresh session and ensure it is closed on exit."""
    session: Session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


def run_scheduled_sync(cancellation: CancellationToken | None = None) -> None:
    """
    Run one sync for the configured origin; failures are logged, never raised.

    ``cancellation`` is the token owned by the scheduler that registered the
    job; cancelling it interrupts a sync waiting between retries.
    """
    logger.info("Scheduler: periodic_sync starting")
    service = get_record_sync_service()

    with _session_scope() as db:
        try:
            outcome = service.run_sync(db=db, cancellation=cancellation)
        except SyncCancelledError:
            logger.warning("Scheduler: periodic_sync cancelled during shutdown")
            return
        except SyncFailure as exc:
            logger.error("Scheduler: periodic_sync failed stage=%s error=%s", exc.stage, exc)
            return
        except ValueError as exc:
            logger.error("Scheduler: periodic_sync misconfigured: %s", exc)
            return

    logger.info(
        "Scheduler: periodic_sync complete origin=%s fetched=%d inserted=%d skipped=%d",
        outcome.origin,
        outcome.fetched_count,
        outcome.inserted_count,
        outcome.skipped_count,
    )


def build_scheduler(settings: SyncSettings | None = None) -> BackgroundScheduler:
    """
    Build and register the periodic sync job.

    Returns a configured but *not yet started* ``BackgroundScheduler``; no job
    is registered when scheduling is disabled.
    """
    settings = settings or get_sync_settings()
    scheduler = BackgroundScheduler(timezone="UTC")

    if not settings.schedule_enabled:
        logger.info("Scheduler: periodic sync disabled")
        return scheduler

    scheduler.add_job(
        run_scheduled_sync,
        trigger="interval",
        minutes=settings.schedule_interval_minutes,
        id=PERIODIC_SYNC_JOB_ID,
        kwargs={"cancellation": CancellationToken()},
        name="Periodic upstream record sync",
        replace_existing=True,
        max_instances=1,
        coalesce=True,
        misfire_grace_time=settings.schedule_interval_minutes * 60,
    )
    return scheduler


def shutdown_scheduler(scheduler: BackgroundScheduler) -> None:
    """
    Cancel any in-flight retry wait, then stop the scheduler and wait for jobs.
    """
    job = scheduler.get_job(PERIODIC_SYNC_JOB_ID)
    if job is not None:
        job.kwargs["cancellation"].cancel()
    if scheduler.running:
        scheduler.shutdown(wait=True)
