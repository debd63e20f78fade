from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from collections.abc import AsyncIterator

from fastapi import FastAPI

from app.logging_utils import configure_logging

logger = logging.getLogger(__name__)


def _validate_env() -> None:
    """
    Validate required environment variables at startup.

    Raises RuntimeError listing every missing or invalid variable so the
    operator can fix all problems in one restart cycle.
    """

    from db.config import load_env_files

    load_env_files()

    errors: list[str] = []

    if not os.getenv("SYNC_ORIGIN", "").strip():
        errors.append("SYNC_ORIGIN is not set. Provide the upstream origin, e.g. 'owner/repo'.")

    database_urls = (
        os.getenv("DATABASE_URL", "").strip(),
        os.getenv("CLOUD_DATABASE_URL", "").strip(),
        os.getenv("LOCAL_DATABASE_URL", "").strip(),
    )
    if not any(database_urls):
        errors.append(
            "No database URL configured. Set DATABASE_URL, CLOUD_DATABASE_URL "
            "or LOCAL_DATABASE_URL."
        )

    for name in ("SYNC_PAGE_SIZE", "SYNC_MAX_RETRIES", "SYNC_RETRY_BASE_DELAY_MS"):
        raw = os.getenv(name)
        if raw is None:
            continue
        try:
            value = int(raw)
        except ValueError:
            errors.append(f"{name}='{raw}' is not an integer.")
            continue
        if value < 0 or (name == "SYNC_PAGE_SIZE" and value < 1):
            errors.append(f"{name}={value} is out of range.")

    if errors:
        raise RuntimeError(
            "Startup validation failed - missing or invalid environment variables:\n"
            + "\n".join(f"  - {e}" for e in errors)
        )


def _check_db() -> None:
    """Open a session and run SELECT 1. Raises RuntimeError if the DB is unreachable."""
    from sqlalchemy import text

    from db.session import SessionLocal

    try:
        db = SessionLocal()
        try:
            db.execute(text("SELECT 1"))
        finally:
            db.close()
    except Exception as exc:
        raise RuntimeError("Database unavailable.") from exc


def _check_schema() -> None:
    """
    Abort startup when a table registered on Base.metadata is missing.

    Does NOT auto-migrate.
    """
    from sqlalchemy import inspect as sa_inspect

    import db.models  # noqa: F401 - registers all ORM models on Base.metadata
    from db.base import Base
    from db.session import get_engine

    inspector = sa_inspect(get_engine())
    actual: set[str] = set(inspector.get_table_names())
    expected: set[str] = set(Base.metadata.tables.keys())
    missing = expected - actual

    if missing:
        logger.critical(
            "Schema mismatch: %d table(s) absent from the database: %s. "
            "Run 'alembic upgrade head' and restart.",
            len(missing),
            ", ".join(sorted(missing)),
        )
        raise RuntimeError(
            f"Schema mismatch: {len(missing)} table(s) missing from the database "
            f"({', '.join(sorted(missing))}). Run migrations and restart."
        )


@asynccontextmanager
async def _lifespan(application: FastAPI) -> AsyncIterator[None]:
    """Validate DB connectivity and schema, start the scheduler on boot; shut it down on exit."""
    _check_db()
    logger.info("Database connectivity confirmed")
    _check_schema()
    logger.info("Database schema validated")

    from app.scheduler.jobs import build_scheduler, shutdown_scheduler

    scheduler = build_scheduler()
    scheduler.start()
    logger.info("Scheduler started with %d jobs", len(scheduler.get_jobs()))
    try:
        yield
    finally:
        shutdown_scheduler(scheduler)
        logger.info("Scheduler shut down")


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.
    """

    _validate_env()
    configure_logging()

    application = FastAPI(
        title="Record Sync API",
        version="1.0.0",
        lifespan=_lifespan,
    )

    from app.api.routers import sync_router

    application.include_router(sync_router)
    logger.info(
        "Available endpoints: POST /api/v1/sync, GET /api/v1/records, "
        "GET /api/v1/records/{id}/exists, GET /api/v1/health"
    )
    return application


app = create_app()
