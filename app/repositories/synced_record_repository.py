"""
app/repositories/synced_record_repository.py

SQLAlchemy-backed record store used by the dedup writer.
"""

from __future__ import annotations

import logging

from sqlalchemy import insert, select
from sqlalchemy.exc import IntegrityError, InterfaceError, OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.domain.sync_record import SyncRecord
from app.sync.errors import RecordWriteError, StoreUnavailableError
from db.models.synced_record import SyncedRecord

logger = logging.getLogger(__name__)

_UNAVAILABLE_ERRORS = (OperationalError, InterfaceError)


class SqlAlchemyRecordStore:
    """
    Record store over the ``synced_records`` table.

    Every insert is committed on its own so one failed record never rolls
    back records written before it.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    def exists(self, record_id: int) -> bool:
        try:
            found = self._session.scalar(
                select(SyncedRecord.id).where(SyncedRecord.id == record_id)
            )
        except SQLAlchemyError as exc:
            self._rollback_quietly()
            logger.error("Failed to check existence of record %s: %s", record_id, exc)
            raise StoreUnavailableError(f"Cannot check existence of record {record_id}.") from exc
        return found is not None

    def insert(self, record: SyncRecord) -> bool:
        """
        Insert ``record`` if its id is absent.

        Returns False when another writer already stored the same id.
        """

        stmt = insert(SyncedRecord).values(
            id=record.id,
            title=record.title,
            created_at=record.created_at,
            state=record.state,
            source_url=record.source_url,
            origin=record.origin,
        )
        try:
            self._session.execute(stmt)
            self._session.commit()
        except IntegrityError as exc:
            self._rollback_quietly()
            if self.exists(record.id):
                return False
            raise RecordWriteError(record.id, f"Record {record.id} violates a constraint: {exc}") from exc
        except _UNAVAILABLE_ERRORS as exc:
            self._rollback_quietly()
            raise StoreUnavailableError(f"Store unavailable while saving record {record.id}.") from exc
        except SQLAlchemyError as exc:
            self._rollback_quietly()
            raise RecordWriteError(record.id, f"Failed to save record {record.id}: {exc}") from exc
        return True

    def list_all(self) -> list[SyncRecord]:
        stmt = select(SyncedRecord).order_by(SyncedRecord.created_at.desc(), SyncedRecord.id.desc())
        try:
            rows = self._session.scalars(stmt).all()
        except SQLAlchemyError as exc:
            self._rollback_quietly()
            logger.error("Failed to list records: %s", exc)
            raise StoreUnavailableError("Cannot list stored records.") from exc
        return [_to_domain(row) for row in rows]

    def _rollback_quietly(self) -> None:
        try:
            self._session.rollback()
        except SQLAlchemyError as exc:
            logger.warning("Session rollback failed: %s", exc)


def _to_domain(row: SyncedRecord) -> SyncRecord:
    return SyncRecord(
        id=row.id,
        title=row.title,
        created_at=row.created_at,
        state=row.state,
        source_url=row.source_url,
        origin=row.origin,
    )
