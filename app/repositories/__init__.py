"""
app/repositories package marker.
"""

from app.repositories.synced_record_repository import SqlAlchemyRecordStore

__all__ = [
    "SqlAlchemyRecordStore",
]
