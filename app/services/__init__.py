"""
app/services package marker.
"""

from app.services.sync_service import RecordSyncService, get_record_sync_service

__all__ = [
    "RecordSyncService",
    "get_record_sync_service",
]
