"""
app/domain package marker.
"""

from app.domain.sync_record import SyncOutcome, SyncRecord, WriteBatchResult

__all__ = [
    "SyncOutcome",
    "SyncRecord",
    "WriteBatchResult",
]
