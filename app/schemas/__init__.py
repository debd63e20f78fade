"""
app/schemas package marker.
"""

from app.schemas.sync import (
    ApiResponse,
    HealthStatusResponse,
    RecordResponse,
    SyncOutcomeResponse,
)

__all__ = [
    "ApiResponse",
    "HealthStatusResponse",
    "RecordResponse",
    "SyncOutcomeResponse",
]
