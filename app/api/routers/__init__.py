"""
app/api/routers package marker.
"""

from app.api.routers.sync_router import router as sync_router

__all__ = [
    "sync_router",
]
