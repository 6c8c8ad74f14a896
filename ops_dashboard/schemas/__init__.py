"""Request and response schemas for the dashboard API."""

from .dashboard import (
    ArgoApplication,
    ArgoSyncResult,
    ArgoTokenRequest,
    JobActionResponse,
    JobCreate,
    ModelCreate,
    TodoCreate,
)

__all__ = [
    "ArgoApplication",
    "ArgoSyncResult",
    "ArgoTokenRequest",
    "JobActionResponse",
    "JobCreate",
    "ModelCreate",
    "TodoCreate",
]
