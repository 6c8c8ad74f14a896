"""
Ops Dashboard

Backend for an internal developer dashboard: todos, a model registry,
data-ingestion jobs with an audited lifecycle, and an Argo CD proxy.
"""

import importlib.metadata

try:
    __version__ = importlib.metadata.version("ops-dashboard")
except importlib.metadata.PackageNotFoundError:
    __version__ = "0.0.0"

from .enums import EventType, JobAction, JobStatus
from .errors import (
    ConflictError,
    DashboardError,
    NotFoundError,
    PersistenceError,
    UnauthorizedError,
    UpstreamError,
    ValidationError,
)

__all__ = [
    "ConflictError",
    "DashboardError",
    "EventType",
    "JobAction",
    "JobStatus",
    "NotFoundError",
    "PersistenceError",
    "UnauthorizedError",
    "UpstreamError",
    "ValidationError",
]
