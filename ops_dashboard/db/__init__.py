"""
Database package for the Ops Dashboard.
"""

from .base import Base, get_db, get_engine, get_session_local
from .models import (
    EventModel,
    IngestionJobModel,
    RegisteredModel,
    TaskModel,
    UserModel,
)

__all__ = [
    "Base",
    "get_db",
    "get_engine",
    "get_session_local",
    "EventModel",
    "IngestionJobModel",
    "RegisteredModel",
    "TaskModel",
    "UserModel",
]
