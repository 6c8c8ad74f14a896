"""
SQLAlchemy models for the Ops Dashboard.
"""

from typing import Any, Dict

from sqlalchemy import (
    Column, DateTime, Enum, ForeignKey, Index, Integer, String, Text
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from ..enums import EventType, JobStatus
from .base import Base


JOB_STATUSES = tuple(status.value for status in JobStatus)

EVENT_TYPES = tuple(event_type.value for event_type in EventType)

job_status_enum = Enum(*JOB_STATUSES, name="job_status", create_constraint=True)

event_type_enum = Enum(*EVENT_TYPES, name="event_type", create_constraint=True)


def _iso(value):
    return value.isoformat() if value else None


class UserModel(Base):
    """Owner of tasks."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)

    tasks = relationship("TaskModel", back_populates="user")

    def to_dict(self) -> Dict[str, Any]:
        """Convert model to dictionary."""
        return {"id": self.id, "name": self.name}


class TaskModel(Base):
    """A todo item owned by a user."""

    __tablename__ = "tasks"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(255), nullable=False)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)
    entity_ref = Column(String(255), nullable=True)
    completion_time = Column(DateTime(timezone=True), nullable=True)

    user = relationship("UserModel", back_populates="tasks", lazy="joined")

    def to_dict(self) -> Dict[str, Any]:
        """Convert model to dictionary, including the owner's name."""
        return {
            "id": self.id,
            "title": self.title,
            "user_id": self.user_id,
            "user_name": self.user.name if self.user else None,
            "entity_ref": self.entity_ref,
            "completion_time": _iso(self.completion_time),
        }


class RegisteredModel(Base):
    """A machine-learning model registration. Immutable after insert."""

    __tablename__ = "models"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    version = Column(String(64), nullable=False)
    description = Column(Text, nullable=True)
    model_uri = Column(String(1024), nullable=False)
    registered_at = Column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    registered_by = Column(String(255), nullable=True)

    __table_args__ = (Index("ix_models_name_version", "name", "version"),)

    def to_dict(self) -> Dict[str, Any]:
        """Convert model to dictionary."""
        return {
            "id": self.id,
            "name": self.name,
            "version": self.version,
            "description": self.description,
            "model_uri": self.model_uri,
            "registered_at": _iso(self.registered_at),
            "registered_by": self.registered_by,
        }


class IngestionJobModel(Base):
    """A data-ingestion job and its lifecycle status."""

    __tablename__ = "data_ingestion_jobs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    data_source_uri = Column(String(1024), nullable=False)
    status = Column(job_status_enum, nullable=False, default="pending", index=True)
    created_at = Column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    completed_at = Column(DateTime(timezone=True), nullable=True)

    def to_dict(self) -> Dict[str, Any]:
        """Convert model to dictionary."""
        return {
            "id": self.id,
            "data_source_uri": self.data_source_uri,
            "status": self.status,
            "created_at": _iso(self.created_at),
            "completed_at": _iso(self.completed_at),
        }


class EventModel(Base):
    """Append-only audit entry for model and job mutations.

    ``id`` is monotonically increasing and defines the log's order.
    """

    __tablename__ = "events"

    id = Column(Integer, primary_key=True, autoincrement=True)
    event_type = Column(event_type_enum, nullable=False, index=True)
    description = Column(Text, nullable=True)
    reference_id = Column(Integer, nullable=True, index=True)
    created_at = Column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    __table_args__ = (
        Index("ix_events_type_reference", "event_type", "reference_id"),
    )

    def to_dict(self) -> Dict[str, Any]:
        """Convert model to dictionary."""
        return {
            "id": self.id,
            "event_type": self.event_type,
            "description": self.description,
            "reference_id": self.reference_id,
            "created_at": _iso(self.created_at),
        }
