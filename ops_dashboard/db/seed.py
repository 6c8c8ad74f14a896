"""
Demo fixture data.

Seeding is optional and idempotent: each table is only populated when it is
empty, so running it against a live database never duplicates rows.
"""

from datetime import datetime, timezone
from typing import Dict

import structlog
from sqlalchemy.orm import Session

from ..enums import EventType, JobStatus
from .base import persistence_guard
from .models import (
    EventModel,
    IngestionJobModel,
    RegisteredModel,
    TaskModel,
    UserModel,
)

logger = structlog.get_logger()


def _utc(year: int, month: int, day: int) -> datetime:
    return datetime(year, month, day, tzinfo=timezone.utc)


SAMPLE_USERS = ["Alice", "Bob", "Charlemagne"]

# (title, owner index into SAMPLE_USERS, completion time)
SAMPLE_TASKS = [
    ("Complete project documentation", 0, _utc(2024, 1, 15)),
    ("Review pull requests", 1, None),
    ("Deploy to production", 2, _utc(2024, 1, 10)),
    ("Update dependencies", 0, None),
    ("Write unit tests", 1, _utc(2024, 1, 5)),
]

SAMPLE_MODELS = [
    {
        "name": "Model 1",
        "version": "1.0.0",
        "description": "The first model",
        "model_uri": "https://example.com/models/model1",
    },
    {
        "name": "Model 2",
        "version": "1.0.0",
        "description": "The second model",
        "model_uri": "https://example.com/models/model2",
    },
]

SAMPLE_JOBS = [
    {
        "data_source_uri": "https://example.com/data.csv",
        "status": JobStatus.COMPLETED.value,
        "created_at": _utc(2024, 1, 1),
        "completed_at": _utc(2024, 1, 2),
    },
    {
        "data_source_uri": "https://example.com/data2.csv",
        "status": JobStatus.FAILED.value,
        "created_at": _utc(2024, 1, 3),
        "completed_at": _utc(2024, 1, 4),
    },
    {
        "data_source_uri": "https://example.com/data3.csv",
        "status": JobStatus.IN_PROGRESS.value,
        "created_at": _utc(2024, 1, 5),
        "completed_at": None,
    },
]

SAMPLE_EVENTS = [
    (EventType.MODEL_ADDED, "A new model was added", 1),
    (EventType.JOB_ADDED, "A new data ingestion job was added", 2),
]


def _is_empty(db: Session, model) -> bool:
    return db.query(model).first() is None


def seed_sample_data(db: Session) -> Dict[str, int]:
    """Populate empty tables with demo rows.

    Returns:
        Number of rows inserted per table.
    """
    inserted = {"users": 0, "tasks": 0, "models": 0, "data_ingestion_jobs": 0, "events": 0}

    with persistence_guard(db, "seed sample data"):
        if _is_empty(db, UserModel):
            users = [UserModel(name=name) for name in SAMPLE_USERS]
            db.add_all(users)
            db.flush()
            inserted["users"] = len(users)

            if _is_empty(db, TaskModel):
                db.add_all(
                    TaskModel(title=title, user_id=users[owner].id, completion_time=done)
                    for title, owner, done in SAMPLE_TASKS
                )
                inserted["tasks"] = len(SAMPLE_TASKS)

        if _is_empty(db, RegisteredModel):
            db.add_all(RegisteredModel(**row) for row in SAMPLE_MODELS)
            inserted["models"] = len(SAMPLE_MODELS)

        if _is_empty(db, IngestionJobModel):
            db.add_all(IngestionJobModel(**row) for row in SAMPLE_JOBS)
            inserted["data_ingestion_jobs"] = len(SAMPLE_JOBS)

        if _is_empty(db, EventModel):
            db.add_all(
                EventModel(event_type=event_type.value, description=text, reference_id=ref)
                for event_type, text, ref in SAMPLE_EVENTS
            )
            inserted["events"] = len(SAMPLE_EVENTS)

        db.commit()

    logger.info("sample_data_seeded", **inserted)
    return inserted
