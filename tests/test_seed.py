"""Tests for the demo fixture loader."""

from ops_dashboard.db.models import (
    EventModel,
    IngestionJobModel,
    RegisteredModel,
    TaskModel,
    UserModel,
)
from ops_dashboard.db.seed import SAMPLE_JOBS, SAMPLE_TASKS, SAMPLE_USERS, seed_sample_data
from ops_dashboard.db.services import IngestionJobService


def test_seed_empty_database(db_session):
    inserted = seed_sample_data(db_session)

    assert inserted == {
        "users": 3,
        "tasks": 5,
        "models": 2,
        "data_ingestion_jobs": 3,
        "events": 2,
    }
    assert db_session.query(UserModel).count() == len(SAMPLE_USERS)
    assert db_session.query(TaskModel).count() == len(SAMPLE_TASKS)
    assert db_session.query(IngestionJobModel).count() == len(SAMPLE_JOBS)


def test_seed_is_idempotent(db_session):
    seed_sample_data(db_session)
    second = seed_sample_data(db_session)

    assert set(second.values()) == {0}
    assert db_session.query(RegisteredModel).count() == 2
    assert db_session.query(EventModel).count() == 2


def test_seed_skips_populated_tables(db_session):
    IngestionJobService(db_session).add_job("uri://existing")

    inserted = seed_sample_data(db_session)

    assert inserted["data_ingestion_jobs"] == 0
    # add_job already wrote an event
    assert inserted["events"] == 0
    assert inserted["models"] == 2


def test_seeded_tasks_have_owners(db_session):
    seed_sample_data(db_session)

    tasks = db_session.query(TaskModel).order_by(TaskModel.id).all()
    assert [t.user.name for t in tasks] == ["Alice", "Bob", "Charlemagne", "Alice", "Bob"]


def test_seeded_in_progress_job_can_complete(db_session):
    seed_sample_data(db_session)
    in_progress = db_session.query(IngestionJobModel).filter_by(status="in_progress").one()

    job = IngestionJobService(db_session).complete_job(in_progress.id)

    assert job.status == "completed"
