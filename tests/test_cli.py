"""
Tests for the ops-dashboard command line interface.

Verifies:
- set-job-status follows the job lifecycle and exits 1 on rejected moves
- jobs and events print the stored rows, honouring their filters
- db seed can be run repeatedly without duplicating rows
"""

import pytest
from rich.console import Console
from typer.testing import CliRunner

from ops_dashboard import cli
from ops_dashboard.db.event_service import EventService
from ops_dashboard.db.models import IngestionJobModel, UserModel
from ops_dashboard.db.services import IngestionJobService

runner = CliRunner()


@pytest.fixture(autouse=True)
def cli_env(monkeypatch, session_factory):
    """Point the CLI at the test database and keep its output unwrapped."""
    monkeypatch.setattr(cli, "get_session_local", lambda: session_factory)
    monkeypatch.setattr(cli, "configure_logging", lambda *args, **kwargs: None)
    monkeypatch.setattr(cli, "console", Console(width=200))


class TestSetJobStatus:
    """Tests for `ops-dashboard set-job-status`."""

    def test_start_pending_job(self, db_session):
        job = IngestionJobService(db_session).add_job("uri://a")

        result = runner.invoke(cli.app, ["set-job-status", str(job.id), "in_progress"])

        assert result.exit_code == 0
        assert f"Job {job.id} is now in_progress" in result.output
        db_session.expire_all()
        assert db_session.get(IngestionJobModel, job.id).status == "in_progress"

    def test_records_event(self, db_session):
        job = IngestionJobService(db_session).add_job("uri://a")

        runner.invoke(cli.app, ["set-job-status", str(job.id), "in_progress"])

        types = [e.event_type for e in EventService(db_session).list_events(reference_id=job.id)]
        assert types == ["Data Ingestion Job Added", "Data Ingestion Job Started"]

    def test_terminal_job_exits_with_error(self, db_session):
        service = IngestionJobService(db_session)
        job = service.add_job("uri://a")
        service.start_job(job.id)
        service.complete_job(job.id)

        result = runner.invoke(cli.app, ["set-job-status", str(job.id), "failed"])

        assert result.exit_code == 1
        assert "Job already completed or failed" in result.output
        db_session.expire_all()
        assert db_session.get(IngestionJobModel, job.id).status == "completed"

    def test_unknown_job_exits_with_error(self):
        result = runner.invoke(cli.app, ["set-job-status", "999", "in_progress"])

        assert result.exit_code == 1
        assert "Job not found" in result.output

    def test_unknown_status_is_a_usage_error(self, db_session):
        job = IngestionJobService(db_session).add_job("uri://a")

        result = runner.invoke(cli.app, ["set-job-status", str(job.id), "archived"])

        assert result.exit_code == 2


class TestListings:
    """Tests for `ops-dashboard jobs` and `ops-dashboard events`."""

    def test_jobs_empty(self):
        result = runner.invoke(cli.app, ["jobs"])

        assert result.exit_code == 0
        assert "No data ingestion jobs" in result.output

    def test_jobs_filtered_by_status(self, db_session):
        service = IngestionJobService(db_session)
        started = service.add_job("s3://started-source")
        service.add_job("s3://waiting-source")
        service.start_job(started.id)

        result = runner.invoke(cli.app, ["jobs", "--status", "pending"])

        assert result.exit_code == 0
        assert "s3://waiting-source" in result.output
        assert "s3://started-source" not in result.output

    def test_events_limit(self, db_session):
        service = IngestionJobService(db_session)
        first = service.add_job("uri://a")
        second = service.add_job("uri://b")

        result = runner.invoke(cli.app, ["events", "--limit", "1"])

        assert result.exit_code == 0
        assert f"Job ID {first.id} was added." in result.output
        assert f"Job ID {second.id} was added." not in result.output

    def test_events_empty(self):
        result = runner.invoke(cli.app, ["events"])

        assert result.exit_code == 0
        assert "Event log is empty" in result.output


class TestDbSeed:
    """Tests for `ops-dashboard db seed`."""

    def test_seed_twice(self, db_session):
        first = runner.invoke(cli.app, ["db", "seed"])
        second = runner.invoke(cli.app, ["db", "seed"])

        assert first.exit_code == 0
        assert second.exit_code == 0
        assert "Seeded Rows" in first.output
        assert db_session.query(UserModel).count() == 3
        assert db_session.query(IngestionJobModel).count() == 3
