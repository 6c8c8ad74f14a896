"""
Tests for the event log service.

Verifies:
- Events are appended and listed in insertion order
- Filtering by event type and reference ID
- Pagination via limit and offset
- Unknown event types are rejected before touching the database
"""

import pytest

from ops_dashboard.db.event_service import EventService
from ops_dashboard.db.models import EventModel
from ops_dashboard.enums import EventType
from ops_dashboard.errors import ValidationError


@pytest.fixture
def events(db_session):
    return EventService(db_session)


class TestEventService:
    """Tests for EventService."""

    def test_record(self, events):
        entry = events.record(EventType.MODEL_ADDED, "New model added: m", 3)

        assert entry.id is not None
        assert entry.event_type == "Model Added"
        assert entry.reference_id == 3
        assert entry.created_at is not None

    def test_record_accepts_display_string(self, events):
        entry = events.record("Data Ingestion Job Failed", "Job ID 1 has failed.", 1)
        assert entry.event_type == EventType.JOB_FAILED.value

    def test_record_unknown_type(self, events, db_session):
        with pytest.raises(ValidationError) as exc_info:
            events.record("Model Deleted", "nope", 1)
        assert exc_info.value.message == "Unknown event type 'Model Deleted'"
        assert exc_info.value.status_code == 400
        assert db_session.query(EventModel).count() == 0

    def test_record_without_commit_is_rolled_back(self, events, db_session):
        events.record(EventType.JOB_ADDED, "pending", 1, commit=False)
        db_session.rollback()

        assert events.list_events() == []

    def test_list_unknown_type(self, events):
        with pytest.raises(ValidationError):
            events.list_events(event_type="Model Deleted")

    def test_insertion_order(self, events):
        for i in range(5):
            events.record(EventType.JOB_ADDED, f"Job ID {i} was added.", i)

        listed = events.list_events()

        assert [e.reference_id for e in listed] == [0, 1, 2, 3, 4]
        assert [e.id for e in listed] == sorted(e.id for e in listed)

    def test_filters(self, events):
        events.record(EventType.JOB_ADDED, "a", 1)
        events.record(EventType.JOB_STARTED, "b", 1)
        events.record(EventType.JOB_ADDED, "c", 2)

        assert [e.description for e in events.list_events(event_type=EventType.JOB_ADDED)] == [
            "a",
            "c",
        ]
        assert [e.description for e in events.list_events(reference_id=1)] == ["a", "b"]
        assert [
            e.description
            for e in events.list_events(event_type="Data Ingestion Job Added", reference_id=2)
        ] == ["c"]

    def test_pagination(self, events):
        for i in range(5):
            events.record(EventType.MODEL_ADDED, str(i), i)

        assert [e.description for e in events.list_events(limit=2)] == ["0", "1"]
        assert [e.description for e in events.list_events(limit=2, offset=3)] == ["3", "4"]
        assert [e.description for e in events.list_events(offset=4)] == ["4"]
