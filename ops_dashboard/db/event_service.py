"""
Event Log Service.

Appends audit entries for model and job mutations and lists them back in
insertion order. The log is append-only: this service exposes no update or
delete operations.
"""

from typing import List, Optional, Union

import structlog
from sqlalchemy.orm import Session

from ..enums import EventType, parse_enum
from .base import persistence_guard
from .models import EventModel

logger = structlog.get_logger()


class EventService:
    """Service for recording and reading the event log.

    Usage:
        events = EventService(db_session)
        events.record(EventType.JOB_ADDED, "Job ID 4 was added.", 4)
    """

    def __init__(self, db: Session):
        self.db = db

    def record(
        self,
        event_type: Union[EventType, str],
        description: str,
        reference_id: Optional[int],
        commit: bool = True,
    ) -> EventModel:
        """Append an event.

        Args:
            event_type: One of the fixed audit categories
            description: Human-readable description of what happened
            reference_id: ID of the model or job that triggered the event
            commit: When False the row is only flushed, so the caller can
                commit it together with the mutation it describes

        Returns:
            The stored EventModel
        """
        event_type = parse_enum(EventType, event_type, "event type")

        entry = EventModel(
            event_type=event_type.value,
            description=description,
            reference_id=reference_id,
        )

        with persistence_guard(self.db, "record event"):
            self.db.add(entry)
            if commit:
                self.db.commit()
                self.db.refresh(entry)
            else:
                self.db.flush()

        logger.info(
            "event_recorded",
            event_type=event_type.value,
            reference_id=reference_id,
        )
        return entry

    def list_events(
        self,
        event_type: Optional[Union[EventType, str]] = None,
        reference_id: Optional[int] = None,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> List[EventModel]:
        """List events, oldest first.

        Args:
            event_type: Optional filter by event category
            reference_id: Optional filter by referenced model/job id
            limit: Maximum number of entries to return (None = all)
            offset: Number of entries to skip

        Returns:
            List of EventModel entries in insertion order
        """
        if event_type:
            event_type = parse_enum(EventType, event_type, "event type")

        with persistence_guard(self.db, "list events"):
            query = self.db.query(EventModel)

            if event_type:
                query = query.filter(EventModel.event_type == event_type.value)
            if reference_id is not None:
                query = query.filter(EventModel.reference_id == reference_id)

            query = query.order_by(EventModel.id).offset(offset)
            if limit is not None:
                query = query.limit(limit)

            return query.all()
