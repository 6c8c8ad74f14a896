"""
Enumerations shared by the persistence layer, the lifecycle policy and the API.
"""

from enum import Enum
from typing import Type, TypeVar, Union

from .errors import ValidationError


class JobStatus(str, Enum):
    """Lifecycle states of a data-ingestion job."""

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (JobStatus.COMPLETED, JobStatus.FAILED)


class JobAction(str, Enum):
    """Operator actions that move a job between states."""

    START = "start"
    COMPLETE = "complete"
    FAIL = "fail"


class EventType(str, Enum):
    """Fixed audit categories recorded in the event log."""

    MODEL_ADDED = "Model Added"
    JOB_ADDED = "Data Ingestion Job Added"
    JOB_STARTED = "Data Ingestion Job Started"
    JOB_COMPLETED = "Data Ingestion Job Completed"
    JOB_FAILED = "Data Ingestion Job Failed"


E = TypeVar("E", bound=Enum)


def parse_enum(enum_cls: Type[E], value: Union[E, str], kind: str) -> E:
    """Coerce ``value`` into ``enum_cls``, raising ValidationError if it is not a member."""
    try:
        return enum_cls(value)
    except ValueError:
        raise ValidationError(
            f"Unknown {kind} '{value}'",
            details={kind.replace(" ", "_"): str(value)},
        ) from None
