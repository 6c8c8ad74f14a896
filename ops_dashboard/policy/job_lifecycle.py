"""
Lifecycle policy for data-ingestion jobs.

A pure, I/O-free gate: given a job's current status and an operator action it
either returns the status the job moves to or raises ConflictError.

Transitions:
- start:    pending      -> in_progress
- complete: in_progress  -> completed
- fail:     in_progress  -> failed

completed and failed are terminal; nothing leaves them.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, FrozenSet, Union

from ..enums import EventType, JobAction, JobStatus, parse_enum
from ..errors import ConflictError


@dataclass(frozen=True)
class Transition:
    """One edge of the job state machine, with its audit metadata."""

    action: JobAction
    sources: FrozenSet[JobStatus]
    target: JobStatus
    event_type: EventType
    message_template: str

    def message(self, job_id: int) -> str:
        return self.message_template.format(job_id=job_id)


TRANSITIONS: Dict[JobAction, Transition] = {
    JobAction.START: Transition(
        action=JobAction.START,
        sources=frozenset({JobStatus.PENDING}),
        target=JobStatus.IN_PROGRESS,
        event_type=EventType.JOB_STARTED,
        message_template="Job ID {job_id} has started.",
    ),
    JobAction.COMPLETE: Transition(
        action=JobAction.COMPLETE,
        sources=frozenset({JobStatus.IN_PROGRESS}),
        target=JobStatus.COMPLETED,
        event_type=EventType.JOB_COMPLETED,
        message_template="Job ID {job_id} has been completed.",
    ),
    JobAction.FAIL: Transition(
        action=JobAction.FAIL,
        sources=frozenset({JobStatus.IN_PROGRESS}),
        target=JobStatus.FAILED,
        event_type=EventType.JOB_FAILED,
        message_template="Job ID {job_id} has failed.",
    ),
}

_ACTION_FOR_TARGET: Dict[JobStatus, JobAction] = {
    transition.target: action for action, transition in TRANSITIONS.items()
}


def get_transition(action: Union[JobAction, str]) -> Transition:
    """Look up the transition for an action name."""
    return TRANSITIONS[parse_enum(JobAction, action, "job action")]


def action_for_target(target: Union[JobStatus, str]) -> JobAction:
    """Return the action that moves a job into ``target``.

    ``pending`` is only ever an initial state, so asking for it is a conflict.
    """
    target = parse_enum(JobStatus, target, "job status")
    try:
        return _ACTION_FOR_TARGET[target]
    except KeyError:
        raise ConflictError(
            f"No transition leads to status '{target.value}'",
            details={"target": target.value},
        ) from None


def conflict_message(action: JobAction, current: JobStatus) -> str:
    if action is JobAction.START:
        return "Job not in pending state"
    if current.is_terminal:
        return "Job already completed or failed"
    return f"Job cannot {action.value} from status '{current.value}'"


def check_transition(
    current: Union[JobStatus, str], action: Union[JobAction, str]
) -> JobStatus:
    """
    Validate ``action`` against ``current`` and return the resulting status.

    Raises:
        ConflictError: if the action is not allowed from the current status.
        ValidationError: if the status or action is not a known value.
    """
    current = parse_enum(JobStatus, current, "job status")
    transition = get_transition(action)

    if current not in transition.sources:
        raise ConflictError(
            conflict_message(transition.action, current),
            details={
                "action": transition.action.value,
                "current_status": current.value,
            },
        )

    return transition.target


def allowed_actions(current: Union[JobStatus, str]) -> list[JobAction]:
    """Actions that are legal from ``current``, in declaration order."""
    current = parse_enum(JobStatus, current, "job status")
    return [action for action, t in TRANSITIONS.items() if current in t.sources]
