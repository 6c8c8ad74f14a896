"""
Database services for the Ops Dashboard.

Each service wraps one table. Mutations of models and jobs append an event
in the same transaction, so a committed mutation always has its audit entry.
"""

from datetime import datetime, timezone
from typing import List, Optional, Union

import structlog
from sqlalchemy import update
from sqlalchemy.orm import Session

from ..enums import EventType, JobAction, JobStatus, parse_enum
from ..errors import ConflictError, NotFoundError
from ..policy.job_lifecycle import (
    Transition,
    action_for_target,
    check_transition,
    get_transition,
)
from .base import persistence_guard
from .event_service import EventService
from .models import IngestionJobModel, RegisteredModel, TaskModel, UserModel

logger = structlog.get_logger()


class UserService:
    """Service for reading task owners."""

    def __init__(self, db: Session):
        self.db = db

    def get_user(self, user_id: int) -> Optional[UserModel]:
        """Get a user by ID."""
        with persistence_guard(self.db, "fetch user"):
            return self.db.get(UserModel, user_id)

    def list_users(self) -> List[UserModel]:
        """List all users ordered by ID."""
        with persistence_guard(self.db, "fetch users"):
            return self.db.query(UserModel).order_by(UserModel.id).all()


class TaskService:
    """Service for managing todo tasks."""

    def __init__(self, db: Session):
        self.db = db

    def list_tasks(self) -> List[TaskModel]:
        """List tasks with their owner's name, oldest first."""
        with persistence_guard(self.db, "fetch tasks"):
            return self.db.query(TaskModel).order_by(TaskModel.id).all()

    def get_task(self, task_id: int) -> TaskModel:
        """Get a task by ID.

        Raises:
            NotFoundError: if no task has this ID.
        """
        with persistence_guard(self.db, "fetch task"):
            task = self.db.get(TaskModel, task_id)
        if task is None:
            raise NotFoundError("Task", task_id)
        return task

    def add_task(
        self,
        title: str,
        user_id: Optional[int] = None,
        completion_time: Optional[datetime] = None,
        entity_ref: Optional[str] = None,
    ) -> TaskModel:
        """
        Create a new task.

        Args:
            title: Non-empty task title.
            user_id: Owning user; must reference an existing user when given.
            completion_time: When the task was completed, if it already is.
            entity_ref: Catalog entity the task refers to.

        Returns:
            The created TaskModel instance.
        """
        if user_id is not None and UserService(self.db).get_user(user_id) is None:
            raise NotFoundError("User", user_id)

        db_task = TaskModel(
            title=title,
            user_id=user_id,
            completion_time=completion_time,
            entity_ref=entity_ref,
        )

        with persistence_guard(self.db, "add task"):
            self.db.add(db_task)
            self.db.commit()
            self.db.refresh(db_task)

        logger.info("task_added", task_id=db_task.id, user_id=user_id)
        return db_task


class ModelService:
    """Service for the model registry."""

    def __init__(self, db: Session, events: Optional[EventService] = None):
        self.db = db
        self.events = events or EventService(db)

    def list_models(self) -> List[RegisteredModel]:
        """List registered models, oldest first."""
        with persistence_guard(self.db, "fetch models"):
            return self.db.query(RegisteredModel).order_by(RegisteredModel.id).all()

    def add_model(
        self,
        name: str,
        version: str,
        description: Optional[str],
        model_uri: str,
        registered_by: Optional[str] = None,
    ) -> RegisteredModel:
        """Register a model and record a 'Model Added' event."""
        db_model = RegisteredModel(
            name=name,
            version=version,
            description=description,
            model_uri=model_uri,
            registered_by=registered_by,
        )

        with persistence_guard(self.db, "add model"):
            self.db.add(db_model)
            self.db.flush()
            self.events.record(
                EventType.MODEL_ADDED,
                f"New model added: {db_model.name}",
                db_model.id,
                commit=False,
            )
            self.db.commit()
            self.db.refresh(db_model)

        logger.info(
            "model_added", model_id=db_model.id, name=name, version=version
        )
        return db_model


class IngestionJobService:
    """Service for data-ingestion jobs and their lifecycle."""

    def __init__(self, db: Session, events: Optional[EventService] = None):
        self.db = db
        self.events = events or EventService(db)

    def list_jobs(self, status: Optional[str] = None) -> List[IngestionJobModel]:
        """List jobs, oldest first, optionally filtered by status."""
        if status:
            status = parse_enum(JobStatus, status, "job status").value

        with persistence_guard(self.db, "fetch data ingestion jobs"):
            query = self.db.query(IngestionJobModel)
            if status:
                query = query.filter(IngestionJobModel.status == status)
            return query.order_by(IngestionJobModel.id).all()

    def get_job(self, job_id: int) -> IngestionJobModel:
        """Get a job by ID.

        Raises:
            NotFoundError: if no job has this ID.
        """
        with persistence_guard(self.db, "fetch data ingestion job"):
            job = self.db.get(IngestionJobModel, job_id)
        if job is None:
            raise NotFoundError("Job", job_id)
        return job

    def add_job(self, data_source_uri: str) -> IngestionJobModel:
        """Create a job in 'pending' and record a 'Job Added' event."""
        db_job = IngestionJobModel(
            data_source_uri=data_source_uri,
            status=JobStatus.PENDING.value,
            completed_at=None,
        )

        with persistence_guard(self.db, "add data ingestion job"):
            self.db.add(db_job)
            self.db.flush()
            self.events.record(
                EventType.JOB_ADDED,
                f"Job ID {db_job.id} was added.",
                db_job.id,
                commit=False,
            )
            self.db.commit()
            self.db.refresh(db_job)

        logger.info("job_added", job_id=db_job.id, data_source_uri=data_source_uri)
        return db_job

    def start_job(self, job_id: int) -> IngestionJobModel:
        return self.apply(job_id, JobAction.START)

    def complete_job(self, job_id: int) -> IngestionJobModel:
        return self.apply(job_id, JobAction.COMPLETE)

    def fail_job(self, job_id: int) -> IngestionJobModel:
        return self.apply(job_id, JobAction.FAIL)

    def set_status(
        self, job_id: int, new_status: Union[JobStatus, str]
    ) -> IngestionJobModel:
        """Move a job to ``new_status`` via the matching lifecycle action."""
        return self.apply(job_id, action_for_target(new_status))

    def apply(
        self, job_id: int, action: Union[JobAction, str]
    ) -> IngestionJobModel:
        """
        Apply a lifecycle action to a job.

        The status check and the write happen in one conditional UPDATE, so of
        several concurrent requests for the same job at most one succeeds; the
        others observe zero affected rows and get a ConflictError.

        Raises:
            NotFoundError: if the job does not exist.
            ConflictError: if the action is illegal for the job's status.
            ValidationError: if the action is not a known lifecycle action.
        """
        transition = get_transition(action)

        # Fail fast with the precise reason before attempting the write
        job = self.get_job(job_id)
        check_transition(job.status, transition.action)

        with persistence_guard(self.db, f"{transition.action.value} data ingestion job"):
            updated = self._compare_and_set(job_id, transition)
            if not updated:
                self.db.rollback()
            else:
                self.events.record(
                    transition.event_type,
                    transition.message(job_id),
                    job_id,
                    commit=False,
                )
                self.db.commit()

        if not updated:
            # Lost a race: report against the status that won
            self.db.expire_all()
            current = self.get_job(job_id)
            check_transition(current.status, transition.action)
            raise ConflictError(
                "Job status changed concurrently",
                details={"action": transition.action.value, "current_status": current.status},
            )

        self.db.refresh(job)
        logger.info(
            f"job_{transition.target.value}",
            job_id=job_id,
            action=transition.action.value,
            status=job.status,
        )
        return job

    def _compare_and_set(self, job_id: int, transition: Transition) -> bool:
        values = {"status": transition.target.value}
        if transition.target.is_terminal:
            values["completed_at"] = datetime.now(timezone.utc)

        result = self.db.execute(
            update(IngestionJobModel)
            .where(IngestionJobModel.id == job_id)
            .where(
                IngestionJobModel.status.in_([s.value for s in transition.sources])
            )
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1
