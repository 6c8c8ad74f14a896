"""
Dashboard API routes.

Todos, models, data-ingestion jobs, the event log and the Argo CD proxy.
Services raise typed errors; the handlers registered in ``api.py`` turn them
into HTTP responses.
"""

from typing import Any, AsyncGenerator, Dict, List, Optional

import structlog
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from .db.base import get_db
from .db.event_service import EventService
from .db.services import IngestionJobService, ModelService, TaskService, UserService
from .enums import EventType, JobAction
from .errors import UnauthorizedError
from .integrations.argocd import ArgoCDClient
from .policy.job_lifecycle import get_transition
from .schemas.dashboard import (
    ArgoTokenRequest,
    JobActionResponse,
    JobCreate,
    ModelCreate,
    TodoCreate,
)

logger = structlog.get_logger()

router = APIRouter()


def require_argo_token(body: Optional[ArgoTokenRequest] = None) -> str:
    """Dependency extracting the caller's Argo CD bearer token."""
    if body is None or not body.token:
        raise UnauthorizedError("Unauthorized: Missing token")
    return body.token


async def get_argocd_client(
    token: str = Depends(require_argo_token),
) -> AsyncGenerator[ArgoCDClient, None]:
    """Dependency providing a per-request Argo CD client.

    Resolved after the token check, so a request without a credential is
    rejected before any client or TLS setup happens.
    """
    client = ArgoCDClient.from_settings()
    try:
        yield client
    finally:
        await client.close()


# =============================================================================
# Todo Endpoints
# =============================================================================


@router.post("/todos", status_code=201, tags=["todos"])
def create_todo(
    todo: TodoCreate,
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    """Create a todo task."""
    task = TaskService(db).add_task(
        title=todo.title,
        user_id=todo.user_id,
        completion_time=todo.completion_time,
        entity_ref=todo.entity_ref,
    )
    return task.to_dict()


@router.get("/todos", tags=["todos"])
def list_todos(db: Session = Depends(get_db)) -> List[Dict[str, Any]]:
    """List todo tasks with their owner's name."""
    return [task.to_dict() for task in TaskService(db).list_tasks()]


@router.get("/todos/{task_id}", tags=["todos"])
def get_todo(task_id: int, db: Session = Depends(get_db)) -> Dict[str, Any]:
    """Get a todo task by ID."""
    return TaskService(db).get_task(task_id).to_dict()


@router.get("/users", tags=["todos"])
def list_users(db: Session = Depends(get_db)) -> List[Dict[str, Any]]:
    """List the users tasks can be assigned to."""
    return [user.to_dict() for user in UserService(db).list_users()]


# =============================================================================
# Model Endpoints
# =============================================================================


@router.get("/models", tags=["models"])
def list_models(db: Session = Depends(get_db)) -> List[Dict[str, Any]]:
    """List registered models."""
    return [model.to_dict() for model in ModelService(db).list_models()]


@router.post("/models/add", status_code=201, tags=["models"])
def add_model(
    model: ModelCreate,
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    """Register a model. Records a 'Model Added' event."""
    db_model = ModelService(db).add_model(
        name=model.name,
        version=model.version,
        description=model.description,
        model_uri=model.model_uri,
        registered_by=model.registered_by,
    )
    return db_model.to_dict()


# =============================================================================
# Data Ingestion Job Endpoints
# =============================================================================


@router.get("/jobs", tags=["jobs"])
def list_jobs(db: Session = Depends(get_db)) -> List[Dict[str, Any]]:
    """List data-ingestion jobs."""
    return [job.to_dict() for job in IngestionJobService(db).list_jobs()]


@router.get("/jobs/{job_id}", tags=["jobs"])
def get_job(job_id: int, db: Session = Depends(get_db)) -> Dict[str, Any]:
    """Get a data-ingestion job by ID."""
    return IngestionJobService(db).get_job(job_id).to_dict()


@router.post("/jobs/add", status_code=201, tags=["jobs"])
def add_job(
    job: JobCreate,
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    """Create a job in 'pending'. Records a 'Data Ingestion Job Added' event."""
    return IngestionJobService(db).add_job(job.data_source_uri).to_dict()


def _apply_job_action(db: Session, job_id: int, action: JobAction) -> JobActionResponse:
    job = IngestionJobService(db).apply(job_id, action)
    return JobActionResponse(
        message=get_transition(action).message(job_id),
        job=job.to_dict(),
    )


@router.post("/jobs/start/{job_id}", response_model=JobActionResponse, tags=["jobs"])
def start_job(job_id: int, db: Session = Depends(get_db)) -> JobActionResponse:
    """Move a pending job to in_progress."""
    return _apply_job_action(db, job_id, JobAction.START)


@router.post("/jobs/complete/{job_id}", response_model=JobActionResponse, tags=["jobs"])
def complete_job(job_id: int, db: Session = Depends(get_db)) -> JobActionResponse:
    """Mark an in-progress job completed."""
    return _apply_job_action(db, job_id, JobAction.COMPLETE)


@router.post("/jobs/fail/{job_id}", response_model=JobActionResponse, tags=["jobs"])
def fail_job(job_id: int, db: Session = Depends(get_db)) -> JobActionResponse:
    """Mark an in-progress job failed."""
    return _apply_job_action(db, job_id, JobAction.FAIL)


# =============================================================================
# Event Log Endpoints
# =============================================================================


@router.get("/events", tags=["events"])
def list_events(
    event_type: Optional[EventType] = None,
    reference_id: Optional[int] = None,
    limit: Optional[int] = Query(None, ge=1, le=1000),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
) -> List[Dict[str, Any]]:
    """List the event log in insertion order."""
    events = EventService(db).list_events(
        event_type=event_type,
        reference_id=reference_id,
        limit=limit,
        offset=offset,
    )
    return [event.to_dict() for event in events]


# =============================================================================
# Argo CD Endpoints
# =============================================================================


@router.post("/argo/applications", tags=["argo"])
async def list_argo_applications(
    token: str = Depends(require_argo_token),
    client: ArgoCDClient = Depends(get_argocd_client),
) -> List[Dict[str, Any]]:
    """List Argo CD applications visible to the caller's token."""
    applications = await client.list_applications(token)
    return [app.model_dump() for app in applications]


@router.post("/argo/applications/{app_name}/sync", tags=["argo"])
async def sync_argo_application(
    app_name: str,
    token: str = Depends(require_argo_token),
    client: ArgoCDClient = Depends(get_argocd_client),
) -> Dict[str, Any]:
    """Trigger a sync of one Argo CD application."""
    result = await client.trigger_sync(app_name, token)
    return result.model_dump()
