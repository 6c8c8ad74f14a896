from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, constr


class TodoCreate(BaseModel):
    """Request body for POST /todos."""

    model_config = ConfigDict(
        extra="forbid",
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "title": "Review pull requests",
                "entityRef": "component:default/ops-dashboard",
                "user_id": 2,
            }
        },
    )

    title: constr(strip_whitespace=True, min_length=1, max_length=255)
    entity_ref: Optional[constr(min_length=1, max_length=255)] = Field(
        default=None, alias="entityRef"
    )
    user_id: Optional[int] = Field(default=None, ge=1)
    completion_time: Optional[datetime] = None


class ModelCreate(BaseModel):
    """Request body for POST /models/add."""

    model_config = ConfigDict(
        extra="forbid",
        protected_namespaces=(),
        json_schema_extra={
            "example": {
                "name": "churn-classifier",
                "version": "1.0.0",
                "description": "Gradient boosted churn model",
                "model_uri": "s3://models/churn/1.0.0",
                "registered_by": "alice",
            }
        },
    )

    name: constr(strip_whitespace=True, min_length=1, max_length=255)
    version: constr(strip_whitespace=True, min_length=1, max_length=64)
    description: Optional[str] = None
    model_uri: constr(strip_whitespace=True, min_length=1, max_length=1024)
    registered_by: Optional[constr(min_length=1, max_length=255)] = None


class JobCreate(BaseModel):
    """Request body for POST /jobs/add."""

    model_config = ConfigDict(
        extra="forbid",
        json_schema_extra={"example": {"data_source_uri": "https://example.com/data.csv"}},
    )

    data_source_uri: constr(strip_whitespace=True, min_length=1, max_length=1024)


class JobActionResponse(BaseModel):
    """Response body for the job lifecycle endpoints."""

    message: str
    job: Dict[str, Any]


class ArgoTokenRequest(BaseModel):
    """Request body carrying the caller's Argo CD bearer credential.

    ``token`` is optional at the schema level so that a missing credential is
    reported as 401 rather than a body validation error.
    """

    token: Optional[str] = None


class ArgoApplication(BaseModel):
    """Normalized view of an Argo CD Application."""

    name: str = "Unknown"
    namespace: str = "Unknown"
    created_at: Optional[str] = None
    health: str = "Unknown"
    sync_status: str = "Unknown"
    revision: Optional[str] = None
    last_synced_at: Optional[str] = None


class ArgoSyncResult(BaseModel):
    """Normalized result of an Argo CD sync request."""

    name: str
    sync_status: str = "Unknown"
    phase: str = "Unknown"
    message: Optional[str] = None
