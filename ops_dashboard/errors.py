"""
Error taxonomy for the Ops Dashboard.

Services raise these; the HTTP boundary maps them to status codes using
``status_code`` and renders ``to_dict()`` as the response body.
"""

from typing import Any, Dict, Optional


class DashboardError(Exception):
    """Base class for errors with a stable code and HTTP status."""

    code = "INTERNAL_ERROR"
    status_code = 500

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        error: Dict[str, Any] = {"code": self.code, "message": self.message}
        if self.details:
            error["details"] = self.details
        return {"error": error}


class ValidationError(DashboardError):
    """Raised when a request body does not match the expected shape."""

    code = "VALIDATION_ERROR"
    status_code = 400


class UnauthorizedError(DashboardError):
    """Raised when a required credential is missing."""

    code = "UNAUTHORIZED"
    status_code = 401


class NotFoundError(DashboardError):
    """Raised when a referenced row does not exist."""

    code = "NOT_FOUND"
    status_code = 404

    def __init__(self, entity_kind: str, entity_id: Any):
        self.entity_kind = entity_kind
        self.entity_id = entity_id
        super().__init__(
            f"{entity_kind} not found",
            details={"entity_kind": entity_kind, "entity_id": entity_id},
        )


class ConflictError(DashboardError):
    """Raised when an operation is illegal for the current state."""

    code = "CONFLICT"
    status_code = 409


class UpstreamError(DashboardError):
    """Raised when the remote CD API fails or answers with a non-success status."""

    code = "UPSTREAM_ERROR"
    status_code = 500

    def __init__(self, message: str, upstream_status: Optional[int] = None):
        self.upstream_status = upstream_status
        details = {"upstream_status": upstream_status} if upstream_status else None
        super().__init__(message, details=details)


class PersistenceError(DashboardError):
    """Raised when a database operation fails."""

    code = "PERSISTENCE_ERROR"
    status_code = 500
