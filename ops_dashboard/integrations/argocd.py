"""
Argo CD integration.

Thin client for the Argo CD REST API. The caller's bearer token is passed on
every call and never kept on the client. TLS certificates are always
verified; self-signed endpoints need an explicit CA bundle.
"""

import ssl
from typing import Any, Dict, List, Optional, Union
from urllib.parse import quote

import httpx
import structlog

from ..config import Settings, get_settings
from ..errors import UpstreamError
from ..schemas.dashboard import ArgoApplication, ArgoSyncResult

logger = structlog.get_logger()

UNKNOWN = "Unknown"


def _get(data: Any, *path: str) -> Any:
    """Walk nested dicts, returning None as soon as a key is missing."""
    for key in path:
        if not isinstance(data, dict):
            return None
        data = data.get(key)
    return data


def normalize_application(item: Dict[str, Any]) -> ArgoApplication:
    """Flatten an Argo CD Application resource into the dashboard's shape."""
    return ArgoApplication(
        name=_get(item, "metadata", "name") or UNKNOWN,
        namespace=_get(item, "metadata", "namespace") or UNKNOWN,
        created_at=_get(item, "metadata", "creationTimestamp"),
        health=_get(item, "status", "health", "status") or UNKNOWN,
        sync_status=_get(item, "status", "sync", "status") or UNKNOWN,
        revision=_get(item, "status", "sync", "revision"),
        last_synced_at=_get(item, "status", "operationState", "finishedAt"),
    )


def normalize_application_list(payload: Any) -> List[ArgoApplication]:
    """Normalize an ApplicationList response.

    Argo CD encodes an empty list as ``"items": null``.
    """
    if not isinstance(payload, dict) or "items" not in payload:
        raise UpstreamError("Invalid data format")

    items = payload["items"]
    if items is None:
        return []
    if not isinstance(items, list):
        raise UpstreamError("Invalid data format")

    return [normalize_application(item) for item in items]


def normalize_sync_result(app_name: str, payload: Any) -> ArgoSyncResult:
    """Reduce the Application returned by a sync request to its sync state."""
    if not isinstance(payload, dict):
        raise UpstreamError("Invalid data format")

    return ArgoSyncResult(
        name=_get(payload, "metadata", "name") or app_name,
        sync_status=_get(payload, "status", "sync", "status") or UNKNOWN,
        phase=_get(payload, "status", "operationState", "phase") or UNKNOWN,
        message=_get(payload, "status", "operationState", "message"),
    )


class ArgoCDClient:
    """
    Client for the Argo CD applications API.
    """

    def __init__(
        self,
        base_url: Optional[str],
        ca_bundle: Optional[str] = None,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/") if base_url else None
        verify: Union[bool, ssl.SSLContext] = True
        if ca_bundle:
            try:
                verify = ssl.create_default_context(cafile=ca_bundle)
            except OSError as e:
                logger.error("argocd_ca_bundle_invalid", ca_bundle=ca_bundle, error=str(e))
                raise UpstreamError(f"Invalid Argo CD CA bundle: {e}") from e
        self.client = httpx.AsyncClient(
            timeout=timeout,
            verify=verify,
            transport=transport,
            headers={"Content-Type": "application/json"},
        )

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "ArgoCDClient":
        settings = settings or get_settings()
        return cls(
            base_url=settings.argocd_base_url,
            ca_bundle=settings.argocd_ca_bundle,
            timeout=settings.argocd_timeout_seconds,
        )

    async def close(self) -> None:
        """Close the HTTP client."""
        await self.client.aclose()

    async def __aenter__(self) -> "ArgoCDClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    def _url(self, path: str) -> str:
        if not self.base_url:
            raise UpstreamError("Argo CD base URL is not configured")
        return f"{self.base_url}{path}"

    async def _request(
        self, method: str, path: str, token: str, failure: str
    ) -> Any:
        url = self._url(path)
        headers = {"Authorization": f"Bearer {token}"}

        try:
            response = await self.client.request(method, url, headers=headers)
        except httpx.RequestError as e:
            logger.error("argocd_request_failed", method=method, path=path, error=str(e))
            raise UpstreamError(f"{failure}: {e}") from e

        if not response.is_success:
            logger.warning(
                "argocd_non_success",
                method=method,
                path=path,
                status_code=response.status_code,
            )
            raise UpstreamError(
                f"{failure}: {response.reason_phrase}",
                upstream_status=response.status_code,
            )

        try:
            return response.json()
        except ValueError as e:
            raise UpstreamError(f"{failure}: invalid JSON response") from e

    async def list_applications(self, token: str) -> List[ArgoApplication]:
        """Fetch and normalize all applications visible to ``token``."""
        payload = await self._request(
            "GET", "/api/v1/applications", token, "Failed to fetch applications"
        )
        applications = normalize_application_list(payload)
        logger.info("argocd_applications_fetched", count=len(applications))
        return applications

    async def trigger_sync(self, app_name: str, token: str) -> ArgoSyncResult:
        """Ask Argo CD to sync ``app_name``."""
        path = f"/api/v1/applications/{quote(app_name, safe='')}/sync"
        payload = await self._request("POST", path, token, "Failed to sync application")
        result = normalize_sync_result(app_name, payload)
        logger.info("argocd_sync_triggered", app_name=app_name, phase=result.phase)
        return result
