"""
Thin HTTP client for the Atlas instances API.

The client only sends requests and reports what came back. Deciding whether
a status code is acceptable is left to the lifecycle operations.
"""

from dataclasses import dataclass
from typing import Any
from urllib.parse import quote

import requests

from ..utils.exceptions import ConfigurationError, RequestError
from ..utils.logging import get_logger
from .auth import CredentialProvider, credential_provider_from_config

logger = get_logger(__name__)

API_PREFIX = "/api/v1alpha1/"
PROJECT_HEADER = "X-PROJECT-ID"


@dataclass
class ApiResponse:
    """Status and decoded JSON body of one API call."""

    status_code: int
    reason: str
    body: Any = None

    @property
    def status(self) -> str:
        return f"{self.status_code} {self.reason}".strip()


class AtlasClient:
    """Issues instance requests scoped to a project."""

    def __init__(
        self,
        base_url: str,
        credentials: CredentialProvider,
        session: requests.Session | None = None,
        timeout: float = 30,
    ) -> None:
        if not base_url:
            raise ConfigurationError("Atlas region URL must not be empty")
        self.base_url = base_url.rstrip("/") + API_PREFIX
        self.credentials = credentials
        self.session = session or requests.Session()
        self.timeout = timeout

    def _request(
        self,
        method: str,
        path: str,
        project_id: str,
        json: dict[str, Any] | None = None,
    ) -> ApiResponse:
        if not project_id:
            raise ConfigurationError("Project ID must accompany every request")

        headers = {
            "Authorization": f"Bearer {self.credentials.token()}",
            PROJECT_HEADER: str(project_id),
            "Accept": "application/json",
        }
        url = self.base_url + path
        logger.debug(f"{method} {url}")

        try:
            response = self.session.request(
                method, url, headers=headers, json=json, timeout=self.timeout
            )
        except requests.RequestException as e:
            raise RequestError(f"{method} {url} failed: {e}")

        body = None
        if response.content:
            try:
                body = response.json()
            except ValueError:
                logger.debug(f"Non-JSON response body from {method} {url}")

        return ApiResponse(response.status_code, response.reason or "", body)

    def create_instance(
        self,
        project_id: str,
        name: str,
        instance_type: str,
        ephemeral: bool | None = None,
    ) -> ApiResponse:
        payload: dict[str, Any] = {"name": name, "type": instance_type}
        if ephemeral is not None:
            payload["ephemeral"] = ephemeral
        return self._request("POST", "instances", project_id, json=payload)

    def get_instance(self, project_id: str, instance_id: str) -> ApiResponse:
        return self._request("GET", f"instances/{quote(str(instance_id))}", project_id)

    def list_instances(self, project_id: str) -> ApiResponse:
        return self._request("GET", "instances", project_id)

    def stop_instance(self, project_id: str, instance_id: str) -> ApiResponse:
        return self._request(
            "POST", f"instances/{quote(str(instance_id))}/actions/stop", project_id
        )

    def start_instance(self, project_id: str, instance_id: str) -> ApiResponse:
        return self._request(
            "POST", f"instances/{quote(str(instance_id))}/actions/start", project_id
        )

    def delete_instance(self, project_id: str, instance_id: str) -> ApiResponse:
        return self._request(
            "DELETE", f"instances/{quote(str(instance_id))}", project_id
        )


def client_from_config(
    config: dict[str, Any], session: requests.Session | None = None
) -> AtlasClient:
    """Build an AtlasClient from a validated configuration mapping."""
    session = session or requests.Session()
    return AtlasClient(
        base_url=config.get("ATLAS_REGION_URL", ""),
        credentials=credential_provider_from_config(config, session=session),
        session=session,
        timeout=float(config.get("ATLAS_REQUEST_TIMEOUT", 30)),
    )
