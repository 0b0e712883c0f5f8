"""HTTP client for the remote script project API.

This module provides:
- ScriptClient: HTTP client for project content and listings
- APIError (TransportError) and subclasses for failed calls
- Version, Deployment, ScriptInfo: Listing records
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

import httpx

from scriptsync.client.sync.pagination import fetch_with_pages
from scriptsync.client.sync.remote import RemoteFile
from scriptsync.client.sync.types import Page, PagedResults
from scriptsync.core.config import ApiConfig

logger = logging.getLogger(__name__)

SCRIPT_MIME_TYPE = "application/vnd.google-apps.script"

ERROR_CODES = {
    400: "INVALID_ARGUMENT",
    401: "NOT_AUTHENTICATED",
    403: "NOT_AUTHORIZED",
    404: "NOT_FOUND",
}


class APIError(Exception):
    """Base exception for API errors.

    Attributes:
        status_code: HTTP status, or None for network failures
        code: Short error code (e.g. "INVALID_ARGUMENT", "NETWORK_ERROR")
        details: Per-file or per-field messages returned by the server
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        code: str = "UNEXPECTED_API_ERROR",
        details: Sequence[str] = (),
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.code = code
        self.details = list(details)


TransportError = APIError


class AuthenticationError(APIError):
    """Authentication failed."""


class PermissionDeniedError(APIError):
    """The authenticated user may not perform this action."""


class NotFoundError(APIError):
    """Resource not found."""


@dataclass
class Version:
    """Immutable project version."""

    version_number: int
    description: str = ""
    create_time: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Version:
        """Create from API response dictionary."""
        return cls(
            version_number=int(data["versionNumber"]),
            description=data.get("description") or "",
            create_time=data.get("createTime"),
        )


@dataclass
class Deployment:
    """Project deployment."""

    deployment_id: str
    version_number: int | None = None
    description: str = ""
    update_time: str | None = None
    entry_points: list[dict[str, Any]] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Deployment:
        """Create from API response dictionary."""
        config = data.get("deploymentConfig") or {}
        version = config.get("versionNumber")
        return cls(
            deployment_id=data["deploymentId"],
            version_number=int(version) if version is not None else None,
            description=config.get("description") or "",
            update_time=data.get("updateTime"),
            entry_points=list(data.get("entryPoints") or []),
        )


@dataclass
class ScriptInfo:
    """Script project visible to the user."""

    id: str
    name: str

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ScriptInfo:
        """Create from API response dictionary."""
        return cls(id=data["id"], name=data.get("name") or "")


def _error_details(error: dict[str, Any]) -> list[str]:
    details: list[str] = []
    for detail in error.get("details") or []:
        if not isinstance(detail, dict):
            continue
        if detail.get("errorMessage"):
            details.append(str(detail["errorMessage"]))
        for violation in detail.get("fieldViolations") or []:
            description = violation.get("description")
            if description:
                details.append(str(description))
    return details


class ScriptClient:
    """HTTP client for the remote script project API."""

    def __init__(
        self,
        config: ApiConfig,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            config: API URLs, credentials and timeout.
            transport: Optional httpx transport (used by tests).
        """
        self._config = config
        self._client = httpx.Client(
            timeout=config.timeout,
            headers={"Authorization": config.credentials.authorization_header},
            transport=transport,
        )

    def close(self) -> None:
        """Close the HTTP client."""
        self._client.close()

    def __enter__(self) -> ScriptClient:
        """Context manager entry."""
        return self

    def __exit__(self, *args: object) -> None:
        """Context manager exit."""
        self.close()

    def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        logger.debug("%s %s", method, url)
        try:
            response = self._client.request(method, url, **kwargs)
        except httpx.RequestError as e:
            raise TransportError(f"Network error: {e}", code="NETWORK_ERROR") from e
        return self._handle_response(response)

    def _handle_response(self, response: httpx.Response) -> httpx.Response:
        """Handle API response and raise appropriate exceptions."""
        if response.status_code < 400:
            return response

        message = response.reason_phrase or "Unknown error"
        details: list[str] = []
        try:
            payload = response.json()
        except ValueError:
            payload = None
        if isinstance(payload, dict) and isinstance(payload.get("error"), dict):
            error = payload["error"]
            message = error.get("message") or message
            details = _error_details(error)

        status = response.status_code
        code = ERROR_CODES.get(status, "UNEXPECTED_API_ERROR")
        if status == 401:
            raise AuthenticationError(message, status, code, details)
        if status == 403:
            raise PermissionDeniedError(message, status, code, details)
        if status == 404:
            raise NotFoundError(message, status, code, details)
        raise APIError(message, status, code, details)

    def _project_url(self, script_id: str, suffix: str) -> str:
        return f"{self._config.script_api_url}/projects/{script_id}/{suffix}"

    # === Project content ===

    def get_content(self, script_id: str, version_number: int | None = None) -> list[RemoteFile]:
        """Get the files of a project.

        Args:
            script_id: Project identifier.
            version_number: Version to fetch; None for the current head.

        Returns:
            Remote file records.
        """
        params = {}
        if version_number is not None:
            params["versionNumber"] = str(version_number)
        response = self._request("GET", self._project_url(script_id, "content"), params=params)
        return [RemoteFile.from_dict(f) for f in response.json().get("files") or []]

    def update_content(self, script_id: str, files: Sequence[dict[str, Any]]) -> None:
        """Replace the whole file set of a project.

        Args:
            script_id: Project identifier.
            files: Complete ``{name, type, source}`` list.
        """
        self._request(
            "PUT",
            self._project_url(script_id, "content"),
            json={"scriptId": script_id, "files": list(files)},
        )

    # === Listings ===

    def list_versions_page(
        self, script_id: str, page_size: int, page_token: str | None
    ) -> Page[Version]:
        """Fetch one page of project versions."""
        params = {"pageSize": str(page_size)}
        if page_token:
            params["pageToken"] = page_token
        data = self._request("GET", self._project_url(script_id, "versions"), params=params).json()
        return Page(
            results=[Version.from_dict(v) for v in data.get("versions") or []],
            next_page_token=data.get("nextPageToken"),
        )

    def list_deployments_page(
        self, script_id: str, page_size: int, page_token: str | None
    ) -> Page[Deployment]:
        """Fetch one page of project deployments."""
        params = {"pageSize": str(page_size)}
        if page_token:
            params["pageToken"] = page_token
        data = self._request(
            "GET", self._project_url(script_id, "deployments"), params=params
        ).json()
        return Page(
            results=[Deployment.from_dict(d) for d in data.get("deployments") or []],
            next_page_token=data.get("nextPageToken"),
        )

    def list_scripts_page(self, page_size: int, page_token: str | None) -> Page[ScriptInfo]:
        """Fetch one page of script projects visible to the user."""
        params = {
            "pageSize": str(page_size),
            "q": f'mimeType="{SCRIPT_MIME_TYPE}"',
            "fields": "nextPageToken, files(id, name)",
        }
        if page_token:
            params["pageToken"] = page_token
        data = self._request("GET", f"{self._config.drive_api_url}/files", params=params).json()
        return Page(
            results=[ScriptInfo.from_dict(f) for f in data.get("files") or []],
            next_page_token=data.get("nextPageToken"),
        )

    def list_versions(self, script_id: str, **limits: int) -> PagedResults[Version]:
        """List project versions across pages."""
        return fetch_with_pages(
            lambda size, token: self.list_versions_page(script_id, size, token), **limits
        )

    def list_deployments(self, script_id: str, **limits: int) -> PagedResults[Deployment]:
        """List project deployments across pages."""
        return fetch_with_pages(
            lambda size, token: self.list_deployments_page(script_id, size, token), **limits
        )

    def list_scripts(self, **limits: int) -> PagedResults[ScriptInfo]:
        """List script projects across pages."""
        return fetch_with_pages(self.list_scripts_page, **limits)
