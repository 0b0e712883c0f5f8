"""Connection settings and credentials for the remote script API.

This module defines the configuration objects handed to the API client.
Nothing here is process-wide: callers build an ApiConfig and pass it in.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path

TOKEN_ENV_VAR = "SCRIPTSYNC_TOKEN"
CREDENTIALS_FILE_NAME = ".scriptsyncrc.json"

DEFAULT_SCRIPT_API_URL = "https://script.googleapis.com/v1"
DEFAULT_DRIVE_API_URL = "https://www.googleapis.com/drive/v3"


class CredentialsError(Exception):
    """No usable access token was found."""


@dataclass(frozen=True)
class Credentials:
    """OAuth access token for the remote API.

    Obtaining and refreshing the token happens outside this package.
    """

    access_token: str

    def __post_init__(self) -> None:
        if not self.access_token:
            raise CredentialsError("Access token cannot be empty")

    @property
    def authorization_header(self) -> str:
        """Value of the Authorization header."""
        return f"Bearer {self.access_token}"


@dataclass
class ApiConfig:
    """Configuration for connecting to the remote script API.

    Attributes:
        credentials: Access token holder.
        script_api_url: Base URL of the script projects API.
        drive_api_url: Base URL of the Drive API (script listing).
        timeout: Request timeout in seconds.
    """

    credentials: Credentials
    script_api_url: str = DEFAULT_SCRIPT_API_URL
    drive_api_url: str = DEFAULT_DRIVE_API_URL
    timeout: float = 30.0

    def __post_init__(self) -> None:
        """Normalize base URLs."""
        self.script_api_url = self.script_api_url.rstrip("/")
        self.drive_api_url = self.drive_api_url.rstrip("/")


def get_credentials_file() -> Path:
    """Get the path to the user's credentials file."""
    return Path.home() / CREDENTIALS_FILE_NAME


def load_credentials(token: str | None = None, path: Path | None = None) -> Credentials:
    """Resolve credentials from an explicit token, the environment or a file.

    Args:
        token: Explicit token; wins over every other source.
        path: Credentials file; defaults to ~/.scriptsyncrc.json.

    Raises:
        CredentialsError: If no token is found or the file is malformed.
    """
    if token:
        return Credentials(token)

    env_token = os.environ.get(TOKEN_ENV_VAR)
    if env_token:
        return Credentials(env_token)

    credentials_file = path or get_credentials_file()
    if not credentials_file.exists():
        raise CredentialsError(
            f"Not authenticated. Pass --token, set {TOKEN_ENV_VAR} "
            f"or create {credentials_file}."
        )
    try:
        data = json.loads(credentials_file.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        raise CredentialsError(f"Could not read {credentials_file}: {e}") from e

    stored = data.get("access_token") if isinstance(data, dict) else None
    if not isinstance(stored, str) or not stored:
        raise CredentialsError(f"No access_token in {credentials_file}")
    return Credentials(stored)
