"""Core module - Shared file model and API settings."""

from scriptsync.core.config import (
    ApiConfig,
    Credentials,
    CredentialsError,
    load_credentials,
)
from scriptsync.core.types import MANIFEST_NAME, FileType, ProjectFile

__all__ = [
    # Types
    "MANIFEST_NAME",
    "FileType",
    "ProjectFile",
    # Config
    "ApiConfig",
    "Credentials",
    "CredentialsError",
    "load_credentials",
]
