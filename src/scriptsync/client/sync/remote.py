"""Mapping of remote project files onto local paths.

This module provides:
- RemoteFile: A file record as returned by the remote API
- map_to_local: Annotates remote files with their local paths
- validate_remote_name: Rejects names that would escape the content directory
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from scriptsync.client.sync.extensions import ExtensionMap
from scriptsync.client.sync.types import InvalidRemoteNameError, UnknownTypeError
from scriptsync.core.types import FileType, ProjectFile

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RemoteFile:
    """File record from the remote project content."""

    name: str
    type: str
    source: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RemoteFile:
        """Create from API response dictionary."""
        return cls(
            name=data.get("name") or "",
            type=data.get("type") or "",
            source=data.get("source") or "",
        )


def validate_remote_name(name: str) -> str:
    """Check that a remote name maps to a path inside the content directory.

    Returns:
        The name with backslashes normalized to slashes.

    Raises:
        InvalidRemoteNameError: If the name is empty, absolute or uses ``..``.
    """
    normalized = name.replace("\\", "/")
    parts = normalized.split("/")
    if not normalized or normalized.startswith("/") or any(p in ("", ".", "..") for p in parts):
        raise InvalidRemoteNameError(name)
    if ":" in parts[0]:
        # Windows drive letter
        raise InvalidRemoteNameError(name)
    return normalized


def map_to_local(
    remote_files: Iterable[RemoteFile],
    extensions: ExtensionMap,
) -> list[ProjectFile]:
    """Assign a local path to every remote file.

    The local path is the remote name plus the preferred extension of its
    type, relative to the content directory.

    Raises:
        UnknownTypeError: If a file's type is unknown or has no extension.
        InvalidRemoteNameError: If a name would escape the content directory.
    """
    files: list[ProjectFile] = []
    for remote in remote_files:
        file_type = FileType.parse(remote.type)
        if file_type is None:
            raise UnknownTypeError(remote.type, remote.name)
        name = validate_remote_name(remote.name)
        try:
            extension = extensions.preferred_extension(file_type)
        except UnknownTypeError as e:
            raise UnknownTypeError(remote.type, remote.name) from e

        project_file = ProjectFile(
            remote_name=name,
            local_path=f"{name}{extension}",
            type=file_type,
            source=remote.source,
        )
        logger.debug("Mapped remote %s -> %s", name, project_file.local_path)
        files.append(project_file)
    return files
