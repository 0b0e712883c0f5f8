"""Core types shared by the engine, the API client and the CLI.

This module provides:
- FileType: Logical type of a project file (script, markup, config)
- ProjectFile: One logical unit of source with its local and remote names
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

MANIFEST_NAME = "appsscript"


class FileType(Enum):
    """Logical type of a project file.

    Values are the type strings used by the remote API.
    """

    SCRIPT = "SERVER_JS"
    MARKUP = "HTML"
    CONFIG = "JSON"

    @classmethod
    def parse(cls, value: str | None) -> FileType | None:
        """Parse a type string.

        Accepts either the remote value ("SERVER_JS") or the member
        name ("SCRIPT"), case-insensitively.

        Returns:
            The matching FileType, or None if the string names no known type.
        """
        if not value:
            return None
        key = value.strip().upper()
        for member in cls:
            if key in (member.value, member.name):
                return member
        return None


@dataclass(frozen=True)
class ProjectFile:
    """A project file as seen by both sides of the sync.

    Attributes:
        remote_name: Slash-separated, extension-free name on the remote side.
        local_path: POSIX path relative to the content directory.
        type: Logical file type.
        source: Text content. Empty source is valid but never written on pull.
    """

    remote_name: str
    local_path: str
    type: FileType
    source: str = ""

    def to_remote(self) -> dict[str, Any]:
        """Render the file the way the remote API expects it on push."""
        return {
            "name": self.remote_name,
            "type": self.type.value,
            "source": self.source,
        }
