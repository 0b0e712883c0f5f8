"""Shared types and exceptions for sync operations.

This module provides:
- SyncError and its subclasses: ConfigError, FileConflictError,
  UnknownTypeError, InvalidRemoteNameError, PushError
- PartialResultsWarning: Signals a truncated paged listing
- WriteEntry: One file write of a pull plan
- SyncClassification: Result of status analysis
- Page, PagedResults: Pagination containers
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

from scriptsync.core.types import ProjectFile

T = TypeVar("T")


class SyncError(Exception):
    """Base exception for sync errors."""


class ConfigError(SyncError):
    """Project or ignore configuration is unreadable, malformed or incomplete."""


class FileConflictError(SyncError):
    """Two local files resolve to the same remote name.

    Attributes:
        basename: The shared remote name
        paths: Local paths that collide
    """

    def __init__(self, basename: str, paths: Sequence[str] = ()) -> None:
        self.basename = basename
        self.paths = list(paths)
        listing = ", ".join(self.paths)
        super().__init__(
            f"File conflict: more than one file would be named {basename!r} "
            f"in the remote project ({listing}). Rename one of them."
        )


class UnknownTypeError(SyncError):
    """A remote file type has no configured extension mapping."""

    def __init__(self, file_type: str | None, remote_name: str | None = None) -> None:
        self.file_type = file_type
        self.remote_name = remote_name
        where = f" for {remote_name!r}" if remote_name else ""
        super().__init__(f"No local extension configured for file type {file_type!r}{where}")


class InvalidRemoteNameError(SyncError):
    """A remote file name would resolve outside the content directory."""

    def __init__(self, remote_name: str) -> None:
        self.remote_name = remote_name
        super().__init__(f"Refusing to write remote file with unsafe name: {remote_name!r}")


class PushError(SyncError):
    """A push was rejected or failed in transport.

    Attributes:
        files: Every file of the attempted payload, in push order
        cause: The underlying transport error
        snippet: Source excerpt around a reported syntax error, if any
    """

    def __init__(
        self,
        message: str,
        files: Sequence[ProjectFile],
        cause: Exception | None = None,
        snippet: str | None = None,
    ) -> None:
        super().__init__(message)
        self.files = list(files)
        self.cause = cause
        self.snippet = snippet


class PartialResultsWarning(UserWarning):
    """A paged listing stopped at its page or result limit."""


@dataclass(frozen=True)
class WriteEntry:
    """One file to write during a pull."""

    local_path: str
    source: str


@dataclass
class SyncClassification:
    """Tracked and untracked local files."""

    tracked: list[ProjectFile] = field(default_factory=list)
    untracked: list[str] = field(default_factory=list)


@dataclass
class Page(Generic[T]):
    """A single page returned by a listing endpoint."""

    results: list[T]
    next_page_token: str | None = None

    @classmethod
    def coerce(cls, value: Page[T] | dict[str, Any]) -> Page[T]:
        """Accept either a Page or a mapping with the same keys."""
        if isinstance(value, Page):
            return value
        token = value.get("next_page_token", value.get("nextPageToken"))
        return cls(results=list(value.get("results") or []), next_page_token=token or None)


@dataclass
class PagedResults(Generic[T]):
    """Results accumulated across pages.

    Attributes:
        results: All collected items
        partial: True if more items may exist beyond what was fetched
    """

    results: list[T]
    partial: bool = False
