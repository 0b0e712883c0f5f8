"""Project file synchronization.

This module provides:
- ProjectFiles: Push, pull and status operations for one project
- PullResult: Outcome of a pull
- RemoteDiff: What a push would change on the remote side
- extract_syntax_error: Formats script syntax errors reported on push
"""

from __future__ import annotations

import logging
import re
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import PurePosixPath
from typing import TYPE_CHECKING

from scriptsync.client.api import APIError
from scriptsync.client.sync.collector import collect_local_files
from scriptsync.client.sync.planner import (
    classify,
    delete_files,
    plan_prune,
    plan_pull,
    plan_push,
    write_files,
)
from scriptsync.client.sync.remote import map_to_local
from scriptsync.client.sync.types import PushError, SyncClassification
from scriptsync.client.sync.watcher import DEFAULT_DEBOUNCE_S, OnChange, PushWatcher
from scriptsync.core.types import ProjectFile

if TYPE_CHECKING:
    from scriptsync.client.api import ScriptClient
    from scriptsync.client.project import ProjectConfig
    from scriptsync.client.sync.ignore import IgnoreRuleSet

logger = logging.getLogger(__name__)

SYNTAX_ERROR_PATTERN = re.compile(r"Syntax error: (.+?) line: (\d+) file: (.+)")
SNIPPET_CONTEXT_LINES = 2


@dataclass
class PullResult:
    """Outcome of a pull.

    Attributes:
        files: Every file of the pulled snapshot, placeholders included
        written: Local paths written
        prunable: Local paths tracked before the pull and absent from it
    """

    files: list[ProjectFile] = field(default_factory=list)
    written: list[str] = field(default_factory=list)
    prunable: list[str] = field(default_factory=list)


@dataclass
class RemoteDiff:
    """Differences between the tracked local files and the remote project.

    Attributes:
        changed: Local files missing remotely or differing from the remote
        removed: Remote names with no local counterpart
    """

    changed: list[ProjectFile] = field(default_factory=list)
    removed: list[str] = field(default_factory=list)

    def __bool__(self) -> bool:
        return bool(self.changed or self.removed)


def extract_syntax_error(
    message: str, files: Sequence[ProjectFile]
) -> tuple[str, str] | None:
    """Parse a script syntax error reported by the remote runtime.

    Args:
        message: Error message returned by the push.
        files: Files of the attempted push, used to build the snippet.

    Returns:
        (formatted message, code snippet), or None if the message is not a
        syntax error. The snippet shows the failing line, marked with ``>``,
        and up to two lines on each side.
    """
    match = SYNTAX_ERROR_PATTERN.search(message)
    if not match:
        return None

    error_name, line_str, file_name = match.groups()
    file_name = file_name.strip()
    line_number = int(line_str)
    formatted = f'{error_name} in file "{file_name}" at line {line_number}'

    stem = str(PurePosixPath(file_name).with_suffix(""))
    candidates = {file_name, stem, PurePosixPath(stem).name}
    error_file = next((f for f in files if f.remote_name in candidates), None)
    if error_file is None or not error_file.source:
        return formatted, "Could not retrieve code snippet."

    lines = error_file.source.split("\n")
    index = line_number - 1
    start = max(0, index - SNIPPET_CONTEXT_LINES)
    end = min(len(lines), index + SNIPPET_CONTEXT_LINES + 1)

    snippet_lines = []
    for offset, text in enumerate(lines[start:end]):
        current = start + offset + 1
        marker = "> " if current == line_number else "  "
        snippet_lines.append(f"{marker}{current:4d} | {text}")
    return formatted, "\n".join(snippet_lines)


class ProjectFiles:
    """Synchronizes the files of one local project with its remote project."""

    def __init__(
        self,
        config: ProjectConfig,
        rules: IgnoreRuleSet,
        client: ScriptClient | None = None,
    ) -> None:
        """Initialize the project view.

        Args:
            config: Project settings.
            rules: Ignore rules for the content directory.
            client: Remote API client; required by operations that talk to
                the remote project.
        """
        self._config = config
        self._rules = rules
        self._client = client

    @property
    def config(self) -> ProjectConfig:
        """Project settings."""
        return self._config

    @property
    def rules(self) -> IgnoreRuleSet:
        """Ignore rules in effect."""
        return self._rules

    def _require_client(self) -> ScriptClient:
        if self._client is None:
            raise RuntimeError("This operation needs a ScriptClient")
        return self._client

    def close(self) -> None:
        """Close the API client, if any."""
        if self._client is not None:
            self._client.close()

    def __enter__(self) -> ProjectFiles:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    # === Local ===

    def collect_local_files(self) -> list[ProjectFile]:
        """Collect tracked local files in push order.

        Raises:
            FileConflictError: If two files map to the same remote name.
        """
        return collect_local_files(
            self._config.content_dir,
            self._rules,
            self._config.file_extensions,
            skip_subdirectories=self._config.skip_subdirectories,
            file_push_order=self._config.file_push_order,
        )

    def classify(self) -> SyncClassification:
        """Split local files into tracked and untracked."""
        return classify(
            self._config.content_dir,
            self._rules,
            self._config.file_extensions,
            skip_subdirectories=self._config.skip_subdirectories,
            file_push_order=self._config.file_push_order,
        )

    def get_untracked_files(self) -> list[str]:
        """List untracked local entries, collapsed to directories."""
        return self.classify().untracked

    def missing_from_push_order(self, pushed: Sequence[ProjectFile]) -> list[str]:
        """List filePushOrder entries that matched none of the pushed files."""
        order = self._config.file_push_order
        if not order:
            return []
        names = {f.local_path for f in pushed} | {f.remote_name for f in pushed}
        return [entry for entry in order if entry not in names]

    # === Remote ===

    def fetch_remote(self, version_number: int | None = None) -> list[ProjectFile]:
        """Fetch the remote snapshot mapped to local paths.

        Args:
            version_number: Version to fetch; None for the current head.
        """
        script_id = self._config.require_script_id()
        remote = self._require_client().get_content(script_id, version_number)
        logger.debug("Fetched %d remote files", len(remote))
        return map_to_local(remote, self._config.file_extensions)

    def diff_remote(self) -> RemoteDiff:
        """Compare the tracked local files with the remote project.

        Returns:
            RemoteDiff, falsy when a push would change nothing.
        """
        local = self.collect_local_files()
        remote = {f.remote_name: f for f in self.fetch_remote()}
        changed = []
        for f in local:
            counterpart = remote.get(f.remote_name)
            if counterpart is None or counterpart.source != f.source or counterpart.type != f.type:
                changed.append(f)
        removed = sorted(set(remote) - {f.remote_name for f in local})
        logger.debug(
            "%d of %d local files differ from the remote, %d remote files removed locally",
            len(changed),
            len(local),
            len(removed),
        )
        return RemoteDiff(changed=changed, removed=removed)

    def get_changed_files(self) -> list[ProjectFile]:
        """List local files missing on the remote side or differing from it."""
        return self.diff_remote().changed

    def push(self) -> list[ProjectFile]:
        """Replace the remote file set with the tracked local files.

        Returns:
            Files pushed, in push order. Empty if nothing is tracked.

        Raises:
            PushError: If the remote rejected the push or could not be reached.
        """
        script_id = self._config.require_script_id()
        client = self._require_client()
        files = self.collect_local_files()
        if not files:
            logger.debug("No local files to push")
            return []

        payload = plan_push(files)
        logger.debug("Pushing %d files", len(payload))
        try:
            client.update_content(script_id, payload)
        except APIError as e:
            syntax_error = extract_syntax_error(str(e), files)
            if syntax_error:
                message, snippet = syntax_error
                raise PushError(message, files, cause=e, snippet=snippet) from e
            raise PushError(f"Push failed: {e}", files, cause=e) from e
        return files

    def pull(
        self,
        version_number: int | None = None,
        find_unused: bool = False,
    ) -> PullResult:
        """Write the remote snapshot into the content directory.

        Args:
            version_number: Version to pull; None for the current head.
            find_unused: Also list tracked local files the snapshot does not
                contain. Nothing is deleted; see prune().
        """
        existing = self.collect_local_files() if find_unused else []
        files = self.fetch_remote(version_number)
        written = write_files(self._config.content_dir, plan_pull(files))
        prunable = plan_prune(existing, files) if find_unused else []
        logger.debug("Pulled %d files, %d prunable", len(written), len(prunable))
        return PullResult(files=files, written=written, prunable=prunable)

    def prune(self, paths: Sequence[str]) -> list[str]:
        """Delete local files, typically PullResult.prunable."""
        return delete_files(self._config.content_dir, paths)

    # === Watch ===

    def watch(self, on_change: OnChange, debounce_s: float = DEFAULT_DEBOUNCE_S) -> PushWatcher:
        """Create a watcher on the content directory.

        The watcher is returned unstarted.
        """
        return PushWatcher(
            self._config.content_dir,
            on_change,
            rules=self._rules,
            debounce_s=debounce_s,
        )
