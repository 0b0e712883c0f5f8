"""Push, pull and status planning.

This module provides:
- plan_push: Whole-set push payload
- plan_pull / write_files: Pull write plan and its application
- plan_prune / delete_files: Files made obsolete by a pull, and their removal
- classify / untracked_paths: Tracked vs. untracked files for status

Planning functions never touch the filesystem; write_files and
delete_files are the only functions here that modify it.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from pathlib import Path, PurePosixPath
from typing import Any

from scriptsync.client.sync.collector import collect_local_files, iter_local_paths
from scriptsync.client.sync.extensions import ExtensionMap
from scriptsync.client.sync.ignore import IgnoreRuleSet
from scriptsync.client.sync.types import SyncClassification, WriteEntry
from scriptsync.core.types import ProjectFile

logger = logging.getLogger(__name__)


# =============================================================================
# Push
# =============================================================================


def plan_push(files: Sequence[ProjectFile]) -> list[dict[str, Any]]:
    """Build the payload replacing the whole remote file set.

    Args:
        files: Every tracked file, already in push order.

    Returns:
        ``{name, type, source}`` records in the same order.
    """
    return [f.to_remote() for f in files]


# =============================================================================
# Pull
# =============================================================================


def plan_pull(files: Iterable[ProjectFile]) -> list[WriteEntry]:
    """Build the list of files to write for a pull.

    Files with empty source are placeholders on the remote side and are
    left out.
    """
    plan: list[WriteEntry] = []
    for f in files:
        if not f.source:
            logger.debug("Skipping placeholder file with no source: %s", f.local_path)
            continue
        plan.append(WriteEntry(local_path=f.local_path, source=f.source))
    return plan


def write_files(content_dir: Path, plan: Iterable[WriteEntry]) -> list[str]:
    """Write a pull plan under the content directory.

    Parent directories are created as needed.

    Returns:
        Local paths written.
    """
    written: list[str] = []
    for entry in plan:
        target = Path(content_dir) / entry.local_path
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(entry.source, encoding="utf-8")
        logger.debug("Wrote %s", target)
        written.append(entry.local_path)
    return written


def plan_prune(
    existing: Iterable[ProjectFile],
    pulled: Iterable[ProjectFile],
) -> list[str]:
    """List local files that a pull made obsolete.

    Args:
        existing: Tracked local files before the pull.
        pulled: Files of the pulled snapshot (placeholders included).

    Returns:
        Sorted local paths tracked before the pull but absent from it.
    """
    pulled_paths = {f.local_path for f in pulled}
    return sorted({f.local_path for f in existing} - pulled_paths)


def delete_files(content_dir: Path, paths: Iterable[str]) -> list[str]:
    """Delete local files, then any directories this leaves empty.

    The content directory itself is never removed.

    Returns:
        Local paths deleted.
    """
    root = Path(content_dir)
    deleted: list[str] = []
    for relative in paths:
        target = root / relative
        if not target.is_file():
            logger.debug("Not deleting %s: not a file", target)
            continue
        target.unlink()
        deleted.append(relative)
        logger.debug("Deleted %s", target)

        parent = target.parent
        while parent != root and root in parent.parents and not any(parent.iterdir()):
            parent.rmdir()
            parent = parent.parent
    return deleted


# =============================================================================
# Status
# =============================================================================


def _parent_dirs(path: str) -> list[str]:
    parents = [p.as_posix() for p in PurePosixPath(path).parents]
    return [p for p in parents if p != "."]


def untracked_paths(all_paths: Iterable[str], tracked_paths: Iterable[str]) -> list[str]:
    """Collapse untracked files into their highest fully-untracked directory.

    A directory is reported (with a trailing ``/``) in place of its files
    when nothing under it is tracked.

    Args:
        all_paths: Every local file, as POSIX paths.
        tracked_paths: Local paths of tracked files.

    Returns:
        Sorted, de-duplicated untracked entries.
    """
    tracked = set(tracked_paths)
    tracked_dirs: set[str] = set()
    for path in tracked:
        tracked_dirs.update(_parent_dirs(path))

    entries: set[str] = set()
    for path in all_paths:
        if path in tracked:
            continue
        display = path
        for parent in _parent_dirs(path):
            if parent in tracked_dirs:
                break
            display = parent + "/"
        entries.add(display)
    return sorted(entries)


def classify(
    content_dir: Path,
    rules: IgnoreRuleSet,
    extensions: ExtensionMap,
    skip_subdirectories: bool = False,
    file_push_order: Sequence[str] | None = None,
) -> SyncClassification:
    """Split local files into tracked files and untracked entries.

    Raises:
        FileConflictError: If two tracked files map to the same remote name.
    """
    tracked = collect_local_files(
        content_dir,
        rules,
        extensions,
        skip_subdirectories=skip_subdirectories,
        file_push_order=file_push_order,
    )
    untracked = untracked_paths(
        iter_local_paths(Path(content_dir)),
        (f.local_path for f in tracked),
    )
    logger.debug("Found %d tracked and %d untracked entries", len(tracked), len(untracked))
    return SyncClassification(tracked=tracked, untracked=untracked)
