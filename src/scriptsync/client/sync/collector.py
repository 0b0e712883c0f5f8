"""Local file discovery for push and status.

This module provides:
- collect_local_files: Walks the content directory and builds ProjectFiles
- iter_local_paths: Lists every file under a directory as POSIX paths
- sort_by_push_order: Orders files by an explicit push order, then by name

Collection is read-only: files are never renamed or rewritten.
"""

from __future__ import annotations

import logging
import os
from collections import defaultdict
from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from pathlib import Path

from scriptsync.client.sync.extensions import ExtensionMap
from scriptsync.client.sync.ignore import IgnoreRuleSet
from scriptsync.client.sync.types import FileConflictError
from scriptsync.core.types import FileType, ProjectFile

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _Candidate:
    """A local file that passed ignore and extension checks."""

    local_path: str
    remote_name: str
    file_type: FileType


def iter_local_paths(root: Path, recursive: bool = True) -> Iterator[str]:
    """Yield every regular file under root as a POSIX path relative to root.

    Symlinks are skipped. Paths are yielded in sorted order. A missing
    root yields nothing.

    Args:
        root: Directory to walk.
        recursive: Whether to descend into subdirectories.
    """
    try:
        entries = sorted(os.scandir(root), key=lambda e: e.name)
    except (FileNotFoundError, NotADirectoryError):
        logger.debug("Directory %s does not exist, nothing to collect", root)
        return
    except PermissionError:
        logger.warning("Permission denied reading %s", root)
        return

    for entry in entries:
        if entry.is_symlink():
            continue
        if entry.is_file():
            yield entry.name
        elif entry.is_dir() and recursive:
            for child in iter_local_paths(Path(entry.path), recursive=True):
                yield f"{entry.name}/{child}"


def _is_hidden(relative_path: str) -> bool:
    return relative_path.split("/", 1)[0].startswith(".")


def _find_candidates(
    content_dir: Path,
    rules: IgnoreRuleSet,
    extensions: ExtensionMap,
    skip_subdirectories: bool,
) -> list[_Candidate]:
    candidates: list[_Candidate] = []
    for relative_path in iter_local_paths(content_dir, recursive=not skip_subdirectories):
        if rules.matches(relative_path):
            continue
        if _is_hidden(relative_path) and not rules.explicitly_includes(relative_path):
            continue

        resolved = extensions.split(relative_path)
        if resolved is None:
            logger.debug("Skipping unsupported file type: %s", relative_path)
            continue

        remote_name, file_type = resolved
        candidates.append(_Candidate(relative_path, remote_name, file_type))
    return candidates


def _check_conflicts(candidates: Sequence[_Candidate]) -> None:
    groups: dict[str, list[str]] = defaultdict(list)
    for candidate in candidates:
        groups[candidate.remote_name].append(candidate.local_path)

    for remote_name, paths in groups.items():
        if len(paths) > 1:
            raise FileConflictError(remote_name, paths)


def sort_by_push_order(
    files: Sequence[ProjectFile],
    push_order: Sequence[str] | None = None,
) -> list[ProjectFile]:
    """Order files for push.

    Files named in ``push_order`` (by local path or remote name) come
    first, in that order; the rest follow sorted by remote name.
    """
    rank: dict[str, int] = {}
    for index, entry in enumerate(push_order or ()):
        rank.setdefault(entry.replace("\\", "/").removeprefix("./"), index)

    def key(file: ProjectFile) -> tuple[int, int, str]:
        position = min(
            rank.get(file.local_path, len(rank)),
            rank.get(file.remote_name, len(rank)),
        )
        if position < len(rank):
            return (0, position, file.remote_name)
        return (1, 0, file.remote_name)

    return sorted(files, key=key)


def collect_local_files(
    content_dir: Path,
    rules: IgnoreRuleSet,
    extensions: ExtensionMap,
    skip_subdirectories: bool = False,
    file_push_order: Sequence[str] | None = None,
) -> list[ProjectFile]:
    """Collect the project files under a content directory.

    Args:
        content_dir: Root of the synced sources.
        rules: Ignore rules, matched against paths relative to content_dir.
        extensions: Extension to type mapping.
        skip_subdirectories: Only look at files directly in content_dir.
        file_push_order: Files to place first, by local path or remote name.

    Returns:
        Files in push order, each with a unique remote name.

    Raises:
        FileConflictError: If two files map to the same remote name.
    """
    content_dir = Path(content_dir)
    logger.debug(
        "Collecting files in %s (recursive: %s)", content_dir, not skip_subdirectories
    )

    candidates = _find_candidates(content_dir, rules, extensions, skip_subdirectories)
    _check_conflicts(candidates)

    files: list[ProjectFile] = []
    for candidate in candidates:
        try:
            source = (content_dir / candidate.local_path).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Could not read %s, skipping: %s", candidate.local_path, e)
            continue
        files.append(
            ProjectFile(
                remote_name=candidate.remote_name,
                local_path=candidate.local_path,
                type=candidate.file_type,
                source=source,
            )
        )

    logger.debug("Collected %d local files", len(files))
    return sort_by_push_order(files, file_push_order)
