"""Ignore rules for local file collection.

This module provides:
- IgnoreRuleSet: gitignore-style pattern matching backed by pathspec
- load_ignore_rules: Loads rules from an ignore file or falls back to defaults
- DEFAULT_IGNORE_PATTERNS: Rules used when no ignore file exists
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

import pathspec

from scriptsync.client.sync.types import ConfigError

logger = logging.getLogger(__name__)

IGNORE_FILE_NAME = ".scriptsyncignore"

# Ignore everything except project sources, then drop VCS and dependency dirs
DEFAULT_IGNORE_PATTERNS = (
    "**/**",
    "!**/appsscript.json",
    "!**/*.gs",
    "!**/*.js",
    "!**/*.ts",
    "!**/*.html",
    ".git/**",
    "node_modules/**",
)


def normalize_path(path: str | Path) -> str:
    """Convert a relative path to the POSIX form the matcher expects."""
    posix = str(path).replace("\\", "/")
    while posix.startswith("./"):
        posix = posix[2:]
    return posix.lstrip("/")


def _names_dot_segment(pattern: str) -> bool:
    return any(
        part.startswith(".") and part not in (".", "..")
        for part in pattern.strip("/").split("/")
    )


class IgnoreRuleSet:
    """An ordered, immutable list of gitignore-style patterns.

    Later patterns take precedence, so a ``!pattern`` re-includes paths
    excluded by an earlier, broader pattern.
    """

    def __init__(self, patterns: Iterable[str] = (), source: Path | None = None) -> None:
        """Initialize the rule set.

        Args:
            patterns: Patterns in file order.
            source: Ignore file the patterns came from, if any.
        """
        self._patterns = tuple(patterns)
        self._source = source
        self._spec = pathspec.GitIgnoreSpec.from_lines(self._patterns)
        self._dot_includes = pathspec.GitIgnoreSpec.from_lines(
            [p[1:] for p in self._patterns if p.startswith("!") and _names_dot_segment(p[1:])],
        )

    @classmethod
    def default(cls) -> IgnoreRuleSet:
        """Rule set used when the project has no ignore file."""
        return cls(DEFAULT_IGNORE_PATTERNS)

    @property
    def patterns(self) -> tuple[str, ...]:
        """Patterns in evaluation order."""
        return self._patterns

    @property
    def source(self) -> Path | None:
        """Ignore file these rules were loaded from, or None for defaults."""
        return self._source

    def matches(self, relative_path: str | Path) -> bool:
        """Check whether a path is excluded.

        Args:
            relative_path: Path relative to the content directory, using
                either separator.

        Returns:
            True if the path should be ignored.
        """
        return self._spec.match_file(normalize_path(relative_path))

    def explicitly_includes(self, relative_path: str | Path) -> bool:
        """Check whether a negation pattern naming a dot path re-includes this path."""
        return self._dot_includes.match_file(normalize_path(relative_path))

    def __len__(self) -> int:
        return len(self._patterns)

    def __repr__(self) -> str:
        return f"IgnoreRuleSet({list(self._patterns)!r})"


def parse_ignore_lines(text: str) -> list[str]:
    """Split ignore file text into patterns, dropping blanks and comments."""
    if text.startswith("\ufeff"):
        text = text[1:]
    patterns = []
    for line in text.splitlines():
        stripped = line.strip()
        if stripped and not stripped.startswith("#"):
            patterns.append(stripped)
    return patterns


def load_ignore_rules(
    path: Path | str | None = None,
    project_root: Path | None = None,
) -> IgnoreRuleSet:
    """Load the ignore rules for a project.

    Args:
        path: Explicit ignore file, or a directory holding one. Must exist.
        project_root: Directory searched for the ignore file when no path
            is given.

    Returns:
        Rules from the file. An existing but empty file gives an empty rule
        set; a missing file (without an explicit path) gives the defaults.

    Raises:
        ConfigError: If an explicit path is missing or unreadable.
    """
    explicit = path is not None
    if path is not None:
        ignore_path = Path(path)
        if ignore_path.is_dir():
            ignore_path = ignore_path / IGNORE_FILE_NAME
    else:
        ignore_path = (project_root or Path.cwd()) / IGNORE_FILE_NAME
        if not ignore_path.exists():
            logger.debug("No ignore file at %s, using default rules", ignore_path)
            return IgnoreRuleSet.default()

    try:
        text = ignore_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        if explicit and not ignore_path.exists():
            raise ConfigError(f"Ignore file not found: {ignore_path}") from e
        raise ConfigError(f"Could not read ignore file {ignore_path}: {e}") from e

    patterns = parse_ignore_lines(text)
    logger.debug("Loaded %d ignore patterns from %s", len(patterns), ignore_path)
    return IgnoreRuleSet(patterns, source=ignore_path)
