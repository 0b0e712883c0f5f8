"""Project configuration (.scriptsync.json).

This module provides:
- ProjectConfig: Settings of one local project
- find_project_config: Locates the config file
- load_project_config / load_project: Parse settings, or fall back to defaults
- save_project_config: Write settings back to disk
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from scriptsync.client.sync.extensions import ExtensionMap
from scriptsync.client.sync.ignore import normalize_path
from scriptsync.client.sync.types import ConfigError

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = ".scriptsync.json"


@dataclass
class ProjectConfig:
    """Settings of a local project.

    Attributes:
        project_root: Directory holding the config file.
        content_dir: Absolute directory whose files are synced.
        script_id: Remote project identifier; required for push and pull.
        file_extensions: Extension mapping per file type.
        file_push_order: Files pushed first, in this order.
        skip_subdirectories: Only collect files at the top of content_dir.
        project_id: Cloud project id, kept as-is.
        parent_id: Id of the document the script is bound to, kept as-is.
        config_path: Where the settings were read from (or would be saved).
    """

    project_root: Path
    content_dir: Path
    script_id: str | None = None
    file_extensions: ExtensionMap = field(default_factory=ExtensionMap)
    file_push_order: list[str] = field(default_factory=list)
    skip_subdirectories: bool = False
    project_id: str | None = None
    parent_id: str | None = None
    config_path: Path | None = None

    @classmethod
    def default(cls, root: Path) -> ProjectConfig:
        """Settings used when no config file exists."""
        root = Path(root).resolve()
        return cls(project_root=root, content_dir=root, config_path=root / CONFIG_FILE_NAME)

    def require_script_id(self) -> str:
        """Get the script id, failing if the project has none.

        Raises:
            ConfigError: If no scriptId is configured.
        """
        if not self.script_id:
            where = self.config_path or self.project_root / CONFIG_FILE_NAME
            raise ConfigError(f"No scriptId configured. Add one to {where}.")
        return self.script_id

    def to_dict(self) -> dict[str, Any]:
        """Render the settings in config file form."""
        relative_dir = Path(os.path.relpath(self.content_dir, self.project_root)).as_posix()
        data: dict[str, Any] = {
            "scriptId": self.script_id,
            "rootDir": relative_dir or ".",
        }
        if self.project_id:
            data["projectId"] = self.project_id
        if self.parent_id:
            data["parentId"] = self.parent_id
        data["fileExtensions"] = self.file_extensions.to_config()
        data["filePushOrder"] = list(self.file_push_order)
        data["skipSubdirectories"] = self.skip_subdirectories
        return data


def _first_value(value: Any) -> str | None:
    if isinstance(value, list):
        return str(value[0]) if value else None
    return str(value) if value else None


def _optional_str(data: dict[str, Any], key: str) -> str | None:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ConfigError(f"{key} must be a string")
    return value or None


def _push_order(value: Any, project_root: Path, content_dir: Path) -> list[str]:
    if value is None:
        return []
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ConfigError("filePushOrder must be a list of paths")

    # Entries may be relative to the project root or to the content dir
    try:
        prefix = content_dir.relative_to(project_root).as_posix()
    except ValueError:
        prefix = ""
    if prefix == ".":
        prefix = ""
    order = []
    for entry in value:
        path = normalize_path(entry)
        if prefix and path.startswith(prefix + "/"):
            path = path[len(prefix) + 1 :]
        order.append(path)
    return order


def find_project_config(start: Path, config_path: Path | None = None) -> Path | None:
    """Find the project config file.

    An explicit path (file, or directory holding the file) is used as-is and
    must exist. Otherwise the search walks up from ``start``.

    Returns:
        Path to the config file, or None if there is none.

    Raises:
        ConfigError: If an explicit path does not exist.
    """
    if config_path is not None:
        candidate = Path(config_path)
        if candidate.is_dir():
            candidate = candidate / CONFIG_FILE_NAME
        if not candidate.is_file():
            raise ConfigError(f"Project config not found: {candidate}")
        return candidate.resolve()

    current = Path(start).resolve()
    for directory in (current, *current.parents):
        candidate = directory / CONFIG_FILE_NAME
        if candidate.is_file():
            logger.debug("Found project config at %s", candidate)
            return candidate
    return None


def load_project_config(path: Path) -> ProjectConfig:
    """Parse a project config file.

    Raises:
        ConfigError: If the file is unreadable, not JSON or holds
            settings of the wrong type.
    """
    path = Path(path).resolve()
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ConfigError(f"Could not read {path}: {e}") from e
    except ValueError as e:
        raise ConfigError(f"Invalid JSON in {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"{path} must contain a JSON object")

    project_root = path.parent
    content_source = data.get("srcDir") or data.get("rootDir") or "."
    if not isinstance(content_source, str):
        raise ConfigError("rootDir must be a string")
    content_dir = (project_root / content_source).resolve()

    skip = data.get("skipSubdirectories", data.get("ignoreSubdirectories", False))
    if not isinstance(skip, bool):
        raise ConfigError("skipSubdirectories must be true or false")

    return ProjectConfig(
        project_root=project_root,
        content_dir=content_dir,
        script_id=_optional_str(data, "scriptId"),
        file_extensions=ExtensionMap.from_config(data),
        file_push_order=_push_order(data.get("filePushOrder"), project_root, content_dir),
        skip_subdirectories=skip,
        project_id=_optional_str(data, "projectId"),
        parent_id=_first_value(data.get("parentId")),
        config_path=path,
    )


def load_project(start: Path, config_path: Path | None = None) -> ProjectConfig:
    """Load the project around ``start``, or default settings if none exists."""
    found = find_project_config(start, config_path)
    if found is None:
        logger.debug("No %s found, using defaults for %s", CONFIG_FILE_NAME, start)
        return ProjectConfig.default(start)
    return load_project_config(found)


def save_project_config(config: ProjectConfig) -> Path:
    """Write settings to the config file.

    Returns:
        Path written.
    """
    config.require_script_id()
    path = config.config_path or config.project_root / CONFIG_FILE_NAME
    path.write_text(json.dumps(config.to_dict(), indent=2) + "\n", encoding="utf-8")
    logger.debug("Saved project config to %s", path)
    return path
