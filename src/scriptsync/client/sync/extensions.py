"""Mapping between local file extensions and project file types.

This module provides:
- ExtensionMap: Per-type ordered extension lists
- normalize_extension: Lowercase, dot-prefixed form of an extension
- DEFAULT_EXTENSIONS: Extensions used when the project config names none

The first extension of a type is the one written on pull; every
extension of a type is accepted when collecting local files.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from pathlib import PurePosixPath
from typing import Any

from scriptsync.client.sync.types import ConfigError, UnknownTypeError
from scriptsync.core.types import MANIFEST_NAME, FileType

DEFAULT_EXTENSIONS: dict[FileType, tuple[str, ...]] = {
    FileType.SCRIPT: (".js", ".gs"),
    FileType.MARKUP: (".html",),
    FileType.CONFIG: (".json",),
}

# Legacy per-type keys accepted in the project config
_LEGACY_KEYS: dict[str, FileType] = {
    "scriptExtensions": FileType.SCRIPT,
    "htmlExtensions": FileType.MARKUP,
    "jsonExtensions": FileType.CONFIG,
}


def normalize_extension(extension: str) -> str:
    """Return the lowercase, dot-prefixed form of an extension.

    Raises:
        ConfigError: If the extension is empty.
    """
    normalized = extension.strip().lower()
    if not normalized.startswith("."):
        normalized = "." + normalized
    if normalized == ".":
        raise ConfigError(f"Invalid file extension: {extension!r}")
    return normalized


def _as_list(value: Any, key: str) -> list[str]:
    if isinstance(value, str):
        return [value]
    if isinstance(value, list) and all(isinstance(item, str) for item in value):
        return value
    raise ConfigError(f"{key} must be a string or a list of strings")


class ExtensionMap:
    """Resolves file types from extensions and back."""

    def __init__(self, mapping: Mapping[FileType, Iterable[str]] | None = None) -> None:
        """Initialize the map.

        Args:
            mapping: Extensions per type. Types left out use their defaults.
        """
        self._extensions: dict[FileType, tuple[str, ...]] = dict(DEFAULT_EXTENSIONS)
        if mapping:
            for file_type, extensions in mapping.items():
                normalized: list[str] = []
                for ext in extensions:
                    ext = normalize_extension(ext)
                    if ext not in normalized:
                        normalized.append(ext)
                self._extensions[file_type] = tuple(normalized)

        self._by_extension: dict[str, FileType] = {}
        for file_type, extensions in self._extensions.items():
            for ext in extensions:
                owner = self._by_extension.setdefault(ext, file_type)
                if owner is not file_type:
                    raise ConfigError(
                        f"Extension {ext} is registered for both {owner.name} and {file_type.name}"
                    )

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> ExtensionMap:
        """Build a map from project config fields.

        Reads ``fileExtensions`` (keyed by remote type or type name) and the
        legacy ``scriptExtensions``, ``htmlExtensions``, ``jsonExtensions`` and
        ``fileExtension`` keys. Later keys win.

        Raises:
            ConfigError: If a field has the wrong shape or names an unknown type.
        """
        mapping: dict[FileType, list[str]] = {}

        legacy = config.get("fileExtension")
        if legacy is not None:
            mapping[FileType.SCRIPT] = _as_list(legacy, "fileExtension")

        for key, file_type in _LEGACY_KEYS.items():
            if config.get(key) is not None:
                mapping[file_type] = _as_list(config[key], key)

        per_type = config.get("fileExtensions")
        if per_type is not None:
            if not isinstance(per_type, Mapping):
                raise ConfigError("fileExtensions must be an object mapping types to extensions")
            for type_key, value in per_type.items():
                file_type = FileType.parse(type_key)
                if file_type is None:
                    raise ConfigError(f"Unknown file type in fileExtensions: {type_key!r}")
                mapping[file_type] = _as_list(value, f"fileExtensions.{type_key}")

        return cls(mapping)

    def to_config(self) -> dict[str, list[str]]:
        """Render the map as a ``fileExtensions`` config value."""
        return {file_type.value: list(exts) for file_type, exts in self._extensions.items()}

    def type_of(self, extension: str) -> FileType | None:
        """Get the type registered for an extension, or None."""
        if not extension:
            return None
        return self._by_extension.get(normalize_extension(extension))

    def extensions_for(self, file_type: FileType) -> list[str]:
        """Get the ordered extensions accepted for a type."""
        return list(self._extensions.get(file_type, ()))

    def preferred_extension(self, file_type: FileType) -> str:
        """Get the extension used when writing a file of this type.

        Raises:
            UnknownTypeError: If no extension is registered for the type.
        """
        extensions = self._extensions.get(file_type)
        if not extensions:
            raise UnknownTypeError(file_type.value)
        return extensions[0]

    def split(self, relative_path: str) -> tuple[str, FileType] | None:
        """Split a local path into its remote name and type.

        The longest registered extension ending the file name wins, so
        multi-dot extensions such as ``.gs.js`` are supported. CONFIG files
        are only recognized for the project manifest.

        Returns:
            (path without extension, type), or None if the file is not a
            recognized project file.
        """
        posix = PurePosixPath(relative_path.replace("\\", "/"))
        lower_name = posix.name.lower()

        match: str | None = None
        for ext in self._by_extension:
            if lower_name.endswith(ext) and len(lower_name) > len(ext):
                if match is None or len(ext) > len(match):
                    match = ext
        if match is None:
            return None

        file_type = self._by_extension[match]
        stem = posix.name[: -len(match)]
        if file_type is FileType.CONFIG and stem.lower() != MANIFEST_NAME:
            return None
        if file_type is FileType.CONFIG:
            stem = MANIFEST_NAME

        parent = posix.parent.as_posix()
        name = stem if parent == "." else f"{parent}/{stem}"
        return name, file_type

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ExtensionMap):
            return NotImplemented
        return self._extensions == other._extensions

    def __repr__(self) -> str:
        inner = ", ".join(f"{t.name}={list(e)}" for t, e in self._extensions.items())
        return f"ExtensionMap({inner})"
