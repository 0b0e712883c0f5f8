"""Local/remote file synchronization.

Pipeline:
    IgnoreRuleSet + ExtensionMap → collect_local_files → plan_push
    remote content → map_to_local → plan_pull → write_files

Components:
- **ignore**: gitignore-style rules deciding which paths are considered
- **extensions**: Extension ↔ file type mapping
- **collector**: Local file discovery, conflict detection, push order
- **remote**: Remote snapshot to local path mapping
- **planner**: Push payloads, pull/prune plans, status classification
- **pagination**: Paged listing aggregation
- **watcher**: Watch mode with coalesced pushes
- **engine**: ProjectFiles facade used by the CLI (import it from
  scriptsync.client.sync.engine; it depends on the API client)
"""

from scriptsync.client.sync.collector import (
    collect_local_files,
    iter_local_paths,
    sort_by_push_order,
)
from scriptsync.client.sync.extensions import (
    DEFAULT_EXTENSIONS,
    ExtensionMap,
    normalize_extension,
)
from scriptsync.client.sync.ignore import (
    DEFAULT_IGNORE_PATTERNS,
    IGNORE_FILE_NAME,
    IgnoreRuleSet,
    load_ignore_rules,
    normalize_path,
)
from scriptsync.client.sync.pagination import (
    DEFAULT_MAX_PAGES,
    DEFAULT_PAGE_SIZE,
    fetch_with_pages,
)
from scriptsync.client.sync.planner import (
    classify,
    delete_files,
    plan_prune,
    plan_pull,
    plan_push,
    untracked_paths,
    write_files,
)
from scriptsync.client.sync.remote import RemoteFile, map_to_local, validate_remote_name
from scriptsync.client.sync.types import (
    ConfigError,
    FileConflictError,
    InvalidRemoteNameError,
    Page,
    PagedResults,
    PartialResultsWarning,
    PushError,
    SyncClassification,
    SyncError,
    UnknownTypeError,
    WriteEntry,
)
from scriptsync.client.sync.watcher import PushWatcher

__all__ = [
    # Collector
    "collect_local_files",
    "iter_local_paths",
    "sort_by_push_order",
    # Extensions
    "DEFAULT_EXTENSIONS",
    "ExtensionMap",
    "normalize_extension",
    # Ignore
    "DEFAULT_IGNORE_PATTERNS",
    "IGNORE_FILE_NAME",
    "IgnoreRuleSet",
    "load_ignore_rules",
    "normalize_path",
    # Pagination
    "DEFAULT_MAX_PAGES",
    "DEFAULT_PAGE_SIZE",
    "fetch_with_pages",
    # Planner
    "classify",
    "delete_files",
    "plan_prune",
    "plan_pull",
    "plan_push",
    "untracked_paths",
    "write_files",
    # Remote
    "RemoteFile",
    "map_to_local",
    "validate_remote_name",
    # Types
    "ConfigError",
    "FileConflictError",
    "InvalidRemoteNameError",
    "Page",
    "PagedResults",
    "PartialResultsWarning",
    "PushError",
    "SyncClassification",
    "SyncError",
    "UnknownTypeError",
    "WriteEntry",
    # Watcher
    "PushWatcher",
]
