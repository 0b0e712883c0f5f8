"""File system watcher that pushes local changes.

This module provides:
- PushWatcher: Watches the content directory using watchdog
- Debouncing: Waits for a quiet period after the last change
- Coalescing: At most one push runs at a time; changes that arrive
  during a push are batched into the next one
- Ignore rules: Paths excluded by the project's ignore rules are dropped
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from pathlib import Path
from typing import TYPE_CHECKING

from watchdog.events import (
    DirCreatedEvent,
    DirDeletedEvent,
    DirModifiedEvent,
    DirMovedEvent,
    FileSystemEvent,
    FileSystemEventHandler,
)
from watchdog.observers import Observer

from scriptsync.client.sync.ignore import IgnoreRuleSet, normalize_path

if TYPE_CHECKING:
    from watchdog.observers.api import BaseObserver

logger = logging.getLogger(__name__)

DEFAULT_DEBOUNCE_S = 0.5

OnChange = Callable[[list[str]], object]


class _ChangeHandler(FileSystemEventHandler):
    """Forwards relevant file events to the watcher."""

    def __init__(self, watcher: PushWatcher) -> None:
        super().__init__()
        self._watcher = watcher

    def _paths(self, event: FileSystemEvent) -> list[str]:
        paths = [event.src_path]
        dest = getattr(event, "dest_path", None)
        if dest:
            paths.append(dest)
        return [p.decode("utf-8", errors="replace") if isinstance(p, bytes) else p for p in paths]

    def _handle_event(self, event: FileSystemEvent) -> None:
        if isinstance(event, (DirCreatedEvent, DirDeletedEvent, DirModifiedEvent, DirMovedEvent)):
            return
        for path in self._paths(event):
            self._watcher.notify(Path(path))

    def on_created(self, event: FileSystemEvent) -> None:
        """Handle created event."""
        self._handle_event(event)

    def on_modified(self, event: FileSystemEvent) -> None:
        """Handle modified event."""
        self._handle_event(event)

    def on_deleted(self, event: FileSystemEvent) -> None:
        """Handle deleted event."""
        self._handle_event(event)

    def on_moved(self, event: FileSystemEvent) -> None:
        """Handle moved event."""
        self._handle_event(event)


class PushWatcher:
    """Watches a content directory and pushes after changes settle."""

    def __init__(
        self,
        content_dir: Path,
        on_change: OnChange,
        rules: IgnoreRuleSet | None = None,
        debounce_s: float = DEFAULT_DEBOUNCE_S,
    ) -> None:
        """Initialize the watcher.

        Args:
            content_dir: Directory to watch.
            on_change: Called on the push thread with the sorted relative
                paths changed since the previous call.
            rules: Ignore rules; matching paths never trigger a push.
            debounce_s: Quiet period after the last change before pushing.
        """
        self._content_dir = Path(content_dir).resolve()
        if not self._content_dir.is_dir():
            raise ValueError(f"Watch path must be a directory: {content_dir}")

        self._on_change = on_change
        self._rules = rules or IgnoreRuleSet.default()
        self._debounce_s = debounce_s

        self._pending: set[str] = set()
        self._lock = threading.Lock()
        self._timer: threading.Timer | None = None
        self._ready = threading.Event()
        self._stopping = threading.Event()
        self._pushing = threading.Event()
        self._push_thread: threading.Thread | None = None

        self._observer: BaseObserver = Observer()
        self._running = False

    @property
    def content_dir(self) -> Path:
        """Get the watched directory path."""
        return self._content_dir

    @property
    def is_running(self) -> bool:
        """Check if the watcher is running."""
        return self._running

    @property
    def is_pushing(self) -> bool:
        """Check if a push is in flight."""
        return self._pushing.is_set()

    def _relative(self, path: Path) -> str | None:
        try:
            relative = normalize_path(path.resolve().relative_to(self._content_dir))
        except (OSError, ValueError):
            return None
        if not relative or relative == ".":
            return None
        if self._rules.matches(relative):
            return None
        if relative.startswith(".") and not self._rules.explicitly_includes(relative):
            return None
        return relative

    def notify(self, path: Path) -> None:
        """Record a changed path and restart the debounce timer."""
        relative = self._relative(Path(path))
        if relative is None:
            return

        with self._lock:
            if self._stopping.is_set():
                return
            logger.debug("Change detected: %s", relative)
            self._pending.add(relative)
            if self._timer:
                self._timer.cancel()
            self._timer = threading.Timer(self._debounce_s, self._ready.set)
            self._timer.daemon = True
            self._timer.start()

    def _push_loop(self) -> None:
        while True:
            self._ready.wait()
            if self._stopping.is_set():
                return
            with self._lock:
                self._ready.clear()
                self._timer = None
                paths = sorted(self._pending)
                self._pending.clear()
            if not paths:
                continue

            self._pushing.set()
            try:
                self._on_change(paths)
            except Exception:
                logger.exception("Push after change failed")
            finally:
                self._pushing.clear()

    def start(self) -> None:
        """Start watching for changes."""
        if self._running:
            return

        self._stopping.clear()
        self._push_thread = threading.Thread(
            target=self._push_loop, name="scriptsync-push", daemon=True
        )
        self._push_thread.start()
        self._observer.schedule(_ChangeHandler(self), str(self._content_dir), recursive=True)
        self._observer.start()
        self._running = True
        logger.debug("Watching %s", self._content_dir)

    def stop(self) -> None:
        """Stop watching for changes.

        No new push is started after this call; a push already in flight
        runs to completion before this returns.
        """
        if not self._running:
            return

        with self._lock:
            self._stopping.set()
            if self._timer:
                self._timer.cancel()
                self._timer = None
        self._observer.stop()
        self._observer.join(timeout=5.0)
        self._ready.set()
        if self._push_thread:
            self._push_thread.join()
            self._push_thread = None
        self._running = False

    def __enter__(self) -> PushWatcher:
        """Context manager entry."""
        self.start()
        return self

    def __exit__(self, *args: object) -> None:
        """Context manager exit."""
        self.stop()
