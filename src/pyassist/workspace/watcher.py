"""
File-change invalidation.

Cached completions and memoized contexts describe files as they were when
they were cached. This module keeps the caches honest:

- ``InvalidationHub`` is the entry point the host calls on file changes,
  deletions and workspace-folder changes.
- ``WorkspaceWatcher`` produces those calls itself from ``watchdog`` file
  system events, for hosts that do not deliver change notifications.

Classes:
    FileEventType: Kinds of file system events
    FileEvent: One filtered file system event
    InvalidationHub: Routes change notifications to the caches
    AssistEventHandler: watchdog handler with filtering and duplicate suppression
    WorkspaceWatcher: Observer lifecycle for a set of folders

Example:
    >>> hub = InvalidationHub(completion_cache, assembler)
    >>> watcher = WorkspaceWatcher(workspace.folders, hub, loop=asyncio.get_running_loop())
    >>> watcher.start()
    >>> ...
    >>> watcher.stop()
"""

from __future__ import annotations

import asyncio
import threading
import time
from collections import deque
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from ..cache.completion_cache import CompletionCache
from ..context.assembler import ContextAssembler
from ..core.config import AssistConfig
from ..utils.helpers import matches_patterns
from ..utils.logging_config import AssistLogger, get_logger


class FileEventType(str, Enum):
    CREATED = "created"
    MODIFIED = "modified"
    DELETED = "deleted"
    MOVED = "moved"


@dataclass(slots=True)
class FileEvent:
    path: Path
    event_type: FileEventType
    timestamp: float
    is_directory: bool = False
    old_path: Path | None = None  # for move events


class InvalidationHub:
    """
    Applies change notifications to the completion cache and the assembler.

    A changed or deleted file drops every cache entry whose key mentions it,
    plus memoized contexts that list it as a related file. A workspace
    folder change drops the whole context namespace.
    """

    def __init__(
        self,
        completion_cache: CompletionCache,
        assembler: ContextAssembler | None = None,
        logger: AssistLogger | None = None,
    ) -> None:
        self.completion_cache = completion_cache
        self.assembler = assembler
        self.logger = logger or get_logger()
        self.invalidations = 0

    def on_file_changed(self, uri: Path | str) -> int:
        removed = self.completion_cache.invalidate_file(uri)
        if self.assembler is not None:
            removed += self.assembler.invalidate_file(uri)
        self._record("change", str(uri), removed)
        return removed

    def on_file_deleted(self, uri: Path | str) -> int:
        removed = self.completion_cache.invalidate_file(uri)
        if self.assembler is not None:
            removed += self.assembler.invalidate_file(uri)
        self._record("delete", str(uri), removed)
        return removed

    def on_workspace_folders_changed(self) -> int:
        removed = self.completion_cache.invalidate_workspace()
        self._record("folders", "*", removed)
        return removed

    def _record(self, kind: str, target: str, removed: int) -> None:
        self.invalidations += 1
        self.logger.debug(
            f"Invalidated {removed} cache entries on {kind}: {target}",
            kind=kind,
            target=target,
            removed=removed,
        )


class AssistEventHandler(FileSystemEventHandler):
    """
    Turns watchdog events into hub calls.

    Events under excluded paths are dropped, and a repeat of the same event
    for the same path within ``duplicate_threshold`` seconds is ignored.
    """

    def __init__(
        self,
        hub: InvalidationHub,
        folders: Sequence[Path],
        exclude: Sequence[str],
        dispatch: Any = None,
        duplicate_threshold: float = 0.1,
    ) -> None:
        super().__init__()
        self.hub = hub
        self.folders = list(folders)
        self.exclude = list(exclude)
        self.logger = get_logger()
        self._dispatch = dispatch
        self._duplicate_threshold = duplicate_threshold
        self._recent_events: deque[tuple[str, FileEventType, float]] = deque(maxlen=1000)
        self._lock = threading.Lock()

        self.events_seen = 0
        self.events_dropped = 0

    def _root_of(self, path: Path) -> Path | None:
        for folder in self.folders:
            if path.is_relative_to(folder):
                return folder
        return None

    def _should_process_path(self, path: Path) -> bool:
        if not self.exclude:
            return True
        return not matches_patterns(path, self.exclude, root=self._root_of(path))

    def _is_duplicate_event(self, path: str, event_type: FileEventType, timestamp: float) -> bool:
        with self._lock:
            cutoff = timestamp - self._duplicate_threshold
            while self._recent_events and self._recent_events[0][2] < cutoff:
                self._recent_events.popleft()

            for seen_path, seen_type, _ in self._recent_events:
                if seen_path == path and seen_type == event_type:
                    return True

            self._recent_events.append((path, event_type, timestamp))
            return False

    def _create_file_event(
        self,
        src_path: str,
        event_type: FileEventType,
        is_directory: bool = False,
        dest_path: str | None = None,
    ) -> FileEvent | None:
        self.events_seen += 1
        path = Path(dest_path) if dest_path else Path(src_path)
        timestamp = time.monotonic()

        if self._is_duplicate_event(str(path), event_type, timestamp):
            self.events_dropped += 1
            return None

        if not self._should_process_path(path):
            self.events_dropped += 1
            return None

        return FileEvent(
            path=path,
            event_type=event_type,
            timestamp=timestamp,
            is_directory=is_directory,
            old_path=Path(src_path) if dest_path else None,
        )

    def on_created(self, event: FileSystemEvent) -> None:
        if event.is_directory:
            return
        file_event = self._create_file_event(str(event.src_path), FileEventType.CREATED)
        if file_event:
            self._process_event(file_event)

    def on_modified(self, event: FileSystemEvent) -> None:
        if event.is_directory:
            return
        file_event = self._create_file_event(str(event.src_path), FileEventType.MODIFIED)
        if file_event:
            self._process_event(file_event)

    def on_deleted(self, event: FileSystemEvent) -> None:
        file_event = self._create_file_event(
            str(event.src_path), FileEventType.DELETED, event.is_directory
        )
        if file_event:
            self._process_event(file_event)

    def on_moved(self, event: FileSystemEvent) -> None:
        dest = getattr(event, "dest_path", None)
        if not dest:
            return
        file_event = self._create_file_event(
            str(event.src_path), FileEventType.MOVED, event.is_directory, str(dest)
        )
        if file_event:
            self._process_event(file_event)

    def _process_event(self, event: FileEvent) -> None:
        if self._dispatch is not None:
            self._dispatch(self._apply, event)
        else:
            self._apply(event)

    def _apply(self, event: FileEvent) -> None:
        try:
            if event.event_type == FileEventType.DELETED:
                self.hub.on_file_deleted(event.path)
            elif event.event_type == FileEventType.MOVED:
                if event.old_path is not None:
                    self.hub.on_file_deleted(event.old_path)
                self.hub.on_file_changed(event.path)
            else:
                self.hub.on_file_changed(event.path)
        except Exception as e:
            self.logger.error(f"Error processing file event {event.path}: {e}")


class WorkspaceWatcher:
    """
    Watches workspace folders and keeps the caches invalidated.

    When ``loop`` is given, hub calls are marshalled onto that event loop
    with ``call_soon_threadsafe``; otherwise they run on the observer thread.
    """

    def __init__(
        self,
        folders: Sequence[Path | str],
        hub: InvalidationHub,
        config: AssistConfig | None = None,
        loop: asyncio.AbstractEventLoop | None = None,
        recursive: bool = True,
    ) -> None:
        self.folders = [Path(f) for f in folders]
        self.hub = hub
        self.config = config or AssistConfig()
        self.recursive = recursive
        self.logger = get_logger()

        dispatch = loop.call_soon_threadsafe if loop is not None else None
        self.handler = AssistEventHandler(
            hub, self.folders, self.config.exclude_patterns, dispatch=dispatch
        )
        self._observer: Any = None
        self._is_watching = False
        self._start_time: float | None = None

    @property
    def is_watching(self) -> bool:
        return self._is_watching

    def start(self) -> bool:
        """Start watching; returns False when already running or nothing could be watched."""
        if self._is_watching:
            return False

        observer = Observer()
        scheduled = 0
        for folder in self.folders:
            if not folder.is_dir():
                self.logger.warning(f"Not watching missing folder: {folder}")
                continue
            observer.schedule(self.handler, str(folder), recursive=self.recursive)
            scheduled += 1

        if scheduled == 0:
            return False

        observer.start()
        self._observer = observer
        self._is_watching = True
        self._start_time = time.time()
        self.logger.info(f"Started watching {scheduled} folder(s)")
        return True

    def stop(self) -> None:
        if not self._is_watching or self._observer is None:
            return
        self._observer.stop()
        self._observer.join()
        self._observer = None
        self._is_watching = False
        self.logger.info("Stopped watching workspace folders")

    def set_folders(self, folders: Sequence[Path | str]) -> None:
        """Watch a new folder set and drop workspace-scoped cache entries."""
        was_watching = self._is_watching
        self.stop()
        self.folders = [Path(f) for f in folders]
        self.handler.folders = list(self.folders)
        self.hub.on_workspace_folders_changed()
        if was_watching:
            self.start()

    def get_stats(self) -> dict[str, Any]:
        return {
            "is_watching": self._is_watching,
            "folders": [str(f) for f in self.folders],
            "uptime": time.time() - self._start_time if self._start_time else 0.0,
            "events_seen": self.handler.events_seen,
            "events_dropped": self.handler.events_dropped,
            "invalidations": self.hub.invalidations,
        }

    def __enter__(self) -> WorkspaceWatcher:
        self.start()
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.stop()
