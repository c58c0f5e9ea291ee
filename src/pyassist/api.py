"""
Main API module for pyassist.

This module provides the PyAssist class, the entry point an editor host uses
to drive completions, workspace search and cache invalidation for a single
workspace. It wires the cache, context assembler, trigger controller, search
engine and invalidation hub together around one shared configuration.

Classes:
    PyAssist: Facade over every pyassist service for one workspace

Key Features:
    - Debounced, single-flight completion requests per document
    - Namespaced TTL caches for completions, provider responses and contexts
    - Workspace search with definitions, references and TODO markers
    - File-change invalidation, optionally driven by a file system watcher

Example:
    Completion and search against a local folder:
        >>> from pyassist import PyAssist, LocalWorkspace, FunctionBackend
        >>> from pyassist.core.types import CursorPosition
        >>>
        >>> workspace = LocalWorkspace(["."])
        >>> backend = FunctionBackend(my_model.complete)
        >>> async with PyAssist(workspace, backend, provider="claude") as assist:
        ...     doc = workspace.open_document("src/app.ts")
        ...     text = await assist.complete(doc, CursorPosition(4, 38))
        ...     todos = await assist.find_todos()
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any

from .cache.completion_cache import CompletionCache
from .cache.store import CacheStore
from .completion.controller import CancellationToken, TriggerController
from .context.assembler import ContextAssembler
from .core.config import AssistConfig
from .core.types import CursorPosition, SearchOptions, SearchResult, WorkspaceContext
from .search.engine import SearchEngine
from .utils.logging_config import get_logger
from .workspace.protocols import CompletionBackend, EditorDocument, Workspace
from .workspace.watcher import InvalidationHub, WorkspaceWatcher


class PyAssist:
    """
    One workspace's completion and search services, wired together.

    The instance owns a single ``CacheStore``; call ``start()`` from a
    running event loop to begin the background sweep and ``aclose()`` when
    done.
    """

    def __init__(
        self,
        workspace: Workspace,
        backend: CompletionBackend,
        config: AssistConfig | None = None,
        provider: str | None = None,
    ) -> None:
        self.cfg = config or AssistConfig()
        self.cfg.validate()
        self.logger = get_logger()
        self.workspace = workspace

        self.store = CacheStore(
            max_size=self.cfg.cache_max_size,
            sweep_interval=self.cfg.cache_sweep_interval,
            logger=self.logger,
        )
        self.cache = CompletionCache(self.store, self.cfg)
        self.assembler = ContextAssembler(workspace, self.cache, self.cfg, self.logger)
        self.controller = TriggerController(
            self.assembler, self.cache, backend, self.cfg, self.logger, provider=provider
        )
        self.search_engine = SearchEngine(workspace, self.cfg, self.logger)
        self.hub = InvalidationHub(self.cache, self.assembler, self.logger)
        self._watcher: WorkspaceWatcher | None = None

    # Lifecycle

    def start(self, watch: bool = False) -> None:
        self.store.start()
        if watch and self._watcher is None:
            self._watcher = WorkspaceWatcher(
                self.workspace.folders, self.hub, self.cfg, loop=asyncio.get_running_loop()
            )
            self._watcher.start()

    async def aclose(self) -> None:
        self.controller.dispose()
        if self._watcher is not None:
            self._watcher.stop()
            self._watcher = None
        await self.store.stop()

    async def __aenter__(self) -> PyAssist:
        self.start()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.aclose()

    # Completion

    async def complete(
        self,
        document: EditorDocument,
        position: CursorPosition,
        token: CancellationToken | None = None,
    ) -> str | None:
        return await self.controller.request_completion(document, position, token)

    def document_closed(self, uri: Path | str) -> None:
        self.controller.close_session(Path(uri))

    async def context_for(self, document: EditorDocument | None) -> WorkspaceContext:
        return await self.assembler.build_context(document)

    # Search

    async def search(self, query: str, options: SearchOptions | None = None) -> list[SearchResult]:
        return await self.search_engine.search(query, options)

    async def find_definitions(self, identifier: str, language: str | None = None) -> list[SearchResult]:
        return await self.search_engine.search_definitions(identifier, language)

    async def find_references(self, identifier: str, language: str | None = None) -> list[SearchResult]:
        return await self.search_engine.search_references(identifier, language)

    async def find_todos(self) -> list[SearchResult]:
        return await self.search_engine.search_todos()

    # Invalidation

    def file_changed(self, uri: Path | str) -> int:
        return self.hub.on_file_changed(uri)

    def file_deleted(self, uri: Path | str) -> int:
        return self.hub.on_file_deleted(uri)

    def workspace_folders_changed(self) -> int:
        return self.hub.on_workspace_folders_changed()

    def cache_stats(self) -> dict[str, Any]:
        return self.cache.stats()
