"""
Context assembly for completion prompts.

``ContextAssembler`` turns the active document into a ``WorkspaceContext``:
the current file, a short ranked list of related files, the file's imports,
the project type and the workspace name.

Related files come from four pools, each with its own relevance weight:
    - open editor tabs (0.8)
    - resolved relative imports (0.7)
    - code files in the same directory (0.6)
    - files whose name contains the current file's base name (0.4)

Pools are merged, oversized files dropped, duplicates collapsed to their
best score, and the result ranked and truncated. Results are memoized in the
``context`` cache namespace by ``(uri, version)``; a memoized context is only
reused when its current-file content still equals the document text.

Example:
    >>> assembler = ContextAssembler(workspace, cache=CompletionCache())
    >>> context = await assembler.build_context(document)
    >>> print(format_for_prompt(context))
"""

from __future__ import annotations

import time
from pathlib import Path

from ..analysis.language_detection import is_code_file
from ..cache.completion_cache import CONTEXT, CompletionCache
from ..cache.keys import file_key
from ..core.config import AssistConfig
from ..core.types import FileContext, WorkspaceContext
from ..search.scorer import dedupe_keep_best, rank
from ..utils.error_handling import ErrorCollector, handle_file_error
from ..utils.logging_config import AssistLogger, get_logger
from ..workspace.protocols import EditorDocument, Workspace
from .imports import extract_import_specifiers, extract_imports, resolve_import_path
from .project import detect_project_type, workspace_name


def _identity(path: Path) -> Path:
    return path.resolve()


def _score(file: FileContext) -> float:
    return file.relevance_score


class ContextAssembler:
    """Builds and memoizes ``WorkspaceContext`` objects for documents."""

    def __init__(
        self,
        workspace: Workspace,
        cache: CompletionCache | None = None,
        config: AssistConfig | None = None,
        logger: AssistLogger | None = None,
    ) -> None:
        self.workspace = workspace
        self.config = config or AssistConfig()
        self.cache = cache
        self.logger = logger or get_logger()
        self.errors = ErrorCollector()

    async def build_context(self, document: EditorDocument | None) -> WorkspaceContext:
        """
        Build the context for ``document``.

        Args:
            document: The active document, or None when no editor is active

        Returns:
            The assembled context; ``WorkspaceContext.empty()`` for None
        """
        if document is None:
            return WorkspaceContext.empty()

        key = file_key(document.uri, document.version)
        if self.cache is not None:
            cached = self.cache.get_cached_context(key)
            if (
                isinstance(cached, WorkspaceContext)
                and cached.current_file is not None
                and cached.current_file.content == document.text
            ):
                return cached

        start = time.perf_counter()
        context = await self._build_fresh(document)
        if self.cache is not None:
            self.cache.cache_context(key, context)

        self.logger.debug(
            f"Built context for {document.uri}: {len(context.related_files)} related files",
            uri=str(document.uri),
            related=len(context.related_files),
            elapsed_ms=(time.perf_counter() - start) * 1000.0,
        )
        return context

    def invalidate_file(self, uri: Path | str) -> int:
        """
        Drop memoized contexts that mention ``uri``.

        This covers contexts built for the file itself and contexts that list
        it as a related file.
        """
        if self.cache is None:
            return 0
        needle = str(uri)
        store = self.cache.store
        doomed: set[str] = set()
        for key in store.keys(CONTEXT):
            if needle in key:
                doomed.add(key)
                continue
            entry = store.peek(CONTEXT, key)
            if entry is not None and isinstance(entry.data, WorkspaceContext):
                if any(str(f.uri) == needle for f in entry.data.related_files):
                    doomed.add(key)
        return store.invalidate(CONTEXT, lambda key: key in doomed)

    def invalidate_workspace(self) -> int:
        if self.cache is None:
            return 0
        return self.cache.invalidate_workspace()

    def clear_cache(self) -> None:
        if self.cache is not None:
            self.cache.store.clear(CONTEXT)

    # Assembly

    async def _build_fresh(self, document: EditorDocument) -> WorkspaceContext:
        current = FileContext(
            uri=document.uri,
            file_name=document.uri.name,
            relative_path=self.workspace.relative_path(document.uri),
            content=document.text,
            language=document.language_id,
            is_open=True,
            relevance_score=self.config.related_weights.current,
        )

        folders = self.workspace.folders
        return WorkspaceContext(
            current_file=current,
            related_files=await self._related_files(current),
            imports=extract_imports(current.content, current.language),
            project_type=await detect_project_type(
                folders[0] if folders else None,
                self.workspace.exists,
                self.workspace.list_directory,
            ),
            workspace_name=workspace_name(folders),
        )

    async def _related_files(self, current: FileContext) -> list[FileContext]:
        current_id = _identity(current.uri)
        candidates: list[FileContext] = []
        candidates += self._open_tab_files()
        candidates += await self._same_directory_files(current)
        candidates += await self._imported_files(current)
        candidates += await self._similar_name_files(current)

        candidates = [
            c
            for c in candidates
            if len(c.content) <= self.config.max_file_size and _identity(c.uri) != current_id
        ]
        unique = dedupe_keep_best(candidates, lambda c: _identity(c.uri), _score)
        return rank(unique, _score)[: self.config.max_related_files]

    def _open_tab_files(self) -> list[FileContext]:
        weight = self.config.related_weights.open_tab
        return [
            FileContext(
                uri=doc.uri,
                file_name=doc.uri.name,
                relative_path=self.workspace.relative_path(doc.uri),
                content=doc.text,
                language=doc.language_id,
                is_open=True,
                relevance_score=weight,
            )
            for doc in self.workspace.open_documents()
        ]

    async def _same_directory_files(self, current: FileContext) -> list[FileContext]:
        directory = current.uri.parent
        try:
            entries = await self.workspace.list_directory(directory)
        except Exception as e:
            handle_file_error(directory, "list", e, self.errors, self.logger)
            return []

        files: list[FileContext] = []
        for name, is_file in entries:
            if not is_file or not is_code_file(name) or name == current.file_name:
                continue
            loaded = await self._load(directory / name, self.config.related_weights.same_directory)
            if loaded is not None:
                files.append(loaded)
        return files

    async def _imported_files(self, current: FileContext) -> list[FileContext]:
        files: list[FileContext] = []
        for specifier in extract_import_specifiers(current.content, current.language):
            resolved = await resolve_import_path(specifier, current.uri, self.workspace.exists)
            if resolved is None:
                continue
            loaded = await self._load(resolved, self.config.related_weights.imported)
            if loaded is not None:
                files.append(loaded)
        return files

    async def _similar_name_files(self, current: FileContext) -> list[FileContext]:
        base = current.uri.stem
        root = self._folder_of(current.uri)
        if not base or root is None:
            return []

        try:
            found = await self.workspace.find_files("**/*", ["**/node_modules/**"], root=root)
        except Exception as e:
            handle_file_error(root, "find", e, self.errors, self.logger)
            return []

        files: list[FileContext] = []
        matched = 0
        for path in found:
            if matched >= self.config.similar_files_limit:
                break
            # Either name may contain the other.
            if path == current.uri or not is_code_file(path.name):
                continue
            if base not in path.name and (not path.stem or path.stem not in base):
                continue
            matched += 1
            loaded = await self._load(path, self.config.related_weights.similar_name)
            if loaded is not None:
                files.append(loaded)
        return files

    async def _load(self, path: Path, score: float) -> FileContext | None:
        try:
            content = await self.workspace.read_file(path)
        except Exception as e:
            handle_file_error(path, "read", e, self.errors, self.logger)
            return None
        if len(content) > self.config.max_file_size:
            return None
        return FileContext(
            uri=path,
            file_name=path.name,
            relative_path=self.workspace.relative_path(path),
            content=content,
            language=self.workspace.language_of(path),
            is_open=False,
            relevance_score=score,
        )

    def _folder_of(self, path: Path) -> Path | None:
        for folder in self.workspace.folders:
            if path.is_relative_to(folder):
                return folder
        return None
