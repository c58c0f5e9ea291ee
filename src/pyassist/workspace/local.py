"""
Disk-backed collaborators.

``LocalWorkspace`` implements the ``Workspace`` protocol on top of the local
file system, with open documents tracked in memory the way an editor host
would track its tabs. ``FunctionBackend`` adapts a plain callable to the
``CompletionBackend`` protocol.

Example:
    >>> workspace = LocalWorkspace([Path("/path/to/project")])
    >>> doc = workspace.open_document(Path("/path/to/project/src/app.ts"))
    >>> files = await workspace.find_files("**/*.ts", limit=100)
"""

from __future__ import annotations

import asyncio
import inspect
from collections.abc import Awaitable, Callable, Sequence
from pathlib import Path

from ..analysis.language_detection import language_id_for
from ..core.config import AssistConfig
from ..utils.error_handling import FileAccessError
from ..utils.helpers import iter_files, read_text_safely
from .protocols import EditorDocument


class LocalWorkspace:
    """
    A ``Workspace`` over real folders.

    File operations run in a worker thread so the event loop stays free while
    the disk is walked.
    """

    def __init__(self, folders: Sequence[Path | str], config: AssistConfig | None = None) -> None:
        self.config = config or AssistConfig()
        self._folders = [Path(f) for f in folders]
        self._documents: dict[Path, EditorDocument] = {}

    # Workspace

    @property
    def folders(self) -> list[Path]:
        return list(self._folders)

    def set_folders(self, folders: Sequence[Path | str]) -> None:
        self._folders = [Path(f) for f in folders]

    def open_documents(self) -> list[EditorDocument]:
        return list(self._documents.values())

    def relative_path(self, path: Path) -> str:
        """Path relative to the containing workspace folder, or the full path."""
        for folder in self._folders:
            try:
                return path.relative_to(folder).as_posix()
            except ValueError:
                continue
        return str(path)

    def language_of(self, path: Path) -> str:
        document = self._documents.get(path)
        if document is not None:
            return document.language_id
        return language_id_for(path)

    # Open documents

    def open_document(
        self, path: Path | str, text: str | None = None, language_id: str | None = None
    ) -> EditorDocument:
        """
        Open ``path`` as an editor document.

        The text is read from disk when not given. Reopening an already open
        document returns it unchanged.
        """
        path = Path(path)
        existing = self._documents.get(path)
        if existing is not None:
            return existing
        if text is None:
            text = self._read_sync(path)
        document = EditorDocument(
            uri=path,
            text=text,
            language_id=language_id or language_id_for(path, text),
            version=1,
        )
        self._documents[path] = document
        return document

    def update_document(self, path: Path | str, text: str) -> EditorDocument:
        """Replace an open document's text and bump its version."""
        path = Path(path)
        document = self._documents.get(path)
        if document is None:
            return self.open_document(path, text)
        document.text = text
        document.version += 1
        return document

    def close_document(self, path: Path | str) -> bool:
        return self._documents.pop(Path(path), None) is not None

    def get_document(self, path: Path | str) -> EditorDocument | None:
        return self._documents.get(Path(path))

    # FileSystem

    async def read_file(self, path: Path) -> str:
        document = self._documents.get(path)
        if document is not None:
            return document.text
        return await asyncio.to_thread(self._read_sync, path)

    async def list_directory(self, path: Path) -> list[tuple[str, bool]]:
        def _list() -> list[tuple[str, bool]]:
            return sorted((entry.name, entry.is_file()) for entry in path.iterdir())

        return await asyncio.to_thread(_list)

    async def find_files(
        self,
        include: str | Sequence[str],
        exclude: Sequence[str] | None = None,
        limit: int | None = None,
        root: Path | None = None,
    ) -> list[Path]:
        patterns = [include] if isinstance(include, str) else list(include)
        roots = [root] if root is not None else self.folders

        def _find() -> list[Path]:
            return list(
                iter_files(roots, patterns, exclude, follow_symlinks=False, limit=limit)
            )

        return await asyncio.to_thread(_find)

    async def exists(self, path: Path) -> bool:
        return await asyncio.to_thread(path.exists)

    def _read_sync(self, path: Path) -> str:
        content = read_text_safely(path, self.config.max_file_bytes)
        if content is None:
            raise FileAccessError(f"Not a readable text file: {path}", file_path=path)
        return content


class FunctionBackend:
    """
    Wrap a callable as a ``CompletionBackend``.

    The callable takes the prompt and returns the completion text, either
    directly or as an awaitable.
    """

    def __init__(self, fn: Callable[[str], str | Awaitable[str]]) -> None:
        self._fn = fn
        self.calls = 0

    async def complete(self, prompt: str) -> str:
        self.calls += 1
        result = self._fn(prompt)
        if inspect.isawaitable(result):
            result = await result
        return result
