"""
Collaborator interfaces consumed by pyassist.

The editor host supplies these; ``pyassist.workspace.local`` provides a
disk-backed implementation for tests and standalone use.

Classes:
    EditorDocument: Snapshot of an open document
    CompletionBackend: Turns a prompt into completion text
    FileSystem: Async file access
    Workspace: File system plus folder and open-document enumeration

Every FileSystem call may fail. Callers skip the affected item instead of
aborting the surrounding operation.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol, runtime_checkable


@dataclass(slots=True)
class EditorDocument:
    """
    An open document as seen by the editor.

    ``version`` increases on every edit and is the invalidation signal for
    memoized context.
    """

    uri: Path
    text: str
    language_id: str = "plaintext"
    version: int = 1

    @property
    def lines(self) -> list[str]:
        return self.text.split("\n")

    @property
    def line_count(self) -> int:
        return self.text.count("\n") + 1

    def line_at(self, line: int) -> str:
        """Text of a zero-based line without its terminator, '' when out of range."""
        lines = self.lines
        if 0 <= line < len(lines):
            return lines[line].rstrip("\r")
        return ""


@runtime_checkable
class CompletionBackend(Protocol):
    """
    The AI completion provider.

    Authentication, provider selection, timeouts and network errors are the
    backend's business. A failure is raised as an exception.
    """

    async def complete(self, prompt: str) -> str: ...


@runtime_checkable
class FileSystem(Protocol):
    async def read_file(self, path: Path) -> str: ...

    async def list_directory(self, path: Path) -> list[tuple[str, bool]]:
        """Entries of a directory as ``(name, is_file)`` pairs."""
        ...

    async def find_files(
        self,
        include: str | Sequence[str],
        exclude: Sequence[str] | None = None,
        limit: int | None = None,
        root: Path | None = None,
    ) -> list[Path]:
        """Files matching ``include`` and not ``exclude`` under ``root`` (default: every folder)."""
        ...

    async def exists(self, path: Path) -> bool: ...


@runtime_checkable
class Workspace(FileSystem, Protocol):
    @property
    def folders(self) -> list[Path]: ...

    def open_documents(self) -> list[EditorDocument]: ...

    def relative_path(self, path: Path) -> str: ...

    def language_of(self, path: Path) -> str: ...
