"""
Collaborator seams and their local implementations.

``pyassist.workspace.watcher`` is not imported here because it depends on
the context package, which itself depends on these protocols.
"""

from .local import FunctionBackend, LocalWorkspace
from .protocols import CompletionBackend, EditorDocument, FileSystem, Workspace

__all__ = [
    "FunctionBackend",
    "LocalWorkspace",
    "CompletionBackend",
    "EditorDocument",
    "FileSystem",
    "Workspace",
]
