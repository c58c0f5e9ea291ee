"""
pyassist: the local intelligence layer of an AI-assisted code editor.

pyassist sits between an editor's keystrokes and a remote completion
provider. It decides when a completion should be requested, assembles the
workspace context sent with the request, remembers answers it has already
received, and locates definitions, references and TODO markers across the
workspace.

Key Features:
    - **Namespaced TTL/LRU cache**: completions, contexts and provider
      responses with lazy expiry, a size bound and a background sweep
    - **Context assembly**: the current file plus ranked related files from
      open tabs, imports, the same directory and similar names
    - **Debounced single-flight triggering**: one completion request per
      document at a time, stale work cancelled
    - **Workspace search**: text/regex search with context lines, ranking
      and deduplication; definition, reference and TODO lookups
    - **Invalidation**: file change, delete and folder-change hooks, plus
      an optional watchdog-based watcher

Main Classes:
    PyAssist: Wires every service for one workspace
    AssistConfig: All tunable constants
    CacheStore: The generic namespaced cache
    CompletionCache: Purpose-specific cache facade
    ContextAssembler: Builds WorkspaceContext objects
    TriggerController: Debounce and single-flight scheduler
    SearchEngine: Workspace-wide search

Example Usage:
    >>> from pyassist import PyAssist, LocalWorkspace, FunctionBackend, CursorPosition
    >>> workspace = LocalWorkspace(["/path/to/project"])
    >>> backend = FunctionBackend(my_provider_call)
    >>> async with PyAssist(workspace, backend, provider="claude") as assist:
    ...     doc = workspace.open_document("/path/to/project/src/app.ts")
    ...     text = await assist.complete(doc, CursorPosition(line=3, character=16))
    ...     todos = await assist.find_todos()
"""

from .api import PyAssist
from .cache import CacheStore, CompletionCache
from .completion import CancellationToken, TriggerController, TriggerState, should_trigger
from .context import ContextAssembler, format_for_prompt
from .core import (
    AssistConfig,
    CursorPosition,
    FileContext,
    Language,
    RelatedFileWeights,
    SearchOptions,
    SearchResult,
    WorkspaceContext,
)
from .search import SearchEngine
from .utils import (
    AssistError,
    BackendError,
    ConfigurationError,
    ErrorCollector,
    FileAccessError,
    PatternError,
    configure_logging,
    disable_logging,
    enable_debug_logging,
    get_logger,
)
from .workspace import CompletionBackend, EditorDocument, FunctionBackend, LocalWorkspace, Workspace
from .workspace.watcher import InvalidationHub, WorkspaceWatcher

__version__ = "0.1.0"
__license__ = "MIT"
__description__ = "Completion triggering, context assembly, caching and search for AI code assistants"

__all__ = [
    # Main classes
    "PyAssist",
    "AssistConfig",
    "RelatedFileWeights",
    "CacheStore",
    "CompletionCache",
    "ContextAssembler",
    "TriggerController",
    "TriggerState",
    "CancellationToken",
    "SearchEngine",
    "InvalidationHub",
    "WorkspaceWatcher",
    # Data types
    "CursorPosition",
    "FileContext",
    "Language",
    "SearchOptions",
    "SearchResult",
    "WorkspaceContext",
    "EditorDocument",
    # Collaborators
    "CompletionBackend",
    "Workspace",
    "LocalWorkspace",
    "FunctionBackend",
    # Utility functions
    "should_trigger",
    "format_for_prompt",
    # Errors
    "AssistError",
    "BackendError",
    "ConfigurationError",
    "ErrorCollector",
    "FileAccessError",
    "PatternError",
    # Logging
    "configure_logging",
    "disable_logging",
    "enable_debug_logging",
    "get_logger",
]
