"""
Core type definitions for pyassist.

All data types shared between the cache, context, completion and search
packages live in ``basic_types`` and are re-exported here.
"""

from .basic_types import (
    CursorPosition,
    FileContext,
    Language,
    SearchOptions,
    SearchResult,
    WorkspaceContext,
)

__all__ = [
    "CursorPosition",
    "FileContext",
    "Language",
    "SearchOptions",
    "SearchResult",
    "WorkspaceContext",
]
