"""
Core building blocks shared by every pyassist component:
configuration and the common data types.
"""

from .config import AssistConfig, RelatedFileWeights
from .types import (
    CursorPosition,
    FileContext,
    Language,
    SearchOptions,
    SearchResult,
    WorkspaceContext,
)

__all__ = [
    "AssistConfig",
    "RelatedFileWeights",
    "CursorPosition",
    "FileContext",
    "Language",
    "SearchOptions",
    "SearchResult",
    "WorkspaceContext",
]
