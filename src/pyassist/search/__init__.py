"""
Workspace search for pyassist.

``SearchEngine`` runs text and regex searches across workspace folders;
``scorer`` holds the relevance heuristics shared with the context
assembler.
"""

from .engine import SearchEngine
from .matchers import build_search_regex, find_line_matches
from .patterns import TODO_PATTERNS, definition_patterns, extract_code_keywords, file_types_for_language
from .scorer import CONTEXT_KEYWORDS, RelatedFileWeights, ScoringWeights, score_match

__all__ = [
    "SearchEngine",
    "build_search_regex",
    "find_line_matches",
    "TODO_PATTERNS",
    "definition_patterns",
    "extract_code_keywords",
    "file_types_for_language",
    "CONTEXT_KEYWORDS",
    "RelatedFileWeights",
    "ScoringWeights",
    "score_match",
]
