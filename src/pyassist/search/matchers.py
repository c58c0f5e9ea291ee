"""
Line level matching for workspace search.

Functions:
    build_search_regex: Compile a query and options into one pattern
    find_line_matches: All non-overlapping matches on a line
    is_comment_line: Comment-only line heuristic
    is_in_open_string: Quote parity heuristic for string literals
    should_include_match: Apply the comment and string filters
    context_lines: Lines surrounding a hit, bounded at the file edges

The heuristics are language agnostic on purpose: they look only at the line
containing the match.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache

import regex as regex_mod

from ..core.types import SearchOptions
from ..utils.error_handling import PatternError
from ..utils.logging_config import get_logger

_COMMENT_PREFIXES = ("//", "#", "/*")
_QUOTE_CHARS = ("'", '"', "`")


@dataclass(slots=True)
class LineMatch:
    index: int
    text: str


@lru_cache(maxsize=256)
def _get_compiled_regex(pattern: str, flags: int) -> regex_mod.Pattern:
    return regex_mod.compile(pattern, flags=flags)


def compile_search_regex(query: str, options: SearchOptions) -> regex_mod.Pattern:
    """
    Compile ``query`` according to ``options``.

    Raises:
        PatternError: If a user supplied regular expression does not compile.
    """
    pattern = query if options.use_regex else regex_mod.escape(query)
    if options.whole_word:
        pattern = rf"\b{pattern}\b"
    flags = 0 if options.case_sensitive else regex_mod.IGNORECASE
    try:
        return _get_compiled_regex(pattern, flags)
    except regex_mod.error as e:
        raise PatternError(f"Invalid search pattern: {e}", pattern=query) from e


def build_search_regex(query: str, options: SearchOptions) -> regex_mod.Pattern | None:
    """Like ``compile_search_regex`` but returns None for an invalid pattern."""
    try:
        return compile_search_regex(query, options)
    except PatternError as e:
        get_logger().debug(e.message, pattern=query)
        return None


def find_line_matches(line: str, pattern: regex_mod.Pattern) -> list[LineMatch]:
    """Non-overlapping matches; an empty match advances one character."""
    matches: list[LineMatch] = []
    pos = 0
    while pos <= len(line):
        m = pattern.search(line, pos)
        if m is None:
            break
        matches.append(LineMatch(index=m.start(), text=m.group(0)))
        pos = m.end() if m.end() > m.start() else m.start() + 1
    return matches


def is_comment_line(line: str) -> bool:
    stripped = line.strip()
    return stripped.startswith(_COMMENT_PREFIXES) or "*/" in line


def is_in_open_string(line: str, index: int) -> bool:
    """True when an odd number of any one quote character precedes ``index``."""
    before = line[:index]
    return any(before.count(q) % 2 == 1 for q in _QUOTE_CHARS)


def should_include_match(line: str, index: int, options: SearchOptions) -> bool:
    if not options.include_comments and is_comment_line(line):
        return False
    if not options.include_strings and is_in_open_string(line, index):
        return False
    return True


def context_lines(lines: list[str], index: int, count: int) -> tuple[list[str], list[str]]:
    """``count`` lines before and after ``lines[index]``."""
    if count <= 0:
        return [], []
    before = lines[max(0, index - count) : index]
    after = lines[index + 1 : index + 1 + count]
    return before, after
