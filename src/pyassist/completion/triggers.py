"""
Eligibility gate for inline completion.

An edit qualifies for a completion request only when:
    - nothing but whitespace follows the cursor on its line
    - the cursor does not sit inside a string literal or comment
    - the text before the cursor matches a trigger pattern

Trigger patterns are a language agnostic common set plus a per-language
extension set. Both are compiled once at import time and exposed as
immutable tables keyed by ``Language``.
"""

from __future__ import annotations

from types import MappingProxyType

import regex as regex_mod

from ..core.types import Language

_IGNORECASE = regex_mod.IGNORECASE


def _compile(*patterns: str | tuple[str, int]) -> tuple[regex_mod.Pattern, ...]:
    compiled: list[regex_mod.Pattern] = []
    for p in patterns:
        if isinstance(p, tuple):
            compiled.append(regex_mod.compile(p[0], p[1]))
        else:
            compiled.append(regex_mod.compile(p))
    return tuple(compiled)


COMMON_TRIGGER_PATTERNS: tuple[regex_mod.Pattern, ...] = _compile(
    r"function\s+\w+\s*\([^)]*\)\s*\{\s*$",  # function declaration
    r"=>\s*\{\s*$",  # arrow function body
    r"if\s*\([^)]+\)\s*\{\s*$",
    r"else\s*\{\s*$",
    r"for\s*\([^)]+\)\s*\{\s*$",
    r"while\s*\([^)]+\)\s*\{\s*$",
    r"try\s*\{\s*$",
    r"catch\s*\([^)]*\)\s*\{\s*$",
    (r"//\s*TODO:", _IGNORECASE),
    (r"//\s*FIXME:", _IGNORECASE),
    r"//\s*.+$",  # trailing comment
    r"^\s*$",  # blank line
    r"\.\s*$",  # method chaining
    r"\w+\(\s*$",  # call opening
)

LANGUAGE_TRIGGER_PATTERNS: MappingProxyType[Language, tuple[regex_mod.Pattern, ...]] = MappingProxyType(
    {
        Language.JAVASCRIPT: _compile(
            r"const\s+\w+\s*=\s*$",
            r"let\s+\w+\s*=\s*$",
            r"export\s+(?:default\s+)?$",
            r"import\s+.*from\s*$",
            r"\.then\s*\(\s*$",
            r"\.catch\s*\(\s*$",
            r"async\s+function\s*\w*\s*\([^)]*\)\s*\{\s*$",
        ),
        Language.TYPESCRIPT: _compile(
            r"const\s+\w+:\s*\w*\s*=\s*$",
            r"interface\s+\w+\s*\{\s*$",
            r"type\s+\w+\s*=\s*$",
            r"class\s+\w+\s*\{\s*$",
            r"private\s+\w+\s*:\s*$",
            r"public\s+\w+\s*:\s*$",
        ),
        Language.PYTHON: _compile(
            r"def\s+\w+\([^)]*\):\s*$",
            r"class\s+\w+(?:\([^)]*\))?:\s*$",
            r"if\s+.+:\s*$",
            r"elif\s+.+:\s*$",
            r"else:\s*$",
            r"for\s+\w+\s+in\s+.+:\s*$",
            r"while\s+.+:\s*$",
            r"try:\s*$",
            r"except\s*(?:\w+)?:\s*$",
            r"with\s+.+:\s*$",
            (r"#\s*TODO:", _IGNORECASE),
        ),
        Language.JAVA: _compile(
            r"public\s+(?:static\s+)?(?:void|[\w<>]+)\s+\w+\s*\([^)]*\)\s*\{\s*$",
            r"private\s+(?:static\s+)?(?:void|[\w<>]+)\s+\w+\s*\([^)]*\)\s*\{\s*$",
            r"if\s*\([^)]+\)\s*\{\s*$",
            r"for\s*\([^)]+\)\s*\{\s*$",
            r"while\s*\([^)]+\)\s*\{\s*$",
            r"try\s*\{\s*$",
            r"catch\s*\([^)]+\)\s*\{\s*$",
        ),
    }
)

_QUOTES = ('"', "'", "`")


def trigger_patterns(language: Language | str | None) -> tuple[regex_mod.Pattern, ...]:
    """Common patterns plus the language's own; unknown languages get the common set."""
    lang = language if isinstance(language, Language) else Language.from_id(language)
    return COMMON_TRIGGER_PATTERNS + LANGUAGE_TRIGGER_PATTERNS.get(lang, ())


def _unescaped_count(text: str, quote: str) -> int:
    count = 0
    escaped = False
    for ch in text:
        if escaped:
            escaped = False
        elif ch == "\\":
            escaped = True
        elif ch == quote:
            count += 1
    return count


def is_in_string_or_comment(text_before: str) -> bool:
    """Heuristic check on the text between line start and cursor."""
    if any(_unescaped_count(text_before, q) % 2 == 1 for q in _QUOTES):
        return True

    stripped = text_before.strip()
    if stripped.startswith(("//", "#")):
        return True

    opened = text_before.rfind("/*")
    return opened != -1 and text_before.find("*/", opened + 2) == -1


def should_trigger(line_text: str, character: int, language_id: Language | str | None) -> bool:
    """
    The eligibility gate for one cursor position.

    Args:
        line_text: Full text of the cursor's line
        character: Zero-based cursor column
        language_id: Editor language identifier or ``Language``

    Returns:
        True when a completion request may be scheduled
    """
    character = max(0, min(character, len(line_text)))
    before = line_text[:character]
    after = line_text[character:]

    if after.strip():
        return False
    if is_in_string_or_comment(before):
        return False
    return any(p.search(before) for p in trigger_patterns(language_id))
