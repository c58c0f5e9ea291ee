"""
Regex tables used by the specialized searches.

Functions:
    definition_patterns: Declaration regexes for one identifier
    extract_code_keywords: Significant identifiers of a code snippet
    file_types_for_language: Include globs restricting a search to a language
"""

from __future__ import annotations

from types import MappingProxyType

import regex as regex_mod

from ..core.types import Language

TODO_PATTERNS: tuple[str, ...] = (
    r"\bTODO\b:?\s*(.*)",
    r"\bFIXME\b:?\s*(.*)",
    r"\bHACK\b:?\s*(.*)",
    r"\bNOTE\b:?\s*(.*)",
    r"\bBUG\b:?\s*(.*)",
    r"\bREVIEW\b:?\s*(.*)",
)

_ECMASCRIPT_DEFINITIONS = (
    r"function\s+{id}\s*\(",
    r"const\s+{id}\s*=",
    r"let\s+{id}\s*=",
    r"class\s+{id}\s*\{{",
    r"interface\s+{id}\s*\{{",
    r"type\s+{id}\s*=",
    r"export\s+(?:const|let|function|class|interface|type)\s+{id}",
)

_PYTHON_DEFINITIONS = (
    r"def\s+{id}\s*\(",
    r"class\s+{id}\s*[\(:]",
    r"{id}\s*=\s*lambda",
)

_JAVA_DEFINITIONS = (
    r"(?:public|private|protected)?\s*(?:static)?\s*\w+\s+{id}\s*\(",
    r"(?:public|private|protected)?\s*class\s+{id}\s*\{{",
    r"(?:public|private|protected)?\s*interface\s+{id}\s*\{{",
)

LANGUAGE_KEYWORDS: MappingProxyType[Language, frozenset[str]] = MappingProxyType(
    {
        Language.JAVASCRIPT: frozenset(
            {"var", "let", "const", "function", "if", "else", "for", "while",
             "return", "true", "false", "null", "undefined"}
        ),
        Language.TYPESCRIPT: frozenset(
            {"var", "let", "const", "function", "if", "else", "for", "while",
             "return", "true", "false", "null", "undefined", "interface", "type", "enum"}
        ),
        Language.PYTHON: frozenset(
            {"def", "class", "if", "else", "elif", "for", "while", "return",
             "True", "False", "None", "import", "from"}
        ),
        Language.JAVA: frozenset(
            {"public", "private", "protected", "static", "final", "class", "interface",
             "if", "else", "for", "while", "return", "true", "false", "null"}
        ),
    }
)

_FILE_TYPES: MappingProxyType[Language, tuple[str, ...]] = MappingProxyType(
    {
        Language.JAVASCRIPT: ("**/*.js", "**/*.jsx", "**/*.mjs"),
        Language.TYPESCRIPT: ("**/*.ts", "**/*.tsx"),
        Language.PYTHON: ("**/*.py", "**/*.pyw"),
        Language.JAVA: ("**/*.java",),
        Language.CPP: ("**/*.cpp", "**/*.cc", "**/*.cxx", "**/*.h", "**/*.hpp"),
        Language.C: ("**/*.c", "**/*.h"),
        Language.RUST: ("**/*.rs",),
        Language.GO: ("**/*.go",),
        Language.PHP: ("**/*.php",),
        Language.RUBY: ("**/*.rb",),
        Language.SWIFT: ("**/*.swift",),
        Language.KOTLIN: ("**/*.kt",),
        Language.SCALA: ("**/*.scala",),
    }
)

_LINE_COMMENT = regex_mod.compile(r"//.*$", regex_mod.MULTILINE)
_BLOCK_COMMENT = regex_mod.compile(r"/\*[\s\S]*?\*/")
_STRING_LITERAL = regex_mod.compile(r"""(["'`])(?:\\.|(?!\1)[^\\])*\1""")
_IDENTIFIER = regex_mod.compile(r"\b[a-zA-Z_][a-zA-Z0-9_]*\b")


def _as_language(language: Language | str | None) -> Language | None:
    if language is None or isinstance(language, Language):
        return language
    return Language.from_id(language)


def definition_patterns(identifier: str, language: Language | str | None = None) -> list[str]:
    """
    Declaration regexes for ``identifier``.

    With no language every family's patterns are returned; an unsupported
    language yields an empty list.
    """
    lang = _as_language(language)
    escaped = regex_mod.escape(identifier)
    templates: list[str] = []
    if lang is None or lang.is_ecmascript:
        templates.extend(_ECMASCRIPT_DEFINITIONS)
    if lang is None or lang == Language.PYTHON:
        templates.extend(_PYTHON_DEFINITIONS)
    if lang is None or lang == Language.JAVA:
        templates.extend(_JAVA_DEFINITIONS)
    return [t.format(id=escaped) for t in templates]


def is_language_keyword(word: str, language: Language | str | None) -> bool:
    lang = _as_language(language)
    return lang is not None and word in LANGUAGE_KEYWORDS.get(lang, frozenset())


def extract_code_keywords(code: str, language: Language | str | None) -> list[str]:
    """
    Unique identifiers longer than two characters, longest first.

    Comments and string literals are removed first and language keywords
    are skipped.
    """
    clean = _LINE_COMMENT.sub("", code)
    clean = _BLOCK_COMMENT.sub("", clean)
    clean = _STRING_LITERAL.sub("", clean)

    seen: dict[str, None] = {}
    for m in _IDENTIFIER.finditer(clean):
        word = m.group(0)
        if len(word) > 2 and not is_language_keyword(word, language):
            seen.setdefault(word, None)
    return sorted(seen, key=len, reverse=True)


def file_types_for_language(language: Language | str | None) -> list[str]:
    lang = _as_language(language)
    if lang is None:
        return ["**/*"]
    return list(_FILE_TYPES.get(lang, ("**/*",)))
