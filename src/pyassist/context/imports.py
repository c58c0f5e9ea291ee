"""
Import extraction and relative import resolution.

Functions:
    extract_import_specifiers: Every import specifier in source order
    extract_imports: Specifiers worth reporting as dependencies
    resolve_import_path: Map a relative specifier onto an existing file
"""

from __future__ import annotations

import os
from collections.abc import Awaitable, Callable
from pathlib import Path
from types import MappingProxyType

import regex as regex_mod

from ..core.types import Language
from ..utils.logging_config import get_logger

RESOLVE_EXTENSIONS: tuple[str, ...] = (".js", ".ts", ".jsx", ".tsx", ".py", ".java")

_ES_IMPORT = regex_mod.compile(
    r"""import\s+(?:\s*(?:\w++|\{[^}]*\}|\*\s+as\s+\w++)(?:\s*,)?)*\s*from\s+['"`]([^'"`]+)['"`]"""
)
_ES_SIDE_EFFECT_IMPORT = regex_mod.compile(r"""^\s*import\s+['"`]([^'"`]+)['"`]""", regex_mod.MULTILINE)
_REQUIRE = regex_mod.compile(r"""require\s*\(\s*['"`]([^'"`]+)['"`]\s*\)""")
_PY_FROM_IMPORT = regex_mod.compile(r"^\s*from\s+(\S+)\s+import\b", regex_mod.MULTILINE)
_PY_IMPORT = regex_mod.compile(r"^\s*import\s+([^\n#]+)", regex_mod.MULTILINE)
_JAVA_IMPORT = regex_mod.compile(r"^\s*import\s+(?:static\s+)?([^;\s]+)\s*;", regex_mod.MULTILINE)


def _ecmascript_specifiers(content: str) -> list[tuple[int, str]]:
    found = [(m.start(), m.group(1)) for m in _ES_IMPORT.finditer(content)]
    found += [(m.start(), m.group(1)) for m in _ES_SIDE_EFFECT_IMPORT.finditer(content)]
    found += [(m.start(), m.group(1)) for m in _REQUIRE.finditer(content)]
    return found


def _python_specifiers(content: str) -> list[tuple[int, str]]:
    found = [(m.start(), m.group(1)) for m in _PY_FROM_IMPORT.finditer(content)]
    for m in _PY_IMPORT.finditer(content):
        # import a, b.c as d
        for part in m.group(1).split(","):
            name = part.strip().split(" ")[0]
            if name:
                found.append((m.start(), name))
    return found


def _java_specifiers(content: str) -> list[tuple[int, str]]:
    return [(m.start(), m.group(1)) for m in _JAVA_IMPORT.finditer(content)]


_EXTRACTORS: MappingProxyType[Language, Callable[[str], list[tuple[int, str]]]] = MappingProxyType(
    {
        Language.JAVASCRIPT: _ecmascript_specifiers,
        Language.TYPESCRIPT: _ecmascript_specifiers,
        Language.PYTHON: _python_specifiers,
        Language.JAVA: _java_specifiers,
    }
)


def extract_import_specifiers(content: str, language: Language | str) -> list[str]:
    """All import specifiers in source order, relative ones included."""
    lang = language if isinstance(language, Language) else Language.from_id(language)
    extractor = _EXTRACTORS.get(lang)
    if extractor is None:
        return []
    found = sorted(extractor(content), key=lambda item: item[0])
    return list(dict.fromkeys(spec for _, spec in found))


def extract_imports(content: str, language: Language | str) -> list[str]:
    """
    Dependencies named by the file's imports.

    Relative specifiers and anything under ``node_modules`` are dropped;
    duplicates keep their first position.
    """
    return [
        spec
        for spec in extract_import_specifiers(content, language)
        if spec and not spec.startswith(".") and "node_modules" not in spec
    ]


async def resolve_import_path(
    specifier: str,
    current_file: Path,
    exists: Callable[[Path], Awaitable[bool]],
) -> Path | None:
    """
    Resolve a ``./`` or ``../`` specifier against ``current_file``'s directory.

    The specifier is tried as written and then with each of
    ``RESOLVE_EXTENSIONS`` appended. Other specifiers resolve to None.
    """
    if not specifier.startswith(("./", "../")):
        return None

    base = Path(os.path.normpath(current_file.parent / specifier))
    candidates = [base] if base.suffix else []
    candidates += [base.with_name(base.name + ext) for ext in RESOLVE_EXTENSIONS]
    for candidate in candidates:
        if candidate == current_file:
            continue
        try:
            if await exists(candidate):
                return candidate
        except Exception as e:
            get_logger().debug(f"Could not check import candidate {candidate}: {e}")
            continue
    return None
