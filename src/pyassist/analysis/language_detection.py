from __future__ import annotations

import re
from pathlib import Path

from ..core.types import Language

# File extension to language mapping
EXTENSION_MAP: dict[str, Language] = {
    # Python
    ".py": Language.PYTHON,
    ".pyw": Language.PYTHON,
    ".pyi": Language.PYTHON,
    # JavaScript/TypeScript
    ".js": Language.JAVASCRIPT,
    ".jsx": Language.JAVASCRIPT,
    ".mjs": Language.JAVASCRIPT,
    ".cjs": Language.JAVASCRIPT,
    ".ts": Language.TYPESCRIPT,
    ".tsx": Language.TYPESCRIPT,
    # JVM
    ".java": Language.JAVA,
    ".kt": Language.KOTLIN,
    ".kts": Language.KOTLIN,
    ".scala": Language.SCALA,
    # C family
    ".c": Language.C,
    ".h": Language.C,
    ".cpp": Language.CPP,
    ".cxx": Language.CPP,
    ".cc": Language.CPP,
    ".hpp": Language.CPP,
    ".cs": Language.CSHARP,
    # Others
    ".go": Language.GO,
    ".rs": Language.RUST,
    ".php": Language.PHP,
    ".rb": Language.RUBY,
    ".swift": Language.SWIFT,
    ".sh": Language.SHELL,
    ".bash": Language.SHELL,
    ".zsh": Language.SHELL,
    # Web and data
    ".html": Language.HTML,
    ".htm": Language.HTML,
    ".css": Language.CSS,
    ".scss": Language.CSS,
    ".less": Language.CSS,
    ".json": Language.JSON,
    ".yaml": Language.YAML,
    ".yml": Language.YAML,
    ".toml": Language.TOML,
    ".xml": Language.XML,
    ".md": Language.MARKDOWN,
    ".markdown": Language.MARKDOWN,
}

# Special filename patterns
FILENAME_PATTERNS: dict[str, Language] = {
    "Dockerfile": Language.SHELL,
    "Makefile": Language.SHELL,
    "Rakefile": Language.RUBY,
    "Gemfile": Language.RUBY,
    "SConstruct": Language.PYTHON,
    "build.gradle.kts": Language.KOTLIN,
}

# Shebang patterns for script detection
SHEBANG_PATTERNS: dict[str, Language] = {
    r"#!.*\bpython[0-9.]*\b": Language.PYTHON,
    r"#!.*\bnode\b": Language.JAVASCRIPT,
    r"#!.*\b(ba|z)?sh\b": Language.SHELL,
    r"#!.*\bruby\b": Language.RUBY,
    r"#!.*\bphp\b": Language.PHP,
}

# Extensions eligible as same-directory and similar-name context files.
CODE_EXTENSIONS: frozenset[str] = frozenset(
    {
        ".js", ".ts", ".jsx", ".tsx", ".py", ".java", ".cs", ".cpp", ".c", ".h",
        ".rs", ".go", ".php", ".rb", ".swift", ".kt", ".scala", ".clj", ".fs",
        ".vue", ".svelte", ".html", ".css", ".scss", ".less", ".json", ".xml",
        ".yaml", ".yml", ".toml", ".ini", ".cfg", ".conf",
    }
)

_TEXT_EXTENSIONS: frozenset[str] = CODE_EXTENSIONS | frozenset(EXTENSION_MAP) | frozenset(
    {".txt", ".rst", ".log", ".csv", ".tsv", ".properties", ".env", ".mjs", ".cjs", ".sql"}
)


def detect_language_by_extension(path: Path) -> Language:
    """Detect language based on file extension."""
    return EXTENSION_MAP.get(path.suffix.lower(), Language.UNKNOWN)


def detect_language_by_filename(path: Path) -> Language:
    """Detect language based on filename patterns."""
    return FILENAME_PATTERNS.get(path.name, Language.UNKNOWN)


def detect_language_by_shebang(content: str) -> Language:
    """Detect language based on shebang line."""
    if not content:
        return Language.UNKNOWN

    first_line = content.split("\n", 1)[0].strip()
    if not first_line.startswith("#!"):
        return Language.UNKNOWN

    for pattern, language in SHEBANG_PATTERNS.items():
        if re.search(pattern, first_line):
            return language

    return Language.UNKNOWN


def detect_language(path: Path, content: str | None = None) -> Language:
    """
    Detect a file's language from its name, extension and shebang line.

    Args:
        path: File path
        content: Optional file content for shebang detection

    Returns:
        Detected language, ``Language.UNKNOWN`` when nothing matches
    """
    lang = detect_language_by_filename(path)
    if lang != Language.UNKNOWN:
        return lang

    lang = detect_language_by_extension(path)
    if lang != Language.UNKNOWN:
        return lang

    if content:
        return detect_language_by_shebang(content)

    return Language.UNKNOWN


def language_id_for(path: Path, content: str | None = None) -> str:
    """Editor-style language identifier for a file (``"plaintext"`` when unknown)."""
    lang = detect_language(path, content)
    return "plaintext" if lang == Language.UNKNOWN else lang.value


def get_language_extensions(language: Language) -> list[str]:
    """Get all file extensions associated with a language."""
    return [ext for ext, lang in EXTENSION_MAP.items() if lang == language]


def is_code_file(file_name: str | Path) -> bool:
    """True when the file's extension is on the context allow-list."""
    return Path(file_name).suffix.lower() in CODE_EXTENSIONS


def is_text_file(path: Path) -> bool:
    """Check if a file is likely a text file based on extension."""
    return (
        path.suffix.lower() in _TEXT_EXTENSIONS
        or path.name in FILENAME_PATTERNS
        or not path.suffix
    )
