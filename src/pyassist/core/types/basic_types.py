from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from pathlib import Path


class Language(str, Enum):
    """Languages with dedicated trigger, import and definition tables."""

    PYTHON = "python"
    JAVASCRIPT = "javascript"
    TYPESCRIPT = "typescript"
    JAVA = "java"
    C = "c"
    CPP = "cpp"
    CSHARP = "csharp"
    GO = "go"
    RUST = "rust"
    PHP = "php"
    RUBY = "ruby"
    KOTLIN = "kotlin"
    SWIFT = "swift"
    SCALA = "scala"
    SHELL = "shell"
    HTML = "html"
    CSS = "css"
    JSON = "json"
    YAML = "yaml"
    TOML = "toml"
    XML = "xml"
    MARKDOWN = "markdown"
    UNKNOWN = "unknown"

    @classmethod
    def from_id(cls, language_id: str | None) -> Language:
        """Map an editor language identifier onto a Language."""
        if not language_id:
            return cls.UNKNOWN
        key = language_id.strip().lower()
        alias = _LANGUAGE_ID_ALIASES.get(key)
        if alias is not None:
            return alias
        try:
            return cls(key)
        except ValueError:
            return cls.UNKNOWN

    @property
    def is_ecmascript(self) -> bool:
        return self in (Language.JAVASCRIPT, Language.TYPESCRIPT)


_LANGUAGE_ID_ALIASES: dict[str, Language] = {
    "javascriptreact": Language.JAVASCRIPT,
    "js": Language.JAVASCRIPT,
    "jsx": Language.JAVASCRIPT,
    "typescriptreact": Language.TYPESCRIPT,
    "ts": Language.TYPESCRIPT,
    "tsx": Language.TYPESCRIPT,
    "py": Language.PYTHON,
    "c++": Language.CPP,
    "cs": Language.CSHARP,
    "shellscript": Language.SHELL,
    "bash": Language.SHELL,
    "sh": Language.SHELL,
    "yml": Language.YAML,
}


@dataclass(slots=True)
class CursorPosition:
    """Zero-based cursor location inside a document."""

    line: int
    character: int


@dataclass(slots=True)
class FileContext:
    """One file's contribution to a workspace context."""

    uri: Path
    file_name: str
    relative_path: str
    content: str
    language: str
    is_open: bool = False
    relevance_score: float = 0.0


@dataclass(slots=True)
class WorkspaceContext:
    """The ranked bundle of files and metadata sent with a completion request."""

    current_file: FileContext | None = None
    related_files: list[FileContext] = field(default_factory=list)
    imports: list[str] = field(default_factory=list)
    project_type: str = "unknown"
    workspace_name: str = "unknown"

    @classmethod
    def empty(cls) -> WorkspaceContext:
        return cls()

    @property
    def is_empty(self) -> bool:
        return self.current_file is None


@dataclass(slots=True)
class SearchResult:
    """A single matching line with its surrounding context."""

    uri: Path
    file_name: str
    relative_path: str
    line_number: int
    line_text: str
    match_text: str
    context_before: list[str] = field(default_factory=list)
    context_after: list[str] = field(default_factory=list)
    relevance_score: float = 0.0


@dataclass(slots=True)
class SearchOptions:
    """
    Options for a workspace search.

    ``None`` for ``file_types``, ``exclude_patterns``, ``max_results`` or
    ``context_lines`` means "use the engine's configured default".
    """

    case_sensitive: bool = False
    whole_word: bool = False
    use_regex: bool = False
    include_comments: bool = True
    include_strings: bool = True
    file_types: list[str] | None = None
    exclude_patterns: list[str] | None = None
    max_results: int | None = None
    context_lines: int | None = None

    def with_defaults(
        self,
        *,
        exclude_patterns: list[str],
        max_results: int,
        context_lines: int,
    ) -> SearchOptions:
        """Return a copy with every unset option filled in."""
        return replace(
            self,
            file_types=list(self.file_types) if self.file_types else ["**/*"],
            exclude_patterns=(
                list(self.exclude_patterns)
                if self.exclude_patterns is not None
                else list(exclude_patterns)
            ),
            max_results=self.max_results if self.max_results is not None else max_results,
            context_lines=max(0, self.context_lines if self.context_lines is not None else context_lines),
        )
