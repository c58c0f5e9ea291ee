"""
Workspace search engine for pyassist.

This module provides ``SearchEngine``, the text/regex search over every
workspace folder, plus the specialized searches built on it (definitions,
references, TODO markers, similar code and file globbing).

Classes:
    SearchEngine: Line oriented workspace search with relevance ranking

Search pipeline:
    1. Compile the query (escaped unless ``use_regex``, ``\\b`` wrapped for
       ``whole_word``, case-insensitive unless ``case_sensitive``)
    2. Enumerate candidate files per folder from the include/exclude globs
    3. Find non-overlapping matches on every line
    4. Apply the comment and string filters
    5. Score each hit and attach its context lines
    6. Deduplicate by ``(uri, line_number)``, rank and truncate

Example:
    >>> from pyassist.search.engine import SearchEngine
    >>> from pyassist.workspace.local import LocalWorkspace
    >>> engine = SearchEngine(LocalWorkspace([Path("project")]))
    >>> results = await engine.search("parse_config", SearchOptions(whole_word=True))
    >>> todos = await engine.search_todos()

Unreadable files are skipped and recorded in ``engine.errors``; a search
never fails because one file could not be read.
"""

from __future__ import annotations

import time
from pathlib import Path

import regex as regex_mod

from ..core.config import DEFAULT_EXCLUDE_PATTERNS, AssistConfig
from ..core.types import Language, SearchOptions, SearchResult
from ..utils.error_handling import ErrorCollector, handle_file_error
from ..utils.helpers import split_lines
from ..utils.logging_config import AssistLogger, get_logger
from ..workspace.protocols import Workspace
from .matchers import build_search_regex, context_lines, find_line_matches, should_include_match
from .patterns import TODO_PATTERNS, definition_patterns, extract_code_keywords, file_types_for_language
from .scorer import ScoringWeights, dedupe_keep_best, keyword_overlap_bonus, rank, score_match

# Upper bound on keyword sub-searches issued by search_similar_code.
MAX_SIMILARITY_KEYWORDS = 10
SEARCH_FILES_LIMIT = 1000


def _result_identity(result: SearchResult) -> tuple[str, int]:
    return str(result.uri), result.line_number


def _result_score(result: SearchResult) -> float:
    return result.relevance_score


class SearchEngine:
    """
    Text and regex search across workspace folders.

    The engine holds no per-query state; concurrent searches are
    independent.
    """

    def __init__(
        self,
        workspace: Workspace,
        config: AssistConfig | None = None,
        logger: AssistLogger | None = None,
        scoring: ScoringWeights | None = None,
    ) -> None:
        self.workspace = workspace
        self.config = config or AssistConfig()
        self.logger = logger or get_logger()
        self.scoring = scoring or ScoringWeights()
        self.errors = ErrorCollector()

    def normalize_options(self, options: SearchOptions | None) -> SearchOptions:
        return (options or SearchOptions()).with_defaults(
            exclude_patterns=self.config.exclude_patterns,
            max_results=self.config.max_results,
            context_lines=self.config.context_lines,
        )

    async def search(self, query: str, options: SearchOptions | None = None) -> list[SearchResult]:
        """
        Search every workspace folder for ``query``.

        Args:
            query: Literal text, or a regular expression when ``use_regex``
            options: Search options; unset values take the configured defaults

        Returns:
            Results ranked by relevance, at most ``max_results`` long. An
            empty query or an invalid regular expression yields no results.
        """
        opts = self.normalize_options(options)
        if not query:
            return []

        pattern = build_search_regex(query, opts)
        if pattern is None:
            return []

        start = time.perf_counter()
        results: list[SearchResult] = []
        files_scanned = 0
        for folder in self.workspace.folders:
            for path in await self._candidate_files(folder, opts):
                text = await self._read(path)
                if text is None:
                    continue
                files_scanned += 1
                results.extend(self._search_text(path, text, query, pattern, opts))

        results = dedupe_keep_best(results, _result_identity, _result_score)
        results = rank(results, _result_score)[: opts.max_results]

        elapsed_ms = (time.perf_counter() - start) * 1000.0
        self.logger.log_search_complete(
            query, len(results), elapsed_ms, files_scanned=files_scanned
        )
        return results

    async def search_definitions(
        self, identifier: str, language: Language | str | None = None
    ) -> list[SearchResult]:
        """Union of the declaration pattern searches for ``identifier``."""
        results: list[SearchResult] = []
        for pattern in definition_patterns(identifier, language):
            results.extend(
                await self.search(
                    pattern,
                    SearchOptions(use_regex=True, case_sensitive=False, max_results=50, context_lines=3),
                )
            )
        return rank(dedupe_keep_best(results, _result_identity, _result_score), _result_score)

    async def search_references(
        self, identifier: str, language: Language | str | None = None
    ) -> list[SearchResult]:
        """Case-sensitive whole-word occurrences of ``identifier`` outside comments."""
        options = SearchOptions(
            case_sensitive=True,
            whole_word=True,
            include_comments=False,
            max_results=100,
            context_lines=2,
        )
        if language:
            options.file_types = file_types_for_language(language)
        return await self.search(identifier, options)

    async def search_todos(self) -> list[SearchResult]:
        """TODO, FIXME, HACK, NOTE, BUG and REVIEW markers ordered by file then line."""
        results: list[SearchResult] = []
        for pattern in TODO_PATTERNS:
            results.extend(
                await self.search(
                    pattern,
                    SearchOptions(
                        use_regex=True,
                        case_sensitive=False,
                        include_comments=True,
                        max_results=100,
                        context_lines=1,
                    ),
                )
            )
        results = dedupe_keep_best(results, _result_identity, _result_score)
        return sorted(results, key=lambda r: (r.relative_path, r.line_number))

    async def search_similar_code(
        self, snippet: str, language: Language | str | None
    ) -> list[SearchResult]:
        """
        Lines resembling ``snippet``.

        Each significant identifier of the snippet is searched for; hits are
        then boosted by how many of the snippet's identifiers their line
        shares.
        """
        keywords = extract_code_keywords(snippet, language)
        file_types = file_types_for_language(language)
        results: list[SearchResult] = []
        for keyword in keywords[:MAX_SIMILARITY_KEYWORDS]:
            results.extend(
                await self.search(
                    keyword,
                    SearchOptions(
                        file_types=file_types,
                        include_comments=False,
                        max_results=20,
                        context_lines=5,
                    ),
                )
            )

        results = dedupe_keep_best(results, _result_identity, _result_score)
        for result in results:
            result.relevance_score += keyword_overlap_bonus(
                keywords, extract_code_keywords(result.line_text, language)
            )
        return rank(results, _result_score)

    async def search_files(self, pattern: str, limit: int = SEARCH_FILES_LIMIT) -> list[Path]:
        """Files matching a glob in any folder, default excludes applied."""
        found: list[Path] = []
        for folder in self.workspace.folders:
            remaining = limit - len(found)
            if remaining <= 0:
                break
            try:
                found.extend(
                    await self.workspace.find_files(
                        pattern, list(DEFAULT_EXCLUDE_PATTERNS), remaining, root=folder
                    )
                )
            except Exception as e:
                handle_file_error(folder, "list", e, self.errors, self.logger)
        return found

    # Internals

    async def _candidate_files(self, folder: Path, opts: SearchOptions) -> list[Path]:
        try:
            return await self.workspace.find_files(
                opts.file_types,
                opts.exclude_patterns,
                self.config.max_files_per_folder,
                root=folder,
            )
        except Exception as e:
            handle_file_error(folder, "list", e, self.errors, self.logger)
            return []

    async def _read(self, path: Path) -> str | None:
        try:
            return await self.workspace.read_file(path)
        except Exception as e:
            handle_file_error(path, "read", e, self.errors, self.logger)
            return None

    def _search_text(
        self,
        path: Path,
        text: str,
        query: str,
        pattern: regex_mod.Pattern,
        opts: SearchOptions,
    ) -> list[SearchResult]:
        lines = split_lines(text)
        file_name = path.name
        relative = self.workspace.relative_path(path)
        found: list[SearchResult] = []
        for i, line in enumerate(lines):
            for match in find_line_matches(line, pattern):
                if not should_include_match(line, match.index, opts):
                    continue
                before, after = context_lines(lines, i, opts.context_lines)
                found.append(
                    SearchResult(
                        uri=path,
                        file_name=file_name,
                        relative_path=relative,
                        line_number=i + 1,
                        line_text=line,
                        match_text=match.text,
                        context_before=before,
                        context_after=after,
                        relevance_score=score_match(
                            match.text, query, file_name, line, self.scoring
                        ),
                    )
                )
        return found
