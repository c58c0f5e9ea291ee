"""Tests for pyassist.search.engine and pyassist.search.patterns."""

from __future__ import annotations

from pathlib import Path

import pytest

from pyassist.core.config import AssistConfig
from pyassist.core.types import Language, SearchOptions
from pyassist.search.engine import SearchEngine
from pyassist.search.patterns import (
    definition_patterns,
    extract_code_keywords,
    file_types_for_language,
    is_language_keyword,
)
from pyassist.workspace.local import LocalWorkspace


class FlakyWorkspace(LocalWorkspace):
    """A workspace whose reads fail for chosen file names."""

    def __init__(self, folders, failing: set[str]):
        super().__init__(folders)
        self.failing = failing

    async def read_file(self, path: Path) -> str:
        if path.name in self.failing:
            raise OSError(f"simulated read failure: {path}")
        return await super().read_file(path)


class TestPatterns:
    """Tests for the regex tables."""

    def test_definition_patterns_per_language(self):
        ts = definition_patterns("greet", Language.TYPESCRIPT)
        assert r"function\s+greet\s*\(" in ts
        assert r"class\s+greet\s*\{" in ts
        assert all("def" not in p for p in ts)

        py = definition_patterns("greet", "python")
        assert py == [r"def\s+greet\s*\(", r"class\s+greet\s*[\(:]", r"greet\s*=\s*lambda"]

    def test_definition_patterns_without_language_cover_all_families(self):
        patterns = definition_patterns("x")
        assert len(patterns) == 7 + 3 + 3

    def test_definition_patterns_escape_identifier(self):
        assert definition_patterns("$el", "javascript")[0] == r"function\s+\$el\s*\("

    def test_unsupported_language_has_no_patterns(self):
        assert definition_patterns("x", Language.RUST) == []

    def test_extract_code_keywords(self):
        code = 'const userName = getUser("ignored literal"); // trailing comment\nreturn userName;'
        assert extract_code_keywords(code, "javascript") == ["userName", "getUser"]

    def test_language_keywords(self):
        assert is_language_keyword("def", "python")
        assert not is_language_keyword("def", "javascript")
        assert not is_language_keyword("def", None)

    def test_file_types_for_language(self):
        assert file_types_for_language("typescript") == ["**/*.ts", "**/*.tsx"]
        assert file_types_for_language(None) == ["**/*"]
        assert file_types_for_language("cobol") == ["**/*"]


class TestSearch:
    """Tests for SearchEngine.search."""

    @pytest.mark.asyncio
    async def test_ranked_results_with_context(self, workspace):
        engine = SearchEngine(workspace)
        results = await engine.search("Logger")

        assert [r.relative_path for r in results] == ["lib/logger.ts", "src/app.ts"]
        top = results[0]
        assert top.line_number == 1
        assert top.line_text == "export class Logger {"
        assert top.context_before == []
        assert top.context_after == ["    log(message: string) {", '        console.log(message);']
        assert top.relevance_score > results[1].relevance_score

    @pytest.mark.asyncio
    async def test_one_result_per_line(self, workspace):
        engine = SearchEngine(workspace)
        results = await engine.search("logger")
        keys = [(r.uri, r.line_number) for r in results]
        assert len(keys) == len(set(keys))

    @pytest.mark.asyncio
    async def test_empty_query(self, workspace):
        assert await SearchEngine(workspace).search("") == []

    @pytest.mark.asyncio
    async def test_invalid_regex_yields_nothing(self, workspace):
        engine = SearchEngine(workspace)
        assert await engine.search("(greet", SearchOptions(use_regex=True)) == []

    @pytest.mark.asyncio
    async def test_max_results(self, workspace):
        results = await SearchEngine(workspace).search("e", SearchOptions(max_results=3))
        assert len(results) == 3

    @pytest.mark.asyncio
    async def test_zero_context_lines(self, workspace):
        results = await SearchEngine(workspace).search("Logger", SearchOptions(context_lines=0))
        assert all(r.context_before == [] and r.context_after == [] for r in results)

    @pytest.mark.asyncio
    async def test_default_excludes_skip_node_modules(self, workspace):
        results = await SearchEngine(workspace).search("never seen")
        assert results == []

    @pytest.mark.asyncio
    async def test_explicit_excludes_replace_defaults(self, workspace):
        results = await SearchEngine(workspace).search(
            "never seen", SearchOptions(exclude_patterns=[])
        )
        assert len(results) == 1
        assert results[0].relative_path == "node_modules/left-pad/app.js"

    @pytest.mark.asyncio
    async def test_file_types(self, workspace):
        results = await SearchEngine(workspace).search(
            "return", SearchOptions(file_types=["**/*.py"])
        )
        assert {r.file_name for r in results} == {"worker.py"}

    @pytest.mark.asyncio
    async def test_read_failures_are_skipped_and_collected(self, sample_project):
        engine = SearchEngine(FlakyWorkspace([sample_project], {"logger.ts"}))
        results = await engine.search("Logger")
        assert [r.relative_path for r in results] == ["src/app.ts"]
        assert any(
            e.file_path is not None and e.file_path.name == "logger.ts" for e in engine.errors.errors
        )

    @pytest.mark.asyncio
    async def test_binary_files_are_skipped(self, tmp_path):
        (tmp_path / "a.ts").write_text("const foo = 1;\n")
        (tmp_path / "logo.png").write_bytes(b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR\x00foo")
        engine = SearchEngine(LocalWorkspace([tmp_path]))

        results = await engine.search("foo")

        assert [r.file_name for r in results] == ["a.ts"]
        assert [e.file_path.name for e in engine.errors.errors] == ["logo.png"]

    @pytest.mark.asyncio
    async def test_line_numbers_follow_newlines_only(self, tmp_path):
        (tmp_path / "a.py").write_text("x = 1\f\ny = 2\nfoo = 3\n")
        results = await SearchEngine(LocalWorkspace([tmp_path])).search("foo")
        assert [r.line_number for r in results] == [3]
        assert results[0].context_before == ["x = 1\f", "y = 2"]

    @pytest.mark.asyncio
    async def test_configured_defaults(self, workspace):
        engine = SearchEngine(workspace, AssistConfig(max_results=1, context_lines=0))
        results = await engine.search("Logger")
        assert len(results) == 1
        assert results[0].context_after == []


class TestSpecializedSearches:
    """Tests for definitions, references, TODOs, similar code and files."""

    @pytest.mark.asyncio
    async def test_overlapping_definition_patterns_produce_one_result(self, workspace):
        results = await SearchEngine(workspace).search_definitions("greet")
        assert len(results) == 1
        hit = results[0]
        assert hit.relative_path == "src/app.ts"
        assert hit.line_number == 5
        # "function greet(" outscores the longer "export function greet" match
        assert hit.match_text == "function greet("

    @pytest.mark.asyncio
    async def test_python_definitions(self, workspace):
        results = await SearchEngine(workspace).search_definitions("Processor", "python")
        assert [(r.file_name, r.line_number) for r in results] == [("worker.py", 10)]

    @pytest.mark.asyncio
    async def test_references(self, workspace):
        results = await SearchEngine(workspace).search_references("formatName", "typescript")
        found = sorted((r.relative_path, r.line_number) for r in results)
        assert found == [("src/app.ts", 1), ("src/app.ts", 7), ("src/utils.ts", 1)]

    @pytest.mark.asyncio
    async def test_references_are_case_sensitive_and_skip_comments(self, sample_project):
        (sample_project / "src" / "extra.ts").write_text(
            "// formatName is documented here\nconst formatname = 1;\nformatName('x');\n"
        )
        engine = SearchEngine(LocalWorkspace([sample_project]))
        results = await engine.search_references("formatName", "typescript")
        extra = [r.line_number for r in results if r.file_name == "extra.ts"]
        assert extra == [3]

    @pytest.mark.asyncio
    async def test_todos(self, workspace):
        results = await SearchEngine(workspace).search_todos()
        assert [(r.relative_path, r.line_number) for r in results] == [
            ("py/worker.py", 6),
            ("src/app.ts", 6),
        ]
        assert "TODO" in results[1].match_text
        assert results[0].match_text.startswith("FIXME")

    @pytest.mark.asyncio
    async def test_todo_scenario(self, tmp_path):
        (tmp_path / "a.js").write_text("let a = 1;\n// TODO: refactor this\n")
        results = await SearchEngine(LocalWorkspace([tmp_path])).search_todos()
        assert any("TODO" in r.match_text for r in results)

    @pytest.mark.asyncio
    async def test_bare_and_lower_case_markers(self, tmp_path):
        (tmp_path / "a.js").write_text("let a = 1; // TODO\n// fixme: later\n// debugging Notes\n")
        results = await SearchEngine(LocalWorkspace([tmp_path])).search_todos()
        assert [(r.line_number, r.match_text) for r in results] == [(1, "TODO"), (2, "fixme: later")]

    @pytest.mark.asyncio
    async def test_similar_code(self, workspace):
        results = await SearchEngine(workspace).search_similar_code(
            "const name = formatName(name);", "typescript"
        )
        assert results
        assert results[0].file_name in {"app.ts", "utils.ts"}
        assert "formatName" in results[0].line_text

    @pytest.mark.asyncio
    async def test_search_files(self, workspace, sample_project):
        files = await SearchEngine(workspace).search_files("**/*.ts")
        names = sorted(p.relative_to(sample_project).as_posix() for p in files)
        assert names == ["lib/app.test.ts", "lib/logger.ts", "src/app.ts", "src/utils.ts"]

    @pytest.mark.asyncio
    async def test_search_files_limit(self, workspace):
        assert len(await SearchEngine(workspace).search_files("**/*.ts", limit=2)) == 2
