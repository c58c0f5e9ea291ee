"""
End-to-end tests for the PyAssist facade.

These tests drive completions, search and invalidation through the public
API against the on-disk sample project, with a scripted backend standing in
for the completion provider.
"""

from __future__ import annotations

import asyncio

import pytest

from pyassist import AssistConfig, PyAssist
from pyassist.cache.completion_cache import COMPLETIONS, CONTEXT, provider_namespace
from pyassist.core.types import CursorPosition, SearchOptions
from pyassist.utils.error_handling import ConfigurationError

GREET_LINE = 4
GREET_POSITION = CursorPosition(GREET_LINE, len("export function greet(name: string) {"))


@pytest.fixture
def assist(workspace, backend):
    return PyAssist(workspace, backend, AssistConfig(debounce_ms=0), provider="claude")


@pytest.mark.integration
class TestCompletionEndToEnd:
    """Completion requests through the facade."""

    @pytest.mark.asyncio
    async def test_completion_uses_workspace_context(self, assist, workspace, backend, sample_project):
        doc = workspace.open_document(sample_project / "src" / "app.ts")
        result = await assist.complete(doc, GREET_POSITION)

        assert result == "return a + b;"
        prompt = backend.prompts[0]
        assert prompt.startswith("You are an expert typescript developer.")
        assert "Project: project (node)" in prompt
        assert "- src/utils.ts (typescript)" in prompt
        assert "Dependencies: react" in prompt

    @pytest.mark.asyncio
    async def test_repeat_is_served_from_cache(self, assist, workspace, backend, sample_project):
        doc = workspace.open_document(sample_project / "src" / "app.ts")
        await assist.complete(doc, GREET_POSITION)
        assert await assist.complete(doc, GREET_POSITION) == "return a + b;"
        assert backend.calls == 1

        stats = assist.cache_stats()
        assert stats["namespaces"][COMPLETIONS].size == 1
        assert stats["namespaces"][CONTEXT].size == 1
        assert stats["namespaces"][provider_namespace("claude")].size == 1

    @pytest.mark.asyncio
    async def test_editing_a_related_file_rebuilds_context(self, assist, workspace, backend, sample_project):
        doc = workspace.open_document(sample_project / "src" / "app.ts")
        first = await assist.context_for(doc)

        utils = sample_project / "src" / "utils.ts"
        utils.write_text("export function formatName(name: string): string {\n    return name;\n}\n")
        assert assist.file_changed(utils) >= 1

        second = await assist.context_for(doc)
        assert second is not first
        related = {f.relative_path: f.content for f in second.related_files}
        assert related["src/utils.ts"].endswith("return name;\n}\n")

    @pytest.mark.asyncio
    async def test_deleting_the_current_file_drops_its_entries(self, assist, workspace, sample_project):
        doc = workspace.open_document(sample_project / "src" / "app.ts")
        await assist.context_for(doc)
        assert assist.file_deleted(doc.uri) == 1
        assert assist.store.size(CONTEXT) == 0

    @pytest.mark.asyncio
    async def test_folder_change_drops_contexts_only(self, assist, workspace, sample_project):
        doc = workspace.open_document(sample_project / "src" / "app.ts")
        await assist.complete(doc, GREET_POSITION)
        assert assist.workspace_folders_changed() == 1
        assert assist.store.size(CONTEXT) == 0
        assert assist.store.size(COMPLETIONS) == 1

    @pytest.mark.asyncio
    async def test_closing_a_document_drops_its_session(self, assist, workspace, sample_project):
        doc = workspace.open_document(sample_project / "src" / "app.ts")
        await assist.complete(doc, GREET_POSITION)
        assert doc.uri in assist.controller._sessions

        assist.document_closed(str(doc.uri))
        assert doc.uri not in assist.controller._sessions

    @pytest.mark.asyncio
    async def test_non_qualifying_position(self, assist, workspace, backend, sample_project):
        doc = workspace.open_document(sample_project / "src" / "app.ts")
        assert await assist.complete(doc, CursorPosition(GREET_LINE, 3)) is None
        assert backend.calls == 0


@pytest.mark.integration
class TestProviderCacheEndToEnd:
    """Provider responses shared across equivalent prompts."""

    def test_round_trip_with_prompt_normalization(self, assist):
        assist.cache.cache_provider_response("claude", "explain recursion", "A function calling itself.")

        assert assist.cache.get_cached_provider_response("claude", "explain recursion") == (
            "A function calling itself."
        )
        assert assist.cache.get_cached_provider_response("claude", "  Explain \n RECURSION ") == (
            "A function calling itself."
        )
        assert assist.cache.get_cached_provider_response("openai", "explain recursion") is None


@pytest.mark.integration
class TestSearchEndToEnd:
    """Workspace search through the facade."""

    @pytest.mark.asyncio
    async def test_definitions_and_references(self, assist):
        definitions = await assist.find_definitions("greet", "typescript")
        assert [(r.relative_path, r.line_number) for r in definitions] == [("src/app.ts", 5)]

        references = await assist.find_references("formatName")
        assert sorted((r.relative_path, r.line_number) for r in references) == [
            ("src/app.ts", 1),
            ("src/app.ts", 7),
            ("src/utils.ts", 1),
        ]

    @pytest.mark.asyncio
    async def test_todos_skip_excluded_folders(self, assist):
        todos = await assist.find_todos()
        assert [(r.relative_path, r.line_number) for r in todos] == [
            ("py/worker.py", 6),
            ("src/app.ts", 6),
        ]

    @pytest.mark.asyncio
    async def test_plain_search(self, assist):
        results = await assist.search("logger", SearchOptions(file_types=["**/*.ts"], context_lines=0))
        assert results
        assert all(r.relative_path.endswith(".ts") for r in results)
        assert all(r.context_before == [] and r.context_after == [] for r in results)


@pytest.mark.integration
class TestLifecycle:
    """Starting and stopping the background services."""

    def test_invalid_config_is_rejected(self, workspace, backend):
        with pytest.raises(ConfigurationError):
            PyAssist(workspace, backend, AssistConfig(max_results=0))

    @pytest.mark.asyncio
    async def test_async_context_manager_runs_the_sweep(self, workspace, backend):
        async with PyAssist(workspace, backend) as assist:
            assert assist.store.sweeping
        assert not assist.store.sweeping

    @pytest.mark.asyncio
    async def test_start_with_watcher(self, workspace, backend):
        assist = PyAssist(workspace, backend)
        assist.start(watch=True)
        try:
            assert assist._watcher is not None
            assert assist._watcher.is_watching
        finally:
            await assist.aclose()
        assert assist._watcher is None

    def test_services_share_one_store(self, assist):
        assert assist.cache.store is assist.store
        assert assist.controller.cache is assist.cache
        assert assist.assembler.cache is assist.cache

    @pytest.mark.asyncio
    async def test_sweep_runs_on_the_shared_store(self, workspace, backend):
        assist = PyAssist(workspace, backend, AssistConfig(cache_sweep_interval=0.01, completion_ttl_ms=1))
        assist.cache.cache_completion("def add(a, b):", "return a + b")
        assert assist.store.size(COMPLETIONS) == 1

        assist.start()
        try:
            await asyncio.sleep(0.1)
            assert assist.store.size(COMPLETIONS) == 0
        finally:
            await assist.aclose()
