"""Tests for pyassist.completion.triggers, postprocess and prompt modules."""

from __future__ import annotations

from pathlib import Path

import pytest

from pyassist.completion.postprocess import (
    get_indentation,
    looks_like_code,
    post_process_completion,
    strip_code_fences,
)
from pyassist.completion.prompt import CURSOR_MARKER, build_completion_prompt
from pyassist.completion.triggers import (
    COMMON_TRIGGER_PATTERNS,
    is_in_string_or_comment,
    should_trigger,
    trigger_patterns,
)
from pyassist.core.types import CursorPosition, Language
from pyassist.workspace.protocols import EditorDocument


class TestShouldTrigger:
    """Tests for the eligibility gate."""

    def test_function_declaration_at_end_of_line(self):
        line = "function foo() {"
        assert should_trigger(line, len(line), "javascript")

    def test_text_after_cursor_blocks(self):
        line = "const x = 1; // trailing"
        assert not should_trigger(line, 5, "javascript")

    def test_trailing_whitespace_after_cursor_is_ignored(self):
        assert should_trigger("if (ready) {   ", 12, "typescript")

    def test_blank_line(self):
        assert should_trigger("    ", 4, "python")

    @pytest.mark.parametrize(
        "line,language",
        [
            ("def run(self):", "python"),
            ("class Foo(Base):", "python"),
            ("for item in items:", "python"),
            ("const total = ", "javascript"),
            ("promise.then(", "javascript"),
            ("interface Props {", "typescript"),
            ("type Id = ", "typescript"),
            ("public static void main(String[] args) {", "java"),
            ("items.", "go"),
            ("print(", "ruby"),
        ],
    )
    def test_language_patterns(self, line, language):
        assert should_trigger(line, len(line), language)

    def test_language_specific_pattern_needs_language(self):
        line = "def run(self):"
        assert not should_trigger(line, len(line), "javascript")

    def test_no_pattern(self):
        line = "x = compute"
        assert not should_trigger(line, len(line), "python")

    @pytest.mark.parametrize(
        "line",
        [
            'const s = "function foo() {',
            "name = 'if (x) {",
            "// call(",
            "# print(",
            "/* items.",
        ],
    )
    def test_inside_string_or_comment(self, line):
        assert not should_trigger(line, len(line), "javascript")

    def test_cursor_past_end_is_clamped(self):
        assert should_trigger("foo(", 100, "javascript")


class TestStringOrComment:
    """Tests for the string/comment heuristic."""

    def test_closed_string(self):
        assert not is_in_string_or_comment('call("done", ')

    def test_escaped_quote(self):
        assert is_in_string_or_comment(r'"say \"hi')
        assert not is_in_string_or_comment(r'"say \"hi\"" + ')

    def test_closed_block_comment(self):
        assert not is_in_string_or_comment("/* done */ call(")
        assert is_in_string_or_comment("call( /* open")


class TestTriggerPatterns:
    """Tests for the pattern tables."""

    def test_unknown_language_gets_common_set(self):
        assert trigger_patterns("cobol") == COMMON_TRIGGER_PATTERNS
        assert trigger_patterns(None) == COMMON_TRIGGER_PATTERNS

    def test_language_extends_common_set(self):
        python = trigger_patterns(Language.PYTHON)
        assert python[: len(COMMON_TRIGGER_PATTERNS)] == COMMON_TRIGGER_PATTERNS
        assert len(python) > len(COMMON_TRIGGER_PATTERNS)


class TestPostProcess:
    """Tests for completion cleanup."""

    def test_strips_fences(self):
        assert strip_code_fences("```ts\nreturn 1;\n```") == "return 1;"
        assert strip_code_fences("return 1;") == "return 1;"

    def test_plain_completion(self):
        assert post_process_completion("return a + b;", "    ") == "return a + b;"

    def test_empty_or_missing(self):
        assert post_process_completion("", "x") == ""
        assert post_process_completion(None, "x") == ""
        assert post_process_completion("```\n```", "x") == ""

    def test_drops_explanations(self):
        raw = "Here is the completion:\n```python\nreturn total\n```"
        assert post_process_completion(raw, "") == "return total"

    def test_keeps_code_starting_with_prose_word(self):
        raw = "this.value = 1;\nThe result is below"
        assert post_process_completion(raw, "") == "this.value = 1;"

    def test_indents_following_lines(self):
        raw = "if (x) {\nreturn 1;\n\n}"
        assert post_process_completion(raw, "    if") == "if (x) {\n    return 1;\n\n    }"

    def test_no_indentation_on_unindented_line(self):
        assert post_process_completion("a = 1\nb = 2", "x") == "a = 1\nb = 2"

    def test_line_cap(self):
        raw = "\n".join(f"x{i} = {i}" for i in range(20))
        assert post_process_completion(raw, "").count("\n") == 9
        assert post_process_completion(raw, "", max_lines=3) == "x0 = 0\nx1 = 1\nx2 = 2"

    def test_crlf(self):
        assert post_process_completion("a = 1\r\nb = 2\r\n", "") == "a = 1\nb = 2"

    def test_only_prose(self):
        assert post_process_completion("Note that nothing here is code", "") == ""

    def test_helpers(self):
        assert looks_like_code("")
        assert looks_like_code("return x")
        assert not looks_like_code("just some words")
        assert get_indentation("\t  x") == "\t  "


class TestPrompt:
    """Tests for prompt construction."""

    def _document(self) -> EditorDocument:
        lines = [f"line {i}" for i in range(30)]
        lines[15] = "function add(a, b) {"
        return EditorDocument(uri=Path("/w/a.js"), text="\n".join(lines), language_id="javascript")

    def test_window_and_marker(self):
        prompt = build_completion_prompt(self._document(), CursorPosition(15, 12), "CTX")
        assert prompt.startswith("You are an expert javascript developer.")
        assert "\nCTX\n" in prompt
        assert f"line 14\nfunction add{CURSOR_MARKER}\nline 16\n" in prompt
        assert "line 5\n" in prompt
        assert "line 4\n" not in prompt
        assert "line 20\n" in prompt
        assert "line 21" not in prompt
        assert prompt.endswith("Completion:")

    def test_window_sizes(self):
        prompt = build_completion_prompt(
            self._document(), CursorPosition(15, 0), "", preceding=1, following=1
        )
        assert f"line 14\n{CURSOR_MARKER}\nline 16\n```" in prompt
        assert "line 13" not in prompt

    def test_window_at_document_start(self):
        doc = EditorDocument(uri=Path("/w/a.py"), text="def f():", language_id="python")
        prompt = build_completion_prompt(doc, CursorPosition(0, 8), "")
        assert f"```python\n\ndef f():{CURSOR_MARKER}\n\n```" in prompt
