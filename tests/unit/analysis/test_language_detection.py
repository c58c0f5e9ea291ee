"""Tests for pyassist.analysis.language_detection module."""

from __future__ import annotations

from pathlib import Path

import pytest

from pyassist.analysis.language_detection import (
    CODE_EXTENSIONS,
    EXTENSION_MAP,
    detect_language,
    detect_language_by_extension,
    detect_language_by_filename,
    detect_language_by_shebang,
    get_language_extensions,
    is_code_file,
    is_text_file,
    language_id_for,
)
from pyassist.core.types import Language


class TestConstants:
    """Ensure mapping constants are well-formed."""

    def test_extension_keys_are_lowercase_with_dot(self):
        for ext in EXTENSION_MAP:
            assert ext.startswith(".")
            assert ext == ext.lower()

    def test_context_extensions(self):
        for ext in (".ts", ".py", ".vue", ".json", ".conf"):
            assert ext in CODE_EXTENSIONS
        assert ".md" not in CODE_EXTENSIONS


class TestDetection:
    """Tests for the detection cascade."""

    @pytest.mark.parametrize(
        "name,expected",
        [
            ("app.ts", Language.TYPESCRIPT),
            ("App.TSX", Language.TYPESCRIPT),
            ("index.mjs", Language.JAVASCRIPT),
            ("worker.py", Language.PYTHON),
            ("Main.java", Language.JAVA),
            ("lib.rs", Language.RUST),
            ("notes.md", Language.MARKDOWN),
            ("data.bin", Language.UNKNOWN),
        ],
    )
    def test_by_extension(self, name, expected):
        assert detect_language_by_extension(Path(name)) == expected

    def test_by_filename(self):
        assert detect_language_by_filename(Path("Dockerfile")) == Language.SHELL
        assert detect_language_by_filename(Path("Gemfile")) == Language.RUBY
        assert detect_language_by_filename(Path("app.py")) == Language.UNKNOWN

    @pytest.mark.parametrize(
        "content,expected",
        [
            ("#!/usr/bin/env python3\nprint()", Language.PYTHON),
            ("#!/usr/bin/env node\n", Language.JAVASCRIPT),
            ("#!/bin/bash\n", Language.SHELL),
            ("print()", Language.UNKNOWN),
            ("", Language.UNKNOWN),
        ],
    )
    def test_by_shebang(self, content, expected):
        assert detect_language_by_shebang(content) == expected

    def test_cascade_order(self):
        assert detect_language(Path("Rakefile"), "#!/usr/bin/env python") == Language.RUBY
        assert detect_language(Path("script"), "#!/usr/bin/env python") == Language.PYTHON
        assert detect_language(Path("script")) == Language.UNKNOWN

    def test_language_id_for(self):
        assert language_id_for(Path("a.ts")) == "typescript"
        assert language_id_for(Path("a.unknownext")) == "plaintext"

    def test_get_language_extensions(self):
        assert set(get_language_extensions(Language.TYPESCRIPT)) == {".ts", ".tsx"}


class TestFileKinds:
    """Tests for the code and text file checks."""

    def test_is_code_file(self):
        assert is_code_file("utils.ts")
        assert is_code_file(Path("a/b/Config.YAML"))
        assert not is_code_file("README.md")
        assert not is_code_file("Makefile")

    def test_is_text_file(self):
        assert is_text_file(Path("notes.md"))
        assert is_text_file(Path("Makefile"))
        assert is_text_file(Path("LICENSE"))
        assert not is_text_file(Path("logo.png"))
