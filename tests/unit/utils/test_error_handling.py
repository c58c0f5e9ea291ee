"""Tests for pyassist.utils.error_handling module."""

from __future__ import annotations

import builtins
import io
import logging
from pathlib import Path
from unittest.mock import Mock

import pytest

from pyassist.utils.error_handling import (
    AssistError,
    BackendError,
    ConfigurationError,
    EncodingError,
    ErrorCategory,
    ErrorCollector,
    ErrorSeverity,
    FileAccessError,
    PatternError,
    PermissionError,
    create_error_report,
    handle_file_error,
)
from pyassist.utils.logging_config import AssistLogger, LogLevel, StructuredFormatter


class TestErrorClasses:
    """Test the exception hierarchy."""

    def test_enum_string_inheritance(self) -> None:
        assert ErrorSeverity.LOW == "low"
        assert ErrorCategory.PATTERN == "pattern"
        assert isinstance(ErrorCategory.CANCELLED, str)

    def test_base_error_defaults(self) -> None:
        error = AssistError("boom")
        assert str(error) == "boom"
        assert error.category == ErrorCategory.UNKNOWN
        assert error.severity == ErrorSeverity.MEDIUM
        assert error.suggestions == []
        assert error.context == {}

    @pytest.mark.parametrize(
        "error,category,severity",
        [
            (FileAccessError("gone", Path("a.py")), ErrorCategory.FILE_ACCESS, ErrorSeverity.LOW),
            (PermissionError("denied", Path("a.py")), ErrorCategory.PERMISSION, ErrorSeverity.MEDIUM),
            (EncodingError("bad", Path("a.py")), ErrorCategory.ENCODING, ErrorSeverity.LOW),
            (PatternError("bad", "("), ErrorCategory.PATTERN, ErrorSeverity.LOW),
            (BackendError("down", provider="claude"), ErrorCategory.BACKEND, ErrorSeverity.MEDIUM),
            (ConfigurationError("bad"), ErrorCategory.CONFIGURATION, ErrorSeverity.HIGH),
        ],
    )
    def test_subclass_classification(self, error, category, severity) -> None:
        assert isinstance(error, AssistError)
        assert error.category == category
        assert error.severity == severity
        assert error.suggestions

    def test_context_fields(self) -> None:
        assert EncodingError("bad", Path("a"), encoding="latin-1").context["encoding"] == "latin-1"
        pattern_error = PatternError("bad", "(", context={"regex": True})
        assert pattern_error.context == {"pattern": "(", "regex": True}
        assert pattern_error.pattern == "("
        assert BackendError("down", provider="openai").context == {"provider": "openai"}
        assert BackendError("down").context == {}

    def test_permission_error_is_not_os_error(self) -> None:
        assert not issubclass(PermissionError, OSError)


class TestErrorCollector:
    """Test ErrorCollector functionality."""

    def test_classifies_builtin_exceptions(self) -> None:
        collector = ErrorCollector()
        collector.add_error(FileNotFoundError("missing"))
        collector.add_error(builtins.PermissionError("denied"))
        collector.add_error(UnicodeDecodeError("utf-8", b"\xff", 0, 1, "invalid"))
        collector.add_error(TimeoutError())
        collector.add_error(OSError("io"))
        collector.add_error(ValueError("other"))

        assert [e.category for e in collector.errors] == [
            ErrorCategory.FILE_ACCESS,
            ErrorCategory.PERMISSION,
            ErrorCategory.ENCODING,
            ErrorCategory.TIMEOUT,
            ErrorCategory.FILE_ACCESS,
            ErrorCategory.UNKNOWN,
        ]

    def test_assist_errors_keep_their_fields(self) -> None:
        collector = ErrorCollector()
        collector.add_error(FileAccessError("gone", Path("a.py")), context={"op": "read"})
        info = collector.errors[0]
        assert info.file_path == Path("a.py")
        assert info.exception_type == "FileAccessError"
        assert info.context == {"op": "read"}

    def test_bounded_list_unbounded_counts(self) -> None:
        collector = ErrorCollector(max_errors=2)
        for i in range(5):
            collector.add_error(OSError(str(i)))
        assert len(collector.errors) == 2
        assert collector.error_counts[ErrorCategory.FILE_ACCESS] == 5

    def test_suppression(self) -> None:
        collector = ErrorCollector()
        collector.suppress_category(ErrorCategory.ENCODING)
        collector.add_error(EncodingError("bad", Path("a")))
        assert collector.errors == []
        collector.unsuppress_category(ErrorCategory.ENCODING)
        collector.add_error(EncodingError("bad", Path("a")))
        assert len(collector.errors) == 1

    def test_summary_and_clear(self) -> None:
        collector = ErrorCollector()
        collector.add_error(ConfigurationError("bad"))
        collector.add_error(AssistError("fatal", severity=ErrorSeverity.CRITICAL))

        summary = collector.get_summary()
        assert summary["total_errors"] == 2
        assert summary["by_category"] == {"configuration": 1, "unknown": 1}
        assert summary["by_severity"]["critical"] == 1
        assert summary["has_critical"]

        collector.clear()
        assert collector.get_summary()["total_errors"] == 0
        assert not collector.has_critical_errors()


class TestHandleFileError:
    """Test per-file error classification."""

    @pytest.mark.parametrize(
        "exception,expected",
        [
            (FileNotFoundError("x"), FileAccessError),
            (IsADirectoryError("x"), FileAccessError),
            (UnicodeDecodeError("utf-8", b"\xff", 0, 1, "invalid"), EncodingError),
        ],
    )
    def test_classification(self, exception, expected) -> None:
        error = handle_file_error(Path("a.py"), "read", exception)
        assert isinstance(error, expected)
        assert error.file_path == Path("a.py")

    def test_builtin_permission_error(self) -> None:
        error = handle_file_error(Path("a.py"), "read", builtins.PermissionError("denied"))
        assert isinstance(error, PermissionError)
        assert "read" in error.message

    def test_other_errors(self) -> None:
        assert handle_file_error(Path("a"), "stat", OSError("io")).category == ErrorCategory.FILE_ACCESS
        assert handle_file_error(Path("a"), "stat", ValueError("x")).category == ErrorCategory.UNKNOWN

    def test_assist_error_passes_through(self) -> None:
        original = FileAccessError("gone", Path("a"))
        assert handle_file_error(Path("a"), "read", original) is original

    def test_collects_and_logs(self) -> None:
        collector = ErrorCollector()
        logger = Mock()
        handle_file_error(Path("a.py"), "read", FileNotFoundError("x"), collector, logger)
        assert len(collector.errors) == 1
        logger.log_file_error.assert_called_once()
        assert logger.log_file_error.call_args.kwargs["file_operation"] == "read"

    def test_logs_through_a_real_logger(self) -> None:
        logger = AssistLogger(name="pyassist.test.file_error", level=LogLevel.DEBUG, enable_console=False)
        stream = io.StringIO()
        handler = logging.StreamHandler(stream)
        handler.setFormatter(StructuredFormatter())
        logger.logger.handlers = [handler]

        handle_file_error(Path("logo.png"), "read", ValueError("binary"), ErrorCollector(), logger)

        line = stream.getvalue()
        assert "operation=file_error" in line
        assert "file_operation=read" in line


class TestErrorReport:
    """Test human readable error reports."""

    def test_no_errors(self) -> None:
        assert create_error_report(ErrorCollector()) == "No errors occurred."

    def test_report_lists_skipped_files(self) -> None:
        collector = ErrorCollector()
        collector.add_error(FileAccessError("gone", Path("src/a.py")))
        collector.add_error(ConfigurationError("bad setting"))

        report = create_error_report(collector)
        assert report.startswith("pyassist Error Report")
        assert "Total errors: 2" in report
        assert "  file_access: 1" in report
        assert "  - src/a.py: gone" in report
        assert "bad setting" not in report
