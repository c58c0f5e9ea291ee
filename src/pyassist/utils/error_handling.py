"""
Error handling and reporting for pyassist.

pyassist sits on an interactive path, so almost nothing here is allowed to
abort a whole operation. Transient I/O failures (an unreadable file, a
vanished directory) are classified, collected and skipped; malformed input
(a bad TTL, an unparsable user regex) is normalized to a safe default; and
only programmer errors such as an invalid configuration are raised.

Error Categories:
    - FILE_ACCESS: Missing files and directories
    - PERMISSION: Permission denied while reading
    - ENCODING: Undecodable text
    - PATTERN: User-supplied search patterns that do not compile
    - BACKEND: Completion backend failures
    - CONFIGURATION: Invalid settings
    - CANCELLED: Work abandoned through a cancellation token

Classes:
    ErrorSeverity: Error severity levels
    ErrorCategory: Error classification categories
    ErrorInfo: Detailed error information container
    AssistError: Base exception class for pyassist errors
    ErrorCollector: Bounded collection of skipped-item errors

Functions:
    handle_file_error: Classify, collect and log a per-file failure
    create_error_report: Human readable summary of an ErrorCollector

Example:
    >>> from pathlib import Path
    >>> collector = ErrorCollector()
    >>> try:
    ...     Path("missing.py").read_text()
    ... except OSError as e:
    ...     handle_file_error(Path("missing.py"), "read", e, collector)
    >>> collector.get_summary()["total_errors"]
    1
"""

from __future__ import annotations

import builtins
import sys
import time
import traceback
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

BuiltinPermissionError = builtins.PermissionError


class ErrorSeverity(str, Enum):
    """Error severity levels."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """Error categories for classification."""

    FILE_ACCESS = "file_access"
    PERMISSION = "permission"
    ENCODING = "encoding"
    PATTERN = "pattern"
    BACKEND = "backend"
    TIMEOUT = "timeout"
    CONFIGURATION = "configuration"
    CANCELLED = "cancelled"
    UNKNOWN = "unknown"


@dataclass
class ErrorInfo:
    """Detailed error information."""

    category: ErrorCategory
    severity: ErrorSeverity
    message: str
    file_path: Path | None = None
    exception_type: str | None = None
    traceback_str: str | None = None
    timestamp: float = field(default_factory=time.time)
    context: dict[str, Any] = field(default_factory=dict)
    suggestions: list[str] = field(default_factory=list)


class AssistError(Exception):
    """Base exception for pyassist errors."""

    def __init__(
        self,
        message: str,
        category: ErrorCategory = ErrorCategory.UNKNOWN,
        severity: ErrorSeverity = ErrorSeverity.MEDIUM,
        file_path: Path | None = None,
        suggestions: list[str] | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message: str = message
        self.category: ErrorCategory = category
        self.severity: ErrorSeverity = severity
        self.file_path: Path | None = file_path
        self.suggestions: list[str] = suggestions or []
        self.context: dict[str, Any] = context or {}
        self.timestamp: float = time.time()


class FileAccessError(AssistError):
    """Error accessing files."""

    def __init__(
        self, message: str, file_path: Path, context: dict[str, Any] | None = None
    ) -> None:
        super().__init__(
            message,
            category=ErrorCategory.FILE_ACCESS,
            severity=ErrorSeverity.LOW,
            file_path=file_path,
            suggestions=["The file may have been moved or deleted"],
            context=context,
        )


class PermissionError(AssistError):
    """Permission-related errors."""

    def __init__(
        self, message: str, file_path: Path, context: dict[str, Any] | None = None
    ) -> None:
        super().__init__(
            message,
            category=ErrorCategory.PERMISSION,
            severity=ErrorSeverity.MEDIUM,
            file_path=file_path,
            suggestions=[
                "Check file permissions",
                "Exclude the directory from the workspace search",
            ],
            context=context,
        )


class EncodingError(AssistError):
    """File encoding-related errors."""

    def __init__(
        self,
        message: str,
        file_path: Path,
        encoding: str = "unknown",
        context: dict[str, Any] | None = None,
    ) -> None:
        merged_context: dict[str, Any] = {}
        if context:
            merged_context.update(context)
        merged_context["encoding"] = encoding

        super().__init__(
            message,
            category=ErrorCategory.ENCODING,
            severity=ErrorSeverity.LOW,
            file_path=file_path,
            suggestions=[
                f"Try different encoding (current: {encoding})",
                "Check if file is binary",
            ],
            context=merged_context,
        )


class PatternError(AssistError):
    """A search pattern that could not be compiled."""

    def __init__(self, message: str, pattern: str, context: dict[str, Any] | None = None) -> None:
        merged_context: dict[str, Any] = {"pattern": pattern}
        if context:
            merged_context.update(context)
        super().__init__(
            message,
            category=ErrorCategory.PATTERN,
            severity=ErrorSeverity.LOW,
            suggestions=["Escape regex metacharacters or disable regex mode"],
            context=merged_context,
        )
        self.pattern = pattern


class BackendError(AssistError):
    """The completion backend failed to produce a result."""

    def __init__(self, message: str, provider: str | None = None) -> None:
        super().__init__(
            message,
            category=ErrorCategory.BACKEND,
            severity=ErrorSeverity.MEDIUM,
            suggestions=["Retry the request", "Switch to a different provider"],
            context={"provider": provider} if provider else None,
        )
        self.provider = provider


class ConfigurationError(AssistError):
    """Configuration-related errors."""

    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:
        super().__init__(
            message,
            category=ErrorCategory.CONFIGURATION,
            severity=ErrorSeverity.HIGH,
            suggestions=[
                "Check the setting's type and range",
                "Use default configuration",
            ],
            context=context,
        )


class ErrorCollector:
    """Collects errors for items that were skipped during an operation."""

    def __init__(self, max_errors: int = 100) -> None:
        self.max_errors = max_errors
        self.errors: list[ErrorInfo] = []
        self.error_counts: dict[ErrorCategory, int] = {}
        self.suppressed_categories: set[ErrorCategory] = set()

    def add_error(
        self,
        exception: Exception | AssistError,
        category: ErrorCategory | None = None,
        severity: ErrorSeverity | None = None,
        file_path: Path | None = None,
        context: dict[str, Any] | None = None,
        suggestions: list[str] | None = None,
    ) -> None:
        """Add an error to the collection."""
        if isinstance(exception, AssistError):
            error_category = exception.category
            error_severity = exception.severity
            error_file_path = exception.file_path or file_path
            error_suggestions = exception.suggestions or suggestions or []
            error_context = {**exception.context, **(context or {})}
        else:
            error_category = category or self._classify_exception(exception)
            error_severity = severity or ErrorSeverity.MEDIUM
            error_file_path = file_path
            error_suggestions = suggestions or []
            error_context = context or {}

        if error_category in self.suppressed_categories:
            return

        error_info = ErrorInfo(
            category=error_category,
            severity=error_severity,
            message=str(exception),
            file_path=error_file_path,
            exception_type=type(exception).__name__,
            traceback_str=traceback.format_exc() if sys.exc_info()[0] else None,
            context=error_context,
            suggestions=error_suggestions,
        )

        # The list is bounded; counts keep growing.
        if len(self.errors) < self.max_errors:
            self.errors.append(error_info)

        self.error_counts[error_category] = self.error_counts.get(error_category, 0) + 1

    def _classify_exception(self, exception: Exception) -> ErrorCategory:
        """Classify exception into error category."""
        if isinstance(exception, (FileNotFoundError, IsADirectoryError, NotADirectoryError)):
            return ErrorCategory.FILE_ACCESS
        elif isinstance(exception, BuiltinPermissionError):
            return ErrorCategory.PERMISSION
        elif isinstance(exception, (UnicodeDecodeError, UnicodeError, LookupError)):
            return ErrorCategory.ENCODING
        elif isinstance(exception, TimeoutError):
            return ErrorCategory.TIMEOUT
        elif isinstance(exception, OSError):
            return ErrorCategory.FILE_ACCESS
        return ErrorCategory.UNKNOWN

    def suppress_category(self, category: ErrorCategory) -> None:
        """Suppress errors of a specific category."""
        self.suppressed_categories.add(category)

    def unsuppress_category(self, category: ErrorCategory) -> None:
        """Stop suppressing errors of a specific category."""
        self.suppressed_categories.discard(category)

    def get_errors_by_category(self, category: ErrorCategory) -> list[ErrorInfo]:
        """Get all errors of a specific category."""
        return [error for error in self.errors if error.category == category]

    def get_errors_by_severity(self, severity: ErrorSeverity) -> list[ErrorInfo]:
        """Get all errors of a specific severity."""
        return [error for error in self.errors if error.severity == severity]

    def has_critical_errors(self) -> bool:
        """Check if there are any critical errors."""
        return bool(self.get_errors_by_severity(ErrorSeverity.CRITICAL))

    def get_summary(self) -> dict[str, Any]:
        """Get error summary statistics."""
        return {
            "total_errors": len(self.errors),
            "by_category": {category.value: count for category, count in self.error_counts.items()},
            "by_severity": {
                severity.value: len(self.get_errors_by_severity(severity))
                for severity in ErrorSeverity
            },
            "suppressed_categories": [category.value for category in self.suppressed_categories],
            "has_critical": self.has_critical_errors(),
        }

    def clear(self) -> None:
        """Clear all collected errors."""
        self.errors.clear()
        self.error_counts.clear()


def handle_file_error(
    file_path: Path,
    operation: str,
    exception: Exception,
    error_collector: ErrorCollector | None = None,
    logger: Any | None = None,
) -> AssistError:
    """
    Classify a per-file failure, add it to a collector and log it.

    The caller is expected to skip the file and carry on; the classified
    error is returned only so callers and tests can inspect it.

    Args:
        file_path: Path to the file that caused the error
        operation: Operation being performed (e.g., "read", "list", "stat")
        exception: The exception that occurred
        error_collector: Optional error collector to add the error to
        logger: Optional AssistLogger to log the error
    """
    error: AssistError
    if isinstance(exception, AssistError):
        error = exception
    elif isinstance(exception, (FileNotFoundError, IsADirectoryError, NotADirectoryError)):
        error = FileAccessError(f"Cannot {operation} file: {exception}", file_path)
    elif isinstance(exception, BuiltinPermissionError):
        error = PermissionError(f"Permission denied during {operation}: {exception}", file_path)
    elif isinstance(exception, (UnicodeDecodeError, UnicodeError)):
        error = EncodingError(f"Encoding error during {operation}: {exception}", file_path)
    else:
        error = AssistError(
            f"Unexpected error during {operation}: {exception}",
            category=ErrorCategory.FILE_ACCESS if isinstance(exception, OSError) else ErrorCategory.UNKNOWN,
            file_path=file_path,
        )

    if error_collector is not None:
        error_collector.add_error(error)

    if logger is not None:
        logger.log_file_error(str(file_path), error.message, file_operation=operation)

    return error


def create_error_report(error_collector: ErrorCollector) -> str:
    """Create a human-readable error report."""
    if not error_collector.errors:
        return "No errors occurred."

    summary = error_collector.get_summary()

    report = ["pyassist Error Report", "=" * 50, ""]
    report.append(f"Total errors: {summary['total_errors']}")
    report.append(f"Critical errors: {summary['by_severity']['critical']}")
    report.append("")

    report.append("Errors by category:")
    for category, count in summary["by_category"].items():
        report.append(f"  {category}: {count}")
    report.append("")

    report.append("Skipped files:")
    for error in error_collector.errors:
        if error.file_path:
            report.append(f"  - {error.file_path}: {error.message}")

    return "\n".join(report)
