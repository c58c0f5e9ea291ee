"""
Logging configuration for pyassist.

Every component logs through a shared ``AssistLogger`` so that the host editor
can route completion, context and search diagnostics to one place. The logger
wraps the standard library ``logging`` module and adds a few domain helpers
that attach structured fields (``operation=...``) to each record.

Classes:
    LogLevel: Available log levels
    LogFormat: Available output formats
    AssistLogger: Logger facade with domain helpers
    JsonFormatter: One JSON object per record
    StructuredFormatter: Human readable ``key=value`` trailer

Functions:
    get_logger: Return the process-wide logger, creating it on first use
    configure_logging: Replace the process-wide logger with a configured one
    disable_logging: Silence the process-wide logger
    enable_debug_logging: Switch the process-wide logger to DEBUG

Example:
    >>> from pyassist.utils.logging_config import configure_logging, LogFormat
    >>> logger = configure_logging(format_type=LogFormat.STRUCTURED)
    >>> logger.log_search_complete("TODO", results_count=3, elapsed_ms=12.5)
"""

from __future__ import annotations

import json
import logging
import sys
from enum import Enum
from typing import Any

# Attributes every LogRecord carries; anything else came in through ``extra``.
_RESERVED_RECORD_FIELDS = frozenset(
    {
        "name",
        "msg",
        "args",
        "levelname",
        "levelno",
        "pathname",
        "filename",
        "module",
        "exc_info",
        "exc_text",
        "stack_info",
        "lineno",
        "funcName",
        "created",
        "msecs",
        "relativeCreated",
        "thread",
        "threadName",
        "processName",
        "process",
        "taskName",
        "message",
        "asctime",
    }
)


class LogLevel(str, Enum):
    """Level names accepted by ``AssistLogger``."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogFormat(str, Enum):
    """How records are rendered on the console."""

    SIMPLE = "simple"
    JSON = "json"
    STRUCTURED = "structured"


def _extra_fields(record: logging.LogRecord) -> dict[str, Any]:
    return {
        key: value
        for key, value in record.__dict__.items()
        if key not in _RESERVED_RECORD_FIELDS and not key.startswith("_")
    }


class AssistLogger:
    """
    Logger facade shared by every pyassist component.

    Keyword arguments given to the level methods become record attributes,
    which the JSON and structured formatters print as fields.
    """

    def __init__(
        self,
        name: str = "pyassist",
        level: LogLevel = LogLevel.INFO,
        format_type: LogFormat = LogFormat.SIMPLE,
        enable_console: bool = True,
    ):
        self.name = name
        self.level = level
        self.format_type = format_type
        self.enable_console = enable_console

        self.logger = logging.getLogger(name)
        self.logger.setLevel(getattr(logging, level.value))
        self.logger.propagate = False
        # Reconfiguring a name replaces its handlers.
        self.logger.handlers.clear()
        if enable_console:
            handler = logging.StreamHandler(sys.stderr)
            handler.setLevel(self.logger.level)
            handler.setFormatter(self._get_formatter())
            self.logger.addHandler(handler)

    def _get_formatter(self) -> logging.Formatter:
        if self.format_type == LogFormat.JSON:
            return JsonFormatter()
        elif self.format_type == LogFormat.STRUCTURED:
            return StructuredFormatter()
        return logging.Formatter("%(levelname)s: %(message)s")

    def debug(self, message: str, **kwargs: Any) -> None:
        self.logger.debug(message, extra=kwargs)

    def info(self, message: str, **kwargs: Any) -> None:
        self.logger.info(message, extra=kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        self.logger.warning(message, extra=kwargs)

    def error(self, message: str, **kwargs: Any) -> None:
        self.logger.error(message, extra=kwargs)

    def log_completion_request(self, uri: str, outcome: str, elapsed_ms: float, **kwargs: Any) -> None:
        """Log the terminal outcome of one completion request."""
        self.debug(
            f"Completion request for {uri}: {outcome} ({elapsed_ms:.1f}ms)",
            operation="completion",
            uri=uri,
            outcome=outcome,
            elapsed_ms=elapsed_ms,
            **kwargs,
        )

    def log_search_complete(
        self, pattern: str, results_count: int, elapsed_ms: float, **kwargs: Any
    ) -> None:
        """Log the outcome of one workspace search."""
        self.debug(
            f"Search completed: pattern='{pattern}', results={results_count}, time={elapsed_ms:.2f}ms",
            operation="search_complete",
            pattern=pattern,
            results_count=results_count,
            elapsed_ms=elapsed_ms,
            **kwargs,
        )

    def log_file_error(self, file_path: str, error: str, **kwargs: Any) -> None:
        """Log a skipped file."""
        self.debug(
            f"File skipped: {file_path} - {error}",
            operation="file_error",
            file_path=file_path,
            error=error,
            **kwargs,
        )

    def log_cache_sweep(self, removed: int, remaining: int, **kwargs: Any) -> None:
        """Log a background expiry sweep."""
        self.debug(
            f"Cache sweep removed {removed} expired entries, {remaining} remaining",
            operation="cache_sweep",
            removed=removed,
            remaining=remaining,
            **kwargs,
        )


class JsonFormatter(logging.Formatter):
    """One JSON object per record, extra fields inlined."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": record.created,
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "source": f"{record.module}:{record.funcName}:{record.lineno}",
            **_extra_fields(record),
        }
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


class StructuredFormatter(logging.Formatter):
    """Plain message followed by a ``key=value`` trailer of the extra fields."""

    def format(self, record: logging.LogRecord) -> str:
        stamp = self.formatTime(record, self.datefmt)
        text = f"{stamp} [{record.levelname}] {record.name}: {record.getMessage()}"
        fields = _extra_fields(record)
        if fields:
            text += " | " + " ".join(f"{key}={value}" for key, value in fields.items())
        if record.exc_info:
            text += "\n" + self.formatException(record.exc_info)
        return text


_global_logger: AssistLogger | None = None


def get_logger() -> AssistLogger:
    """The process-wide logger; created at WARNING on first use."""
    global _global_logger
    if _global_logger is None:
        _global_logger = AssistLogger(level=LogLevel.WARNING)
    return _global_logger


def configure_logging(
    level: LogLevel = LogLevel.INFO,
    format_type: LogFormat = LogFormat.SIMPLE,
    enable_console: bool = True,
    **kwargs: Any,
) -> AssistLogger:
    """Replace the process-wide logger and return it."""
    global _global_logger
    _global_logger = AssistLogger(
        level=level,
        format_type=format_type,
        enable_console=enable_console,
        **kwargs,
    )
    return _global_logger


def disable_logging() -> None:
    """Raise the process-wide threshold above CRITICAL."""
    logger = get_logger()
    logger.logger.setLevel(logging.CRITICAL + 1)


def enable_debug_logging() -> None:
    """Lower the process-wide logger and its handlers to DEBUG."""
    logger = get_logger()
    logger.level = LogLevel.DEBUG
    logger.logger.setLevel(logging.DEBUG)
    for handler in logger.logger.handlers:
        handler.setLevel(logging.DEBUG)
