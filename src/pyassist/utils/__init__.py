"""
Utility functions and helper modules.

This package contains the ambient helpers used throughout pyassist:
- Error classification and collection
- Logging configuration
- File reading, globbing and walking
- Structured output of search results
"""

from .error_handling import (
    AssistError,
    BackendError,
    ConfigurationError,
    EncodingError,
    ErrorCollector,
    FileAccessError,
    PatternError,
    PermissionError,
    create_error_report,
    handle_file_error,
)
from .formatter import format_results_text, results_to_dicts, to_json_bytes
from .helpers import build_pathspec, iter_files, matches_patterns, read_text_safely, split_lines
from .logging_config import configure_logging, disable_logging, enable_debug_logging, get_logger

__all__ = [
    # Error handling
    "AssistError",
    "BackendError",
    "ConfigurationError",
    "EncodingError",
    "ErrorCollector",
    "FileAccessError",
    "PatternError",
    "PermissionError",
    "create_error_report",
    "handle_file_error",
    # Formatting
    "format_results_text",
    "results_to_dicts",
    "to_json_bytes",
    # Helpers
    "build_pathspec",
    "iter_files",
    "matches_patterns",
    "read_text_safely",
    "split_lines",
    # Logging
    "configure_logging",
    "disable_logging",
    "enable_debug_logging",
    "get_logger",
]
