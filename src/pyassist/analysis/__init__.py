"""
File classification helpers: language detection and the code-file allow-list.
"""

from .language_detection import (
    CODE_EXTENSIONS,
    detect_language,
    get_language_extensions,
    is_code_file,
    is_text_file,
    language_id_for,
)

__all__ = [
    "CODE_EXTENSIONS",
    "detect_language",
    "get_language_extensions",
    "is_code_file",
    "is_text_file",
    "language_id_for",
]
