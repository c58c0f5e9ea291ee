"""Cache key construction."""

from __future__ import annotations

import hashlib
from pathlib import Path

import regex

_WHITESPACE_RUN = regex.compile(r"\s+")


def normalize_prompt(text: str) -> str:
    """Trim, collapse whitespace runs to one space and case-fold."""
    return _WHITESPACE_RUN.sub(" ", text.strip()).casefold()


def hash_prompt(text: str) -> str:
    """
    Stable key for a prompt.

    Prompts that differ only in surrounding whitespace, internal whitespace
    runs or letter case map to the same key.
    """
    return hashlib.md5(normalize_prompt(text).encode("utf-8")).hexdigest()


def file_key(uri: Path | str, version: int) -> str:
    return f"file:{uri}:{version}"


def workspace_key(workspace_id: str) -> str:
    return f"workspace:{workspace_id}"
