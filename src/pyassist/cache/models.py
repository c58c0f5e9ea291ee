"""
Cache data models for pyassist.

Classes:
    CacheEntry: A stored value with its expiry and access bookkeeping
    NamespaceStats: Size, hit and memory figures for one namespace

Functions:
    format_bytes: Human readable byte count ("1.5 KB")

All timestamps are milliseconds read from the owning store's clock.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any

_BYTE_UNITS = ("Bytes", "KB", "MB", "GB")


@dataclass(slots=True)
class CacheEntry:
    """A cached value with expiry and access tracking."""

    data: Any
    created_at: float
    expires_at: float
    access_count: int = 0
    last_accessed_at: float = 0.0

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at

    def touch(self, now: float) -> None:
        """Update last accessed time and increment access count."""
        self.access_count += 1
        self.last_accessed_at = now


@dataclass(slots=True)
class NamespaceStats:
    """Cache statistics for a single namespace."""

    size: int = 0
    hits: int = 0
    misses: int = 0
    memory_estimate_bytes: int = 0

    @property
    def memory_usage(self) -> str:
        return format_bytes(self.memory_estimate_bytes)


def format_bytes(num_bytes: float) -> str:
    if num_bytes <= 0:
        return "0 Bytes"
    i = min(int(math.floor(math.log(num_bytes, 1024))), len(_BYTE_UNITS) - 1)
    value = round(num_bytes / 1024**i, 2)
    if value == int(value):
        return f"{int(value)} {_BYTE_UNITS[i]}"
    return f"{value:g} {_BYTE_UNITS[i]}"
