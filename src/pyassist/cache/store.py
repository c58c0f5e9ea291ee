"""
Namespaced in-memory cache with TTL expiry and LRU size bounding.

This module provides ``CacheStore``, the process-lifetime cache shared by the
completion, provider and context caches. Each namespace is an independent
``OrderedDict`` kept in access order, so the least recently used entry is
always at the front.

Classes:
    CacheStore: Namespaced TTL + LRU store with a background expiry sweep

Features:
    - Lazy expiry on read plus a periodic sweep on the running event loop
    - Per-namespace size bound enforced after every insertion
    - Predicate based invalidation for file and workspace changes
    - Approximate memory statistics

Example:
    >>> store = CacheStore(max_size=100)
    >>> store.set("completions", "abc", "return x", ttl_ms=120_000)
    >>> store.get("completions", "abc")
    'return x'

    Inside a running loop the sweep can be armed:
        >>> async with CacheStore(sweep_interval=30) as store:
        ...     ...

All mutating methods are synchronous, so on a single event loop a sweep and
a foreground ``get``/``set`` never interleave inside an entry update.
"""

from __future__ import annotations

import asyncio
import math
import time
from collections import OrderedDict
from collections.abc import Callable, Iterator
from numbers import Real
from typing import Any

import orjson

from ..utils.logging_config import AssistLogger, get_logger
from .models import CacheEntry, NamespaceStats

Clock = Callable[[], float]
KeyPredicate = Callable[[str], bool]


def _monotonic_ms() -> float:
    return time.monotonic() * 1000.0


def _serialize_fallback(obj: Any) -> str:
    return repr(obj)


class CacheStore:
    """
    Namespaced key-value cache with TTL expiry and LRU eviction.

    Timestamps come from ``clock`` (milliseconds). Values are returned by
    reference; the store never copies them.
    """

    def __init__(
        self,
        max_size: int = 1000,
        sweep_interval: float = 60.0,
        clock: Clock | None = None,
        logger: AssistLogger | None = None,
    ) -> None:
        """
        Initialize the store.

        Args:
            max_size: Maximum number of entries per namespace
            sweep_interval: Seconds between background expiry sweeps
            clock: Millisecond clock, defaults to a monotonic clock
            logger: Logger, defaults to the shared pyassist logger
        """
        if max_size <= 0:
            raise ValueError("max_size must be positive")
        self.max_size = max_size
        self.sweep_interval = sweep_interval
        self._clock = clock or _monotonic_ms
        self.logger = logger or get_logger()

        self._namespaces: dict[str, OrderedDict[str, CacheEntry]] = {}
        self._misses: dict[str, int] = {}
        self._sweep_task: asyncio.Task[None] | None = None

    # Core operations

    def now(self) -> float:
        return self._clock()

    def set(self, namespace: str, key: str, value: Any, ttl_ms: float | None) -> None:
        """
        Insert or overwrite an entry.

        A TTL that is missing, non-numeric, NaN or not positive produces an
        entry that is already expired.
        """
        now = self._clock()
        entries = self._namespaces.setdefault(namespace, OrderedDict())
        entries.pop(key, None)
        entries[key] = CacheEntry(
            data=value,
            created_at=now,
            expires_at=now + self._normalize_ttl(ttl_ms),
            access_count=0,
            last_accessed_at=now,
        )
        evicted = 0
        while len(entries) > self.max_size:
            entries.popitem(last=False)
            evicted += 1
        if evicted:
            self.logger.debug(
                f"Evicted {evicted} least recently used entries from '{namespace}'",
                namespace=namespace,
                evicted=evicted,
            )

    def get(self, namespace: str, key: str) -> Any | None:
        """Return the cached value, or None when absent or expired."""
        entries = self._namespaces.get(namespace)
        entry = entries.get(key) if entries is not None else None
        if entry is None:
            self._record_miss(namespace)
            return None

        now = self._clock()
        if entry.is_expired(now):
            del entries[key]
            self._record_miss(namespace)
            return None

        entry.touch(now)
        entries.move_to_end(key)
        return entry.data

    def peek(self, namespace: str, key: str) -> CacheEntry | None:
        """Return the raw entry without touching it or checking expiry."""
        entries = self._namespaces.get(namespace)
        return entries.get(key) if entries is not None else None

    def invalidate(self, namespace: str, key_or_predicate: str | KeyPredicate) -> int:
        """
        Remove entries from one namespace.

        Args:
            namespace: Namespace to remove from
            key_or_predicate: An exact key, or a callable selecting keys

        Returns:
            Number of entries removed
        """
        entries = self._namespaces.get(namespace)
        if not entries:
            return 0

        if isinstance(key_or_predicate, str):
            return 1 if entries.pop(key_or_predicate, None) is not None else 0

        doomed = [key for key in entries if key_or_predicate(key)]
        for key in doomed:
            del entries[key]
        return len(doomed)

    def invalidate_all(self, predicate: KeyPredicate) -> int:
        """Remove entries selected by ``predicate`` from every namespace."""
        removed = sum(self.invalidate(ns, predicate) for ns in list(self._namespaces))
        if removed:
            self.logger.debug(f"Invalidated {removed} cache entries", removed=removed)
        return removed

    def clear(self, namespace: str | None = None) -> None:
        """Drop every entry in one namespace, or in all of them."""
        if namespace is None:
            self._namespaces.clear()
            self._misses.clear()
            return
        self._namespaces.pop(namespace, None)
        self._misses.pop(namespace, None)

    def sweep(self) -> int:
        """Remove expired entries from every namespace."""
        now = self._clock()
        removed = 0
        for entries in self._namespaces.values():
            expired = [key for key, entry in entries.items() if entry.is_expired(now)]
            for key in expired:
                del entries[key]
            removed += len(expired)

        if removed:
            self.logger.log_cache_sweep(removed, len(self))
        return removed

    # Statistics

    def stats(self, namespace: str | None = None) -> dict[str, NamespaceStats]:
        """
        Per-namespace statistics.

        ``hits`` is the sum of entry access counts and the memory figure is
        an estimate (twice the key length plus twice the serialized entry
        length), not a measurement.
        """
        names = [namespace] if namespace is not None else list(self._namespaces)
        result: dict[str, NamespaceStats] = {}
        for name in names:
            entries = self._namespaces.get(name, OrderedDict())
            result[name] = NamespaceStats(
                size=len(entries),
                hits=sum(entry.access_count for entry in entries.values()),
                misses=self._misses.get(name, 0),
                memory_estimate_bytes=sum(
                    self._estimate_entry_size(key, entry) for key, entry in entries.items()
                ),
            )
        return result

    def size(self, namespace: str) -> int:
        return len(self._namespaces.get(namespace, ()))

    def namespaces(self) -> list[str]:
        return list(self._namespaces)

    def keys(self, namespace: str) -> list[str]:
        return list(self._namespaces.get(namespace, ()))

    def __contains__(self, item: tuple[str, str]) -> bool:
        namespace, key = item
        return key in self._namespaces.get(namespace, ())

    def __len__(self) -> int:
        return sum(len(entries) for entries in self._namespaces.values())

    def __iter__(self) -> Iterator[tuple[str, str]]:
        for namespace, entries in list(self._namespaces.items()):
            for key in list(entries):
                yield namespace, key

    # Background sweep

    @property
    def sweeping(self) -> bool:
        return self._sweep_task is not None and not self._sweep_task.done()

    def start(self) -> None:
        """Arm the periodic sweep on the running event loop."""
        if self.sweeping:
            return
        loop = asyncio.get_running_loop()
        self._sweep_task = loop.create_task(self._sweep_loop(), name="pyassist-cache-sweep")

    async def stop(self) -> None:
        """Cancel the periodic sweep and wait for it to finish."""
        task = self._sweep_task
        self._sweep_task = None
        if task is None or task.done():
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    def close(self) -> None:
        """Cancel the periodic sweep without waiting."""
        if self._sweep_task is not None:
            self._sweep_task.cancel()
            self._sweep_task = None

    async def __aenter__(self) -> CacheStore:
        self.start()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.stop()

    async def _sweep_loop(self) -> None:
        while True:
            await asyncio.sleep(self.sweep_interval)
            try:
                self.sweep()
            except Exception as e:
                self.logger.error(f"Cache sweep failed: {e}")

    # Internals

    def _record_miss(self, namespace: str) -> None:
        self._misses[namespace] = self._misses.get(namespace, 0) + 1

    @staticmethod
    def _normalize_ttl(ttl_ms: Any) -> float:
        if isinstance(ttl_ms, bool) or not isinstance(ttl_ms, Real):
            return 0.0
        ttl = float(ttl_ms)
        if math.isnan(ttl) or ttl <= 0:
            return 0.0
        return ttl

    @staticmethod
    def _estimate_entry_size(key: str, entry: CacheEntry) -> int:
        payload = {
            "data": entry.data,
            "createdAt": entry.created_at,
            "expiresAt": entry.expires_at,
            "accessCount": entry.access_count,
            "lastAccessedAt": entry.last_accessed_at,
        }
        try:
            serialized = orjson.dumps(payload, default=_serialize_fallback)
        except orjson.JSONEncodeError:
            serialized = repr(payload).encode("utf-8")
        return 2 * len(key) + 2 * len(serialized)
