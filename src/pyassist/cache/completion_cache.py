"""
Purpose-specific caches built on ``CacheStore``.

``CompletionCache`` owns the namespace layout and TTL policy for everything
pyassist caches: post-processed completions, raw provider responses, context
objects, file contents and workspace analyses.

Namespaces:
    completions: prompt hash -> completion text
    provider:<name>: prompt hash -> provider response text
    context: file/workspace keys -> context data

Example:
    >>> cache = CompletionCache(CacheStore())
    >>> cache.cache_completion("def add(a, b):", "    return a + b")
    >>> cache.get_cached_completion("  DEF add(a,   b): ")
    '    return a + b'
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from ..core.config import AssistConfig
from .keys import file_key, hash_prompt, workspace_key
from .models import NamespaceStats, format_bytes
from .store import CacheStore

COMPLETIONS = "completions"
CONTEXT = "context"
PROVIDER_PREFIX = "provider:"


def provider_namespace(provider: str) -> str:
    return f"{PROVIDER_PREFIX}{provider}"


class CompletionCache:
    """Completion, provider and context caching with per-purpose TTLs."""

    def __init__(self, store: CacheStore | None = None, config: AssistConfig | None = None) -> None:
        self.config = config or AssistConfig()
        self.store = store if store is not None else CacheStore(
            max_size=self.config.cache_max_size,
            sweep_interval=self.config.cache_sweep_interval,
        )

    # Completions

    def cache_completion(self, prompt: str, completion: str) -> None:
        self.store.set(COMPLETIONS, hash_prompt(prompt), completion, self.config.completion_ttl_ms)

    def get_cached_completion(self, prompt: str) -> str | None:
        return self.store.get(COMPLETIONS, hash_prompt(prompt))

    # Provider responses

    def cache_provider_response(self, provider: str, prompt: str, response: str) -> None:
        """Cache a raw provider response with that provider's TTL."""
        self.store.set(
            provider_namespace(provider),
            hash_prompt(prompt),
            response,
            self.config.provider_ttl(provider),
        )

    def get_cached_provider_response(self, provider: str, prompt: str) -> str | None:
        return self.store.get(provider_namespace(provider), hash_prompt(prompt))

    # Context

    def cache_context(self, key: str, data: Any, ttl_ms: float | None = None) -> None:
        ttl = self.config.default_ttl_ms if ttl_ms is None else ttl_ms
        self.store.set(CONTEXT, key, data, ttl)

    def get_cached_context(self, key: str) -> Any | None:
        return self.store.get(CONTEXT, key)

    def cache_file_content(self, uri: Path | str, content: str, version: int) -> None:
        self.cache_context(file_key(uri, version), content, self.config.file_content_ttl_ms)

    def get_cached_file_content(self, uri: Path | str, version: int) -> str | None:
        return self.get_cached_context(file_key(uri, version))

    def cache_workspace_analysis(self, workspace_id: str, analysis: Any) -> None:
        self.cache_context(workspace_key(workspace_id), analysis, self.config.workspace_ttl_ms)

    def get_cached_workspace_analysis(self, workspace_id: str) -> Any | None:
        return self.get_cached_context(workspace_key(workspace_id))

    # Invalidation

    def invalidate_file(self, uri: Path | str) -> int:
        """Drop every entry, in any namespace, whose key mentions ``uri``."""
        needle = str(uri)
        return self.store.invalidate_all(lambda key: needle in key)

    def invalidate_workspace(self) -> int:
        """Drop the whole context namespace."""
        removed = self.store.size(CONTEXT)
        self.store.clear(CONTEXT)
        return removed

    def clear_all(self) -> None:
        self.store.clear()

    # Statistics

    def stats(self) -> dict[str, Any]:
        """
        Per-namespace statistics plus a human readable memory total.

        The completions and context namespaces are always reported, even when
        empty.
        """
        per_namespace: dict[str, NamespaceStats] = {
            COMPLETIONS: NamespaceStats(),
            CONTEXT: NamespaceStats(),
        }
        per_namespace.update(self.store.stats())
        total = sum(s.memory_estimate_bytes for s in per_namespace.values())
        return {
            "namespaces": per_namespace,
            "memory_estimate_bytes": total,
            "memory_usage": format_bytes(total),
        }
