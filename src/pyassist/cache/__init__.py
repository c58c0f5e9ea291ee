"""
Caching for pyassist.

``CacheStore`` is the generic namespaced TTL + LRU store; ``CompletionCache``
layers the completion, provider and context namespaces on top of it.
"""

from .completion_cache import COMPLETIONS, CONTEXT, CompletionCache, provider_namespace
from .keys import file_key, hash_prompt, normalize_prompt, workspace_key
from .models import CacheEntry, NamespaceStats, format_bytes
from .store import CacheStore

__all__ = [
    "CacheStore",
    "CacheEntry",
    "NamespaceStats",
    "format_bytes",
    "CompletionCache",
    "COMPLETIONS",
    "CONTEXT",
    "provider_namespace",
    "file_key",
    "hash_prompt",
    "normalize_prompt",
    "workspace_key",
]
