"""
Configuration module for pyassist.

This module defines ``AssistConfig``, the single object that carries every
tunable constant used by the cache, context assembler, trigger controller and
search engine. The relevance weights and TTLs are heuristics, so they are
exposed here rather than hard-coded in the algorithms.

Classes:
    RelatedFileWeights: Relevance assigned to each related-file pool
    AssistConfig: Main configuration class

Key Configuration Areas:
    - Cache: size bound, sweep interval, per-purpose and per-provider TTLs
    - Context: related-file count, file size bound, pool weights
    - Trigger: debounce delay, completion length, prompt window
    - Search: result and context defaults, exclude patterns, file limits

Example:
    >>> from pyassist.core.config import AssistConfig
    >>> config = AssistConfig(debounce_ms=250, max_related_files=3)
    >>> config.validate()

    Settings coming from the host editor:
        >>> config = AssistConfig.from_mapping({"debounce_ms": 300})
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass, field, fields
from typing import Any

from ..utils.error_handling import ConfigurationError

MINUTE_MS = 60 * 1000

DEFAULT_EXCLUDE_PATTERNS: tuple[str, ...] = (
    "**/node_modules/**",
    "**/dist/**",
    "**/build/**",
    "**/out/**",
    "**/.git/**",
    "**/*.min.js",
    "**/*.map",
    "**/coverage/**",
    "**/__pycache__/**",
    "**/.venv/**",
)


def _default_provider_ttls() -> dict[str, float]:
    return {
        "claude": 5 * MINUTE_MS,
        "openai": 3 * MINUTE_MS,
        "local": 10 * MINUTE_MS,
        "cursor": 1 * MINUTE_MS,
    }


@dataclass(slots=True)
class RelatedFileWeights:
    current: float = 1.0
    open_tab: float = 0.8
    imported: float = 0.7
    same_directory: float = 0.6
    similar_name: float = 0.4


@dataclass(slots=True)
class AssistConfig:
    # Cache
    cache_max_size: int = 1000
    cache_sweep_interval: float = 60.0  # seconds
    default_ttl_ms: float = 5 * MINUTE_MS
    completion_ttl_ms: float = 2 * MINUTE_MS
    file_content_ttl_ms: float = 10 * MINUTE_MS
    workspace_ttl_ms: float = 15 * MINUTE_MS
    provider_ttls_ms: dict[str, float] = field(default_factory=_default_provider_ttls)

    # Context
    max_related_files: int = 5
    max_file_size: int = 50_000  # characters
    similar_files_limit: int = 10
    inline_content_limit: int = 1000
    related_weights: RelatedFileWeights = field(default_factory=RelatedFileWeights)

    # Trigger
    debounce_ms: float = 500
    max_completion_lines: int = 10
    preceding_lines: int = 10
    following_lines: int = 5

    # Search
    max_results: int = 50
    context_lines: int = 2
    exclude_patterns: list[str] = field(default_factory=lambda: list(DEFAULT_EXCLUDE_PATTERNS))
    max_files_per_folder: int = 1000
    max_file_bytes: int = 2_000_000

    @classmethod
    def from_mapping(cls, settings: Mapping[str, Any]) -> AssistConfig:
        """Build a config from host settings, rejecting unknown keys."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(settings) - known)
        if unknown:
            raise ConfigurationError(
                f"Unknown settings: {', '.join(unknown)}",
                context={"unknown": unknown},
            )
        values = dict(settings)
        weights = values.get("related_weights")
        if isinstance(weights, Mapping):
            values["related_weights"] = RelatedFileWeights(**weights)
        config = cls(**values)
        config.validate()
        return config

    def provider_ttl(self, provider: str) -> float:
        return self.provider_ttls_ms.get(provider, self.completion_ttl_ms)

    def validate(self) -> None:
        """Validate configuration and raise ConfigurationError on issues.

        Raises:
            ConfigurationError: If the configuration is invalid.
        """
        positive_ints = {
            "cache_max_size": self.cache_max_size,
            "max_related_files": self.max_related_files,
            "max_file_size": self.max_file_size,
            "max_completion_lines": self.max_completion_lines,
            "max_results": self.max_results,
            "max_files_per_folder": self.max_files_per_folder,
            "max_file_bytes": self.max_file_bytes,
        }
        for name, value in positive_ints.items():
            if not isinstance(value, int) or value <= 0:
                raise ConfigurationError(
                    f"{name} must be a positive integer",
                    context={"field": name, "value": value},
                )

        non_negative = {
            "context_lines": self.context_lines,
            "preceding_lines": self.preceding_lines,
            "following_lines": self.following_lines,
            "similar_files_limit": self.similar_files_limit,
            "inline_content_limit": self.inline_content_limit,
        }
        for name, value in non_negative.items():
            if value < 0:
                raise ConfigurationError(
                    f"{name} must be non-negative",
                    context={"field": name, "value": value},
                )

        if math.isnan(self.debounce_ms) or self.debounce_ms < 0:
            raise ConfigurationError(
                "debounce_ms must be a non-negative number",
                context={"field": "debounce_ms", "value": self.debounce_ms},
            )

        if self.cache_sweep_interval <= 0:
            raise ConfigurationError(
                "cache_sweep_interval must be positive",
                context={"field": "cache_sweep_interval", "value": self.cache_sweep_interval},
            )
