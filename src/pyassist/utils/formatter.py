"""
Structured output for search results.

The editor host receives results as JSON; ``to_json_bytes`` serializes them
with orjson. ``format_results_text`` renders the plain text form used in logs
and tests.

Key Functions:
    results_to_dicts: Convert results into JSON-ready dictionaries
    to_json_bytes: Fast JSON serialization using orjson
    format_results_text: Plain text rendering with line numbers and context

Example:
    >>> from pyassist.utils.formatter import to_json_bytes
    >>> payload = to_json_bytes(results)
    >>> payload.decode("utf-8")
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

import orjson

from ..core.types import SearchResult


def results_to_dicts(results: Iterable[SearchResult]) -> list[dict[str, Any]]:
    return [
        {
            "uri": str(r.uri),
            "file_name": r.file_name,
            "relative_path": r.relative_path,
            "line_number": r.line_number,
            "line_text": r.line_text,
            "match_text": r.match_text,
            "context_before": list(r.context_before),
            "context_after": list(r.context_after),
            "relevance_score": r.relevance_score,
        }
        for r in results
    ]


def to_json_bytes(results: Iterable[SearchResult], indent: bool = True) -> bytes:
    """
    Serialize search results to JSON bytes.

    Args:
        results: Search results in ranked order
        indent: Pretty print with two-space indentation (default: True)

    Returns:
        JSON-encoded bytes of ``{"items": [...], "count": n}``
    """
    items = results_to_dicts(results)
    option = orjson.OPT_INDENT_2 if indent else 0
    return orjson.dumps({"items": items, "count": len(items)}, option=option)


def format_results_text(results: Iterable[SearchResult]) -> str:
    out: list[str] = []
    for r in results:
        out.append(f"{r.relative_path}:{r.line_number} (score={r.relevance_score:.2f})")
        first = r.line_number - len(r.context_before)
        for offset, line in enumerate(r.context_before):
            out.append(f"{first + offset:6d} | {line}")
        out.append(f"{r.line_number:6d} > {r.line_text}")
        for offset, line in enumerate(r.context_after, start=1):
            out.append(f"{r.line_number + offset:6d} | {line}")
        out.append("")
    return "\n".join(out)
