"""
Relevance scoring for search hits and related-file candidates.

Classes:
    ScoringWeights: Tunable weights for search hit scoring
    RelatedFileWeights: Tunable weights for the context related-file pools

Functions:
    score_match: Score one search hit
    rank: Stable descending sort by score
    dedupe_keep_best: Collapse duplicates, keeping the best scored one
    keyword_overlap_bonus: Bonus proportional to shared keywords

The weights are heuristics and are exposed as dataclasses so callers can
tune them; the defaults reproduce the stock ranking.
"""

from __future__ import annotations

from collections.abc import Callable, Hashable, Iterable
from dataclasses import dataclass
from typing import TypeVar

from ..core.config import RelatedFileWeights

T = TypeVar("T")

# Declaration-like keywords that make a matching line more interesting.
CONTEXT_KEYWORDS: tuple[str, ...] = (
    "function",
    "class",
    "interface",
    "export",
    "import",
    "const",
    "let",
    "var",
)


@dataclass(slots=True)
class ScoringWeights:
    """Configurable weights for search hit scoring."""

    exact_match: float = 10.0
    filename_match: float = 5.0
    keyword_bonus: float = 2.0
    length_base: float = 10.0
    length_divisor: float = 10.0


_DEFAULT_WEIGHTS = ScoringWeights()


def score_match(
    match_text: str,
    query: str,
    file_name: str,
    line: str,
    weights: ScoringWeights | None = None,
) -> float:
    """
    Score a single search hit.

    - exact case-insensitive match of the whole query
    - file name containing the query
    - one bonus per declaration keyword on the line
    - a length bonus that shrinks as the match grows

    Args:
        match_text: The matched text
        query: The query as typed by the user
        file_name: Base name of the file containing the hit
        line: Full text of the matching line
        weights: Optional weights, defaults to ``ScoringWeights()``

    Returns:
        Non-negative relevance score
    """
    w = weights or _DEFAULT_WEIGHTS
    query_lower = query.lower()
    score = 0.0

    if match_text.lower() == query_lower:
        score += w.exact_match

    if query_lower and query_lower in file_name.lower():
        score += w.filename_match

    line_lower = line.lower()
    for keyword in CONTEXT_KEYWORDS:
        if keyword in line_lower:
            score += w.keyword_bonus

    score += max(0.0, w.length_base - len(match_text) / w.length_divisor)
    return score


def rank(items: Iterable[T], key: Callable[[T], float]) -> list[T]:
    """Sort descending by ``key``; equal scores keep their input order."""
    return sorted(items, key=key, reverse=True)


def dedupe_keep_best(
    items: Iterable[T],
    identity: Callable[[T], Hashable],
    score: Callable[[T], float],
) -> list[T]:
    """
    Collapse items sharing an identity.

    The survivor takes the position of the first occurrence and is the
    highest scoring duplicate (the earliest one on ties).
    """
    best: dict[Hashable, T] = {}
    for item in items:
        ident = identity(item)
        current = best.get(ident)
        if current is None or score(item) > score(current):
            best[ident] = item
    return list(best.values())


def keyword_overlap_bonus(
    a_keywords: Iterable[str], b_keywords: Iterable[str], per_keyword: float = 3.0
) -> float:
    """``per_keyword`` for every keyword of ``a_keywords`` also in ``b_keywords``."""
    others = set(b_keywords)
    return per_keyword * sum(1 for k in a_keywords if k in others)


__all__ = [
    "CONTEXT_KEYWORDS",
    "RelatedFileWeights",
    "ScoringWeights",
    "dedupe_keep_best",
    "keyword_overlap_bonus",
    "rank",
    "score_match",
]
