"""Pure domain functions for reranking retrieved passages.

Raw vector similarity is noisy when the hash fallback produced the vectors,
so the composite score blends lexical overlap, similarity, a passage length
preference and a metadata bonus.

Functions:
- word_set: lowercased whitespace tokens of a text
- keyword_overlap: share of query keywords present in a text
- length_score: mild preference for medium-length passages
- composite_score: weighted blend for one candidate
- sort_by_scores_desc: stable descending sort by scores
- rerank: score, sort and truncate candidates
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, replace
from typing import TypeVar

from grounded_rag.domain.models import SEMANTIC_CHUNK_KEYS, ScoredPassage, metadata_flag

T = TypeVar("T")


@dataclass(frozen=True)
class RerankWeights:
    """Empirical blend weights. Changing them changes ranking behavior."""

    overlap: float = 0.4
    similarity: float = 0.4
    length: float = 0.1
    semantic_bonus: float = 0.1
    ideal_length_chars: int = 500


def word_set(text: str) -> set[str]:
    return set((text or "").lower().split())


def keyword_overlap(keywords: Iterable[str], text: str) -> float:
    """|keywords ∩ words(text)| / |keywords|, 0.0 when there are no keywords."""
    kw = {k.lower() for k in keywords}
    if not kw:
        return 0.0
    return len(kw & word_set(text)) / len(kw)


def length_score(content: str, ideal_length_chars: int = 500) -> float:
    return min(len(content) / ideal_length_chars, 1.0)


def composite_score(
    keywords: Sequence[str],
    candidate: ScoredPassage,
    weights: RerankWeights = RerankWeights(),
) -> float:
    passage = candidate.passage
    semantic = metadata_flag(passage.metadata, SEMANTIC_CHUNK_KEYS)
    bonus = weights.semantic_bonus if semantic else 0.0
    return (
        weights.overlap * keyword_overlap(keywords, passage.content)
        + weights.similarity * (candidate.similarity or 0.0)
        + weights.length * length_score(passage.content, weights.ideal_length_chars)
        + bonus
    )


def sort_by_scores_desc(items: Sequence[T], scores: Sequence[float]) -> list[T]:
    """Stable sort (descending) by scores, pure & deterministic.

    Examples:
        >>> sort_by_scores_desc(["a", "b", "c"], [0.2, 0.9, 0.5])
        ['b', 'c', 'a']
    """
    pairs: list[tuple[float, T]] = list(zip(scores, items, strict=True))
    pairs.sort(key=lambda p: p[0], reverse=True)
    return [it for _, it in pairs]


def rerank(
    keywords: Sequence[str],
    candidates: Sequence[ScoredPassage],
    top_k: int = 5,
    weights: RerankWeights = RerankWeights(),
) -> list[ScoredPassage]:
    """Attach composite relevance, sort descending (ties keep input order), keep top_k."""
    if top_k <= 0:
        return []
    scored = [replace(c, relevance=composite_score(keywords, c, weights)) for c in candidates]
    ranked = sort_by_scores_desc(scored, [c.relevance or 0.0 for c in scored])
    return ranked[:top_k]
