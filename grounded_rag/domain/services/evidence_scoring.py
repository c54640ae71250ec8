"""Evidence-quality proxies computed without ground truth.

All four metrics are lexical-overlap ratios over lowercased whitespace
tokens. A zero divisor yields 0.0, never NaN.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from grounded_rag.domain.models import EvidenceMetrics, ScoredPassage
from grounded_rag.domain.services.reranking import word_set

logger = logging.getLogger(__name__)

NEUTRAL_METRICS = EvidenceMetrics(
    faithfulness=0.8,
    answer_relevancy=0.7,
    context_recall=0.8,
    context_precision=0.7,
)
ZERO_METRICS = EvidenceMetrics(0.0, 0.0, 0.0, 0.0)

MAX_DIVERSITY_BONUS = 0.2


def _ratio(numerator: int, denominator: int) -> float:
    return numerator / denominator if denominator else 0.0


def faithfulness(answer: str, source_texts: Sequence[str]) -> float:
    answer_words = word_set(answer)
    source_words = set().union(*(word_set(t) for t in source_texts))
    return _ratio(len(answer_words & source_words), len(answer_words))


def answer_relevancy(query: str, answer: str) -> float:
    query_words = word_set(query)
    return _ratio(len(query_words & word_set(answer)), len(query_words))


def context_recall(query: str, source_texts: Sequence[str]) -> float:
    query_words = word_set(query)
    source_words = set().union(*(word_set(t) for t in source_texts))
    return _ratio(len(query_words & source_words), len(query_words))


def context_precision(query: str, source_texts: Sequence[str]) -> float:
    query_words = word_set(query)
    relevant = sum(1 for t in source_texts if query_words & word_set(t))
    return _ratio(relevant, len(source_texts))


def score_evidence(query: str, answer: str, sources: Sequence[ScoredPassage]) -> EvidenceMetrics:
    """Compute the four metrics; unexpected input shapes degrade to NEUTRAL_METRICS."""
    try:
        texts = [s.passage.content for s in sources]
        return EvidenceMetrics(
            faithfulness=faithfulness(answer, texts),
            answer_relevancy=answer_relevancy(query, answer),
            context_recall=context_recall(query, texts),
            context_precision=context_precision(query, texts),
        )
    except Exception as ex:  # noqa: BLE001
        logger.warning("Evidence scoring failed, using neutral metrics: %s", ex)
        return NEUTRAL_METRICS


def relevance_score(passages: Sequence[ScoredPassage]) -> float:
    """Mean similarity of the selected passages plus a small diversity bonus, capped at 1."""
    if not passages:
        return 0.0
    avg = sum(p.similarity for p in passages) / len(passages)
    bonus = min(len(passages) / 3, MAX_DIVERSITY_BONUS)
    return max(0.0, min(avg + bonus, 1.0))
