# grounded_rag/application/dto/query_dto.py
from __future__ import annotations

from collections.abc import Collection, Mapping
from dataclasses import dataclass
from typing import Any

from grounded_rag.domain.models import EvidenceMetrics, Intent, QueryContext, ScoredPassage


@dataclass(frozen=True)
class QueryRequest:
    """
    DTO for querying the knowledge base.

    - question: user question (non-empty)
    - document_ids: restrict retrieval to these documents (None = all)
    - min_similarity: similarity threshold for candidates (None = settings default)
    - top_k: number of passages kept after reranking (None = settings default)
    """

    question: str
    document_ids: Collection[str] | None = None
    min_similarity: float | None = None
    top_k: int | None = None


@dataclass(frozen=True)
class SourcePassage:
    passage_id: str
    content: str
    similarity: float
    relevance: float | None
    document_id: str
    type: str
    metadata: Mapping[str, Any]

    @classmethod
    def from_scored(cls, scored: ScoredPassage) -> SourcePassage:
        p = scored.passage
        return cls(
            passage_id=p.id,
            content=p.content,
            similarity=scored.similarity,
            relevance=scored.relevance,
            document_id=p.document_id,
            type=p.type,
            metadata=dict(p.metadata),
        )


@dataclass(frozen=True)
class QueryAnswer:
    """Complete RAG answer with its evidence, quality metrics and provenance."""

    answer_text: str
    source_passages: list[SourcePassage]
    relevance_score: float
    intent: Intent
    metrics: EvidenceMetrics
    context: str = ""
    query_context: QueryContext | None = None
    embedding_provider: str | None = None
    answer_provider: str | None = None
