# grounded_rag/domain/models.py
# Domain models must be pure (no I/O, no external libs)
from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Literal

from .types import Vector

Intent = Literal[
    "factual",
    "comparison",
    "procedural",
    "analytical",
    "numerical",
    "visual",
    "temporal",
    "location",
    "causal",
    "list",
    "information_request",
]

DEFAULT_INTENT: Intent = "information_request"

# Passage flags arrive snake_case or camelCase depending on the chunker.
SEMANTIC_CHUNK_KEYS = ("semantic_chunk", "semanticChunk")
HAS_TABLE_KEYS = ("has_table", "hasTables")
HAS_IMAGE_KEYS = ("has_image", "hasImages")


def metadata_flag(metadata: Mapping[str, Any], keys: tuple[str, ...]) -> bool:
    """True when any spelling of the flag is set truthy."""
    return any(metadata.get(key) for key in keys)


@dataclass(frozen=True)
class Passage:
    """
    Immutable unit of retrieval: one chunk of an ingested document.

    - id:              "{document_id}_{index}", unique across the index
    - document_id:     owning document
    - content:         the passage text
    - embedding:       vector used for similarity search (None until backfilled)
    - type:            source medium tag ("text", "pdf", "image", ...)
    - metadata:        open mapping (has_table, has_image, word_count, semantic_chunk, ...)
    - embedding_model: provider that produced the embedding, "supplied" if handed in
    """

    id: str
    document_id: str
    content: str
    embedding: Vector | None = None
    type: str = "text"
    metadata: Mapping[str, Any] = field(default_factory=dict)
    embedding_model: str = "supplied"


@dataclass(frozen=True)
class DocumentRecord:
    """Aggregate record of one ingested document."""

    id: str
    metadata: Mapping[str, Any]
    passage_ids: tuple[str, ...]
    ingested_at: datetime

    @property
    def chunk_count(self) -> int:
        return len(self.passage_ids)


@dataclass(frozen=True)
class ScoredPassage:
    """A passage found by similarity search, optionally rescored by the reranker."""

    passage: Passage
    similarity: float
    relevance: float | None = None


@dataclass(frozen=True)
class QueryContext:
    """Result of query understanding. expanded_text is diagnostic only."""

    text: str
    intent: Intent = DEFAULT_INTENT
    keywords: tuple[str, ...] = ()
    entities: tuple[str, ...] = ()
    expanded_text: str = ""


@dataclass(frozen=True)
class EvidenceMetrics:
    """Lexical-overlap proxies for answer quality, all within [0, 1]."""

    faithfulness: float
    answer_relevancy: float
    context_recall: float
    context_precision: float

    @property
    def overall_score(self) -> float:
        return (
            self.faithfulness + self.answer_relevancy + self.context_recall + self.context_precision
        ) / 4

    def as_dict(self) -> dict[str, float]:
        return {
            "faithfulness": self.faithfulness,
            "answer_relevancy": self.answer_relevancy,
            "context_recall": self.context_recall,
            "context_precision": self.context_precision,
            "overall_score": self.overall_score,
        }


@dataclass(frozen=True)
class IndexStats:
    total_passages: int
    total_documents: int
    average_passages_per_document: float
    embedding_provider_usage_counts: Mapping[str, int]
