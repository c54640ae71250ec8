from __future__ import annotations

import logging
from collections.abc import Collection
from dataclasses import dataclass

from grounded_rag.application.ports.vector_store_port import VectorIndexPort
from grounded_rag.application.services.embedding_chain import EmbeddingChain
from grounded_rag.domain.models import QueryContext, ScoredPassage

logger = logging.getLogger(__name__)

MIN_CANDIDATES = 20
OVERFETCH_FACTOR = 4


@dataclass(frozen=True)
class Retrieval:
    candidates: list[ScoredPassage]
    embedding_provider: str


class Retriever:
    """Embeds the raw query text and over-fetches candidates for the reranker."""

    def __init__(self, embedding: EmbeddingChain, index: VectorIndexPort) -> None:
        self.embedding = embedding
        self.index = index

    def retrieve(
        self,
        query: QueryContext,
        document_ids: Collection[str] | None,
        min_similarity: float,
        top_k: int,
    ) -> Retrieval:
        # raw text only, expanded_text never reaches the embedder
        vector, provider = self.embedding.embed_with_provider(query.text)
        candidate_k = max(top_k * OVERFETCH_FACTOR, MIN_CANDIDATES)
        candidates = self.index.search(
            vector,
            document_ids=document_ids,
            min_similarity=min_similarity,
            top_k=candidate_k,
        )
        logger.debug(
            "Retrieved %d candidates (k=%d, min_similarity=%.3f, provider=%s)",
            len(candidates),
            candidate_k,
            min_similarity,
            provider,
        )
        return Retrieval(candidates=candidates, embedding_provider=provider)
