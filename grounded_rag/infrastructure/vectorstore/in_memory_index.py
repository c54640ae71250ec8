"""In-memory vector index with exhaustive cosine scan.

Concurrency: readers never lock. Writers serialize on one lock, build a new
immutable snapshot that contains the complete document, and publish it with
a single reference assignment, so a search sees either none or all of a
document's passages.
"""

from __future__ import annotations

import logging
import threading
from collections import Counter
from collections.abc import Collection, Mapping, Sequence
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any

from grounded_rag.application.ports.clock_port import ClockPort
from grounded_rag.application.ports.vector_store_port import VectorIndexPort
from grounded_rag.application.services.embedding_chain import EmbeddingChain
from grounded_rag.domain.errors import ValidationError
from grounded_rag.domain.models import (
    HAS_IMAGE_KEYS,
    HAS_TABLE_KEYS,
    DocumentRecord,
    IndexStats,
    Passage,
    ScoredPassage,
    metadata_flag,
)
from grounded_rag.domain.services.hash_embedding import hash_embedding
from grounded_rag.domain.similarity import coerce_vector, cosine
from grounded_rag.infrastructure.time.system_clock import SystemClock

logger = logging.getLogger(__name__)

MALFORMED_FALLBACK_MODEL = "hash-fallback"


@dataclass(frozen=True)
class _Snapshot:
    passages: Mapping[str, Passage] = field(default_factory=dict)
    documents: Mapping[str, DocumentRecord] = field(default_factory=dict)


class InMemoryVectorIndex(VectorIndexPort):
    """Append-only passage store keyed by passage id, plus document -> passage ids."""

    def __init__(
        self,
        embedding: EmbeddingChain | None = None,
        clock: ClockPort | None = None,
    ) -> None:
        self.embedding = embedding or EmbeddingChain()
        self.clock = clock or SystemClock()
        self._snapshot = _Snapshot()
        self._write_lock = threading.Lock()

    # ===== Ingestion =====

    def insert(
        self,
        document_id: str,
        passages: Sequence[Passage],
        metadata: Mapping[str, Any] | None = None,
    ) -> DocumentRecord:
        """Embed missing vectors, validate all of them, then publish the document atomically.

        Raises:
            ValidationError: empty document id, duplicate document, or a passage
                that belongs to another document
        """
        if not document_id or not str(document_id).strip():
            raise ValidationError("document_id must not be empty")
        document_id = str(document_id)
        if document_id in self._snapshot.documents:
            raise ValidationError(f"document '{document_id}' is already indexed")

        # Provider calls happen here, outside the write lock.
        ready = [self._prepare(document_id, p) for p in passages]

        with self._write_lock:
            current = self._snapshot
            if document_id in current.documents:
                raise ValidationError(f"document '{document_id}' is already indexed")
            clashes = [p.id for p in ready if p.id in current.passages]
            if clashes:
                raise ValidationError(f"passage ids already indexed: {clashes[:3]}")

            record = DocumentRecord(
                id=document_id,
                metadata=MappingProxyType(_aggregate_metadata(metadata, ready)),
                passage_ids=tuple(p.id for p in ready),
                ingested_at=self.clock.now(),
            )
            new_passages = dict(current.passages)
            new_passages.update((p.id, p) for p in ready)
            new_documents = dict(current.documents)
            new_documents[document_id] = record
            self._snapshot = _Snapshot(passages=new_passages, documents=new_documents)

        logger.info(
            "Indexed document %s with %d passages (total %d)",
            document_id,
            len(ready),
            len(new_passages),
        )
        return record

    def _prepare(self, document_id: str, passage: Passage) -> Passage:
        if passage.document_id != document_id:
            raise ValidationError(
                f"passage '{passage.id}' belongs to '{passage.document_id}', not '{document_id}'"
            )
        if passage.embedding is None:
            vector, provider = self.embedding.embed_with_provider(passage.content)
            passage = replace(passage, embedding=tuple(vector), embedding_model=provider)

        metadata = MappingProxyType(dict(passage.metadata))
        vector = coerce_vector(passage.embedding)
        if vector is None:
            logger.warning(
                "Malformed embedding for passage %s, replacing with hash embedding", passage.id
            )
            return replace(
                passage,
                embedding=tuple(hash_embedding(passage.content)),
                embedding_model=MALFORMED_FALLBACK_MODEL,
                metadata=metadata,
            )
        return replace(passage, embedding=vector, metadata=metadata)

    # ===== Query =====

    def search(
        self,
        query_embedding: Sequence[float],
        document_ids: Collection[str] | None = None,
        min_similarity: float = 0.1,
        top_k: int = 10,
    ) -> list[ScoredPassage]:
        """Linear scan; descending similarity, ties in insertion order, at most top_k."""
        if top_k <= 0:
            return []
        query_vector = coerce_vector(query_embedding)
        if query_vector is None:
            logger.warning("Malformed query embedding, nothing can match")
            return []

        snapshot = self._snapshot
        allowed = {str(d) for d in document_ids} if document_ids is not None else None

        hits: list[ScoredPassage] = []
        for passage in snapshot.passages.values():
            if allowed is not None and passage.document_id not in allowed:
                continue
            similarity = cosine(query_vector, passage.embedding)
            if similarity >= min_similarity:
                hits.append(ScoredPassage(passage=passage, similarity=similarity))

        # list.sort is stable: equal similarities keep insertion order
        hits.sort(key=lambda h: h.similarity, reverse=True)
        logger.debug(
            "Scanned %d passages, %d above %.3f", len(snapshot.passages), len(hits), min_similarity
        )
        return hits[:top_k]

    # ===== Inspection =====

    def get_document(self, document_id: str) -> DocumentRecord | None:
        return self._snapshot.documents.get(str(document_id))

    def get_passages(self, document_id: str) -> list[Passage]:
        snapshot = self._snapshot
        record = snapshot.documents.get(str(document_id))
        if record is None:
            return []
        return [snapshot.passages[pid] for pid in record.passage_ids]

    def stats(self) -> IndexStats:
        snapshot = self._snapshot
        total_passages = len(snapshot.passages)
        total_documents = len(snapshot.documents)
        usage = Counter(p.embedding_model for p in snapshot.passages.values())
        return IndexStats(
            total_passages=total_passages,
            total_documents=total_documents,
            average_passages_per_document=(
                total_passages / total_documents if total_documents else 0.0
            ),
            embedding_provider_usage_counts=dict(usage),
        )


def _aggregate_metadata(
    metadata: Mapping[str, Any] | None, passages: Sequence[Passage]
) -> dict[str, Any]:
    out = dict(metadata or {})
    out["chunk_count"] = len(passages)
    out["has_table"] = any(metadata_flag(p.metadata, HAS_TABLE_KEYS) for p in passages)
    out["has_image"] = any(metadata_flag(p.metadata, HAS_IMAGE_KEYS) for p in passages)
    return out
