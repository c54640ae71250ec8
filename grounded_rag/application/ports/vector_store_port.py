from collections.abc import Collection, Mapping, Sequence
from typing import Any, Protocol, runtime_checkable

from grounded_rag.domain.models import DocumentRecord, IndexStats, Passage, ScoredPassage

__all__ = ["VectorIndexPort"]


@runtime_checkable
class VectorIndexPort(Protocol):
    def insert(
        self,
        document_id: str,
        passages: Sequence[Passage],
        metadata: Mapping[str, Any] | None = None,
    ) -> DocumentRecord: ...

    def search(
        self,
        query_embedding: Sequence[float],
        document_ids: Collection[str] | None = None,
        min_similarity: float = 0.1,
        top_k: int = 10,
    ) -> list[ScoredPassage]: ...

    def stats(self) -> IndexStats: ...
