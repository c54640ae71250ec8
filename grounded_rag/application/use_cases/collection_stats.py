from dataclasses import dataclass

from grounded_rag.application.ports.vector_store_port import VectorIndexPort
from grounded_rag.domain.models import IndexStats


@dataclass
class CollectionStats:
    """Read-only snapshot of the index for health checks."""

    index: VectorIndexPort

    def execute(self) -> IndexStats:
        return self.index.stats()
