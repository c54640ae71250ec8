from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, cast

from grounded_rag.application.dto.ingest_dto import IngestDocumentRequest
from grounded_rag.application.ports.telemetry_port import NoopTelemetry, TelemetryPort
from grounded_rag.application.ports.vector_store_port import VectorIndexPort
from grounded_rag.domain.errors import ValidationError
from grounded_rag.domain.models import DocumentRecord, Passage

logger = logging.getLogger(__name__)


def passage_id(document_id: str, index: int) -> str:
    return f"{document_id}_{index}"


@dataclass
class IngestDocuments:
    """Registers one pre-chunked document; the index makes it visible atomically."""

    index: VectorIndexPort
    telemetry: TelemetryPort = field(default_factory=NoopTelemetry)

    def execute(self, req: IngestDocumentRequest) -> DocumentRecord:
        document_id = str(req.document_id or "").strip()
        if not document_id:
            raise ValidationError("document_id must not be empty")

        passages = [
            Passage(
                id=passage_id(document_id, i),
                document_id=document_id,
                content=p.content or "",
                # shape is validated by the index; malformed vectors are replaced there
                embedding=cast(Any, p.embedding),
                type=p.type or "text",
                metadata=dict(p.metadata or {}),
                embedding_model=p.embedding_model or "supplied",
            )
            for i, p in enumerate(req.passages)
        ]

        record = self.index.insert(document_id, passages, metadata=req.metadata)
        self.telemetry.incr("rag.documents.ingested", {})
        self.telemetry.observe("rag.passages.ingested", float(len(passages)), {})
        logger.info("Ingested document %s (%d passages)", document_id, record.chunk_count)
        return record
