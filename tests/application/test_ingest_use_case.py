from datetime import UTC, datetime

import pytest

from grounded_rag.application.dto.ingest_dto import IngestDocumentRequest, PassageInput
from grounded_rag.application.ports.clock_port import ClockPort
from grounded_rag.application.use_cases.collection_stats import CollectionStats
from grounded_rag.application.use_cases.ingest_documents import IngestDocuments, passage_id
from grounded_rag.domain.errors import ValidationError
from grounded_rag.infrastructure.vectorstore.in_memory_index import InMemoryVectorIndex


class FakeClock(ClockPort):
    def now(self) -> datetime:
        return datetime(2024, 1, 1, tzinfo=UTC)


class RecordingTelemetry:
    def __init__(self) -> None:
        self.counters: list[str] = []
        self.observations: list[tuple[str, float]] = []

    def incr(self, name, tags=None) -> None:
        self.counters.append(name)

    def observe(self, name, value, tags=None) -> None:
        self.observations.append((name, value))


def test_passage_ids_follow_document_and_position():
    assert passage_id("report", 0) == "report_0"
    assert passage_id("report", 12) == "report_12"


def test_ingest_single_document():
    index = InMemoryVectorIndex(clock=FakeClock())
    telemetry = RecordingTelemetry()
    uc = IngestDocuments(index=index, telemetry=telemetry)

    record = uc.execute(
        IngestDocumentRequest(
            document_id="report",
            passages=[
                PassageInput(content="The quarterly revenue was 42 million dollars."),
                PassageInput(
                    content="Figure 1 shows growth.",
                    type="image",
                    metadata={"has_image": True},
                    embedding=[0.1, 0.2],
                    embedding_model="clip",
                ),
            ],
            metadata={"title": "Q3 report"},
        )
    )

    assert record.passage_ids == ("report_0", "report_1")
    assert record.metadata["has_image"] is True
    assert record.metadata["title"] == "Q3 report"

    stored = index.get_passages("report")
    assert stored[0].embedding_model == "hash-fallback"
    assert stored[1].embedding_model == "clip"
    assert stored[1].type == "image"

    assert telemetry.counters == ["rag.documents.ingested"]
    assert telemetry.observations == [("rag.passages.ingested", 2.0)]

    stats = CollectionStats(index=index).execute()
    assert stats.total_documents == 1
    assert stats.total_passages == 2


def test_ingest_rejects_empty_document_id():
    uc = IngestDocuments(index=InMemoryVectorIndex(clock=FakeClock()))
    with pytest.raises(ValidationError):
        uc.execute(IngestDocumentRequest(document_id="  ", passages=[]))


def test_ingest_rejects_reingest_of_same_document():
    uc = IngestDocuments(index=InMemoryVectorIndex(clock=FakeClock()))
    req = IngestDocumentRequest(document_id="d", passages=[PassageInput(content="x")])
    uc.execute(req)
    with pytest.raises(ValidationError):
        uc.execute(req)


def test_document_without_passages_is_registered():
    index = InMemoryVectorIndex(clock=FakeClock())
    record = IngestDocuments(index=index).execute(
        IngestDocumentRequest(document_id="empty", passages=[])
    )
    assert record.chunk_count == 0
    assert index.stats().total_documents == 1
