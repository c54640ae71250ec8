# grounded_rag/application/use_cases/query_knowledge_base.py
from __future__ import annotations

import logging
import time

from grounded_rag.application.dto.query_dto import QueryAnswer, QueryRequest, SourcePassage
from grounded_rag.application.ports.telemetry_port import NoopTelemetry, TelemetryPort
from grounded_rag.application.ports.vector_store_port import VectorIndexPort
from grounded_rag.application.services.answer_chain import (
    DEFAULT_MAX_CONTEXT_CHARS,
    AnswerChain,
    build_context,
)
from grounded_rag.application.services.embedding_chain import EmbeddingChain
from grounded_rag.application.services.retriever import Retrieval, Retriever
from grounded_rag.domain.errors import ValidationError
from grounded_rag.domain.models import QueryContext
from grounded_rag.domain.services.evidence_scoring import (
    ZERO_METRICS,
    relevance_score,
    score_evidence,
)
from grounded_rag.domain.services.query_understanding import analyze_query
from grounded_rag.domain.services.reranking import RerankWeights, rerank
from grounded_rag.domain.types import Result

logger = logging.getLogger(__name__)


def no_evidence_answer(question: str) -> str:
    return (
        f'I couldn\'t find specific information to answer your question: "{question}". '
        "This might be because:\n\n"
        "1. The document content doesn't contain information related to your query\n"
        "2. The similarity threshold is too high\n"
        "3. There might be an issue with the document processing\n\n"
        "Please try:\n"
        "- Rephrasing your question\n"
        "- Asking about specific topics mentioned in the document\n"
        "- Uploading additional relevant documents"
    )


class QueryKnowledgeBase:
    """
    Application Use-Case orchestrating the domain for querying the RAG KB.

    understand -> retrieve -> rerank -> generate -> score. Only an invalid
    request is reported as a failure; every other problem degrades the
    answer instead of failing it.
    """

    def __init__(
        self,
        embedding: EmbeddingChain,
        index: VectorIndexPort,
        answers: AnswerChain | None = None,
        telemetry: TelemetryPort | None = None,
        default_top_k: int = 5,
        default_min_similarity: float = 0.1,
        max_context_chars: int = DEFAULT_MAX_CONTEXT_CHARS,
        rerank_weights: RerankWeights | None = None,
    ) -> None:
        self.embedding = embedding
        self.index = index
        self.answers = answers or AnswerChain()
        self.telemetry = telemetry or NoopTelemetry()
        self.default_top_k = default_top_k
        self.default_min_similarity = default_min_similarity
        self.max_context_chars = max_context_chars
        self.rerank_weights = rerank_weights or RerankWeights()
        self.retriever = Retriever(embedding, index)

    def execute(self, req: QueryRequest) -> Result[QueryAnswer, ValidationError]:
        started = time.perf_counter()

        # 1) Validate
        question = (req.question or "").strip()
        if not question:
            self.telemetry.incr("rag.queries.total", {"status": "invalid"})
            return Result.failure(ValidationError("question must not be empty"))
        top_k = self.default_top_k if req.top_k is None else req.top_k
        if top_k <= 0:
            self.telemetry.incr("rag.queries.total", {"status": "invalid"})
            return Result.failure(ValidationError("top_k must be > 0"))
        min_similarity = (
            self.default_min_similarity if req.min_similarity is None else req.min_similarity
        )

        # 2) Understand the query
        ctx = analyze_query(question)
        logger.info("Processing query %r (intent=%s)", question, ctx.intent)

        # 3) Retrieve candidates (overfetch)
        retrieval = self._retrieve(ctx, req, min_similarity, top_k)
        if not retrieval.candidates:
            logger.info("No passages above %.3f for query %r", min_similarity, question)
            answer = self._no_evidence(ctx, retrieval.embedding_provider)
            self._record(started, "no_evidence", answer)
            return Result.success(answer)

        # 4) Rerank and keep top_k
        selected = rerank(ctx.keywords, retrieval.candidates, top_k, self.rerank_weights)

        # 5) Generate
        context = build_context(selected, self.max_context_chars)
        text, provider = self.answers.generate_with_provider(question, context, ctx.intent)

        # 6) Score
        answer = QueryAnswer(
            answer_text=text,
            source_passages=[SourcePassage.from_scored(s) for s in selected],
            relevance_score=relevance_score(selected),
            intent=ctx.intent,
            metrics=score_evidence(question, text, selected),
            context=context,
            query_context=ctx,
            embedding_provider=retrieval.embedding_provider,
            answer_provider=provider,
        )
        self._record(started, "answered", answer)
        return Result.success(answer)

    def _retrieve(
        self, ctx: QueryContext, req: QueryRequest, min_similarity: float, top_k: int
    ) -> Retrieval:
        try:
            return self.retriever.retrieve(ctx, req.document_ids, min_similarity, top_k)
        except Exception:  # noqa: BLE001
            logger.exception("Retrieval failed, answering without evidence")
            return Retrieval(candidates=[], embedding_provider="none")

    def _no_evidence(self, ctx: QueryContext, embedding_provider: str) -> QueryAnswer:
        return QueryAnswer(
            answer_text=no_evidence_answer(ctx.text),
            source_passages=[],
            relevance_score=0.0,
            intent=ctx.intent,
            metrics=ZERO_METRICS,
            context="",
            query_context=ctx,
            embedding_provider=embedding_provider,
            answer_provider=None,
        )

    def _record(self, started: float, status: str, answer: QueryAnswer) -> None:
        latency_ms = (time.perf_counter() - started) * 1000.0
        tags = {"status": status, "intent": answer.intent}
        self.telemetry.incr("rag.queries.total", tags)
        self.telemetry.observe("rag.query.latency_ms", latency_ms, tags)
        self.telemetry.observe("rag.chunks.retrieved", float(len(answer.source_passages)), tags)
        self.telemetry.observe("rag.metrics.overall_score", answer.metrics.overall_score, tags)
