"""Composition root: the only place that instantiates infrastructure adapters."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from grounded_rag.application.ports.clock_port import ClockPort
from grounded_rag.application.ports.embedding_port import TextEmbedder
from grounded_rag.application.ports.llm_port import AnswerGenerator
from grounded_rag.application.ports.telemetry_port import NoopTelemetry, TelemetryPort
from grounded_rag.application.services.answer_chain import AnswerChain
from grounded_rag.application.services.embedding_chain import EmbeddingChain
from grounded_rag.application.services.provider_guard import (
    GuardedAnswerGenerator,
    GuardedEmbedder,
)
from grounded_rag.application.use_cases.collection_stats import CollectionStats
from grounded_rag.application.use_cases.ingest_documents import IngestDocuments
from grounded_rag.application.use_cases.query_knowledge_base import QueryKnowledgeBase
from grounded_rag.config.settings import AppSettings
from grounded_rag.domain.services.reranking import RerankWeights
from grounded_rag.infrastructure.embeddings.hf_sentence_transformers import HFEmbeddingAdapter
from grounded_rag.infrastructure.embeddings.openai_embedding_adapter import (
    OpenAIEmbeddingAdapter,
)
from grounded_rag.infrastructure.llm.hf_inference_adapter import (
    HFModelProfile,
    HuggingFaceInferenceAdapter,
)
from grounded_rag.infrastructure.llm.openai_chat_adapter import OpenAIChatAdapter
from grounded_rag.infrastructure.time.system_clock import SystemClock
from grounded_rag.infrastructure.vectorstore.in_memory_index import InMemoryVectorIndex

logger = logging.getLogger(__name__)


def build_embedding_provider(name: str, settings: AppSettings) -> TextEmbedder | None:
    if name == "openai":
        return OpenAIEmbeddingAdapter(
            api_key=settings.openai_api_key,
            base_url=settings.openai_base_url or None,
            model=settings.openai_embedding_model,
            timeout_s=settings.provider_timeout_s,
        )
    if name in ("sentence-transformers", "huggingface"):
        return HFEmbeddingAdapter(
            model_name=settings.st_embedding_model,
            device=settings.embedding_device,
        )
    logger.warning("Unknown embedding provider %r ignored", name)
    return None


def build_embedding_chain(settings: AppSettings) -> EmbeddingChain:
    """Configured providers in order, each guarded, then the hash fallback."""
    providers = [
        GuardedEmbedder(p, timeout_s=settings.provider_timeout_s)
        for p in (build_embedding_provider(n, settings) for n in settings.embedding_providers)
        if p is not None
    ]
    return EmbeddingChain(providers)


def build_answer_generator(name: str, settings: AppSettings) -> AnswerGenerator | None:
    if name == "openai":
        return OpenAIChatAdapter(
            api_key=settings.openai_api_key,
            base_url=settings.openai_base_url or None,
            model=settings.llm_model,
            timeout_s=settings.llm_timeout_s,
        )
    if name == "huggingface":
        return HuggingFaceInferenceAdapter(
            api_key=settings.huggingface_api_key,
            base_url=settings.hf_inference_url,
            profiles=(
                HFModelProfile(settings.hf_primary_model, max_new_tokens=150, temperature=0.8),
                HFModelProfile(settings.hf_secondary_model, max_new_tokens=100, temperature=0.9),
            ),
            timeout_s=settings.llm_timeout_s,
        )
    logger.warning("Unknown LLM provider %r ignored", name)
    return None


def answer_guard_timeout(generator: AnswerGenerator, settings: AppSettings) -> float:
    """One LLM timeout per sequential model call the generator may make."""
    if isinstance(generator, HuggingFaceInferenceAdapter):
        return settings.llm_timeout_s * max(len(generator.profiles), 1)
    return settings.llm_timeout_s


def build_answer_chain(settings: AppSettings) -> AnswerChain:
    """Configured generators in order, each guarded, then the extractive fallback."""
    generators = [
        GuardedAnswerGenerator(g, timeout_s=answer_guard_timeout(g, settings))
        for g in (build_answer_generator(n, settings) for n in settings.llm_providers)
        if g is not None
    ]
    return AnswerChain(generators)


def build_rerank_weights(settings: AppSettings) -> RerankWeights:
    return RerankWeights(
        overlap=settings.rerank_weight_overlap,
        similarity=settings.rerank_weight_similarity,
        length=settings.rerank_weight_length,
        semantic_bonus=settings.rerank_semantic_bonus,
    )


def build_clock() -> ClockPort:
    """Build clock adapter for ingestion timestamps.

    Note:
        Tests should inject FakeClock or similar test doubles instead.
    """
    return SystemClock()


def build_telemetry(settings: AppSettings) -> TelemetryPort:
    """OpenTelemetryAdapter when enabled, otherwise a no-op sink."""
    if not settings.telemetry_enabled:
        return NoopTelemetry()

    from grounded_rag.infrastructure.telemetry.otel_adapter import (
        OpenTelemetryAdapter,
        OtelConfig,
    )

    cfg = OtelConfig(
        service_name="grounded-rag",
        otlp_endpoint=settings.otlp_endpoint or None,
        environment=settings.telemetry_environment,
        enable_console=False,
    )
    return OpenTelemetryAdapter(cfg)


@dataclass
class Engine:
    """Use cases wired around one shared index."""

    settings: AppSettings
    index: InMemoryVectorIndex
    ingest: IngestDocuments
    query: QueryKnowledgeBase
    stats: CollectionStats


def build_engine(settings: AppSettings | None = None, clock: ClockPort | None = None) -> Engine:
    """Wire embedding chain, index, answer chain and telemetry from settings.

    Example:
        engine = build_engine()
        engine.ingest.execute(IngestDocumentRequest(document_id="1", passages=[...]))
        result = engine.query.execute(QueryRequest(question="What was the revenue?"))
    """
    settings = settings or AppSettings()
    embedding = build_embedding_chain(settings)
    telemetry = build_telemetry(settings)
    index = InMemoryVectorIndex(embedding=embedding, clock=clock or build_clock())
    query = QueryKnowledgeBase(
        embedding=embedding,
        index=index,
        answers=build_answer_chain(settings),
        telemetry=telemetry,
        default_top_k=settings.top_k,
        default_min_similarity=settings.min_similarity,
        max_context_chars=settings.max_context_length,
        rerank_weights=build_rerank_weights(settings),
    )
    return Engine(
        settings=settings,
        index=index,
        ingest=IngestDocuments(index=index, telemetry=telemetry),
        query=query,
        stats=CollectionStats(index=index),
    )
