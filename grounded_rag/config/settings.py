"""Application settings with environment-driven configuration.

This is the ONLY place where environment variables are read. All other
layers receive settings via the composition root.
"""

import os
from dataclasses import dataclass, field


def _csv(name: str, default: str = "") -> tuple[str, ...]:
    raw = os.getenv(name, default)
    return tuple(p.strip().lower() for p in raw.split(",") if p.strip())


def _flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == "true"


@dataclass(frozen=True)
class AppSettings:
    """Application settings loaded from environment variables.

    Provider selection:
    - embedding_providers: ordered subset of "openai", "sentence-transformers"
    - llm_providers: ordered subset of "openai", "huggingface"
    The deterministic hash embedder and the extractive answer generator are
    always appended as last tiers, so an empty list means fully offline.
    """

    # ===== Provider Selection =====
    embedding_providers: tuple[str, ...] = field(
        default_factory=lambda: _csv("EMBEDDING_PROVIDERS")
    )
    llm_providers: tuple[str, ...] = field(default_factory=lambda: _csv("LLM_PROVIDERS"))
    provider_timeout_s: float = field(
        default_factory=lambda: float(os.getenv("PROVIDER_TIMEOUT_S", "10"))
    )
    llm_timeout_s: float = field(default_factory=lambda: float(os.getenv("LLM_TIMEOUT_S", "30")))

    # ===== OpenAI-compatible endpoints =====
    openai_api_key: str = field(default_factory=lambda: os.getenv("OPENAI_API_KEY", ""))
    openai_base_url: str = field(default_factory=lambda: os.getenv("OPENAI_BASE_URL", ""))
    # Empty string = api.openai.com
    openai_embedding_model: str = field(
        default_factory=lambda: os.getenv("OPENAI_EMBEDDING_MODEL", "text-embedding-ada-002")
    )
    llm_model: str = field(default_factory=lambda: os.getenv("LLM_MODEL", "gpt-3.5-turbo"))

    # ===== Local embedding model =====
    st_embedding_model: str = field(
        default_factory=lambda: os.getenv(
            "ST_EMBEDDING_MODEL", "sentence-transformers/all-MiniLM-L6-v2"
        )
    )
    embedding_device: str = field(default_factory=lambda: os.getenv("EMBEDDING_DEVICE", "cpu"))
    # Supported: "cpu" | "cuda" | "mps"

    # ===== HuggingFace Inference API =====
    huggingface_api_key: str = field(default_factory=lambda: os.getenv("HUGGINGFACE_API_KEY", ""))
    hf_inference_url: str = field(
        default_factory=lambda: os.getenv(
            "HF_INFERENCE_URL", "https://api-inference.huggingface.co/models"
        )
    )
    hf_primary_model: str = field(
        default_factory=lambda: os.getenv("HF_PRIMARY_MODEL", "microsoft/DialoGPT-small")
    )
    hf_secondary_model: str = field(
        default_factory=lambda: os.getenv("HF_SECONDARY_MODEL", "gpt2")
    )

    # ===== Retrieval =====
    min_similarity: float = field(
        default_factory=lambda: float(os.getenv("MIN_SIMILARITY_THRESHOLD", "0.1"))
    )
    top_k: int = field(default_factory=lambda: int(os.getenv("TOP_K_RESULTS", "5")))
    max_context_length: int = field(
        default_factory=lambda: int(os.getenv("MAX_CONTEXT_LENGTH", "4000"))
    )

    # ===== Reranking weights (empirical, see RerankWeights) =====
    rerank_weight_overlap: float = field(
        default_factory=lambda: float(os.getenv("RERANK_WEIGHT_OVERLAP", "0.4"))
    )
    rerank_weight_similarity: float = field(
        default_factory=lambda: float(os.getenv("RERANK_WEIGHT_SIMILARITY", "0.4"))
    )
    rerank_weight_length: float = field(
        default_factory=lambda: float(os.getenv("RERANK_WEIGHT_LENGTH", "0.1"))
    )
    rerank_semantic_bonus: float = field(
        default_factory=lambda: float(os.getenv("RERANK_SEMANTIC_BONUS", "0.1"))
    )

    # ===== Telemetry / Logging =====
    telemetry_enabled: bool = field(default_factory=lambda: _flag("TELEMETRY_ENABLED", "false"))
    otlp_endpoint: str = field(default_factory=lambda: os.getenv("OTLP_ENDPOINT", ""))
    # Empty string = no OTLP export
    telemetry_environment: str = field(
        default_factory=lambda: os.getenv("TELEMETRY_ENVIRONMENT", "production")
    )
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO").upper())
