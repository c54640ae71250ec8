"""Ordered embedding providers with a deterministic last resort."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from grounded_rag.application.ports.embedding_port import TextEmbedder
from grounded_rag.domain.services.hash_embedding import HASH_EMBEDDING_DIM, hash_embedding

logger = logging.getLogger(__name__)


class HashEmbedder:
    """Offline embedder backed by the deterministic hash embedding. Never fails."""

    name = "hash-fallback"

    def __init__(self, dimension: int = HASH_EMBEDDING_DIM) -> None:
        self.dimension = dimension

    def embed(self, text: str) -> list[float]:
        return hash_embedding(text, self.dimension)


class EmbeddingChain:
    """Tries each provider in priority order and commits to the first success.

    Providers are normally wrapped (see provider_guard) so failures surface
    as DomainErrors; any failure is logged as degraded mode and never
    propagated.
    """

    def __init__(
        self,
        providers: Sequence[TextEmbedder] = (),
        fallback: HashEmbedder | None = None,
    ) -> None:
        self.providers = list(providers)
        self.fallback = fallback or HashEmbedder()

    @property
    def name(self) -> str:
        return "chain"

    def embed_with_provider(self, text: str) -> tuple[list[float], str]:
        """Return the vector and the name of the provider that produced it."""
        for provider in self.providers:
            try:
                return provider.embed(text), provider.name
            except Exception as ex:  # noqa: BLE001
                logger.warning(
                    "Embedding provider %s degraded, falling back: %s", provider.name, ex
                )
        return self.fallback.embed(text), self.fallback.name

    def embed(self, text: str) -> list[float]:
        return self.embed_with_provider(text)[0]
