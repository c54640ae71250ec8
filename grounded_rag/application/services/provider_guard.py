"""Uniform timeout + catch wrapper for external providers.

Every embedding and generation provider is wrapped before it joins a
fallback chain. A wrapped provider either returns a validated result or
raises a DomainError, and the chain moves on to the next tier.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeout
from dataclasses import dataclass
from typing import TypeVar

from grounded_rag.application.ports.embedding_port import TextEmbedder
from grounded_rag.application.ports.llm_port import AnswerGenerator
from grounded_rag.domain.errors import (
    DomainError,
    EmbeddingError,
    LLMError,
    ProviderTimeoutError,
)
from grounded_rag.domain.similarity import coerce_vector

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Shared by all guards; a timed-out call keeps its worker until the provider's
# own HTTP timeout fires, so the pool is sized above the number of tiers.
_EXECUTOR = ThreadPoolExecutor(max_workers=16, thread_name_prefix="provider")


def run_with_timeout(provider: str, fn: Callable[..., T], timeout_s: float, *args: object) -> T:
    """Run ``fn(*args)`` and give up after ``timeout_s`` seconds.

    Raises:
        ProviderTimeoutError: the call did not finish in time
        Exception: whatever ``fn`` raised
    """
    future = _EXECUTOR.submit(fn, *args)
    try:
        return future.result(timeout=timeout_s)
    except FutureTimeout as ex:
        future.cancel()
        raise ProviderTimeoutError(provider, timeout_s) from ex


@dataclass
class GuardedEmbedder:
    """TextEmbedder wrapper: bounded time, domain errors only, validated vectors."""

    inner: TextEmbedder
    timeout_s: float = 10.0

    @property
    def name(self) -> str:
        return self.inner.name

    def embed(self, text: str) -> list[float]:
        try:
            raw = run_with_timeout(self.name, self.inner.embed, self.timeout_s, text)
        except DomainError:
            raise
        except Exception as ex:  # noqa: BLE001
            raise EmbeddingError(f"{self.name} failed: {ex}") from ex
        vector = coerce_vector(raw)
        if vector is None:
            raise EmbeddingError(f"{self.name} returned a malformed embedding")
        return list(vector)


@dataclass
class GuardedAnswerGenerator:
    """AnswerGenerator wrapper: bounded time, domain errors only, non-empty answers."""

    inner: AnswerGenerator
    timeout_s: float = 30.0

    @property
    def name(self) -> str:
        return self.inner.name

    def generate(self, query: str, context: str, intent: str) -> str:
        try:
            text = run_with_timeout(
                self.name, self.inner.generate, self.timeout_s, query, context, intent
            )
        except DomainError:
            raise
        except Exception as ex:  # noqa: BLE001
            raise LLMError(f"{self.name} failed: {ex}") from ex
        if not isinstance(text, str) or not text.strip():
            raise LLMError(f"{self.name} returned an empty answer")
        return text.strip()
