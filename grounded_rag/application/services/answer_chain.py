"""Answer generation fallback chain.

Tiers are tried in order; the extractive generator closes the chain and
needs no network, so the chain always produces an answer.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from grounded_rag.application.ports.llm_port import AnswerGenerator
from grounded_rag.domain.models import ScoredPassage
from grounded_rag.domain.services.extractive_answer import SEGMENT_SEPARATOR, extractive_answer
from grounded_rag.domain.services.query_understanding import extract_keywords

logger = logging.getLogger(__name__)

DEFAULT_MAX_CONTEXT_CHARS = 4000


def build_context(
    passages: Sequence[ScoredPassage], max_chars: int = DEFAULT_MAX_CONTEXT_CHARS
) -> str:
    """Selected passages joined by blank lines, cut at ``max_chars``."""
    context = SEGMENT_SEPARATOR.join(p.passage.content for p in passages)
    return context[:max_chars]


class ExtractiveAnswerGenerator:
    name = "extractive"

    def generate(self, query: str, context: str, intent: str) -> str:
        return extractive_answer(query, context, intent, extract_keywords(query))


class AnswerChain:
    def __init__(
        self,
        generators: Sequence[AnswerGenerator] = (),
        fallback: ExtractiveAnswerGenerator | None = None,
    ) -> None:
        self.generators = list(generators)
        self.fallback = fallback or ExtractiveAnswerGenerator()

    def generate_with_provider(self, query: str, context: str, intent: str) -> tuple[str, str]:
        """Return the answer and the name of the tier that produced it."""
        for generator in self.generators:
            try:
                return generator.generate(query, context, intent), generator.name
            except Exception as ex:  # noqa: BLE001
                logger.warning("Answer generator %s degraded, falling back: %s", generator.name, ex)
        return self.fallback.generate(query, context, intent), self.fallback.name

    def generate(self, query: str, context: str, intent: str) -> str:
        return self.generate_with_provider(query, context, intent)[0]
