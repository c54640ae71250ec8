# grounded_rag/domain/services/extractive_answer.py
# Pure domain services: no I/O, deterministic, no external libraries.
"""Network-free answer synthesis: pick the best context segment, apply an intent template."""

from __future__ import annotations

import re
from collections.abc import Sequence

from grounded_rag.domain.services.reranking import keyword_overlap

ANSWER_CHAR_BUDGET = 300
NUMERIC_CONTEXT_BUDGET = 200
MAX_NUMBERS = 5
SEGMENT_SEPARATOR = "\n\n"

_NUMBER_RE = re.compile(r"\d+(?:\.\d+)?")

_TEMPLATES: dict[str, str] = {
    "factual": "Based on the document content: {segment}",
    "comparison": (
        "To compare the requested information, here are the relevant details "
        "from the documents: {segment}"
    ),
    "procedural": "Here are the steps or process details: {segment}",
}
_DEFAULT_TEMPLATE = "Here's what I found in the documents regarding your question: {segment}"
_NUMERIC_TEMPLATE = (
    "The numerical data from the documents includes: {numbers}. Full context: {segment}"
)
_NUMERIC_NO_NUMBERS_TEMPLATE = "Here's the relevant information: {segment}"


def truncate(text: str, budget: int) -> str:
    return text[:budget] + ("..." if len(text) > budget else "")


def insufficient_information(query: str) -> str:
    return (
        f'I don\'t have enough information to answer your question: "{query}". '
        "Please try uploading relevant documents first."
    )


def split_segments(context: str) -> list[str]:
    return [s for s in context.split(SEGMENT_SEPARATOR) if s.strip()]


def best_segment(segments: Sequence[str], keywords: Sequence[str]) -> str:
    """First segment with the highest keyword overlap."""
    best, best_score = segments[0], 0.0
    for segment in segments:
        score = keyword_overlap(keywords, segment)
        if score > best_score:
            best, best_score = segment, score
    return best


def extractive_answer(query: str, context: str, intent: str, keywords: Sequence[str]) -> str:
    segments = split_segments(context)
    if not segments:
        return insufficient_information(query)

    segment = best_segment(segments, keywords)

    if intent == "numerical":
        numbers = _NUMBER_RE.findall(segment)
        if numbers:
            return _NUMERIC_TEMPLATE.format(
                numbers=", ".join(numbers[:MAX_NUMBERS]),
                segment=truncate(segment, NUMERIC_CONTEXT_BUDGET),
            )
        return _NUMERIC_NO_NUMBERS_TEMPLATE.format(segment=truncate(segment, ANSWER_CHAR_BUDGET))

    template = _TEMPLATES.get(intent, _DEFAULT_TEMPLATE)
    return template.format(segment=truncate(segment, ANSWER_CHAR_BUDGET))
