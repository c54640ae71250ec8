# grounded_rag/domain/services/query_understanding.py
# Pure domain services: no I/O, deterministic, no external libraries.
"""Heuristic query understanding: intent, keywords, entities, expansion.

Intent rules are evaluated in table order and the first match wins, so a
query carrying cues of several intents resolves to the earliest one.
"""

from __future__ import annotations

import re

from grounded_rag.domain.models import DEFAULT_INTENT, Intent, QueryContext

INTENT_RULES: tuple[tuple[Intent, re.Pattern[str]], ...] = (
    (
        "factual",
        re.compile(r"what (?:is|are|was|were)|define|explain|tell me about|describe", re.I),
    ),
    ("comparison", re.compile(r"compare|versus|vs|difference between|contrast", re.I)),
    ("procedural", re.compile(r"how to|steps|process|procedure|method", re.I)),
    ("analytical", re.compile(r"analyze|analysis|insights|trends|patterns", re.I)),
    ("numerical", re.compile(r"statistics|numbers|data|metrics|calculate|count", re.I)),
    ("visual", re.compile(r"chart|graph|table|image|figure|diagram|plot", re.I)),
    ("temporal", re.compile(r"when|date|time|schedule|timeline|history", re.I)),
    ("location", re.compile(r"where|location|place|address|site", re.I)),
    ("causal", re.compile(r"why|cause|effect|because|reason", re.I)),
    ("list", re.compile(r"list|enumerate|examples|instances|items", re.I)),
)

STOP_WORDS = frozenset(
    {
        "the", "a", "an", "and", "or", "but", "in", "on", "at", "to", "for", "of",
        "with", "by", "is", "are", "was", "were", "be", "been", "have", "has", "had",
        "do", "does", "did", "will", "would", "could", "should", "may", "might", "can",
        "this", "that", "these", "those",
    }
)  # fmt: skip

MAX_KEYWORDS = 10
MIN_KEYWORD_LEN = 3

_ENTITY_RE = re.compile(r"^(?:[A-Z][a-z]+|[A-Z]{2,})")


def classify_intent(query: str) -> Intent:
    for intent, pattern in INTENT_RULES:
        if pattern.search(query):
            return intent
    return DEFAULT_INTENT


def extract_keywords(query: str) -> list[str]:
    """Lowercased content words in query order, at most MAX_KEYWORDS."""
    words = [
        w for w in query.lower().split() if len(w) >= MIN_KEYWORD_LEN and w not in STOP_WORDS
    ]
    return words[:MAX_KEYWORDS]


def extract_entities(query: str) -> list[str]:
    """Capitalized or all-caps tokens. A heuristic, not an NLP parse."""
    return [w for w in query.split() if _ENTITY_RE.match(w)]


def expand_query(query: str, keywords: list[str]) -> str:
    return query + " " + " ".join(keywords)


def analyze_query(query: str) -> QueryContext:
    keywords = extract_keywords(query)
    return QueryContext(
        text=query,
        intent=classify_intent(query),
        keywords=tuple(keywords),
        entities=tuple(extract_entities(query)),
        expanded_text=expand_query(query, keywords),
    )
