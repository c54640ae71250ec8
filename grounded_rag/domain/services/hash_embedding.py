"""Deterministic offline embedding.

Last tier of the embedding chain: no model, no network, identical output for
identical input, so similarity scores stay reproducible without providers.
"""

from __future__ import annotations

from grounded_rag.domain.similarity import l2_normalize

HASH_EMBEDDING_DIM = 384
CHAR_FEATURE_LIMIT = 100
CHAR_FEATURE_WEIGHT = 0.1


def token_hash(token: str) -> int:
    """Java-style string hash (h = h*31 + code) wrapped to a signed 32-bit int."""
    h = 0
    for ch in token:
        h = (h * 31 + ord(ch)) & 0xFFFFFFFF
    if h & 0x80000000:
        h -= 1 << 32
    return h


def hash_embedding(text: str, dimension: int = HASH_EMBEDDING_DIM) -> list[float]:
    """Bag-of-hashed-words vector plus a light character-position signal.

    Returns:
        Unit-length vector of ``dimension`` floats. Text without any content
        maps to the unit vector e0.
    """
    vec = [0.0] * dimension
    for token in (text or "").lower().split():
        vec[abs(token_hash(token)) % dimension] += 1.0

    for i, ch in enumerate((text or "")[:CHAR_FEATURE_LIMIT]):
        vec[(ord(ch) * i) % dimension] += CHAR_FEATURE_WEIGHT

    if not any(vec):
        vec[0] = 1.0
        return vec
    return l2_normalize(vec)
