import math

import pytest

from grounded_rag.domain.services.hash_embedding import (
    HASH_EMBEDDING_DIM,
    hash_embedding,
    token_hash,
)
from grounded_rag.domain.similarity import cosine


def test_token_hash_matches_java_string_hash():
    assert token_hash("") == 0
    assert token_hash("a") == 97
    assert token_hash("ab") == 97 * 31 + 98
    # "polygenelubricants".hashCode() == Integer.MIN_VALUE
    assert token_hash("polygenelubricants") == -(2**31)


def test_hash_embedding_is_deterministic_and_unit_length():
    a = hash_embedding("The quarterly revenue was 42 million dollars.")
    b = hash_embedding("The quarterly revenue was 42 million dollars.")
    assert a == b
    assert len(a) == HASH_EMBEDDING_DIM
    assert math.sqrt(sum(x * x for x in a)) == pytest.approx(1.0)


def test_hash_embedding_empty_text_is_e0():
    vec = hash_embedding("")
    assert vec[0] == 1.0
    assert sum(vec) == 1.0


def test_hash_embedding_is_case_insensitive_for_tokens():
    # character features use the raw text, so vectors are close but not equal
    assert cosine(hash_embedding("Revenue Growth"), hash_embedding("revenue growth")) > 0.9


def test_hash_embedding_custom_dimension():
    assert len(hash_embedding("abc", dimension=16)) == 16


def test_similar_texts_score_higher_than_unrelated():
    base = hash_embedding("quarterly revenue was 42 million")
    near = hash_embedding("revenue was 42 million this quarter")
    far = hash_embedding("penguins live in antarctica")
    assert cosine(base, near) > cosine(base, far)
