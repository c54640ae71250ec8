import pytest

from grounded_rag.domain.models import Passage, ScoredPassage
from grounded_rag.domain.services.evidence_scoring import (
    NEUTRAL_METRICS,
    answer_relevancy,
    context_precision,
    context_recall,
    faithfulness,
    relevance_score,
    score_evidence,
)


def sp(content: str, similarity: float = 0.5) -> ScoredPassage:
    return ScoredPassage(
        passage=Passage(id="d_0", document_id="d", content=content), similarity=similarity
    )


def test_faithfulness():
    assert faithfulness("revenue was 42", ["The revenue was high"]) == pytest.approx(2 / 3)
    assert faithfulness("", ["anything"]) == 0.0


def test_answer_relevancy():
    assert answer_relevancy("what revenue", "revenue rose") == pytest.approx(0.5)
    assert answer_relevancy("", "x") == 0.0


def test_context_recall():
    assert context_recall("what revenue", ["revenue was 42"]) == pytest.approx(0.5)
    assert context_recall("q", []) == 0.0


def test_context_precision():
    assert context_precision("revenue", ["revenue up", "costs down"]) == pytest.approx(0.5)
    assert context_precision("revenue", []) == 0.0


def test_score_evidence_values_are_bounded():
    metrics = score_evidence(
        "What was the revenue?",
        "Based on the document content: The quarterly revenue was 42 million dollars.",
        [sp("The quarterly revenue was 42 million dollars.")],
    )
    for value in metrics.as_dict().values():
        assert 0.0 <= value <= 1.0


def test_score_evidence_falls_back_to_neutral_on_bad_input():
    metrics = score_evidence("q", "a", [object()])  # type: ignore[list-item]
    assert metrics == NEUTRAL_METRICS
    assert metrics.overall_score == pytest.approx(0.75)


def test_relevance_score():
    assert relevance_score([]) == 0.0
    # avg 0.5 + min(1/3, 0.2)
    assert relevance_score([sp("a", 0.5)]) == pytest.approx(0.7)
    assert relevance_score([sp("a", 0.95), sp("b", 0.95)]) == 1.0
