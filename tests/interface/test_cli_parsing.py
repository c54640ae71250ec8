import json

import pytest

from grounded_rag.interface.cli import main as cli
from grounded_rag.interface.cli.main import build_parser, load_corpus, main

CORPUS = {
    "documents": [
        {
            "id": "report",
            "metadata": {"title": "Q3"},
            "passages": [
                {"content": "The quarterly revenue was 42 million dollars."},
                {"content": "Costs stayed flat.", "metadata": {"semantic_chunk": True}},
            ],
        },
        {
            "id": "memo",
            "passages": [{"content": "Office moves in May.", "embedding": [0.1, 0.2]}],
        },
    ]
}


@pytest.fixture
def corpus_file(tmp_path):
    path = tmp_path / "corpus.json"
    path.write_text(json.dumps(CORPUS), encoding="utf-8")
    return str(path)


@pytest.fixture(autouse=True)
def offline_env(monkeypatch):
    for key in ("EMBEDDING_PROVIDERS", "LLM_PROVIDERS", "TELEMETRY_ENABLED"):
        monkeypatch.delenv(key, raising=False)


def test_parser_accepts_repeated_doc_ids():
    args = build_parser().parse_args(
        ["--question", "q", "--doc-id", "a", "--doc-id", "b", "--k", "3"]
    )
    assert args.doc_ids == ["a", "b"]
    assert args.k == 3
    assert args.min_similarity is None


def test_load_corpus(corpus_file):
    requests = load_corpus(corpus_file)

    assert [r.document_id for r in requests] == ["report", "memo"]
    assert requests[0].metadata == {"title": "Q3"}
    assert requests[0].passages[1].metadata == {"semantic_chunk": True}
    assert requests[1].passages[0].embedding == [0.1, 0.2]


def test_load_corpus_accepts_plain_list(tmp_path):
    path = tmp_path / "list.json"
    path.write_text(json.dumps(CORPUS["documents"]), encoding="utf-8")
    assert len(load_corpus(str(path))) == 2


def test_cli_answers_question(corpus_file, capsys):
    code = main(["--corpus", corpus_file, "--question", "What was the revenue?"])

    out = capsys.readouterr().out
    assert code == 0
    assert "ANSWER (factual, via extractive):" in out
    assert "42" in out
    assert "[1] report_" in out
    assert "overall_score" in out


def test_cli_prints_stats(corpus_file, capsys):
    code = main(["--corpus", corpus_file, "--stats"])

    out = capsys.readouterr().out
    assert code == 0
    assert "Documents: 2" in out
    assert "Passages:  3" in out
    assert "hash-fallback: 2" in out
    assert "supplied: 1" in out


def test_cli_reports_validation_error(capsys):
    code = main(["--question", "   "])

    out = capsys.readouterr().out
    assert code == 2
    assert "[ERROR] ValidationError" in out


def test_cli_skips_duplicate_documents(tmp_path, capsys):
    path = tmp_path / "dup.json"
    doc = {"id": "d", "passages": [{"content": "x"}]}
    path.write_text(json.dumps([doc, doc]), encoding="utf-8")

    main(["--corpus", str(path), "--stats"])

    out = capsys.readouterr().out
    assert "[SKIP] d:" in out
    assert "Documents: 1" in out


def test_cli_without_question_does_nothing(monkeypatch, capsys):
    calls = []
    monkeypatch.setattr(cli, "build_engine", lambda settings: calls.append(settings) or None)
    assert main([]) == 0
    assert len(calls) == 1
    assert capsys.readouterr().out == ""
