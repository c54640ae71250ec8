"""CLI for the grounded RAG engine: load a pre-chunked corpus, then ask one question."""

import argparse
import json
import logging
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from grounded_rag.application.dto.ingest_dto import IngestDocumentRequest, PassageInput
from grounded_rag.application.dto.query_dto import QueryRequest
from grounded_rag.config.composition import Engine, build_engine
from grounded_rag.config.logging_setup import setup_logging
from grounded_rag.config.settings import AppSettings
from grounded_rag.domain.errors import DomainError

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="grounded-rag", description="Answer a question from pre-chunked documents."
    )
    parser.add_argument("--corpus", help="JSON file with documents and their passages")
    parser.add_argument("--question")
    parser.add_argument(
        "--doc-id", action="append", dest="doc_ids", help="Restrict to document (repeatable)"
    )
    parser.add_argument("--min-similarity", type=float, default=None)
    parser.add_argument("--k", type=int, default=None, help="Passages kept after reranking")
    parser.add_argument("--stats", action="store_true", help="Print index statistics")
    return parser


def load_corpus(path: str) -> list[IngestDocumentRequest]:
    """Read documents from JSON.

    Accepts a list of documents or {"documents": [...]}; each document is
    {"id", "metadata"?, "passages": [{"content", "type"?, "metadata"?,
    "embedding"?, "embedding_model"?}]}.
    """
    raw: Any = json.loads(Path(path).read_text(encoding="utf-8"))
    docs = raw.get("documents", []) if isinstance(raw, dict) else raw
    requests = []
    for doc in docs:
        passages = [
            PassageInput(
                content=str(p.get("content", "")),
                type=p.get("type", "text"),
                metadata=p.get("metadata") or {},
                embedding=p.get("embedding"),
                embedding_model=p.get("embedding_model"),
            )
            for p in doc.get("passages", [])
        ]
        requests.append(
            IngestDocumentRequest(
                document_id=str(doc.get("id", "")),
                passages=passages,
                metadata=doc.get("metadata") or {},
            )
        )
    return requests


def ingest_corpus(engine: Engine, path: str) -> int:
    ingested = 0
    for req in load_corpus(path):
        try:
            engine.ingest.execute(req)
            ingested += 1
        except DomainError as ex:
            print(f"[SKIP] {req.document_id}: {ex}")
    return ingested


def print_stats(engine: Engine) -> None:
    stats = engine.stats.execute()
    print(f"Documents: {stats.total_documents}")
    print(f"Passages:  {stats.total_passages}")
    print(f"Avg passages/document: {stats.average_passages_per_document:.2f}")
    for provider, count in sorted(stats.embedding_provider_usage_counts.items()):
        print(f"  {provider}: {count}")


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    settings = AppSettings()
    setup_logging(settings.log_level)

    engine = build_engine(settings)
    if args.corpus:
        count = ingest_corpus(engine, args.corpus)
        logger.info("Loaded %d documents from %s", count, args.corpus)

    if args.stats:
        print_stats(engine)

    if not args.question:
        return 0

    req = QueryRequest(
        question=args.question,
        document_ids=args.doc_ids,
        min_similarity=args.min_similarity,
        top_k=args.k,
    )
    result = engine.query.execute(req)

    if not result.ok or result.value is None:
        err = result.error
        print(f"\n[ERROR] {type(err).__name__}: {err}")
        return 2

    answer = result.value
    print("\n" + "=" * 80)
    print(f"ANSWER ({answer.intent}, via {answer.answer_provider or 'none'}):")
    print("=" * 80)
    print(answer.answer_text)
    print("\n" + "=" * 80)
    print("SOURCES:")
    print("=" * 80)
    for i, s in enumerate(answer.source_passages, 1):
        print(f"[{i}] {s.passage_id} (similarity={s.similarity:.3f})")
    print("\n" + "=" * 80)
    print(f"RELEVANCE: {answer.relevance_score:.3f}")
    for name, value in answer.metrics.as_dict().items():
        print(f"  {name}: {value:.3f}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
