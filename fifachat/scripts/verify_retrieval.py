"""
fifachat - Retrieval Check Script
===================================
CLI entry point that runs the retrieval half of the chat pipeline for
one query, without calling the chat model:
    1. Validate settings (fail-fast on a missing ``GOOGLE_API_KEY``).
    2. Initialise the Gemini embedder and the RAG API client.
    3. Run ``RetrievalOrchestrator.retrieve`` and print every document.
    4. Optionally print the assembled system prompt.

Exit status is 1 when retrieval is unavailable (embedding or search
failed), 0 otherwise, even when no documents were found.

Flags:
    --show-prompt   Print the system prompt the model would receive.
    --mode          Override RAG_API_SEARCH_MODE (text | vector).

Usage:
    python -m fifachat.scripts.verify_retrieval "What are ticket prices?"
    python -m fifachat.scripts.verify_retrieval "Where is the final?" --show-prompt
"""

from __future__ import annotations

import argparse
import asyncio
import sys
import time


# ── CLI Argument Parsing ───────────────────────────────────────────────

def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="verify_retrieval", description="fifachat — Run retrieval for a query against the configured RAG API.")
    parser.add_argument("query", help="User question to retrieve fifa.com content for.")
    parser.add_argument("--show-prompt", action="store_true", default=False, help="Print the assembled system prompt.")
    parser.add_argument("--mode", choices=("text", "vector"), default=None, help="Override the RAG API search payload mode.")
    return parser.parse_args(argv)


# ── Main Orchestration ─────────────────────────────────────────────────

async def _run(args: argparse.Namespace) -> int:
    import httpx

    from fifachat.config.settings import settings
    from fifachat.src.core.models import RetrievalUnavailable
    from fifachat.src.core.prompt_builder import build_system_prompt
    from fifachat.src.core.rag_engine import build_embedder
    from fifachat.src.core.retrieval import RetrievalOrchestrator
    from fifachat.src.database.rag_api import RagApiClient
    from fifachat.src.utils.logger import get_logger

    logger = get_logger(__name__)
    _print_header(settings, args.mode or settings.RAG_API_SEARCH_MODE)

    query = args.query.strip()
    if not query:
        print("  Empty query — the chat endpoint would skip retrieval.")
        return 0

    t_start = time.perf_counter()
    async with httpx.AsyncClient(timeout=settings.RAG_API_TIMEOUT) as http:
        orchestrator = RetrievalOrchestrator(build_embedder(), RagApiClient(http, mode=args.mode))
        outcome = await orchestrator.retrieve(query)
    elapsed_ms = (time.perf_counter() - t_start) * 1000
    logger.info("Retrieval finished in %.1fms", elapsed_ms)

    if isinstance(outcome, RetrievalUnavailable):
        print(f"  RETRIEVAL UNAVAILABLE ({outcome.stage}): {outcome.reason}")
        exit_code = 1
    else:
        _print_documents(outcome.documents)
        exit_code = 0

    if args.show_prompt:
        print("=" * 60)
        print("  SYSTEM PROMPT")
        print("=" * 60)
        print(build_system_prompt(outcome, query))
        print()

    print(f"  Elapsed: {elapsed_ms:.1f}ms")
    return exit_code


def main(argv: list[str] | None = None) -> None:
    args = _parse_args(argv)

    try:
        from fifachat.config.settings import settings  # noqa: F401
    except Exception as exc:
        print("\n[FATAL] Configuration error — check your .env file:\n")
        print(f"  {exc}")
        print()
        sys.exit(1)

    sys.exit(asyncio.run(_run(args)))


# ── Pretty-print helpers ──────────────────────────────────────────────

def _print_header(settings: object, mode: str) -> None:
    print()
    print("=" * 60)
    print("  FIFACHAT — Retrieval Check")
    print("=" * 60)
    print(f"  Environment  : {settings.ENV}")                     # type: ignore[attr-defined]
    print(f"  Embedding    : {settings.EMBEDDING_MODEL}")         # type: ignore[attr-defined]
    print(f"  RAG API      : {settings.RAG_API_URL} ({mode})")    # type: ignore[attr-defined]
    print(f"  Limit        : {settings.SEARCH_RESULTS_LIMIT}")    # type: ignore[attr-defined]
    print(f"  Threshold    : {settings.RELEVANCE_THRESHOLD}")     # type: ignore[attr-defined]
    print(f"  RAG API key  : {'set' if settings.RAG_API_KEY else 'not set'}")  # type: ignore[attr-defined]
    print("=" * 60)
    print()


def _print_documents(documents: list) -> None:
    if not documents:
        print("  No documents found — the no-answer prompt would be used.")
        print()
        return

    for i, doc in enumerate(documents, 1):
        score = f"{doc.score:.4f}" if doc.score is not None else "N/A"
        preview = doc.content.replace("\n", " ")[:200]
        print(f"--- Source {i} ---")
        print(f"  Title      : {doc.title}")
        print(f"  URL        : {doc.url}")
        print(f"  Score      : {score}")
        print(f"  Indexed at : {doc.fetched_at or 'unknown'}")
        print(f"  Doc ID     : {doc.document_id or 'N/A'}")
        print(f"  Content    : {preview}")
        print()


# ── Entry point ────────────────────────────────────────────────────────

if __name__ == "__main__":
    main()
