"""
fifachat - Retrieval Orchestrator
===================================
Turns a user query into a ``RetrievalOutcome``:

    1. Embed the query (``aembed_query``) when the RAG API runs in
       ``vector`` mode; ``text`` mode sends the raw query only.
    2. Search the RAG API with the query, embedding, result limit and
       relevance threshold.
    3. Normalise every hit into a ``RetrievedDocument`` and derive its
       public URL with ``classify_url``.  A hit that cannot be converted
       is logged and skipped.

Failure contract
----------------
Nothing raises past ``retrieve()``.  An embedding or search failure is
logged and returned as ``RetrievalUnavailable`` so the chat request can
still complete; the caller decides the fallback.

Usage:
    orchestrator = RetrievalOrchestrator(embedder, RagApiClient(http))
    outcome = await orchestrator.retrieve("What are ticket prices?")
"""

from __future__ import annotations

import time
from typing import Protocol, runtime_checkable

from fifachat.config.settings import settings
from fifachat.src.core.models import RetrievalOutcome, RetrievalResult, RetrievalUnavailable, RetrievedDocument
from fifachat.src.database.rag_api import RagApiClient, SearchHit
from fifachat.src.utils.logger import get_logger
from fifachat.src.utils.text_utils import classify_url, clean_text, content_hash, derive_title

logger = get_logger(__name__)


@runtime_checkable
class QueryEmbedder(Protocol):
    """Anything that can embed a query asynchronously (LangChain ``Embeddings`` qualify)."""

    async def aembed_query(self, text: str) -> list[float]: ...


class RetrievalOrchestrator:
    """
    Embeds a query, searches the RAG API and normalises the hits.

    Parameters
    ----------
    embedder
        A ``QueryEmbedder`` such as ``GoogleGenerativeAIEmbeddings``.
    fetcher
        A ``RagApiClient`` bound to the shared HTTP client.
    limit
        Maximum documents kept.  Defaults to ``settings.SEARCH_RESULTS_LIMIT``.
    score_threshold
        Minimum relevance score.  Defaults to ``settings.RELEVANCE_THRESHOLD``.
    """

    __slots__ = ("_embedder", "_fetcher", "_limit", "_threshold")

    def __init__(self, embedder: QueryEmbedder, fetcher: RagApiClient, limit: int | None = None, score_threshold: float | None = None) -> None:
        self._embedder = embedder
        self._fetcher = fetcher
        self._limit: int = limit or settings.SEARCH_RESULTS_LIMIT
        self._threshold: float = score_threshold if score_threshold is not None else settings.RELEVANCE_THRESHOLD


    async def retrieve(self, query: str) -> RetrievalOutcome:
        """Run embedding + search for a non-empty query; never raises."""
        t_start = time.perf_counter()

        # ── 1. Embed (vector mode only) ───────────────────────────────
        embedding: list[float] | None = None
        if self._fetcher.mode == "vector":
            try:
                embedding = await self._embedder.aembed_query(query)
            except Exception as exc:
                logger.exception("[RETRIEVAL] Embedding generation failed.")
                return RetrievalUnavailable(stage="embedding", reason=str(exc))

            embed_ms = (time.perf_counter() - t_start) * 1000
            logger.debug("[RETRIEVAL] Embedding: %d dimensions in %.1fms", len(embedding), embed_ms)

        # ── 2. Search ─────────────────────────────────────────────────
        try:
            hits = await self._fetcher.search(query, embedding, limit=self._limit, score_threshold=self._threshold)
        except Exception as exc:
            logger.exception("[RETRIEVAL] Content fetch failed.")
            return RetrievalUnavailable(stage="search", reason=str(exc))

        # ── 3. Normalise ──────────────────────────────────────────────
        documents = self._normalise(hits)
        total_ms = (time.perf_counter() - t_start) * 1000
        logger.info("[RETRIEVAL] %d hit(s) → %d document(s) in %.1fms", len(hits), len(documents), total_ms)
        for doc in documents:
            logger.debug("[RETRIEVAL] id=%s url=%s score=%s sha256=%s", doc.document_id, doc.url, doc.score, doc.content_hash[:12])

        return RetrievalResult(documents=documents)


    def _normalise(self, hits: list[SearchHit]) -> list[RetrievedDocument]:
        """Drop malformed, empty and below-threshold hits; keep at most ``limit`` documents."""
        documents: list[RetrievedDocument] = []
        for position, hit in enumerate(hits):
            try:
                doc = self.to_document(hit)
            except (TypeError, ValueError, OverflowError) as exc:
                logger.warning("[RETRIEVAL] Skipping malformed hit #%d: %s", position, exc)
                continue
            if doc is None:
                continue
            if doc.score is not None and doc.score < self._threshold:
                continue
            documents.append(doc)
            if len(documents) >= self._limit:
                break
        return documents


    @staticmethod
    def to_document(hit: SearchHit) -> RetrievedDocument | None:
        """
        Convert one raw RAG API hit into a ``RetrievedDocument``.

        Metadata may sit at the top level of the hit or under ``payload`` /
        ``metadata``.  Returns ``None`` for hits without text.  A missing
        index timestamp stays ``None``; a ``url`` is only trusted when it
        points at the public site.

        Raises
        ------
        TypeError, ValueError, OverflowError
            When a field holds a value that cannot be converted
            (e.g. a score too large for a float).
        """
        payload = hit.get("payload") or hit.get("metadata") or {}
        if not isinstance(payload, dict):
            payload = {}

        raw_text = hit.get("text") or hit.get("content") or payload.get("text") or payload.get("content") or ""
        content = clean_text(str(raw_text))
        if not content:
            return None

        document_id = str(hit.get("id") or hit.get("document_id") or payload.get("id") or "")
        title = str(payload.get("title") or hit.get("title") or derive_title(content))
        fetched_at = payload.get("fetched_at") or payload.get("indexed_at") or hit.get("fetched_at") or hit.get("indexed_at")
        source_url = payload.get("url") or hit.get("url")

        raw_score = hit.get("score", hit.get("similarity"))
        score = float(raw_score) if isinstance(raw_score, (int, float)) and not isinstance(raw_score, bool) else None

        return RetrievedDocument(
            url=classify_url(document_id, content, source_url=str(source_url) if source_url else None),
            title=title,
            content=content,
            fetched_at=str(fetched_at) if fetched_at else None,
            score=score,
            document_id=document_id,
            content_hash=content_hash(content),
        )
