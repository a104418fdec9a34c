"""
fifachat - RAG API Client (Content Fetcher)
=============================================
Async HTTP client for the external RAG API that owns the fifa.com
document index.  This is the only module that talks to that service.

Design decisions:
  • **Dependency Injection** — the ``httpx.AsyncClient`` is injected, so
    the FastAPI lifespan can share one connection pool across requests
    and tests can pass a client built on ``httpx.MockTransport``.
  • **Two payload variants** — ``"text"`` mode lets the RAG API embed the
    query itself; ``"vector"`` mode sends our own query embedding plus
    domain / language filters.
  • **One error type** — transport errors, non-2xx statuses and
    malformed bodies all surface as ``ContentFetcherError``.

Usage:
    async with httpx.AsyncClient() as http:
        client = RagApiClient(http)
        hits = await client.search("ticket prices", embedding, limit=5, score_threshold=0.5)
"""

from __future__ import annotations

import time
from typing import Any

import httpx

from fifachat.config.settings import settings
from fifachat.src.utils.logger import get_logger

logger = get_logger(__name__)

# ── Type Aliases ──────────────────────────────────────────────────────
SearchHit = dict[str, Any]


class ContentFetcherError(RuntimeError):
    """The RAG API could not be reached or returned an unusable response."""


class RagApiClient:
    """
    Thin wrapper around the RAG API search endpoint.

    Parameters
    ----------
    http_client
        Shared ``httpx.AsyncClient``.
    base_url
        Override the RAG API base URL.  Defaults to ``settings.RAG_API_URL``.
    api_key
        Override the bearer token.  Defaults to ``settings.RAG_API_KEY``.
    mode
        ``"text"`` or ``"vector"``.  Defaults to ``settings.RAG_API_SEARCH_MODE``.
    """

    __slots__ = ("_http", "_base_url", "_api_key", "_mode", "_timeout")

    def __init__(self, http_client: httpx.AsyncClient, base_url: str | None = None, api_key: str | None = None, mode: str | None = None, timeout: float | None = None) -> None:
        self._http = http_client
        self._base_url: str = (base_url or settings.RAG_API_URL).rstrip("/")
        if api_key is None and settings.RAG_API_KEY is not None:
            api_key = settings.RAG_API_KEY.get_secret_value()
        self._api_key: str | None = api_key
        self._mode: str = mode or settings.RAG_API_SEARCH_MODE
        self._timeout: float = timeout if timeout is not None else settings.RAG_API_TIMEOUT


    @property
    def mode(self) -> str:
        return self._mode


    @property
    def search_url(self) -> str:
        return f"{self._base_url}{settings.RAG_API_SEARCH_PATH}"


    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"
        return headers


    def build_payload(self, query: str, embedding: list[float] | None, limit: int, score_threshold: float) -> dict[str, Any]:
        """Build the search request body for the configured mode."""
        if self._mode == "vector":
            if not embedding:
                raise ValueError("Vector search mode requires a query embedding.")
            return {
                "query_embedding": embedding,
                "query_text": query,
                "filters": {"domain": settings.SEARCH_DOMAIN, "language": settings.SEARCH_LANGUAGE},
                "top_k": limit,
                "similarity_threshold": score_threshold,
                "include_metadata": True,
            }
        return {"query": query, "limit": limit, "score_threshold": score_threshold}


    async def search(self, query: str, embedding: list[float] | None, limit: int, score_threshold: float) -> list[SearchHit]:
        """
        Run a semantic search against the RAG API.

        Returns
        -------
        list[SearchHit]
            Raw hits in the RAG API's ranking order.

        Raises
        ------
        ContentFetcherError
            On network errors, non-2xx responses, or an unexpected body.
        """
        payload = self.build_payload(query, embedding, limit, score_threshold)
        t_start = time.perf_counter()

        try:
            response = await self._http.post(self.search_url, json=payload, headers=self._headers(), timeout=self._timeout)
            response.raise_for_status()
            body = response.json()
        except httpx.HTTPStatusError as exc:
            logger.error("[RAG-API] Search returned HTTP %d from %s", exc.response.status_code, self.search_url)
            raise ContentFetcherError(f"RAG API returned HTTP {exc.response.status_code}") from exc
        except httpx.HTTPError as exc:
            logger.error("[RAG-API] Search request to %s failed: %s", self.search_url, exc)
            raise ContentFetcherError(f"RAG API request failed: {exc}") from exc
        except ValueError as exc:
            logger.error("[RAG-API] Search response is not valid JSON: %s", exc)
            raise ContentFetcherError("RAG API returned invalid JSON") from exc

        hits = self._extract_hits(body)
        elapsed_ms = (time.perf_counter() - t_start) * 1000
        logger.info("[RAG-API] %s search returned %d hit(s) in %.1fms", self._mode, len(hits), elapsed_ms)
        return hits


    @staticmethod
    def _extract_hits(body: Any) -> list[SearchHit]:
        """Accept either a bare list of hits or an object with a ``results`` list."""
        if isinstance(body, dict):
            body = body.get("results", body.get("documents"))
        if not isinstance(body, list):
            raise ContentFetcherError("RAG API response has no result list")
        return [hit for hit in body if isinstance(hit, dict)]


    def __repr__(self) -> str:
        return f"RagApiClient(url='{self.search_url}', mode='{self._mode}')"
