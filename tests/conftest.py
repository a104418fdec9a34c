"""Shared fixtures and in-memory fakes for the fifachat test suite."""

import json
import os

# Settings are instantiated at import time; provide the required key first.
os.environ.setdefault("GOOGLE_API_KEY", "test-google-key")
os.environ.setdefault("RAG_API_URL", "http://rag-api.test")
os.environ.setdefault("ENV", "prod")

import httpx
from langchain_core.messages import AIMessageChunk

from fifachat.src.database.rag_api import RagApiClient

RAG_SEARCH_URL = "http://rag-api.test/search"


class FakeEmbedder:
    """Async query embedder returning a fixed vector (or raising)."""

    def __init__(self, vector=None, error=None):
        self.vector = vector if vector is not None else [0.1, 0.2, 0.3]
        self.error = error
        self.calls = []

    async def aembed_query(self, text):
        self.calls.append(text)
        if self.error is not None:
            raise self.error
        return self.vector


class FakeChatModel:
    """Streams preset chunks; records the message list of every call."""

    def __init__(self, chunks=None, error=None, fail_after=None):
        self.chunks = chunks if chunks is not None else ["Hello", " there"]
        self.error = error
        self.fail_after = fail_after
        self.calls = []

    async def astream(self, input, config=None, **kwargs):
        self.calls.append(list(input))
        if self.error is not None and self.fail_after is None:
            raise self.error
        for i, chunk in enumerate(self.chunks):
            if self.fail_after is not None and i == self.fail_after:
                raise self.error
            yield AIMessageChunk(content=chunk)


class FakeRagApi:
    """``httpx.MockTransport`` handler recording search requests."""

    def __init__(self, body=None, status_code=200, error=None):
        self.body = body if body is not None else []
        self.status_code = status_code
        self.error = error
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error(f"{self.error.__name__} raised by fake", request=request)
        return httpx.Response(self.status_code, json=self.body)

    @property
    def payloads(self):
        return [json.loads(r.content) for r in self.requests]


def make_rag_client(handler, **kwargs) -> RagApiClient:
    http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return RagApiClient(http, base_url="http://rag-api.test", **kwargs)


def ticket_hit():
    return {
        "id": "doc-tickets-1",
        "score": 0.91,
        "payload": {
            "title": "FIFA World Cup 26 tickets",
            "text": "Tickets for FIFA World Cup 26 start at 60 USD per seat.",
            "fetched_at": "2025-10-01T12:00:00Z",
        },
    }


