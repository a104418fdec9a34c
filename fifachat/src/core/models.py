"""
fifachat - Data Models
=======================
Pydantic models shared by the retrieval pipeline and the chat endpoint.

Retrieval
---------
``RetrievedDocument``     one normalised search hit with provenance.
``RetrievalResult``       the documents found for a query.
``RetrievalUnavailable``  explicit marker for a failed embedding / search.

``RetrievalOutcome`` is the union returned by the orchestrator; callers
must handle both branches.

Chat request (AI SDK UI messages)
---------------------------------
``UIMessagePart``, ``UIMessage``, ``ChatRequest``.
"""

from __future__ import annotations

from typing import Literal, Union

from pydantic import BaseModel, ConfigDict, Field


# ══════════════════════════════════════════════════════════════════════
#  RETRIEVAL
# ══════════════════════════════════════════════════════════════════════


class RetrievedDocument(BaseModel):
    """A fifa.com document returned by the RAG API, ready for the prompt."""

    model_config = ConfigDict(frozen=True)

    url: str
    title: str
    content: str
    fetched_at: str | None = None
    score: float | None = None
    document_id: str = ""
    content_hash: str = ""


class RetrievalResult(BaseModel):
    """Documents retrieved for one query, in the fetcher's ranking order."""

    model_config = ConfigDict(frozen=True)

    documents: list[RetrievedDocument] = Field(default_factory=list)

    @property
    def has_results(self) -> bool:
        return len(self.documents) > 0


class RetrievalUnavailable(BaseModel):
    """Retrieval could not run for this request (embedding or search failed)."""

    model_config = ConfigDict(frozen=True)

    stage: Literal["embedding", "search"]
    reason: str = ""


RetrievalOutcome = Union[RetrievalResult, RetrievalUnavailable]


# ══════════════════════════════════════════════════════════════════════
#  CHAT REQUEST
# ══════════════════════════════════════════════════════════════════════


class UIMessagePart(BaseModel):
    """One part of a UI message; only ``text`` parts carry model input."""

    model_config = ConfigDict(extra="allow")

    type: str
    text: str | None = None


class UIMessage(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str | None = None
    role: Literal["system", "user", "assistant"]
    parts: list[UIMessagePart] = Field(default_factory=list)

    def text(self) -> str:
        """Concatenate the text parts with single spaces."""
        return " ".join(part.text for part in self.parts if part.type == "text" and part.text)


class ChatRequest(BaseModel):
    """Body of ``POST /api/chat``."""

    model_config = ConfigDict(extra="allow")

    messages: list[UIMessage] = Field(..., min_length=1)
