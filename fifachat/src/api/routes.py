"""
fifachat - API Routes
======================
  - POST /api/chat    → stream a retrieval-augmented reply (UI message stream)
  - GET  /api/health  → configuration summary for uptime checks

Route handlers are thin controllers: they validate the request, delegate
to ``ChatService`` and format the response.  Shared clients come from
``app.state`` (created in the lifespan in ``fifachat.src.main``) through
the ``get_chat_service`` dependency.

Error mapping
-------------
- Body not JSON / fails validation   → 500 plain text
- Model fails before its first chunk → 500 plain text
- Retrieval failures never reach this layer (see ``RetrievalOrchestrator``)
"""

from __future__ import annotations

import json

from fastapi import APIRouter, Depends, Request
from fastapi.responses import PlainTextResponse, StreamingResponse
from pydantic import ValidationError

from fifachat.config.settings import settings
from fifachat.src.api.ui_stream import UI_MESSAGE_STREAM_HEADERS, encode_ui_message_stream, prime_stream
from fifachat.src.core.models import ChatRequest
from fifachat.src.core.rag_engine import ChatService
from fifachat.src.core.retrieval import RetrievalOrchestrator
from fifachat.src.database.rag_api import RagApiClient
from fifachat.src.utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/api", tags=["chat"])

INTERNAL_ERROR_BODY = "Internal Server Error"


def get_chat_service(request: Request) -> ChatService:
    """Build a request-scoped ``ChatService`` around the shared clients."""
    state = request.app.state
    fetcher = RagApiClient(state.http_client)
    return ChatService(RetrievalOrchestrator(state.embedder, fetcher), state.llm)


@router.post("/chat")
async def chat(request: Request, service: ChatService = Depends(get_chat_service)):
    """
    Answer the latest user message from indexed fifa.com content.

    Flow:
    1. Parse + validate the UI messages
    2. Retrieve context and build the system prompt
    3. Start the completion and wait for its first chunk
    4. Stream the rest as UI message stream parts
    """
    # 1. Parse
    try:
        chat_request = ChatRequest.model_validate(await request.json())
    except (json.JSONDecodeError, ValidationError):
        logger.exception("[CHAT] Malformed chat request.")
        return PlainTextResponse(INTERNAL_ERROR_BODY, status_code=500)

    # 2-3. Retrieve, build prompt, start completion
    try:
        prepared = await service.prepare(chat_request.messages)
        chunks = await prime_stream(service.stream(prepared))
    except Exception:
        logger.exception("[CHAT] Chat API error.")
        return PlainTextResponse(INTERNAL_ERROR_BODY, status_code=500)

    # 4. Stream
    sources = prepared.documents if settings.EMIT_SOURCE_PARTS else []
    return StreamingResponse(encode_ui_message_stream(chunks, sources), media_type="text/event-stream", headers=UI_MESSAGE_STREAM_HEADERS)


@router.get("/health")
async def health():
    """Service health check; never includes credentials."""
    return {
        "status": "ok",
        "llm_model": settings.LLM_MODEL,
        "embedding_model": settings.EMBEDDING_MODEL,
        "rag_api_url": settings.RAG_API_URL,
        "retrieval_failure_policy": settings.RETRIEVAL_FAILURE_POLICY,
    }
