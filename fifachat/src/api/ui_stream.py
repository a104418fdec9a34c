"""
fifachat - UI Message Stream Encoder
======================================
Encodes model text chunks into the AI SDK "UI message stream" wire
format (Server-Sent Events, one JSON part per ``data:`` line), which the
browser chat widget's ``useChat`` hook consumes.

Part order:
    start → start-step → source-url* → text-start → text-delta* →
    text-end → finish-step → finish → [DONE]

A failure after streaming began is reported as an ``error`` part
followed by ``[DONE]``.
"""

from __future__ import annotations

import json
from typing import Any, AsyncIterator
from uuid import uuid4

from fifachat.src.core.models import RetrievedDocument
from fifachat.src.utils.logger import get_logger

logger = get_logger(__name__)

UI_MESSAGE_STREAM_HEADERS: dict[str, str] = {
    "x-vercel-ai-ui-message-stream": "v1",
    "Cache-Control": "no-cache",
    "X-Accel-Buffering": "no",  # Disable nginx buffering if proxied
}

STREAM_DONE = "data: [DONE]\n\n"


def sse_part(part: dict[str, Any]) -> str:
    """Format one stream part as an SSE ``data:`` event."""
    return f"data: {json.dumps(part, ensure_ascii=False)}\n\n"


async def prime_stream(chunks: AsyncIterator[str]) -> AsyncIterator[str]:
    """
    Pull the first chunk now so provider errors raise before the HTTP
    response starts, then return an iterator over the whole stream.
    """
    try:
        first = await chunks.__anext__()
    except StopAsyncIteration:
        first = None

    async def _chain() -> AsyncIterator[str]:
        if first is not None:
            yield first
        async for chunk in chunks:
            yield chunk

    return _chain()


async def encode_ui_message_stream(chunks: AsyncIterator[str], sources: list[RetrievedDocument] | None = None) -> AsyncIterator[str]:
    """Wrap text chunks in UI message stream parts."""
    yield sse_part({"type": "start", "messageId": f"msg-{uuid4().hex}"})
    yield sse_part({"type": "start-step"})

    for i, doc in enumerate(sources or [], 1):
        yield sse_part({"type": "source-url", "sourceId": f"source-{i}", "url": doc.url, "title": doc.title})

    text_id = uuid4().hex
    yield sse_part({"type": "text-start", "id": text_id})

    try:
        async for chunk in chunks:
            yield sse_part({"type": "text-delta", "id": text_id, "delta": chunk})
    except Exception:
        logger.exception("[STREAM] Completion stream failed mid-response.")
        yield sse_part({"type": "error", "errorText": "The assistant stopped responding. Please try again."})
        yield STREAM_DONE
        return

    yield sse_part({"type": "text-end", "id": text_id})
    yield sse_part({"type": "finish-step"})
    yield sse_part({"type": "finish"})
    yield STREAM_DONE
