"""
fifachat - RAG Chat Engine
============================
Orchestrates one chat turn from UI messages to a model token stream.

Architecture
------------
``ChatService.prepare``
    1. Extract the query from the most recent user message.
    2. Empty query → unaugmented chat (no retrieval, no system prompt).
    3. Otherwise retrieve → ``RetrievalOutcome``.
    4. ``RetrievalUnavailable`` → apply ``RETRIEVAL_FAILURE_POLICY``
       (``"no_answer"`` prompt, or unaugmented chat).
    5. Build the system prompt and the LangChain message list.

``ChatService.stream``
    Calls the chat model's ``astream`` and yields text chunks unchanged.

Model construction lives in ``build_chat_model`` / ``build_embedder`` so
the FastAPI lifespan creates them once and tests can inject fakes.

Usage:
    service = ChatService(RetrievalOrchestrator(embedder, fetcher), llm)
    prepared = await service.prepare(request.messages)
    async for text in service.stream(prepared):
        ...
"""

from __future__ import annotations

import time
from typing import Any, AsyncIterator, NamedTuple, Protocol, runtime_checkable

from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage

from fifachat.config.settings import settings
from fifachat.src.core.models import RetrievalOutcome, RetrievalResult, RetrievalUnavailable, RetrievedDocument, UIMessage
from fifachat.src.core.prompt_builder import build_system_prompt
from fifachat.src.core.retrieval import RetrievalOrchestrator
from fifachat.src.utils.logger import get_logger

logger = get_logger(__name__)


@runtime_checkable
class StreamingChatModel(Protocol):
    """Anything exposing LangChain's ``astream`` (``ChatGoogleGenerativeAI`` qualifies)."""

    def astream(self, input: Any, config: Any = None, **kwargs: Any) -> AsyncIterator[Any]: ...


class PreparedChat(NamedTuple):
    """Everything the completion call needs for one request."""

    query: str
    system_prompt: str | None
    messages: list[BaseMessage]
    outcome: RetrievalOutcome | None

    @property
    def documents(self) -> list[RetrievedDocument]:
        if isinstance(self.outcome, RetrievalResult):
            return list(self.outcome.documents)
        return []


# ══════════════════════════════════════════════════════════════════════
#  MESSAGE HELPERS
# ══════════════════════════════════════════════════════════════════════


def extract_query(messages: list[UIMessage]) -> str:
    """Text of the most recent user message, or ``""`` when there is none."""
    for message in reversed(messages):
        if message.role == "user":
            return message.text()
    return ""


def to_model_messages(messages: list[UIMessage]) -> list[BaseMessage]:
    """
    Convert UI messages into LangChain chat messages.

    Client-supplied ``system`` messages are dropped: the server owns the
    system prompt.  Messages without text are skipped.
    """
    converted: list[BaseMessage] = []
    for message in messages:
        text = message.text()
        if not text:
            continue
        if message.role == "user":
            converted.append(HumanMessage(content=text))
        elif message.role == "assistant":
            converted.append(AIMessage(content=text))
        else:
            logger.warning("[CHAT] Ignoring client-supplied system message.")
    return converted


def chunk_text(chunk: Any) -> str:
    """Text carried by a streamed ``AIMessageChunk`` (string or content-block list)."""
    content = getattr(chunk, "content", chunk)
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts: list[str] = []
        for block in content:
            if isinstance(block, str):
                parts.append(block)
            elif isinstance(block, dict) and block.get("type", "text") == "text":
                parts.append(str(block.get("text", "")))
        return "".join(parts)
    return ""


# ══════════════════════════════════════════════════════════════════════
#  MODEL FACTORIES
# ══════════════════════════════════════════════════════════════════════


def build_chat_model() -> Any:
    """Initialise the streaming Gemini chat model via LangChain."""
    from langchain_google_genai import ChatGoogleGenerativeAI

    llm = ChatGoogleGenerativeAI(model=settings.LLM_MODEL, temperature=settings.LLM_TEMPERATURE, google_api_key=settings.GOOGLE_API_KEY.get_secret_value(), timeout=settings.MAX_DURATION_SECONDS)
    logger.info("LLM initialised: %s (temperature=%.1f)", settings.LLM_MODEL, settings.LLM_TEMPERATURE)
    return llm


def build_embedder() -> Any:
    """Initialise the Gemini query embedder via LangChain."""
    from langchain_google_genai import GoogleGenerativeAIEmbeddings

    embedder = GoogleGenerativeAIEmbeddings(model=settings.EMBEDDING_MODEL, google_api_key=settings.GOOGLE_API_KEY.get_secret_value())
    logger.info("Embedder initialised: %s", settings.EMBEDDING_MODEL)
    return embedder


# ══════════════════════════════════════════════════════════════════════
#  CHAT SERVICE
# ══════════════════════════════════════════════════════════════════════


class ChatService:
    """
    Per-request chat pipeline: query → retrieval → prompt → completion.

    Parameters
    ----------
    retriever
        ``RetrievalOrchestrator`` for the fifa.com index.
    llm
        A ``StreamingChatModel``.
    failure_policy
        ``"no_answer"`` or ``"unaugmented"``.  Defaults to
        ``settings.RETRIEVAL_FAILURE_POLICY``.
    """

    __slots__ = ("_retriever", "_llm", "_failure_policy")

    def __init__(self, retriever: RetrievalOrchestrator, llm: StreamingChatModel, failure_policy: str | None = None) -> None:
        self._retriever = retriever
        self._llm = llm
        self._failure_policy: str = failure_policy or settings.RETRIEVAL_FAILURE_POLICY


    async def prepare(self, messages: list[UIMessage]) -> PreparedChat:
        """Extract the query, run retrieval and assemble the model input."""
        history = to_model_messages(messages)
        query = extract_query(messages)
        logger.info("[CHAT] %d message(s) received, query='%s'", len(messages), query[:80])

        if not query.strip():
            logger.info("[CHAT] Empty query — skipping retrieval, unaugmented chat.")
            return PreparedChat(query=query, system_prompt=None, messages=history, outcome=None)

        outcome = await self._retriever.retrieve(query.strip())

        if isinstance(outcome, RetrievalUnavailable):
            logger.warning("[CHAT] Retrieval unavailable at %s stage — policy=%s", outcome.stage, self._failure_policy)
            if self._failure_policy == "unaugmented":
                return PreparedChat(query=query, system_prompt=None, messages=history, outcome=outcome)

        system_prompt = build_system_prompt(outcome, query)
        grounded = isinstance(outcome, RetrievalResult) and outcome.has_results
        logger.info("[PROMPT] %s prompt built (%d chars)", "Citation" if grounded else "No-answer", len(system_prompt))

        return PreparedChat(query=query, system_prompt=system_prompt, messages=[SystemMessage(content=system_prompt), *history], outcome=outcome)


    async def stream(self, prepared: PreparedChat) -> AsyncIterator[str]:
        """Yield the model's text chunks as they arrive."""
        t_start = time.perf_counter()
        n_chunks = 0
        n_chars = 0

        async for chunk in self._llm.astream(prepared.messages):
            text = chunk_text(chunk)
            if not text:
                continue
            n_chunks += 1
            n_chars += len(text)
            yield text

        llm_ms = (time.perf_counter() - t_start) * 1000
        logger.info("[CHAT] Completion streamed: %d chunk(s), %d chars in %.1fms", n_chunks, n_chars, llm_ms)
