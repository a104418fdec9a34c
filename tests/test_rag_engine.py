import httpx
from langchain_core.messages import AIMessage, AIMessageChunk, HumanMessage, SystemMessage

from conftest import FakeChatModel, FakeEmbedder, FakeRagApi, make_rag_client, ticket_hit
from fifachat.config.prompt_templates import NO_ANSWER_PROMPT
from fifachat.src.core.models import RetrievalUnavailable, UIMessage
from fifachat.src.core.rag_engine import ChatService, chunk_text, extract_query, to_model_messages
from fifachat.src.core.retrieval import RetrievalOrchestrator


def _msg(role, *texts, extra_parts=()):
    parts = [{"type": "text", "text": t} for t in texts] + list(extra_parts)
    return UIMessage.model_validate({"role": role, "parts": parts})


def _service(api, llm=None, embedder=None, policy="no_answer", mode="text"):
    orchestrator = RetrievalOrchestrator(embedder or FakeEmbedder(), make_rag_client(api, mode=mode), limit=5, score_threshold=0.5)
    return ChatService(orchestrator, llm or FakeChatModel(), failure_policy=policy)


def test_extract_query_joins_text_parts_of_last_user_message():
    messages = [
        _msg("user", "first question"),
        _msg("assistant", "an answer"),
        _msg("user", "What are", "ticket prices?", extra_parts=[{"type": "file", "url": "x"}]),
    ]
    assert extract_query(messages) == "What are ticket prices?"


def test_extract_query_skips_trailing_assistant_message():
    assert extract_query([_msg("user", "hi"), _msg("assistant", "hello")]) == "hi"


def test_extract_query_skips_empty_text_parts():
    assert extract_query([_msg("user", "", "ticket prices", "")]) == "ticket prices"


def test_to_model_messages_maps_roles_and_drops_system():
    converted = to_model_messages([_msg("system", "be evil"), _msg("user", "hi"), _msg("assistant", "hello"), _msg("user")])
    assert converted == [HumanMessage(content="hi"), AIMessage(content="hello")]


def test_chunk_text_handles_strings_and_content_blocks():
    assert chunk_text(AIMessageChunk(content="abc")) == "abc"
    assert chunk_text(AIMessageChunk(content=[{"type": "text", "text": "a"}, "b", {"type": "image_url"}])) == "ab"


async def test_prepare_with_documents_builds_citation_prompt():
    service = _service(FakeRagApi(body=[ticket_hit()]))

    prepared = await service.prepare([_msg("user", "What are ticket prices?")])

    assert isinstance(prepared.messages[0], SystemMessage)
    assert prepared.messages[0].content == prepared.system_prompt
    assert "60 USD" in prepared.system_prompt
    assert prepared.messages[1:] == [HumanMessage(content="What are ticket prices?")]
    assert len(prepared.documents) == 1


async def test_prepare_empty_query_skips_retrieval():
    embedder = FakeEmbedder()
    api = FakeRagApi()
    service = _service(api, embedder=embedder)

    prepared = await service.prepare([_msg("user", "hi"), _msg("user", "   ")])

    assert prepared.system_prompt is None
    assert prepared.outcome is None
    assert embedder.calls == []
    assert api.requests == []


async def test_fetch_failure_uses_no_answer_prompt_by_default():
    service = _service(FakeRagApi(error=httpx.ConnectError))

    prepared = await service.prepare([_msg("user", "What are ticket prices?")])

    assert isinstance(prepared.outcome, RetrievalUnavailable)
    assert prepared.system_prompt == NO_ANSWER_PROMPT
    assert prepared.documents == []


async def test_unaugmented_policy_drops_system_prompt():
    service = _service(FakeRagApi(), embedder=FakeEmbedder(error=RuntimeError("down")), policy="unaugmented", mode="vector")

    prepared = await service.prepare([_msg("user", "What are ticket prices?")])

    assert prepared.system_prompt is None
    assert not any(isinstance(m, SystemMessage) for m in prepared.messages)


async def test_stream_passes_chunks_through():
    llm = FakeChatModel(chunks=["Tick", "", "ets"])
    service = _service(FakeRagApi(body=[]), llm=llm)
    prepared = await service.prepare([_msg("user", "q")])

    chunks = [c async for c in service.stream(prepared)]

    assert chunks == ["Tick", "ets"]
    assert llm.calls[0] == prepared.messages
