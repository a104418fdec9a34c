import httpx
import pytest

from conftest import RAG_SEARCH_URL, FakeRagApi, make_rag_client, ticket_hit
from fifachat.src.database.rag_api import ContentFetcherError


async def test_text_mode_payload():
    api = FakeRagApi(body=[ticket_hit()])
    client = make_rag_client(api, mode="text")

    hits = await client.search("ticket prices", [0.1, 0.2], limit=5, score_threshold=0.5)

    assert hits == [ticket_hit()]
    assert str(api.requests[0].url) == RAG_SEARCH_URL
    assert api.payloads[0] == {"query": "ticket prices", "limit": 5, "score_threshold": 0.5}


async def test_vector_mode_payload():
    api = FakeRagApi(body={"results": [ticket_hit()]})
    client = make_rag_client(api, mode="vector")

    hits = await client.search("ticket prices", [0.1, 0.2], limit=3, score_threshold=0.7)

    assert len(hits) == 1
    assert api.payloads[0] == {
        "query_embedding": [0.1, 0.2],
        "query_text": "ticket prices",
        "filters": {"domain": "fifa.com", "language": "en"},
        "top_k": 3,
        "similarity_threshold": 0.7,
        "include_metadata": True,
    }


def test_vector_mode_requires_embedding():
    client = make_rag_client(FakeRagApi(), mode="vector")
    with pytest.raises(ValueError):
        client.build_payload("q", None, limit=5, score_threshold=0.5)


async def test_bearer_token_sent_when_configured():
    api = FakeRagApi()
    client = make_rag_client(api, api_key="secret-token")

    await client.search("q", None, limit=5, score_threshold=0.5)

    assert api.requests[0].headers["Authorization"] == "Bearer secret-token"


async def test_non_success_status_raises_fetcher_error():
    client = make_rag_client(FakeRagApi(body={"detail": "down"}, status_code=503))
    with pytest.raises(ContentFetcherError):
        await client.search("q", None, limit=5, score_threshold=0.5)


async def test_network_error_raises_fetcher_error():
    client = make_rag_client(FakeRagApi(error=httpx.ConnectError))
    with pytest.raises(ContentFetcherError):
        await client.search("q", None, limit=5, score_threshold=0.5)


async def test_invalid_json_raises_fetcher_error():
    client = make_rag_client(lambda request: httpx.Response(200, content=b"<html>oops</html>"))
    with pytest.raises(ContentFetcherError):
        await client.search("q", None, limit=5, score_threshold=0.5)


async def test_body_without_result_list_raises_fetcher_error():
    client = make_rag_client(FakeRagApi(body={"status": "ok"}))
    with pytest.raises(ContentFetcherError):
        await client.search("q", None, limit=5, score_threshold=0.5)
