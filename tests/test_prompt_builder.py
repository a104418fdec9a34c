from fifachat.config.prompt_templates import NO_ANSWER_PROMPT, NO_ANSWER_SENTENCE
from fifachat.src.core.models import RetrievalResult, RetrievalUnavailable, RetrievedDocument
from fifachat.src.core.prompt_builder import build_system_prompt, format_document


def _doc(n, **overrides):
    fields = {
        "url": f"https://www.fifa.com/page-{n}",
        "title": f"Title {n}",
        "content": f"Content body number {n}.",
        "fetched_at": f"2025-10-0{n}T08:00:00Z",
        "score": 0.9,
    }
    fields.update(overrides)
    return RetrievedDocument(**fields)


def test_no_answer_prompt_for_none_empty_and_unavailable():
    assert build_system_prompt(None, "anything") == NO_ANSWER_PROMPT
    assert build_system_prompt(RetrievalResult(documents=[]), "anything") == NO_ANSWER_PROMPT
    assert build_system_prompt(RetrievalUnavailable(stage="search", reason="down"), "anything") == NO_ANSWER_PROMPT


def test_no_answer_prompt_is_independent_of_query():
    empty = RetrievalResult(documents=[])
    assert build_system_prompt(empty, "What are ticket prices?") == build_system_prompt(empty, "Who won in 1930?")


def test_no_answer_prompt_contains_exact_sentence():
    assert "I don't know based on current fifa.com content I have indexed." in NO_ANSWER_PROMPT
    assert NO_ANSWER_SENTENCE in NO_ANSWER_PROMPT
    assert "https://www.fifa.com" in NO_ANSWER_PROMPT


def test_citation_prompt_contains_every_field_in_order():
    docs = [_doc(1), _doc(2), _doc(3)]
    prompt = build_system_prompt(RetrievalResult(documents=docs), "Where is the final?")

    positions = []
    for doc in docs:
        for value in (doc.title, doc.content, doc.url, doc.fetched_at):
            assert value in prompt
        positions.append(prompt.index(f"[Source {docs.index(doc) + 1}] {doc.title}"))
    assert positions == sorted(positions)


def test_citation_prompt_ends_with_query():
    prompt = build_system_prompt(RetrievalResult(documents=[_doc(1)]), "Where is the final?")
    assert prompt.endswith("Where is the final?")


def test_citation_prompt_is_deterministic():
    result = RetrievalResult(documents=[_doc(1), _doc(2)])
    assert build_system_prompt(result, "q") == build_system_prompt(result, "q")


def test_braces_in_content_and_query_are_kept_verbatim():
    doc = _doc(1, content="Use {placeholder} as-is")
    prompt = build_system_prompt(RetrievalResult(documents=[doc]), "what is {x}?")
    assert "Use {placeholder} as-is" in prompt
    assert prompt.endswith("what is {x}?")


def test_format_document_block_layout():
    block = format_document(2, _doc(2))
    assert block.splitlines() == [
        "[Source 2] Title 2",
        "Content: Content body number 2.",
        "URL: https://www.fifa.com/page-2",
        "Last indexed: 2025-10-02T08:00:00Z",
    ]


def test_missing_timestamp_is_rendered_as_unknown():
    block = format_document(1, _doc(1, fetched_at=None))
    assert block.endswith("Last indexed: unknown")
