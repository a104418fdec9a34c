"""
fifachat - Prompt Assembler
=============================
Builds the system prompt from a ``RetrievalOutcome``.

Pure string construction: the same outcome and query always produce
byte-identical output.  The only branch is "documents or not"; with no
documents the fixed ``NO_ANSWER_PROMPT`` is returned and no document
text can reach the model.
"""

from __future__ import annotations

from fifachat.config.prompt_templates import CITATION_PROMPT_TEMPLATE, DOCUMENT_BLOCK_TEMPLATE, DOCUMENT_SEPARATOR, NO_ANSWER_PROMPT, NO_ANSWER_SENTENCE, SITE_NAME, SITE_URL, UNKNOWN_FETCHED_AT
from fifachat.src.core.models import RetrievalOutcome, RetrievalResult, RetrievedDocument


def format_document(index: int, doc: RetrievedDocument) -> str:
    """Render one document as a numbered ``[Source N]`` block."""
    return DOCUMENT_BLOCK_TEMPLATE.format(index=index, title=doc.title, content=doc.content, url=doc.url, fetched_at=doc.fetched_at or UNKNOWN_FETCHED_AT)


def format_context(documents: list[RetrievedDocument]) -> str:
    return DOCUMENT_SEPARATOR.join(format_document(i, doc) for i, doc in enumerate(documents, 1))


def build_system_prompt(result: RetrievalOutcome | None, query: str) -> str:
    """
    Return the system prompt for this request.

    ``None``, ``RetrievalUnavailable`` and empty results all yield
    ``NO_ANSWER_PROMPT`` unchanged, independent of *query*.
    """
    if not isinstance(result, RetrievalResult) or not result.has_results:
        return NO_ANSWER_PROMPT

    return CITATION_PROMPT_TEMPLATE.format(site_name=SITE_NAME, site_url=SITE_URL, no_answer_sentence=NO_ANSWER_SENTENCE, context=format_context(result.documents), query=query)
