"""
fifachat - Text Utilities
==========================
Helper functions for cleaning retrieved text, hashing it for provenance,
and mapping indexed documents to public fifa.com URLs.

These utilities are consumed by the ``RetrievalOrchestrator`` and must
remain stateless and side-effect-free.
"""

from __future__ import annotations

import hashlib
import re
import unicodedata
from typing import NamedTuple

from fifachat.config.prompt_templates import SITE_URL


# ── Non-printable character pattern ────────────────────────────────────
# Control characters (C0/C1) except \n, \r, \t, plus BOM, zero-width
# characters, soft hyphens and directional marks.
_NON_PRINTABLE_RE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f-\x9f\ufeff\u200b\u200c\u200d\u200e\u200f\u00ad\u2060\ufffe]")


# ── Public API ─────────────────────────────────────────────────────────

def clean_text(text: str) -> str:
    """
    Normalise text returned by the RAG API before it reaches the prompt.

    Steps:
        1. Unicode NFC normalisation (accented venue and city names
           such as "Monterrey" / "Guadalajara" pages often mix forms).
        2. Strip non-printable / zero-width characters.
        3. Collapse runs of horizontal whitespace into a single space,
           *preserving* newlines.
        4. Strip every line and collapse 3+ blank lines to 2.
    """
    text = unicodedata.normalize("NFC", text)
    text = _NON_PRINTABLE_RE.sub("", text)
    text = re.sub(r"[^\S\n]+", " ", text)
    lines = [line.strip() for line in text.splitlines()]
    text = "\n".join(lines)
    text = re.sub(r"\n{3,}", "\n\n", text)
    return text.strip()


def content_hash(text: str) -> str:
    """SHA-256 hex digest of *text*, recorded as document provenance."""
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


def derive_title(content: str, max_length: int = 80) -> str:
    """First non-empty line of *content*, truncated to *max_length* characters."""
    for line in content.splitlines():
        line = line.strip()
        if line:
            return line if len(line) <= max_length else line[: max_length - 1].rstrip() + "…"
    return "Untitled fifa.com page"


# ── Content-based URL rules ────────────────────────────────────────────
# Evaluated top to bottom; the first rule with a matching keyword wins.
# Venue names come before the ticket and "stadium" rules because venue
# pages routinely mention tickets and the word "stadium" too.

_WORLD_CUP_URL = f"{SITE_URL}/en/tournaments/mens/worldcup/canadamexicousa2026"
_HOST_CITIES_URL = f"{_WORLD_CUP_URL}/host-cities"


class UrlRule(NamedTuple):
    tag: str
    keywords: tuple[str, ...]
    url: str


URL_RULES: tuple[UrlRule, ...] = (
    # Specific venues
    UrlRule("venue:new-york-new-jersey", ("metlife",), f"{_HOST_CITIES_URL}/new-york-new-jersey"),
    UrlRule("venue:los-angeles", ("sofi stadium",), f"{_HOST_CITIES_URL}/los-angeles"),
    UrlRule("venue:dallas", ("at&t stadium", "arlington"), f"{_HOST_CITIES_URL}/dallas"),
    UrlRule("venue:mexico-city", ("estadio azteca", "azteca"), f"{_HOST_CITIES_URL}/mexico-city"),
    UrlRule("venue:vancouver", ("bc place",), f"{_HOST_CITIES_URL}/vancouver"),
    UrlRule("venue:toronto", ("bmo field",), f"{_HOST_CITIES_URL}/toronto"),
    UrlRule("venue:miami", ("hard rock stadium",), f"{_HOST_CITIES_URL}/miami"),
    UrlRule("venue:atlanta", ("mercedes-benz stadium",), f"{_HOST_CITIES_URL}/atlanta"),
    UrlRule("venue:seattle", ("lumen field",), f"{_HOST_CITIES_URL}/seattle"),
    UrlRule("venue:san-francisco-bay-area", ("levi's stadium", "levis stadium"), f"{_HOST_CITIES_URL}/san-francisco-bay-area"),
    UrlRule("venue:boston", ("gillette stadium",), f"{_HOST_CITIES_URL}/boston"),
    UrlRule("venue:philadelphia", ("lincoln financial field",), f"{_HOST_CITIES_URL}/philadelphia"),
    UrlRule("venue:houston", ("nrg stadium",), f"{_HOST_CITIES_URL}/houston"),
    UrlRule("venue:kansas-city", ("arrowhead",), f"{_HOST_CITIES_URL}/kansas-city"),
    UrlRule("venue:monterrey", ("estadio bbva",), f"{_HOST_CITIES_URL}/monterrey"),
    UrlRule("venue:guadalajara", ("estadio akron",), f"{_HOST_CITIES_URL}/guadalajara"),
    # Known numeric identifiers
    UrlRule("id:final", ("match 104",), f"{_WORLD_CUP_URL}/articles/final-new-york-new-jersey-match-104"),
    UrlRule("id:schedule", ("104 matches", "48 teams"), f"{_WORLD_CUP_URL}/articles/match-schedule-fixtures-results-teams-stadiums"),
    # Groups and stages
    UrlRule("stage", ("group stage", "group a", "group b", "groups", "round of 32", "round of 16", "knockout", "quarter-final", "semi-final", "draw"), f"{_WORLD_CUP_URL}/groups"),
    # Tickets and prices
    UrlRule("tickets", ("ticket", "ticketing", "price", "pricing", "usd", "$", "hospitality"), f"{_WORLD_CUP_URL}/tickets"),
    # Generic stadium catch-all
    UrlRule("stadium", ("stadium",), _HOST_CITIES_URL),
)

DEFAULT_URL: str = _WORLD_CUP_URL


def _keyword_pattern(keyword: str) -> re.Pattern[str]:
    """
    Compile *keyword* so it only matches whole words.

    Word-character edges get a boundary ("draw" does not match
    "withdrawal", "group b" does not match "group bookings").  A keyword
    ending in a word of two or more letters also matches its plural.
    Edges made of punctuation, such as ``"$"``, match anywhere.
    """
    last_word = re.split(r"[\s-]", keyword)[-1]
    plural = r"(?:e?s)?" if last_word.isalpha() and len(last_word) > 1 else ""
    lead = r"(?<!\w)" if keyword[0].isalnum() else ""
    trail = plural + r"(?!\w)" if keyword[-1].isalnum() else ""
    return re.compile(lead + re.escape(keyword) + trail)


_KEYWORD_PATTERNS: dict[str, re.Pattern[str]] = {keyword: _keyword_pattern(keyword) for rule in URL_RULES for keyword in rule.keywords}


def match_url_rule(content: str) -> UrlRule | None:
    """Return the first rule with a keyword present in *content* as a whole word (case-insensitive)."""
    haystack = content.lower()
    for rule in URL_RULES:
        if any(_KEYWORD_PATTERNS[keyword].search(haystack) for keyword in rule.keywords):
            return rule
    return None


def classify_url(document_id: str, content: str, source_url: str | None = None) -> str:
    """
    Map an indexed document to the public fifa.com page a user can open.

    Index identifiers are not externally resolvable, so the URL is
    derived from the document content using ``URL_RULES``.  A
    ``source_url`` reported by the RAG API, or an identifier, that already
    is a public fifa.com URL is returned unchanged.

    Examples::

        classify_url("doc-17", "Tickets start at 60 USD")   → ".../tickets"
        classify_url("doc-3", "MetLife Stadium tickets")    → ".../host-cities/new-york-new-jersey"
        classify_url("doc-9", "Welcome to the tournament")  → DEFAULT_URL
    """
    for candidate in (source_url, document_id):
        if candidate and candidate.startswith(f"{SITE_URL}/"):
            return candidate

    rule = match_url_rule(content)
    return rule.url if rule is not None else DEFAULT_URL
