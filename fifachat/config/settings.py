"""
fifachat - Centralized Configuration
=====================================
Uses ``pydantic-settings`` (``BaseSettings``) to load *all* configuration
from environment variables and the project-level ``.env`` file.

Security
--------
- ``GOOGLE_API_KEY`` is typed as ``SecretStr`` and has **no default value**.
  If the key is missing at startup, Pydantic will raise a ``ValidationError``
  with a clear error message.  The raw value is never exposed in repr,
  logs, or tracebacks.
- ``RAG_API_KEY`` is optional and also ``SecretStr`` — the RAG API bearer
  token must never leak into logs.

RAG API
-------
``RAG_API_URL`` and ``RAG_API_KEY`` override the Content Fetcher's base URL
and credential.  ``RAG_API_SEARCH_MODE`` picks the search payload variant:
``"text"`` sends the raw query, ``"vector"`` sends the query embedding with
domain / language filters.

Retrieval failure policy
------------------------
``RETRIEVAL_FAILURE_POLICY`` decides what happens when embedding or search
fails: ``"no_answer"`` (default) treats it as "no results" and applies the
no-answer prompt, ``"unaugmented"`` falls back to a plain chat completion.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application-wide settings.

    Every field is loaded from environment variables (or ``.env``).
    Fields *without* a default are **required** — the app will refuse
    to start until they are provided.

    Attributes
    ----------
    GOOGLE_API_KEY : SecretStr
        API key for Google AI Studio (Gemini), used for both query
        embeddings and chat completions.  **Required.**
    ENV : Literal["dev", "prod"]
        Environment mode controlling logging verbosity.
    LOG_LEVEL : str | None
        Explicit log level; overrides the ``ENV`` default when set.
    EMBEDDING_MODEL : str
        Model identifier passed to ``GoogleGenerativeAIEmbeddings``.
    LLM_MODEL : str
        Model identifier for the streaming chat model.
    RAG_API_URL : str
        Base URL of the external RAG API (Content Fetcher).
    RAG_API_KEY : SecretStr | None
        Optional bearer token for the RAG API.
    SEARCH_RESULTS_LIMIT : int
        Maximum number of documents injected into the prompt.
    RELEVANCE_THRESHOLD : float
        Minimum relevance score a document must reach.
    MAX_DURATION_SECONDS : int
        Upper bound for a single completion request.
    """

    # ── Environment Mode ───────────────────────────────────────────────
    ENV: Literal["dev", "prod"] = "dev"
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR"] | None = None

    # ── API Keys (REQUIRED — no default) ───────────────────────────────
    GOOGLE_API_KEY: SecretStr

    # ── Model Configuration ────────────────────────────────────────────
    EMBEDDING_MODEL: str = "gemini-embedding-001"
    LLM_MODEL: str = "gemini-2.0-flash"
    LLM_TEMPERATURE: float = 0.2

    # ── RAG API (Content Fetcher) ──────────────────────────────────────
    RAG_API_URL: str = "http://localhost:8001"
    RAG_API_KEY: SecretStr | None = None
    RAG_API_SEARCH_PATH: str = "/search"
    RAG_API_SEARCH_MODE: Literal["text", "vector"] = "text"
    RAG_API_TIMEOUT: float = 10.0

    # ── Retrieval Parameters ───────────────────────────────────────────
    SEARCH_RESULTS_LIMIT: int = 5
    RELEVANCE_THRESHOLD: float = 0.5
    SEARCH_DOMAIN: str = "fifa.com"
    SEARCH_LANGUAGE: str = "en"
    RETRIEVAL_FAILURE_POLICY: Literal["no_answer", "unaugmented"] = "no_answer"

    # ── Streaming / HTTP ───────────────────────────────────────────────
    EMIT_SOURCE_PARTS: bool = True
    MAX_DURATION_SECONDS: int = 300
    CORS_ALLOW_ORIGINS: list[str] = ["*"]
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    # ── Validators ─────────────────────────────────────────────────────

    @field_validator("SEARCH_RESULTS_LIMIT")
    @classmethod
    def _limit_range(cls, v: int) -> int:
        if not 1 <= v <= 20:
            raise ValueError(f"SEARCH_RESULTS_LIMIT must be 1–20, got {v}")
        return v


    @field_validator("RELEVANCE_THRESHOLD")
    @classmethod
    def _threshold_range(cls, v: float) -> float:
        if not 0.0 <= v <= 1.0:
            raise ValueError(f"RELEVANCE_THRESHOLD must be within 0.0–1.0, got {v}")
        return v


    @field_validator("LLM_TEMPERATURE")
    @classmethod
    def _temperature_range(cls, v: float) -> float:
        if not 0.0 <= v <= 2.0:
            raise ValueError(f"LLM_TEMPERATURE must be within 0.0–2.0, got {v}")
        return v


    @field_validator("RAG_API_URL")
    @classmethod
    def _strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    # ── Pydantic Settings Configuration ────────────────────────────────
    model_config = SettingsConfigDict(env_file=Path(__file__).resolve().parent.parent.parent / ".env", env_file_encoding="utf-8", extra="ignore")


# ── Singleton Instance ─────────────────────────────────────────────────
# Import this throughout the project:
#     from fifachat.config.settings import settings
settings = Settings()
