"""
fifachat - Application Entry Point
====================================
FastAPI application factory.  Registers the chat routes, configures CORS
for the website widget, and manages shared clients in the lifespan:

    • one ``httpx.AsyncClient`` for the RAG API (closed on shutdown)
    • one Gemini query embedder
    • one streaming Gemini chat model

Run:
    fifachat-serve
    uvicorn fifachat.src.main:app --reload
"""

from __future__ import annotations

from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from fifachat.config.settings import settings
from fifachat.src.api.routes import router
from fifachat.src.core.rag_engine import build_chat_model, build_embedder
from fifachat.src.utils.logger import get_logger, uvicorn_log_config

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create shared clients at startup; close the HTTP pool at shutdown."""
    logger.info("Starting fifachat API (env=%s)...", settings.ENV)

    http_client = httpx.AsyncClient(timeout=settings.RAG_API_TIMEOUT)
    app.state.http_client = http_client
    app.state.embedder = build_embedder()
    app.state.llm = build_chat_model()
    logger.info("RAG API: %s (mode=%s)", settings.RAG_API_URL, settings.RAG_API_SEARCH_MODE)

    try:
        yield
    finally:
        await http_client.aclose()
        logger.info("Shutting down fifachat API.")


def create_app() -> FastAPI:
    app = FastAPI(title="fifachat", version="0.1.0", lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ALLOW_ORIGINS,
        allow_credentials=False,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )
    app.include_router(router)
    return app


app = create_app()


def run() -> None:
    """Console entry point: serve the API with uvicorn."""
    import uvicorn

    uvicorn.run("fifachat.src.main:app", host=settings.HOST, port=settings.PORT, log_config=uvicorn_log_config())


if __name__ == "__main__":
    run()
