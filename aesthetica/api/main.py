"""Aesthetica FastAPI application: entry point.

Start with:
    uvicorn aesthetica.api.main:app --reload --host 0.0.0.0 --port 8000

The LLM client is resolved from env (OPENAI_API_KEY or GEMINI_API_KEY); without
a key a no-op client is used and brain-routed questions get a canned reply.
Session telemetry goes to PostgreSQL when DATABASE_URL is set, otherwise it is
kept in memory.
"""
from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from aesthetica.api.errors import install_error_handlers
from aesthetica.api.routers import chat
from aesthetica.config import load_brain_config
from aesthetica.core.logger import configure as configure_logging
from aesthetica.knowledge import get_knowledge_base
from aesthetica.orchestrator.types import AssistantConfig
from aesthetica.services.orchestrator_service import OrchestratorService

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # ── Startup ──────────────────────────────────────────────────
    configure_logging()

    knowledge = get_knowledge_base()
    app.state.knowledge = knowledge

    brain_config = load_brain_config()
    llm_client = OrchestratorService.build_llm_client(brain_config)
    app.state.llm_client = llm_client

    store = await OrchestratorService.build_session_store()
    app.state.session_store = store

    config = AssistantConfig(brain_timeout_seconds=brain_config.timeout_seconds)
    app.state.orchestrator = OrchestratorService.build(knowledge, llm_client, store=store, config=config)
    logger.info("API: orchestrator ready")

    yield

    # ── Shutdown ─────────────────────────────────────────────────
    await store.close()
    logger.info("API: session store closed")


app = FastAPI(
    title="Aesthetica API",
    version="1.0.0",
    description="Safety-first esthetic medicine assistant: deterministic triage with a generative fallback.",
    lifespan=lifespan,
)

# Rate limiter: the chat route's limit comes from CHAT_RATE_LIMIT (default 30/minute)
app.state.limiter = chat.limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
install_error_handlers(app)

# CORS: allow the web client dev server and any configured origin
_allowed_origins = os.environ.get(
    "CORS_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000"
).split(",")

app.add_middleware(
    CORSMiddleware,
    allow_origins=_allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(chat.router, prefix="/api/v1")


@app.get("/health", tags=["health"])
async def health():
    return {"status": "ok"}
