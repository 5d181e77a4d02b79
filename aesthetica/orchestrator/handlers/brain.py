"""Generative fallback: one provider call that always yields a usable reply."""
from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Optional

from aesthetica.clients.llm.providers.noop import NOOP_PROVIDER
from aesthetica.orchestrator import responses
from aesthetica.orchestrator.classifiers.definitions import extract_likely_term
from aesthetica.orchestrator.handlers.base import TurnContext
from aesthetica.orchestrator.prompts import build_brain_messages, build_context_pack
from aesthetica.orchestrator.types import BrainReason, BrainRoute, Layer

if TYPE_CHECKING:
    from aesthetica.clients.llm.base import BaseLLMClient

logger = logging.getLogger(__name__)


class BrainFailure(str, Enum):
    NO_CREDENTIAL = "no_credential"
    PROVIDER_ERROR = "provider_error"
    TIMEOUT = "timeout"
    EMPTY = "empty"


@dataclass(frozen=True)
class BrainResult:
    text: str
    ok: bool
    failure: Optional[BrainFailure] = None
    elapsed_ms: float = 0.0


async def call_brain(
    llm: "BaseLLMClient",
    user_message: str,
    context_pack: str,
    *,
    bot_name: str,
    quick: bool = False,
    timeout_seconds: Optional[float] = None,
) -> BrainResult:
    """Ask the provider; every failure maps to its own canned text.

    A timeout is reported as a provider failure to the user (retry text)
    but tagged separately for logs and metrics.
    """
    if llm.provider == NOOP_PROVIDER:
        return BrainResult(responses.brain_unavailable(quick), ok=False, failure=BrainFailure.NO_CREDENTIAL)

    messages = build_brain_messages(user_message, context_pack, bot_name=bot_name, quick=quick)
    start = time.perf_counter()
    try:
        coro = llm.chat(messages)
        if timeout_seconds is not None and timeout_seconds > 0:
            coro = asyncio.wait_for(coro, timeout=timeout_seconds)
        text = await coro
    except asyncio.TimeoutError:
        elapsed = (time.perf_counter() - start) * 1000
        logger.warning("Brain: %s call timed out (%.0fs)", llm.provider, timeout_seconds or 0)
        return BrainResult(responses.brain_retry(quick), ok=False, failure=BrainFailure.TIMEOUT, elapsed_ms=elapsed)
    except Exception as exc:
        elapsed = (time.perf_counter() - start) * 1000
        logger.error("Brain: %s call failed: %s", llm.provider, exc, exc_info=True)
        return BrainResult(
            responses.brain_retry(quick),
            ok=False,
            failure=BrainFailure.PROVIDER_ERROR,
            elapsed_ms=elapsed,
        )

    elapsed = (time.perf_counter() - start) * 1000
    text = (text or "").strip()
    if not text:
        logger.warning("Brain: %s returned empty text", llm.provider)
        return BrainResult(responses.brain_needs_context(quick), ok=False, failure=BrainFailure.EMPTY, elapsed_ms=elapsed)
    return BrainResult(responses.brain_answer(text, quick), ok=True, elapsed_ms=elapsed)


class BrainLayer:
    """Builds the context pack for a brain route and calls the provider."""

    layer = Layer.BRAIN

    def __init__(self, llm: "BaseLLMClient", *, timeout_seconds: Optional[float] = None) -> None:
        self._llm = llm
        self._timeout_seconds = timeout_seconds

    @property
    def llm(self) -> "BaseLLMClient":
        return self._llm

    async def answer(self, ctx: TurnContext, route: BrainRoute) -> BrainResult:
        likely_term = None
        if route.reason is BrainReason.DEFINITION_UNKNOWN:
            likely_term = extract_likely_term(ctx.facts.message)
        context_pack = build_context_pack(
            ctx.facts,
            route,
            ctx.request.effective_profile,
            likely_term=likely_term,
        )
        return await call_brain(
            self._llm,
            ctx.request.message,
            context_pack,
            bot_name=ctx.bot_name,
            quick=ctx.quick,
            timeout_seconds=self._timeout_seconds,
        )
