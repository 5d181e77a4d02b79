"""Orchestrator: the layered response pipeline for one patient message.

Layers run in fixed order and the first one that answers wins:

  domain gate → triage guard → definition → complication → material → router

The router then either calls the generative fallback ("brain") with a
deterministic context pack, or produces a general reply. None of the
safety layers depend on the brain.
"""
from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, List, Optional

from aesthetica.knowledge import KnowledgeBase
from aesthetica.orchestrator.facts import MessageAnalyzer
from aesthetica.orchestrator.handlers.base import BaseLayer, LayerReply, TurnContext
from aesthetica.orchestrator.handlers.brain import BrainFailure, BrainLayer
from aesthetica.orchestrator.handlers.complication import ComplicationLayer
from aesthetica.orchestrator.handlers.definition import DefinitionLayer
from aesthetica.orchestrator.handlers.domain_gate import DomainGate
from aesthetica.orchestrator.handlers.general import GeneralResponder
from aesthetica.orchestrator.handlers.material import MaterialLayer
from aesthetica.orchestrator.handlers.triage_guard import TriageGuard
from aesthetica.orchestrator.quality import classify_quality_event
from aesthetica.orchestrator.router import decide_route
from aesthetica.orchestrator.types import (
    AssistantConfig,
    BrainRoute,
    ChatRequest,
    Layer,
    PipelineMetrics,
    PipelineResult,
    QualityEvent,
    RouteDecision,
    SessionDomain,
)

if TYPE_CHECKING:
    from aesthetica.clients.llm.base import BaseLLMClient
    from aesthetica.services.session_log_service import SessionLogService

logger = logging.getLogger(__name__)


class Orchestrator:
    def __init__(
        self,
        knowledge: KnowledgeBase,
        llm: "BaseLLMClient",
        *,
        config: Optional[AssistantConfig] = None,
        session_log: Optional["SessionLogService"] = None,
    ) -> None:
        self._knowledge = knowledge
        self._config = config or AssistantConfig()
        self._session_log = session_log
        self._analyzer = MessageAnalyzer(knowledge, max_materials=self._config.max_materials)
        self._gate = DomainGate()
        self._layers: List[BaseLayer] = [
            TriageGuard(),
            DefinitionLayer(),
            ComplicationLayer(self._analyzer),
            MaterialLayer(),
        ]
        self._brain = BrainLayer(llm, timeout_seconds=self._config.brain_timeout_seconds)
        self._general = GeneralResponder()

    @property
    def config(self) -> AssistantConfig:
        return self._config

    @property
    def analyzer(self) -> MessageAnalyzer:
        return self._analyzer

    @property
    def session_log(self) -> Optional["SessionLogService"]:
        return self._session_log

    def _emergency_line(self, request: ChatRequest) -> str:
        return self._knowledge.build_emergency_line(request.country or self._config.default_emergency_country)

    async def process(
        self,
        request: ChatRequest,
        *,
        session_domain: SessionDomain = SessionDomain.UNKNOWN,
    ) -> PipelineResult:
        """Run the pipeline without touching any store."""
        t_start = time.monotonic()
        facts = self._analyzer.analyze(request.message)
        ctx = TurnContext(
            request=request,
            facts=facts,
            session_domain=session_domain,
            emergency_line=self._emergency_line(request),
            bot_name=self._config.bot_name,
            definition_match=self._analyzer.find_definition(facts.message) if facts.definition_intent else None,
        )

        gated = await self._gate.handle(ctx)
        if gated is not None:
            return self._finish(gated, self._gate.layer, ctx, t_start)

        for layer in self._layers:
            answered = await layer.handle(ctx)
            if answered is not None:
                return self._finish(answered, layer.layer, ctx, t_start)

        route = decide_route(
            facts.message,
            has_definition_hit=ctx.definition_match is not None,
            definition_intent=facts.definition_intent,
            material=facts.material_for_routing,
            material_context=facts.material_context,
            session_domain=session_domain,
        )

        if isinstance(route, BrainRoute):
            brain = await self._brain.answer(ctx, route)
            result = self._finish(LayerReply(brain.text, route), self._brain.layer, ctx, t_start)
            result.metrics.brain_called = brain.failure is not BrainFailure.NO_CREDENTIAL
            result.metrics.brain_ms = brain.elapsed_ms
            result.metrics.brain_failure = brain.failure.value if brain.failure else None
            return result

        return self._finish(self._general.reply(ctx, route), self._general.layer, ctx, t_start)

    def _finish(self, answered: LayerReply, layer: Layer, ctx: TurnContext, t_start: float) -> PipelineResult:
        elapsed = (time.monotonic() - t_start) * 1000
        return PipelineResult(
            reply=answered.reply,
            layer=layer,
            route=answered.route,
            facts=ctx.facts,
            metrics=PipelineMetrics(total_ms=elapsed),
        )

    async def process_with_tracking(self, request: ChatRequest) -> PipelineResult:
        """Pipeline plus session telemetry.

        Reads the session's domain hint first and records the turn afterwards.
        Store failures are logged and never change the reply.
        """
        session_id = request.session_id
        session_domain = SessionDomain.UNKNOWN
        if session_id and self._session_log is not None:
            session_domain = await self._session_log.session_domain(session_id)

        result = await self.process(request, session_domain=session_domain)

        if result.route is not None:
            result.quality_event = classify_quality_event(self._analyzer, request.message, result.facts)
            if session_id and self._session_log is not None:
                await self._record(session_id, request, result.route, result.quality_event, result.reply)

        logger.info(
            "Orchestrator: %s via %s → %.0fms",
            result.route_label or "gate",
            result.layer.value,
            result.metrics.total_ms,
        )
        return result

    async def _record(
        self,
        session_id: str,
        request: ChatRequest,
        route: RouteDecision,
        event: QualityEvent,
        reply: str,
    ) -> None:
        from aesthetica.services.session_log_service import TurnLog

        turn = TurnLog(
            session_id=session_id,
            route=route,
            quality_event=event,
            user_text=request.message,
            bot_text=reply,
            mode=request.mode,
            profile=request.effective_profile,
        )
        try:
            await self._session_log.record_turn(turn)  # type: ignore[union-attr]
        except Exception as exc:
            logger.error("Orchestrator: session log write failed for %s: %s", session_id, exc, exc_info=True)
