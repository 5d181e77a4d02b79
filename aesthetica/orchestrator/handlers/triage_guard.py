"""Escalates danger signals before any other lookup."""
from __future__ import annotations

import logging
from typing import Optional

from aesthetica.orchestrator import responses
from aesthetica.orchestrator.handlers.base import BaseLayer, LayerReply, TurnContext
from aesthetica.orchestrator.types import DeterministicReason, DeterministicRoute, Layer

logger = logging.getLogger(__name__)


class TriageGuard(BaseLayer):
    """Critical signals, or non-critical ones reported after a procedure, mean urgencias.

    A pure definition lookup ("¿qué es visión borrosa?") is not escalated; its
    signals are carried to the definition layer as a safety footnote.
    """

    layer = Layer.TRIAGE_GUARD

    async def handle(self, ctx: TurnContext) -> Optional[LayerReply]:
        facts = ctx.facts
        if not facts.danger_signals:
            return None

        contextual = (
            not facts.has_critical_signal
            and facts.procedure.likely_post_procedure
            and facts.symptom_report
        )
        if (facts.has_critical_signal or contextual) and not facts.definition_only:
            logger.info("TriageGuard: escalating signals=%s", facts.danger_signals)
            reply = responses.danger_signal_emergency(ctx.bot_name, facts.danger_signals, ctx.emergency_line)
            return LayerReply(reply, DeterministicRoute(DeterministicReason.EMERGENCY))

        if facts.definition_only:
            ctx.carried_signals = list(facts.danger_signals)
        return None
