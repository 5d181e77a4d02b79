"""Complication triage by severity band."""
from __future__ import annotations

import logging
from typing import Optional

from aesthetica.knowledge.models import MAX_LEVEL, MIN_LEVEL
from aesthetica.orchestrator import responses
from aesthetica.orchestrator.facts import MessageAnalyzer
from aesthetica.orchestrator.handlers.base import BaseLayer, LayerReply, TurnContext
from aesthetica.orchestrator.types import DeterministicReason, DeterministicRoute, Layer

logger = logging.getLogger(__name__)

_MILD_MAX = 2


class ComplicationLayer(BaseLayer):
    """Severity >= 4 or forced urgency: emergency. <= 2: mild. 3: prompt review."""

    layer = Layer.COMPLICATION

    def __init__(self, analyzer: MessageAnalyzer) -> None:
        self._analyzer = analyzer

    async def handle(self, ctx: TurnContext) -> Optional[LayerReply]:
        record = self._analyzer.find_complication(ctx.facts.message)
        if record is None:
            return None

        if not MIN_LEVEL <= record.severity <= MAX_LEVEL:
            # The loader rejects these; a record built in code can still carry one.
            logger.error(
                "ComplicationLayer: %s has out-of-range severity %r, skipping",
                record.id,
                record.severity,
            )
            return None

        if record.is_urgent:
            reply = responses.complication_emergency(ctx.bot_name, record.guidance, ctx.emergency_line)
        elif record.severity <= _MILD_MAX:
            reply = responses.complication_mild(record.guidance, ctx.quick)
        else:
            reply = responses.complication_prompt_review(record.guidance, ctx.quick)
        return LayerReply(reply, DeterministicRoute(DeterministicReason.TRIAGE_COMPLICATION))
