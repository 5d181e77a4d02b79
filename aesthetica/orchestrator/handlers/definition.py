"""Answers "what is X" from the definitions table."""
from __future__ import annotations

from typing import Optional

from aesthetica.orchestrator import responses
from aesthetica.orchestrator.handlers.base import BaseLayer, LayerReply, TurnContext
from aesthetica.orchestrator.types import DeterministicReason, DeterministicRoute, Layer


class DefinitionLayer(BaseLayer):
    layer = Layer.DEFINITION

    async def handle(self, ctx: TurnContext) -> Optional[LayerReply]:
        if not ctx.facts.definition_intent or ctx.definition_match is None:
            return None
        record = ctx.definition_match.record
        reply = responses.definition(
            record.term,
            record.definition,
            carried_signals=ctx.carried_signals,
            safety_note=record.safety_note,
            quick=ctx.quick,
        )
        return LayerReply(reply, DeterministicRoute(DeterministicReason.DEFINITION))
