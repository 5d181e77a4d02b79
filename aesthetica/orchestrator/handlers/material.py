"""High-risk material guidance."""
from __future__ import annotations

import logging
from typing import Optional

from aesthetica.orchestrator import responses
from aesthetica.orchestrator.handlers.base import BaseLayer, LayerReply, TurnContext
from aesthetica.orchestrator.types import DeterministicReason, DeterministicRoute, Layer, MaterialContext

logger = logging.getLogger(__name__)


class MaterialLayer(BaseLayer):
    """Answers only for high-risk materials; unknown context is left to the router."""

    layer = Layer.MATERIAL

    async def handle(self, ctx: TurnContext) -> Optional[LayerReply]:
        facts = ctx.facts
        material = facts.high_risk_material
        if material is None:
            return None

        route = DeterministicRoute(DeterministicReason.HIGH_RISK_MATERIAL)
        if facts.danger_signals:
            logger.info("MaterialLayer: %s with signals=%s", material.id, facts.danger_signals)
            return LayerReply(
                responses.high_risk_material_emergency(facts.danger_signals, ctx.emergency_line),
                route,
            )
        if facts.material_context is MaterialContext.CONSIDERING:
            return LayerReply(responses.high_risk_material_considering(material.description, ctx.quick), route)
        if facts.material_context is MaterialContext.ALREADY:
            return LayerReply(responses.high_risk_material_already(material.description, ctx.quick), route)
        return None
