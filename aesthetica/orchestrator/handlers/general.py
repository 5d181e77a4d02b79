"""Canned replies for small talk and anything the brain is not asked about."""
from __future__ import annotations

from aesthetica.orchestrator import responses
from aesthetica.orchestrator.handlers.base import LayerReply, TurnContext
from aesthetica.orchestrator.types import GeneralReason, GeneralRoute, Layer, RouteDecision

_THANKS = "gracias"


class GeneralResponder:
    layer = Layer.GENERAL

    def reply(self, ctx: TurnContext, route: RouteDecision) -> LayerReply:
        if _THANKS in ctx.facts.message.text:
            text = responses.general_thanks(ctx.bot_name, ctx.quick)
        else:
            text = responses.general_orientation(ctx.quick)
        logged = route if isinstance(route, GeneralRoute) else GeneralRoute(GeneralReason.FALLBACK)
        return LayerReply(text, logged)
