"""Thematic fence: keep the conversation on esthetic medicine."""
from __future__ import annotations

import logging
from typing import Optional

from aesthetica.orchestrator import responses
from aesthetica.orchestrator.classifiers.domain import (
    has_esthetic_keyword,
    has_offtopic_keyword,
    is_small_talk,
)
from aesthetica.orchestrator.handlers.base import BaseLayer, LayerReply, TurnContext
from aesthetica.orchestrator.types import Layer, SessionDomain

logger = logging.getLogger(__name__)


class DomainGate(BaseLayer):
    """Blocks off-topic messages. Safety signals and small talk bypass it."""

    layer = Layer.DOMAIN_GATE

    async def handle(self, ctx: TurnContext) -> Optional[LayerReply]:
        facts = ctx.facts
        if facts.danger_signals or facts.high_risk_material is not None:
            return None
        if is_small_talk(facts.message, ctx.session_domain):
            return None

        esthetic = has_esthetic_keyword(facts.message)
        offtopic = has_offtopic_keyword(facts.message)

        if ctx.session_domain is SessionDomain.ESTHETIC:
            # follow-ups pass unless clearly about something else
            if offtopic and not esthetic:
                logger.debug("DomainGate: off-topic message in esthetic session")
                return LayerReply(responses.offtopic_in_esthetic_session(ctx.bot_name, ctx.quick), None)
            return None

        if offtopic and not esthetic:
            logger.debug("DomainGate: out of scope")
            return LayerReply(responses.out_of_scope(ctx.bot_name, ctx.quick), None)
        if not esthetic and not offtopic:
            logger.debug("DomainGate: ambiguous message, asking for an esthetic topic")
            return LayerReply(responses.please_specify(ctx.quick), None)
        return None
