"""Route decision for messages that cleared the safety layers."""
from __future__ import annotations

import re
from typing import Optional, Union

from aesthetica.knowledge import MaterialRecord
from aesthetica.nlp import NormalizedMessage
from aesthetica.orchestrator.classifiers.domain import is_small_talk
from aesthetica.orchestrator.types import (
    BrainReason,
    BrainRoute,
    DeterministicReason,
    DeterministicRoute,
    GeneralReason,
    GeneralRoute,
    MaterialContext,
    RouteDecision,
    SessionDomain,
)

PLAN_DECISION_RES = (
    re.compile(r"\b(cuando|en que momento|cuanto tiempo|intervalo|esperar|despues de|antes de)\b"),
    re.compile(r"\b(puedo|debo|conviene|recomiendas|recomendable|mejor|peor)\b"),
    re.compile(r"\b(cambiar de|pasar de|vs|versus|comparar|diferencia)\b"),
    re.compile(r"\b(dosis|sesiones|protocolo|indicacion|contraindicacion)\b"),
)
EDUCATIONAL_BROAD_RE = re.compile(
    r"\b(riesgos|complicaciones|que tan seguro|peligroso|efectos secundarios|probabilidad)\b"
)

_LONG_MESSAGE_CHARS = 70
_MULTI_QUESTION_MARKS = 2


def looks_like_plan_or_decision(message: Union[str, NormalizedMessage]) -> bool:
    """Timing, comparison, dosage or protocol phrasing; long or multi-question messages."""
    msg = NormalizedMessage.coerce(message)
    if any(r.search(msg.text) for r in PLAN_DECISION_RES):
        return True
    if len(msg.text) >= _LONG_MESSAGE_CHARS:
        return True
    # Question marks are stripped by normalization, so count them on the raw text.
    return msg.raw.count("?") >= _MULTI_QUESTION_MARKS


def looks_like_educational_broad(message: Union[str, NormalizedMessage]) -> bool:
    return bool(EDUCATIONAL_BROAD_RE.search(NormalizedMessage.coerce(message).text))


def decide_route(
    message: Union[str, NormalizedMessage],
    *,
    has_definition_hit: bool,
    definition_intent: bool,
    material: Optional[MaterialRecord],
    material_context: MaterialContext,
    session_domain: SessionDomain = SessionDomain.UNKNOWN,
) -> RouteDecision:
    """Fixed precedence; the first matching rule wins."""
    msg = NormalizedMessage.coerce(message)

    if is_small_talk(msg, session_domain):
        return GeneralRoute(GeneralReason.SMALL_TALK)

    if definition_intent and has_definition_hit:
        return DeterministicRoute(DeterministicReason.DEFINITION)
    if definition_intent:
        return BrainRoute(BrainReason.DEFINITION_UNKNOWN)

    if material is not None and material.is_high_risk and material_context.is_known:
        return DeterministicRoute(DeterministicReason.HIGH_RISK_MATERIAL)

    if looks_like_plan_or_decision(msg):
        return BrainRoute(BrainReason.PLAN_DECISION)
    if looks_like_educational_broad(msg):
        return BrainRoute(BrainReason.EDUCATIONAL_BROAD)

    return BrainRoute(BrainReason.GENERAL_QUESTION)
