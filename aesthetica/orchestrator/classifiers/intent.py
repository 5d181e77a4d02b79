"""Lexical cues about what the user is doing: asking, reporting, or describing a procedure."""
from __future__ import annotations

import re
from typing import Optional, Union

from aesthetica.nlp import NormalizedMessage
from aesthetica.orchestrator.classifiers.domain import is_hard_small_talk
from aesthetica.orchestrator.types import MaterialContext, ProcedureContext

MessageLike = Union[str, NormalizedMessage]

DEFINITION_QUESTION_RES = (
    re.compile(r"\b(q|que)\s+(significa|es)\b"),
    re.compile(r"\b(definicion|define|significado\s+de)\b"),
)

SYMPTOM_CUES = (
    "tengo",
    "me pasa",
    "me paso",
    "me duele",
    "me arde",
    "me siento",
    "siento",
    "presento",
    "empece",
    "ahora",
    "desde",
    "me dejo",
    "veo",
    "no veo",
    "se me nubla",
    "se me nubl",
)

INJECTION_CUES = (
    "me inyectaron",
    "me inyecte",
    "me aplicaron",
    "me aplique",
    "me pusieron",
    "me puse",
    "me lo pusieron",
    "me lo aplicaron",
    "me realizaron",
    "me hice",
)

ENERGY_DEVICE_CUES = ("laser", "ipl", "luz pulsada", "radiofrecuencia", "hifu")

ALREADY_CUES = (
    "me puse",
    "me lo puse",
    "me inyectaron",
    "me inyecte",
    "me aplique",
    "me aplicaron",
    "ya me puse",
    "ya me lo puse",
    "ya me inyectaron",
    "ya me aplicaron",
    "tengo",
    "traigo",
    "desde hace",
    "hace",
    "me hicieron",
    "me pusieron",
    "me lo pusieron",
)

CONSIDERING_CUES = (
    "quiero",
    "me quiero",
    "pienso",
    "estoy pensando",
    "me ofrecen",
    "me ofrecieron",
    "me recomendaron",
    "me recomiendan",
    "me sugirieron",
    "me sugieren",
    "me lo voy a poner",
    "me lo pondre",
    "me lo pondria",
    "me lo pongo",
    "cotice",
    "cotizar",
)

_DEFINITION_TAIL_RES = (
    re.compile(r"\b(q|que)\s+(significa|es)\s+"),
    re.compile(r"\b(definicion|define|significado\s+de)\s+"),
)

# Bare-term heuristic limits, measured on the trimmed raw text.
_BARE_TERM_MAX_CHARS = 26
_BARE_TERM_TWO_TOKEN_MAX_CHARS = 22


def is_definition_question(message: MessageLike) -> bool:
    """Explicit "qué es / qué significa / definición de" phrasing."""
    text = NormalizedMessage.coerce(message).text
    return any(r.search(text) for r in DEFINITION_QUESTION_RES)


def is_symptom_report(message: MessageLike) -> bool:
    """First-person, present or recent experience cues ("tengo", "me duele", "veo"...)."""
    return NormalizedMessage.coerce(message).contains_any(SYMPTOM_CUES)


def infer_procedure_context(message: MessageLike) -> ProcedureContext:
    msg = NormalizedMessage.coerce(message)
    injection = msg.contains_any(INJECTION_CUES)
    energy = msg.contains_any(ENERGY_DEVICE_CUES)
    return ProcedureContext(
        likely_post_procedure=injection or energy,
        has_injection_verb=injection,
        has_energy_device_hint=energy,
    )


def infer_material_context(message: MessageLike) -> MaterialContext:
    """Already-applied phrasing wins over considering phrasing."""
    msg = NormalizedMessage.coerce(message)
    if msg.contains_any(ALREADY_CUES):
        return MaterialContext.ALREADY
    if msg.contains_any(CONSIDERING_CUES):
        return MaterialContext.CONSIDERING
    return MaterialContext.UNKNOWN


def looks_like_bare_term(message: MessageLike) -> bool:
    """A short isolated term ("ptosis", "acido hialuronico") that is probably a lookup.

    Never true for greetings, symptom reports or post-procedure messages.
    """
    msg = NormalizedMessage.coerce(message)
    raw = msg.raw.strip()
    if not raw or len(raw) > _BARE_TERM_MAX_CHARS:
        return False
    token_count = len(msg.tokens)
    if token_count == 0 or token_count > 2:
        return False
    if token_count == 2 and len(raw) > _BARE_TERM_TWO_TOKEN_MAX_CHARS:
        return False
    if is_hard_small_talk(msg):
        return False
    if is_symptom_report(msg):
        return False
    return not infer_procedure_context(msg).likely_post_procedure


def is_definition_intent(message: MessageLike) -> bool:
    return is_definition_question(message) or looks_like_bare_term(message)


def definition_query_tail(message: MessageLike, max_tokens: int = 6) -> Optional[str]:
    """Up to *max_tokens* normalized tokens after an explicit definition pattern."""
    msg = NormalizedMessage.coerce(message)
    for pattern in _DEFINITION_TAIL_RES:
        match = pattern.search(msg.text)
        if not match:
            continue
        tail = msg.text[match.end():].split()
        if tail:
            return " ".join(tail[:max_tokens])
    return None
