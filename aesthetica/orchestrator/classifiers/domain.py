"""Topic fence vocabulary and the small-talk classifier.

Keyword lists are stored already normalized (lowercase, no accents) and are
checked by plain substring containment. A few entries keep a trailing space
(``"java "``, ``"api "``) so they do not fire inside longer words.
"""
from __future__ import annotations

import re
from typing import Optional, Union

from aesthetica.nlp import NormalizedMessage
from aesthetica.orchestrator.types import SessionDomain

MessageLike = Union[str, NormalizedMessage]

ESTHETIC_KEYWORDS = (
    "medicina estetica",
    "estetica",
    "estetico",
    "esteticos",
    "clinica estetica",
    "clinica de belleza",
    "relleno",
    "rellenos",
    "acido hialuronico",
    "hialuronico",
    "hialuronato",
    "botox",
    "toxina",
    "toxina botulinica",
    "labios",
    "labio",
    "codigo de barras",
    "surco nasogeniano",
    "patas de gallo",
    "frente",
    "entrecejo",
    "ojeras",
    "ojera",
    "manchas",
    "melasma",
    "acne",
    "cicatriz",
    "cicatrices",
    "poros",
    "flacidez",
    "papada",
    "perfilado",
    "rinomodelacion",
    "nariz",
    "menton",
    "pomulo",
    "biopolimeros",
    "biopolimero",
    "aceite mineral",
    "silicona",
    "hidroxiapatita",
    "caha",
    "radiesse",
    "laser",
    "ipl",
    "luz pulsada",
    "depilacion laser",
    "depilacion",
    "peeling",
    "hifu",
    "radiofrecuencia",
    "mesoterapia",
    "carboxiterapia",
    "hilos tensores",
    "hilos",
)

OFFTOPIC_KEYWORDS = (
    # legal
    "contrato",
    "arrendamiento",
    "renta",
    "alquiler",
    "hipoteca",
    "prestamo",
    "pagare",
    "factura",
    "notario",
    "juicio",
    "demanda",
    "divorcio",
    "custodia",
    # finance / taxes
    "impuesto",
    "impuestos",
    "sat",
    "hacienda",
    "deuda",
    "tarjeta de credito",
    "credito",
    "credito hipotecario",
    "banco",
    "inversion",
    "criptomoneda",
    "bitcoin",
    "cripto",
    # programming
    "javascript",
    "python",
    "java ",
    "typescript",
    "react",
    "nextjs",
    "nodejs",
    "firebase",
    "programacion",
    "codigo",
    "frontend",
    "backend",
    "base de datos",
    "sql",
    "api ",
    "servidor",
    # homework
    "tarea",
    "examen",
    "resumen",
    "ensayo",
    "monografia",
    # generic marketing
    "marketing",
    "seo",
    "facebook ads",
    "google ads",
    "tiktok ads",
    "campana publicitaria",
    "publicidad",
    "anuncio",
)

# Words that turn a greeting into a real question.
IMPORTANT_KEYWORDS = (
    "botox",
    "toxina",
    "acido",
    "hialuron",
    "biopol",
    "silicona",
    "relleno",
    "hidroxiapatita",
    "caha",
    "radiesse",
    "laser",
    "ipl",
    "luz pulsada",
    "peeling",
    "hifu",
    "radiofrecuencia",
    "dolor",
    "vision",
    "fiebre",
)

GREETING_RE = re.compile(r"^(hola|holi|buenas|buenos dias|buenas tardes|buenas noches)\b")
CHATTER_RES = (
    re.compile(r"\b(como estas|que tal|todo bien|todo bn|todo ok)\b"),
    re.compile(r"\b(gracias|muchas gracias)\b"),
)

_VERY_SHORT_CHARS = 20


def has_esthetic_keyword(message: MessageLike) -> bool:
    return NormalizedMessage.coerce(message).contains_any(ESTHETIC_KEYWORDS)


def has_offtopic_keyword(message: MessageLike) -> bool:
    return NormalizedMessage.coerce(message).contains_any(OFFTOPIC_KEYWORDS)


def is_hard_small_talk(message: MessageLike) -> bool:
    """Pure greeting, pleasantry or thanks, regardless of what else is in the text."""
    text = NormalizedMessage.coerce(message).text
    return bool(GREETING_RE.search(text)) or any(r.search(text) for r in CHATTER_RES)


def is_small_talk(
    message: MessageLike,
    session_domain: Optional[SessionDomain] = None,
) -> bool:
    """Greetings and chit-chat, unless they carry a medical or off-topic keyword.

    Very short messages without keywords count as small talk too, except in a
    session already known to be about esthetics, where they are follow-ups.
    """
    msg = NormalizedMessage.coerce(message)
    domain = session_domain or SessionDomain.UNKNOWN
    text = msg.text

    has_greeting = bool(GREETING_RE.search(text))
    important = msg.contains_any(IMPORTANT_KEYWORDS)
    offtopic = msg.contains_any(OFFTOPIC_KEYWORDS)

    if has_greeting and (important or offtopic):
        return False
    if has_greeting or any(r.search(text) for r in CHATTER_RES):
        return True
    if len(text) <= _VERY_SHORT_CHARS:
        if domain is SessionDomain.ESTHETIC:
            return False
        return not important and not offtopic
    return False
