"""Alarm-symptom detection with a fixed, priority-ranked rule table."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Sequence, Tuple, Union

from aesthetica.nlp import NormalizedMessage

VISUAL_DISTURBANCE = "alteraciones visuales"
BREATHING_OR_CHEST = "dificultad para respirar o dolor/opresión en el pecho"

CRITICAL_LABELS = frozenset({VISUAL_DISTURBANCE, BREATHING_OR_CHEST})


@dataclass(frozen=True)
class DangerRule:
    label: str
    priority: int
    keywords: Tuple[str, ...]


DEFAULT_DANGER_RULES: Tuple[DangerRule, ...] = (
    DangerRule(
        VISUAL_DISTURBANCE,
        100,
        (
            "vision borrosa",
            "vista borrosa",
            "veo borroso",
            "veo borrosa",
            "no veo",
            "perdi vision",
            "perdida de vision",
            "ceguera",
            "se me nubla la vision",
            "se me nubla",
            "borroso",
            "borrosa",
        ),
    ),
    DangerRule(
        BREATHING_OR_CHEST,
        95,
        (
            "dificultad para respirar",
            "falta de aire",
            "me ahogo",
            "opresion en el pecho",
            "dolor en el pecho",
            "pecho apretado",
        ),
    ),
    DangerRule(
        "cambios de color en la piel (palidez/morado/negro)",
        90,
        ("palido", "palida", "morado", "violaceo", "negro", "cambio de color"),
    ),
    DangerRule(
        "piel fría o entumecimiento",
        85,
        ("piel fria", "entumecimiento", "hormigueo", "adormecimiento"),
    ),
    DangerRule("dolor intenso", 80, ("dolor intenso", "dolor fuerte", "dolor insoportable")),
    DangerRule("ampollas o necrosis", 78, ("ampolla", "ampollas", "necrosis")),
    DangerRule("fiebre o datos de infección (secreción/pus)", 75, ("fiebre", "pus", "secrecion")),
    DangerRule(
        "inflamación que progresa rápido",
        70,
        ("inflamacion rapida", "empeora rapido", "hinchazon rapida", "aumento rapido"),
    ),
    DangerRule("mareo o desmayo", 60, ("mareo", "desmayo")),
)


class DangerSignalDetector:
    """Return the distinct labels of every matching rule, highest priority first."""

    def __init__(self, rules: Sequence[DangerRule] = DEFAULT_DANGER_RULES) -> None:
        self._rules = tuple(rules)

    @property
    def rules(self) -> Tuple[DangerRule, ...]:
        return self._rules

    def detect(self, message: Union[str, NormalizedMessage]) -> List[str]:
        msg = NormalizedMessage.coerce(message)
        best: Dict[str, int] = {}
        for rule in self._rules:
            if not msg.matches_any(rule.keywords):
                continue
            if rule.label not in best or rule.priority > best[rule.label]:
                best[rule.label] = rule.priority
        # sorted() is stable: equal priorities keep table order
        return [label for label, _ in sorted(best.items(), key=lambda kv: -kv[1])]


def is_critical(labels: Sequence[str]) -> bool:
    """Visual disturbance or breathing/chest symptoms."""
    return any(label in CRITICAL_LABELS for label in labels)


_default_detector = DangerSignalDetector()


def detect_danger_signals(message: Union[str, NormalizedMessage]) -> List[str]:
    return _default_detector.detect(message)
