"""Quality events: what is worth counting in session telemetry for one message.

Computed from the same facts as the route but never influences the reply.
"""
from __future__ import annotations

from typing import Optional

from aesthetica.orchestrator.classifiers.domain import is_small_talk
from aesthetica.orchestrator.facts import MessageAnalyzer, MessageFacts
from aesthetica.orchestrator.types import (
    ComplicationEvent,
    DangerSignalEvent,
    MaterialEvent,
    NoEvent,
    QualityEvent,
)


def classify_quality_event(
    analyzer: MessageAnalyzer,
    message: str,
    facts: Optional[MessageFacts] = None,
) -> QualityEvent:
    """Small talk, then complication, then material, then bare danger signals.

    Danger signals in a definition lookup are not counted: asking what
    "visión borrosa" means is not reporting it.
    """
    if facts is None:
        facts = analyzer.analyze(message)
    msg = facts.message

    if is_small_talk(msg):
        return NoEvent("small_talk")

    complication = analyzer.find_complication(msg)
    if complication is not None:
        return ComplicationEvent(
            id=complication.id,
            severity=complication.severity,
            urgent=complication.is_urgent,
        )

    material = facts.material_for_routing
    if material is not None:
        signals = tuple(facts.danger_signals) if material.is_high_risk else ()
        return MaterialEvent(
            id=material.id,
            risk=material.risk_level,
            blacklisted=material.blacklisted,
            urgent=material.is_high_risk and bool(signals),
            context=facts.material_context,
            danger_signals=signals,
        )

    if not facts.definition_intent and facts.danger_signals:
        return DangerSignalEvent(danger_signals=tuple(facts.danger_signals))

    return NoEvent("general")
