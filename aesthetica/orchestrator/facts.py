"""Signals extracted once per message and shared by every layer."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Union

from aesthetica.knowledge import ComplicationRecord, KnowledgeBase, MaterialRecord
from aesthetica.nlp import NormalizedMessage
from aesthetica.orchestrator.classifiers.complications import ComplicationMatcher
from aesthetica.orchestrator.classifiers.danger_signals import (
    BREATHING_OR_CHEST,
    VISUAL_DISTURBANCE,
    DangerSignalDetector,
)
from aesthetica.orchestrator.classifiers.definitions import DefinitionMatch, DefinitionMatcher
from aesthetica.orchestrator.classifiers.intent import (
    infer_material_context,
    infer_procedure_context,
    is_definition_intent,
    is_symptom_report,
)
from aesthetica.orchestrator.classifiers.materials import MaterialDetector, pick_high_risk
from aesthetica.orchestrator.types import MaterialContext, ProcedureContext


@dataclass(frozen=True)
class MessageFacts:
    message: NormalizedMessage
    danger_signals: List[str] = field(default_factory=list)
    procedure: ProcedureContext = field(default_factory=ProcedureContext)
    definition_intent: bool = False
    symptom_report: bool = False
    materials: List[MaterialRecord] = field(default_factory=list)
    high_risk_material: Optional[MaterialRecord] = None
    material_context: MaterialContext = MaterialContext.UNKNOWN

    @property
    def material(self) -> Optional[MaterialRecord]:
        return self.materials[0] if self.materials else None

    @property
    def material_for_routing(self) -> Optional[MaterialRecord]:
        """A high-risk material, when present, takes precedence."""
        return self.high_risk_material or self.material

    @property
    def has_vision(self) -> bool:
        return VISUAL_DISTURBANCE in self.danger_signals

    @property
    def has_breathing_chest(self) -> bool:
        return BREATHING_OR_CHEST in self.danger_signals

    @property
    def has_critical_signal(self) -> bool:
        return self.has_vision or self.has_breathing_chest

    @property
    def definition_only(self) -> bool:
        """Asking what a term means, not reporting it happening."""
        return (
            self.definition_intent
            and not self.symptom_report
            and not self.procedure.likely_post_procedure
        )


class MessageAnalyzer:
    """Bundle of the knowledge-backed detectors; builds MessageFacts."""

    def __init__(
        self,
        knowledge: KnowledgeBase,
        *,
        max_materials: int = 3,
        danger_detector: Optional[DangerSignalDetector] = None,
    ) -> None:
        self._knowledge = knowledge
        self._max_materials = max_materials
        self.danger = danger_detector or DangerSignalDetector()
        self.materials = MaterialDetector(knowledge.materials)
        self.definitions = DefinitionMatcher(knowledge.definitions)
        self.complications = ComplicationMatcher(knowledge.complications)

    @property
    def knowledge(self) -> KnowledgeBase:
        return self._knowledge

    def analyze(self, message: Union[str, NormalizedMessage]) -> MessageFacts:
        msg = NormalizedMessage.coerce(message)
        materials = self.materials.find(msg, self._max_materials)
        return MessageFacts(
            message=msg,
            danger_signals=self.danger.detect(msg),
            procedure=infer_procedure_context(msg),
            definition_intent=is_definition_intent(msg),
            symptom_report=is_symptom_report(msg),
            materials=materials,
            high_risk_material=pick_high_risk(materials),
            material_context=infer_material_context(msg) if materials else MaterialContext.UNKNOWN,
        )

    def find_definition(self, message: Union[str, NormalizedMessage]) -> Optional[DefinitionMatch]:
        return self.definitions.find(message)

    def find_complication(self, message: Union[str, NormalizedMessage]) -> Optional[ComplicationRecord]:
        return self.complications.find_highest_severity(message)
