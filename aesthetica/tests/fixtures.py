"""Small in-code knowledge base and fake LLM clients shared by the tests."""
from __future__ import annotations

import asyncio
from typing import List, Optional

from aesthetica.clients.llm.base import BaseLLMClient, LLMMessage
from aesthetica.knowledge import (
    ComplicationRecord,
    DefinitionRecord,
    EmergencyNumber,
    KnowledgeBase,
    MaterialCategory,
    MaterialRecord,
    ProcedureType,
)

BRUISE_GUIDANCE = "Un moretón tras un relleno suele ser leve y se reabsorbe en pocos días."
OCCLUSION_GUIDANCE = "Lo que describes puede corresponder a una oclusión vascular."
PTOSIS_GUIDANCE = "La caída del párpado tras toxina suele ser temporal."
BIOPOLYMER_DESCRIPTION = "Los biopolímeros son rellenos permanentes no autorizados."
PTOSIS_DEFINITION = "La ptosis es la caída del párpado superior."
PTOSIS_SAFETY_NOTE = "Si aparece de golpe con visión doble, busca atención urgente."
HYALURONIC_DEFINITION = "El ácido hialurónico es un relleno reabsorbible."


def build_knowledge() -> KnowledgeBase:
    return KnowledgeBase(
        complications=(
            ComplicationRecord(
                id="moreton_post_relleno",
                procedure=ProcedureType.RELLENOS,
                name="Moretón",
                severity=1,
                keywords=("moreton", "hematoma"),
                guidance=BRUISE_GUIDANCE,
            ),
            ComplicationRecord(
                id="oclusion_vascular",
                procedure=ProcedureType.RELLENOS,
                name="Oclusión vascular",
                severity=5,
                keywords=("piel blanca tras relleno", "zona fria y palida"),
                guidance=OCCLUSION_GUIDANCE,
                force_urgent=True,
            ),
            ComplicationRecord(
                id="ptosis_toxina",
                procedure=ProcedureType.TOXINA,
                name="Ptosis palpebral",
                severity=3,
                keywords=("parpado caido",),
                guidance=PTOSIS_GUIDANCE,
            ),
        ),
        materials=(
            MaterialRecord(
                id="ah_reabsorbible",
                name="Ácido hialurónico",
                category=MaterialCategory.AH,
                risk_level=1,
                description="Relleno reabsorbible.",
                safe_in_expert_hands=True,
                synonyms=("hialuronato",),
            ),
            MaterialRecord(
                id="biopolimeros",
                name="Biopolímeros",
                category=MaterialCategory.BIOPOLIMEROS,
                risk_level=5,
                description=BIOPOLYMER_DESCRIPTION,
                blacklisted=True,
            ),
            MaterialRecord(
                id="toxina_botulinica",
                name="Toxina botulínica",
                category=MaterialCategory.TOXINA,
                risk_level=1,
                description="Relaja músculos de forma temporal.",
                safe_in_expert_hands=True,
                brands=("Botox",),
            ),
        ),
        definitions=(
            DefinitionRecord(
                id="def_ptosis",
                term="ptosis",
                definition=PTOSIS_DEFINITION,
                keywords=("ptosis palpebral",),
                safety_note=PTOSIS_SAFETY_NOTE,
            ),
            DefinitionRecord(
                id="def_ah",
                term="ácido hialurónico",
                definition=HYALURONIC_DEFINITION,
                keywords=("hialuronico",),
            ),
        ),
        emergencies=(
            EmergencyNumber(country_code="MX", country_name="México", number="911"),
            EmergencyNumber(country_code="ES", country_name="España", number="112"),
        ),
    )


class FakeLLM(BaseLLMClient):
    """Returns a fixed answer and remembers what it was sent."""

    def __init__(self, answer: str = "Respuesta del modelo.", *, delay: float = 0.0, error: Optional[Exception] = None):
        self.answer = answer
        self.delay = delay
        self.error = error
        self.calls: List[List[LLMMessage]] = []

    @property
    def provider(self) -> str:
        return "fake"

    async def chat(self, messages: List[LLMMessage]) -> str:
        self.calls.append(messages)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.answer
