"""Material mentions: names, brands, synonyms and lay phrasing per category."""
from __future__ import annotations

from typing import Dict, List, Optional, Sequence, Tuple, Union

from aesthetica.knowledge.models import MaterialCategory, MaterialRecord
from aesthetica.nlp import NormalizedMessage, normalize

# Common lay phrasing not always present in the records themselves.
# Kept narrow on purpose: "silicona" or "aceite" alone would catch implants and skincare.
CATEGORY_HINTS: Dict[MaterialCategory, Tuple[str, ...]] = {
    MaterialCategory.AH: ("acido hialuronico", "hialuronico", "hialuron", "filler de acido hialuronico"),
    MaterialCategory.TOXINA: ("toxina botulinica", "toxina", "botox", "btx"),
    MaterialCategory.CAHA: ("caha", "hidroxiapatita de calcio", "hidroxiapatita", "radiesse", "relleno de calcio"),
    MaterialCategory.PLLA: (
        "plla",
        "acido polilactico",
        "poli l lactico",
        "sculptra",
        "bioestimulador plla",
        "bioestimulador de colageno",
    ),
    MaterialCategory.PCL_CMC: ("pcl", "policaprolactona", "ellanse", "pcl cmc", "microesferas de pcl"),
    MaterialCategory.BIOPOLIMEROS: (
        "biopolimero",
        "biopolimeros",
        "modelante",
        "modelantes",
        "relleno permanente no autorizado",
    ),
    MaterialCategory.SILICONA_LIQUIDA: (
        "silicona liquida",
        "silicona inyectable",
        "silicone oil injection",
        "silicona industrial",
    ),
    MaterialCategory.PMMA: ("pmma", "polimetilmetacrilato", "bellafill", "artefill", "relleno permanente pmma"),
    MaterialCategory.ACEITES: (
        "aceite mineral",
        "aceite de bebe",
        "parafina",
        "vaselina",
        "oil injection",
        "paraffin injection",
    ),
    MaterialCategory.OTRO: ("relleno desconocido", "material desconocido", "sustancia desconocida", "sin trazabilidad"),
}

_MIN_CANDIDATE_CHARS = 3


def candidate_phrases(material: MaterialRecord) -> Tuple[str, ...]:
    """Name, brands, synonyms and category hints, minus anything under 3 normalized chars."""
    raw = (material.name,) + material.brands + material.synonyms + CATEGORY_HINTS.get(material.category, ())
    return tuple(
        phrase.strip()
        for phrase in raw
        if phrase and len(normalize(phrase)) >= _MIN_CANDIDATE_CHARS
    )


def pick_high_risk(materials: Sequence[MaterialRecord]) -> Optional[MaterialRecord]:
    """First blacklisted or risk >= 4 material, if any."""
    return next((m for m in materials if m.is_high_risk), None)


class MaterialDetector:
    """Scan materials high-risk first, then by descending risk, up to a result cap."""

    def __init__(self, materials: Sequence[MaterialRecord]) -> None:
        # sorted() is stable: records of equal rank keep table order
        ordered = sorted(materials, key=lambda m: (not m.is_high_risk, -m.risk_level))
        self._scan: List[Tuple[MaterialRecord, Tuple[str, ...]]] = [
            (m, candidate_phrases(m)) for m in ordered
        ]

    def find(
        self,
        message: Union[str, NormalizedMessage],
        max_results: int = 3,
    ) -> List[MaterialRecord]:
        msg = NormalizedMessage.coerce(message)
        hits: List[MaterialRecord] = []
        seen: set[str] = set()
        for material, candidates in self._scan:
            if len(hits) >= max_results:
                break
            if material.id in seen:
                continue
            if msg.matches_any(candidates):
                hits.append(material)
                seen.add(material.id)
        return hits
