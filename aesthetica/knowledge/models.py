"""Immutable records for the static knowledge tables."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

MIN_LEVEL = 0
MAX_LEVEL = 5
HIGH_RISK_LEVEL = 4


class ProcedureType(str, Enum):
    RELLENOS = "rellenos"
    TOXINA = "toxina"
    HILOS = "hilos"
    LASER = "laser"
    BIOESTIMULADORES = "bioestimuladores"
    CRIOLIPOLISIS = "criolipolisis"
    MESOTERAPIA = "mesoterapia"
    PEELINGS = "peelings"
    MICRONEEDLING = "microneedling"
    OTROS = "otros"


class MaterialCategory(str, Enum):
    """Injectable/material classes."""
    AH = "ah"
    CAHA = "caha"
    PLLA = "plla"
    PCL_CMC = "pcl_cmc"
    TOXINA = "toxina"
    BIOPOLIMEROS = "biopolimeros"
    SILICONA_LIQUIDA = "silicona_liquida"
    PMMA = "pmma"
    ACEITES = "aceites"
    OTRO = "otro"


class DefinitionCategory(str, Enum):
    SINTOMA = "sintoma"
    COMPLICACION = "complicacion"
    MATERIAL = "material"
    PROCEDIMIENTO = "procedimiento"
    DISPOSITIVO = "dispositivo"
    CONCEPTO = "concepto"


@dataclass(frozen=True)
class ComplicationRecord:
    """A triage rule: trigger keywords mapped to a severity and patient guidance."""

    id: str
    procedure: ProcedureType
    name: str
    severity: int
    keywords: Tuple[str, ...]
    guidance: str
    internal_notes: Optional[str] = None
    force_urgent: bool = False

    @property
    def is_urgent(self) -> bool:
        return self.severity >= HIGH_RISK_LEVEL or self.force_urgent


@dataclass(frozen=True)
class MaterialRecord:
    id: str
    name: str
    category: MaterialCategory
    risk_level: int
    description: str
    blacklisted: bool = False
    safe_in_expert_hands: bool = False
    brands: Tuple[str, ...] = ()
    synonyms: Tuple[str, ...] = ()

    @property
    def is_high_risk(self) -> bool:
        return self.blacklisted or self.risk_level >= HIGH_RISK_LEVEL


@dataclass(frozen=True)
class DefinitionRecord:
    id: str
    term: str
    definition: str
    keywords: Tuple[str, ...] = ()
    safety_note: Optional[str] = None
    category: Optional[DefinitionCategory] = None
    priority: int = 0


@dataclass(frozen=True)
class EmergencyNumber:
    country_code: str
    country_name: str
    number: str
    notes: Optional[str] = None
