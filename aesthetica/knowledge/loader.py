"""Load the JSON knowledge tables into immutable records.

Tables live in ``aesthetica/knowledge/data`` unless ``KNOWLEDGE_DIR`` (or an explicit
directory) points elsewhere. Materials and definitions accept either a bare list or
``{"__meta": ..., "items": [...]}``.
"""
from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

from aesthetica.core.exceptions import KnowledgeBaseError
from aesthetica.knowledge.models import (
    MAX_LEVEL,
    MIN_LEVEL,
    ComplicationRecord,
    DefinitionCategory,
    DefinitionRecord,
    EmergencyNumber,
    MaterialCategory,
    MaterialRecord,
    ProcedureType,
)
from aesthetica.nlp import normalize

logger = logging.getLogger(__name__)

DEFAULT_DATA_DIR = Path(__file__).resolve().parent / "data"

_COMPLICATIONS_FILE = "complications.json"
_MATERIALS_FILE = "materials.json"
_DEFINITIONS_FILE = "definitions.json"
_EMERGENCIES_FILE = "emergencies.json"

_GENERIC_EMERGENCY_LINE = (
    "Si estás en México, el número general de emergencias es el 911; "
    "en otros países, usa el número de emergencias local."
)


@dataclass(frozen=True)
class KnowledgeBase:
    """Read-only tables shared by every request."""

    complications: Tuple[ComplicationRecord, ...] = ()
    materials: Tuple[MaterialRecord, ...] = ()
    definitions: Tuple[DefinitionRecord, ...] = ()
    emergencies: Tuple[EmergencyNumber, ...] = ()

    def find_emergency_number(self, country: Optional[str]) -> Optional[EmergencyNumber]:
        """Lookup by country code or country name, ignoring case and accents."""
        query = normalize(country)
        if not query:
            return None
        for entry in self.emergencies:
            if query in (normalize(entry.country_code), normalize(entry.country_name)):
                return entry
        return None

    def build_emergency_line(self, country: Optional[str]) -> str:
        entry = self.find_emergency_number(country)
        if entry is None:
            return _GENERIC_EMERGENCY_LINE
        return f"En {entry.country_name}, el número principal de emergencias es: {entry.number}."


# ── Parsing helpers ─────────────────────────────────────────────────


def _read_json(path: Path) -> Any:
    try:
        with path.open(encoding="utf-8") as fh:
            return json.load(fh)
    except FileNotFoundError as exc:
        raise KnowledgeBaseError(f"Knowledge table not found: {path}", cause=exc) from exc
    except json.JSONDecodeError as exc:
        raise KnowledgeBaseError(f"Invalid JSON in {path.name}: {exc}", cause=exc) from exc


def _items(raw: Any, table: str) -> List[Dict[str, Any]]:
    if isinstance(raw, dict):
        raw = raw.get("items") or []
    if not isinstance(raw, list):
        raise KnowledgeBaseError(f"{table}: expected a list of records or {{'items': [...]}}")
    for i, item in enumerate(raw):
        if not isinstance(item, dict):
            raise KnowledgeBaseError(f"{table}[{i}]: expected an object, got {type(item).__name__}")
    return raw


def _required_str(item: Dict[str, Any], key: str, table: str) -> str:
    value = item.get(key)
    if not isinstance(value, str) or not value.strip():
        raise KnowledgeBaseError(
            f"{table}: record {item.get('id', '?')!r} is missing {key!r}",
            details={"table": table, "field": key},
        )
    return value.strip()


def _level(item: Dict[str, Any], key: str, table: str) -> int:
    value = item.get(key)
    if isinstance(value, bool) or not isinstance(value, int) or not MIN_LEVEL <= value <= MAX_LEVEL:
        raise KnowledgeBaseError(
            f"{table}: record {item.get('id', '?')!r} has {key}={value!r}, "
            f"expected an integer in [{MIN_LEVEL}, {MAX_LEVEL}]",
            details={"table": table, "field": key, "value": value},
        )
    return value


def _str_tuple(value: Any) -> Tuple[str, ...]:
    if not value:
        return ()
    if isinstance(value, str):
        value = [value]
    return tuple(s.strip() for s in value if isinstance(s, str) and s.strip())


def _usable(keywords: Iterable[str]) -> bool:
    return any(len(normalize(k)) >= 3 for k in keywords)


# ── Table parsers ───────────────────────────────────────────────────


def parse_complications(raw: Any) -> Tuple[ComplicationRecord, ...]:
    table = "complications"
    records: List[ComplicationRecord] = []
    for item in _items(raw, table):
        record_id = _required_str(item, "id", table)
        try:
            procedure = ProcedureType(str(item.get("procedure", "otros")))
        except ValueError:
            logger.warning("complications: %s has unknown procedure %r, using 'otros'",
                           record_id, item.get("procedure"))
            procedure = ProcedureType.OTROS
        keywords = _str_tuple(item.get("keywords"))
        if not _usable(keywords):
            logger.warning("complications: %s has no usable keyword and can never match", record_id)
        records.append(
            ComplicationRecord(
                id=record_id,
                procedure=procedure,
                name=_required_str(item, "name", table),
                severity=_level(item, "severity", table),
                keywords=keywords,
                guidance=_required_str(item, "guidance", table),
                internal_notes=item.get("internal_notes") or None,
                force_urgent=bool(item.get("force_urgent", False)),
            )
        )
    return tuple(records)


def parse_materials(raw: Any) -> Tuple[MaterialRecord, ...]:
    table = "materials"
    records: List[MaterialRecord] = []
    for item in _items(raw, table):
        record_id = _required_str(item, "id", table)
        try:
            category = MaterialCategory(str(item.get("category")))
        except ValueError as exc:
            raise KnowledgeBaseError(
                f"materials: record {record_id!r} has unknown category {item.get('category')!r}",
                cause=exc,
            ) from exc
        records.append(
            MaterialRecord(
                id=record_id,
                name=_required_str(item, "name", table),
                category=category,
                risk_level=_level(item, "risk_level", table),
                description=_required_str(item, "description", table),
                blacklisted=bool(item.get("blacklisted", False)),
                safe_in_expert_hands=bool(item.get("safe_in_expert_hands", False)),
                brands=_str_tuple(item.get("brands")),
                synonyms=_str_tuple(item.get("synonyms")),
            )
        )
    return tuple(records)


def parse_definitions(raw: Any) -> Tuple[DefinitionRecord, ...]:
    table = "definitions"
    records: List[DefinitionRecord] = []
    for item in _items(raw, table):
        record_id = _required_str(item, "id", table)
        category: Optional[DefinitionCategory] = None
        if item.get("category"):
            try:
                category = DefinitionCategory(str(item["category"]))
            except ValueError:
                logger.warning("definitions: %s has unknown category %r", record_id, item["category"])
        term = _required_str(item, "term", table)
        keywords = _str_tuple(item.get("keywords"))
        if not _usable((term,) + keywords):
            logger.warning("definitions: %s has no usable term or keyword and can never match", record_id)
        records.append(
            DefinitionRecord(
                id=record_id,
                term=term,
                definition=_required_str(item, "definition", table),
                keywords=keywords,
                safety_note=item.get("safety_note") or None,
                category=category,
                priority=int(item.get("priority") or 0),
            )
        )
    return tuple(records)


def parse_emergencies(raw: Any) -> Tuple[EmergencyNumber, ...]:
    table = "emergencies"
    return tuple(
        EmergencyNumber(
            country_code=_required_str(item, "country_code", table),
            country_name=_required_str(item, "country_name", table),
            number=_required_str(item, "number", table),
            notes=item.get("notes") or None,
        )
        for item in _items(raw, table)
    )


# ── Public API ──────────────────────────────────────────────────────


def load_knowledge_base(directory: Optional[Union[str, Path]] = None) -> KnowledgeBase:
    """Read and validate all four tables. Raises KnowledgeBaseError on bad data."""
    if directory is None:
        directory = os.environ.get("KNOWLEDGE_DIR") or DEFAULT_DATA_DIR
    base = Path(directory)
    kb = KnowledgeBase(
        complications=parse_complications(_read_json(base / _COMPLICATIONS_FILE)),
        materials=parse_materials(_read_json(base / _MATERIALS_FILE)),
        definitions=parse_definitions(_read_json(base / _DEFINITIONS_FILE)),
        emergencies=parse_emergencies(_read_json(base / _EMERGENCIES_FILE)),
    )
    logger.info(
        "Knowledge base loaded from %s: %d complications, %d materials, %d definitions, %d countries",
        base, len(kb.complications), len(kb.materials), len(kb.definitions), len(kb.emergencies),
    )
    return kb


_default_kb: Optional[KnowledgeBase] = None


def get_knowledge_base() -> KnowledgeBase:
    """Process-wide knowledge base, loaded on first use."""
    global _default_kb
    if _default_kb is None:
        _default_kb = load_knowledge_base()
    return _default_kb
