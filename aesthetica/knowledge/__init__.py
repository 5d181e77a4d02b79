"""Static knowledge tables: complications, materials, definitions, emergency numbers."""
from aesthetica.knowledge.loader import (
    KnowledgeBase,
    get_knowledge_base,
    load_knowledge_base,
    parse_complications,
    parse_definitions,
    parse_emergencies,
    parse_materials,
)
from aesthetica.knowledge.models import (
    ComplicationRecord,
    DefinitionCategory,
    DefinitionRecord,
    EmergencyNumber,
    MaterialCategory,
    MaterialRecord,
    ProcedureType,
)

__all__ = [
    "KnowledgeBase",
    "get_knowledge_base",
    "load_knowledge_base",
    "parse_complications",
    "parse_definitions",
    "parse_emergencies",
    "parse_materials",
    "ComplicationRecord",
    "DefinitionCategory",
    "DefinitionRecord",
    "EmergencyNumber",
    "MaterialCategory",
    "MaterialRecord",
    "ProcedureType",
]
