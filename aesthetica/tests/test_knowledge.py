"""Knowledge table parsing and validation."""
from __future__ import annotations

import json
import tempfile
import unittest
from pathlib import Path

from aesthetica.core.exceptions import KnowledgeBaseError
from aesthetica.knowledge import (
    ProcedureType,
    load_knowledge_base,
    parse_complications,
    parse_definitions,
    parse_emergencies,
    parse_materials,
)
from aesthetica.tests.fixtures import build_knowledge


def _complication(**overrides):
    item = {
        "id": "edema",
        "procedure": "rellenos",
        "name": "Edema",
        "severity": 2,
        "keywords": ["hinchazon"],
        "guidance": "Suele ceder en días.",
    }
    item.update(overrides)
    return item


class TestParseComplications(unittest.TestCase):
    def test_valid_record(self):
        (record,) = parse_complications([_complication()])
        self.assertEqual(record.id, "edema")
        self.assertEqual(record.procedure, ProcedureType.RELLENOS)
        self.assertEqual(record.keywords, ("hinchazon",))
        self.assertFalse(record.is_urgent)

    def test_severity_out_of_range_rejected(self):
        with self.assertRaises(KnowledgeBaseError):
            parse_complications([_complication(severity=6)])
        with self.assertRaises(KnowledgeBaseError):
            parse_complications([_complication(severity=-1)])
        with self.assertRaises(KnowledgeBaseError):
            parse_complications([_complication(severity="3")])

    def test_unknown_procedure_falls_back_to_otros(self):
        (record,) = parse_complications([_complication(procedure="liposuccion")])
        self.assertEqual(record.procedure, ProcedureType.OTROS)

    def test_force_urgent(self):
        (record,) = parse_complications([_complication(severity=1, force_urgent=True)])
        self.assertTrue(record.is_urgent)

    def test_missing_guidance_rejected(self):
        item = _complication()
        del item["guidance"]
        with self.assertRaises(KnowledgeBaseError):
            parse_complications([item])

    def test_not_a_list(self):
        with self.assertRaises(KnowledgeBaseError):
            parse_complications("nope")


class TestParseOtherTables(unittest.TestCase):
    def test_materials_with_meta_wrapper(self):
        raw = {
            "__meta": {"version": 1},
            "items": [
                {
                    "id": "pmma",
                    "name": "PMMA",
                    "category": "pmma",
                    "risk_level": 4,
                    "description": "Relleno permanente.",
                    "brands": ["Bellafill"],
                }
            ],
        }
        (record,) = parse_materials(raw)
        self.assertTrue(record.is_high_risk)
        self.assertEqual(record.brands, ("Bellafill",))

    def test_material_unknown_category_rejected(self):
        raw = [{"id": "x", "name": "X", "category": "plastico", "risk_level": 1, "description": "d"}]
        with self.assertRaises(KnowledgeBaseError):
            parse_materials(raw)

    def test_material_risk_out_of_range_rejected(self):
        raw = [{"id": "x", "name": "X", "category": "otro", "risk_level": 9, "description": "d"}]
        with self.assertRaises(KnowledgeBaseError):
            parse_materials(raw)

    def test_definitions(self):
        (record,) = parse_definitions([
            {"id": "d", "term": "fibrosis", "definition": "Tejido cicatricial.", "keywords": "fibrosis tras relleno"}
        ])
        self.assertEqual(record.keywords, ("fibrosis tras relleno",))
        self.assertIsNone(record.category)

    def test_emergencies(self):
        (entry,) = parse_emergencies([{"country_code": "CO", "country_name": "Colombia", "number": "123"}])
        self.assertEqual(entry.number, "123")


class TestEmergencyLine(unittest.TestCase):
    def test_lookup_by_code_or_name(self):
        kb = build_knowledge()
        self.assertIn("911", kb.build_emergency_line("mx"))
        self.assertIn("112", kb.build_emergency_line("España"))

    def test_lookup_ignores_accents(self):
        kb = build_knowledge()
        self.assertEqual(kb.find_emergency_number("Mexico").number, "911")
        self.assertEqual(kb.find_emergency_number("  espana ").country_code, "ES")
        self.assertIsNone(kb.find_emergency_number("   "))

    def test_generic_line(self):
        kb = build_knowledge()
        self.assertEqual(kb.build_emergency_line(None), kb.build_emergency_line("Narnia"))
        self.assertIn("911", kb.build_emergency_line(None))


class TestLoadKnowledgeBase(unittest.TestCase):
    def test_bundled_tables_load(self):
        kb = load_knowledge_base()
        self.assertTrue(kb.complications)
        self.assertTrue(kb.materials)
        self.assertTrue(kb.definitions)
        self.assertTrue(kb.emergencies)
        self.assertTrue(any(m.is_high_risk for m in kb.materials))

    def test_missing_directory(self):
        with tempfile.TemporaryDirectory() as tmp:
            with self.assertRaises(KnowledgeBaseError):
                load_knowledge_base(tmp)

    def test_bad_severity_in_file(self):
        with tempfile.TemporaryDirectory() as tmp:
            base = Path(tmp)
            (base / "complications.json").write_text(json.dumps([_complication(severity=7)]), encoding="utf-8")
            for name in ("materials.json", "definitions.json", "emergencies.json"):
                (base / name).write_text("[]", encoding="utf-8")
            with self.assertRaises(KnowledgeBaseError) as ctx:
                load_knowledge_base(base)
            self.assertIn("severity", str(ctx.exception))

    def test_invalid_json(self):
        with tempfile.TemporaryDirectory() as tmp:
            base = Path(tmp)
            (base / "complications.json").write_text("{not json", encoding="utf-8")
            with self.assertRaises(KnowledgeBaseError):
                load_knowledge_base(base)


if __name__ == "__main__":
    unittest.main()
