"""Quality-event classification used by session telemetry."""
from __future__ import annotations

import unittest

from aesthetica.orchestrator.facts import MessageAnalyzer
from aesthetica.orchestrator.quality import classify_quality_event
from aesthetica.orchestrator.types import (
    ComplicationEvent,
    DangerSignalEvent,
    MaterialContext,
    MaterialEvent,
    NoEvent,
)
from aesthetica.tests.fixtures import build_knowledge


class TestClassifyQualityEvent(unittest.TestCase):
    def setUp(self):
        self.analyzer = MessageAnalyzer(build_knowledge())

    def _event(self, message):
        return classify_quality_event(self.analyzer, message)

    def test_small_talk(self):
        self.assertEqual(self._event("hola"), NoEvent("small_talk"))

    def test_complication(self):
        event = self._event("me salió un moretón tras el relleno")
        self.assertEqual(event, ComplicationEvent(id="moreton_post_relleno", severity=1, urgent=False))
        self.assertEqual(event.event_key(), "complication:moreton_post_relleno:sev1:urgent0")

    def test_forced_urgent_complication(self):
        event = self._event("tengo la zona fria y palida")
        self.assertIsInstance(event, ComplicationEvent)
        self.assertTrue(event.urgent)
        self.assertEqual(event.event_key(), "complication:oclusion_vascular:sev5:urgent1")

    def test_low_risk_material(self):
        event = self._event("tengo acido hialuronico en los labios")
        self.assertIsInstance(event, MaterialEvent)
        self.assertEqual(event.id, "ah_reabsorbible")
        self.assertFalse(event.urgent)
        self.assertFalse(event.is_high_risk)
        self.assertIs(event.context, MaterialContext.ALREADY)
        self.assertEqual(event.danger_signals, ())
        self.assertEqual(event.event_key(), "material:ah_reabsorbible:risk1:blk0:urgent0:ctxalready")

    def test_high_risk_material_with_signals_is_urgent(self):
        event = self._event("Me pusieron biopolímeros y ahora veo borroso")
        self.assertIsInstance(event, MaterialEvent)
        self.assertEqual(event.id, "biopolimeros")
        self.assertTrue(event.urgent)
        self.assertTrue(event.blacklisted)
        self.assertEqual(event.danger_signals[0], "alteraciones visuales")

    def test_bare_danger_signal(self):
        event = self._event("tengo fiebre")
        self.assertEqual(
            event,
            DangerSignalEvent(danger_signals=("fiebre o datos de infección (secreción/pus)",)),
        )
        self.assertEqual(event.event_key(), "danger:fiebre o datos de infección (secreción/pus)")
        self.assertEqual(event.pseudo_severity, 4)

    def test_definition_lookup_is_not_a_danger_event(self):
        self.assertEqual(self._event("¿Qué es visión borrosa?"), NoEvent("general"))

    def test_nothing_relevant(self):
        self.assertEqual(self._event("tratamientos para las ojeras hundidas"), NoEvent("general"))


if __name__ == "__main__":
    unittest.main()
