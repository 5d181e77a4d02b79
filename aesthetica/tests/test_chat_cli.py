"""Chat CLI menu and REPL tests with injected I/O."""
from __future__ import annotations

import asyncio
import unittest

from aesthetica.infra.memory import InMemorySessionStore
from aesthetica.orchestrator.orchestrator import Orchestrator
from aesthetica.scripts.chat_cli import (
    MAIN_ITEMS,
    CliState,
    _reset_io,
    _set_io,
    _show_menu,
    chat_loop,
    run,
    show_session,
)
from aesthetica.services.session_log_service import SessionLogService
from aesthetica.tests.fixtures import FakeLLM, build_knowledge


def _run(coro):
    return asyncio.run(coro)


class CliTestCase(unittest.TestCase):
    def setUp(self):
        self.out: list[str] = []
        self.store = InMemorySessionStore()
        self.orch = Orchestrator(build_knowledge(), FakeLLM(), session_log=SessionLogService(self.store))

    def tearDown(self):
        _reset_io()

    def _feed(self, *answers: str) -> None:
        it = iter(answers)
        _set_io(input_fn=lambda prompt: next(it, "0"), print_fn=self.out.append)

    @property
    def text(self) -> str:
        return "\n".join(self.out)


class TestMenu(CliTestCase):
    def test_show_menu_returns_choice(self):
        self._feed(" 3 ")
        self.assertEqual(_show_menu("Aesthetica Chat CLI", MAIN_ITEMS), "3")

    def test_show_menu_draws_box(self):
        self._feed("0")
        _show_menu("Aesthetica Chat CLI", MAIN_ITEMS)
        self.assertIn("╭", self.text)
        self.assertIn("╯", self.text)
        self.assertIn("Aesthetica Chat CLI", self.text)
        self.assertIn("1) Conversar", self.text)
        self.assertIn("0) Salir", self.text)


class TestChatLoop(CliTestCase):
    def test_answers_until_exit_command(self):
        self._feed("hola", "veo borroso", "/salir")
        state = CliState(session_id="cli")
        turns = _run(chat_loop(self.orch, state))
        self.assertEqual(turns, 2)
        self.assertIn("general/small_talk", self.text)
        self.assertIn("deterministic/emergency", self.text)
        record = _run(self.store.get("cli"))
        self.assertEqual(record.total_messages, 2)

    def test_gate_reply_is_labelled(self):
        self._feed("¿Me ayudas a revisar un contrato de arrendamiento?", "")
        _run(chat_loop(self.orch, CliState(session_id="cli")))
        self.assertIn("[gate · domain_gate", self.text)


class TestSessionView(CliTestCase):
    def test_empty_session(self):
        self._feed()
        _run(show_session(self.store, "none"))
        self.assertIn("Sin registro", self.text)

    def test_counts_shown(self):
        self._feed("Me salió un moretón después del relleno", "")
        _run(chat_loop(self.orch, CliState(session_id="cli")))
        self.out.clear()
        _run(show_session(self.store, "cli"))
        self.assertIn("totalMessages: 1", self.text)
        self.assertIn("triageEvents: 1", self.text)
        self.assertIn("Triage: moreton_post_relleno (sev 1)", self.text)


class TestRun(CliTestCase):
    def test_toggle_mode_and_exit(self):
        self._feed("2", "9", "0")
        state = CliState()
        _run(run(self.orch, self.store, state))
        self.assertTrue(state.quick)
        self.assertIn("Modo: rápido", self.text)
        self.assertIn("Opción no válida.", self.text)
        self.assertIn("Hasta pronto.", self.text)

    def test_new_session(self):
        self._feed("4", "0")
        state = CliState(session_id="old")
        _run(run(self.orch, self.store, state))
        self.assertNotEqual(state.session_id, "old")

    def test_toggle_back(self):
        state = CliState()
        state.toggle_mode()
        state.toggle_mode()
        self.assertFalse(state.quick)
        self.assertIsNone(state.mode)


if __name__ == "__main__":
    unittest.main()
