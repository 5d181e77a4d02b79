#!/usr/bin/env python3
"""
Aesthetica chat CLI – talk to the orchestrator from a terminal.

Usage:
  python -m aesthetica.scripts.chat_cli

Optional env: OPENAI_API_KEY or GEMINI_API_KEY / GOOGLE_API_KEY (brain),
DATABASE_URL (session telemetry in PostgreSQL instead of memory).
"""
from __future__ import annotations

import asyncio
import uuid
from dataclasses import dataclass, field
from typing import List, Optional

from aesthetica.core.logger import configure
from aesthetica.knowledge import get_knowledge_base
from aesthetica.orchestrator.orchestrator import Orchestrator
from aesthetica.orchestrator.types import QUICK_MODE, ChatRequest
from aesthetica.services import OrchestratorService
from aesthetica.services.session_store import SessionStore

# Swappable for tests
_input_fn = input
_print_fn = print
_default_input_fn = input
_default_print_fn = print


def _set_io(input_fn=None, print_fn=None) -> None:
    """Inject I/O for tests. None = leave unchanged."""
    global _input_fn, _print_fn
    if input_fn is not None:
        _input_fn = input_fn
    if print_fn is not None:
        _print_fn = print_fn


def _reset_io() -> None:
    global _input_fn, _print_fn
    _input_fn = _default_input_fn
    _print_fn = _default_print_fn


def _out(msg: str = "") -> None:
    _print_fn(msg)


MENU_WIDTH = 44

MAIN_ITEMS = [
    "1) Conversar",
    "2) Cambiar modo (normal / rápido)",
    "3) Ver sesión",
    "4) Nueva sesión",
    "0) Salir",
]

EXIT_COMMANDS = frozenset({"/salir", "/exit", "/q"})


def _show_menu(title: str, items: List[str]) -> str:
    top = "╭" + "─" * (MENU_WIDTH - 2) + "╮"
    bot = "╰" + "─" * (MENU_WIDTH - 2) + "╯"
    sep = "├" + "─" * (MENU_WIDTH - 2) + "┤"
    _out()
    _out(top)
    _out("│ " + title.center(MENU_WIDTH - 4) + " │")
    _out(sep)
    for item in items:
        _out("│ " + item.ljust(MENU_WIDTH - 4) + " │")
    _out(bot)
    return _input_fn("  Opción: ").strip()


@dataclass
class CliState:
    session_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    mode: Optional[str] = None

    @property
    def quick(self) -> bool:
        return self.mode == QUICK_MODE

    def toggle_mode(self) -> None:
        self.mode = None if self.quick else QUICK_MODE


# ─── Chat ─────────────────────────────────────────────────────────

async def chat_loop(orchestrator: Orchestrator, state: CliState) -> int:
    """Read messages until an empty line or an exit command. Returns the number of turns."""
    _out(f"  Sesión {state.session_id} · modo {'rápido' if state.quick else 'normal'}")
    _out("  Línea vacía o /salir para volver al menú.")
    turns = 0
    while True:
        message = _input_fn("  Tú: ").strip()
        if not message or message.lower() in EXIT_COMMANDS:
            return turns
        request = ChatRequest(message=message, mode=state.mode, session_id=state.session_id)
        try:
            result = await orchestrator.process_with_tracking(request)
        except Exception as exc:
            _out(f"  Error: {exc}")
            continue
        turns += 1
        _out()
        _out(result.reply)
        _out(f"  [{result.route_label or 'gate'} · {result.layer.value} · {result.metrics.total_ms:.0f}ms]")
        _out()


async def show_session(store: SessionStore, session_id: str) -> None:
    record = await store.get(session_id)
    if record is None:
        _out("  Sin registro para esta sesión todavía.")
        return
    _out(f"  Sesión: {record.session_id}")
    _out(f"  Última ruta: {record.last_route or '-'} ({record.last_route_reason or '-'})")
    _out(f"  Dominio: {record.domain_hint.value}")
    for name, value in record.counts().items():
        _out(f"    {name}: {value}")
    if record.highest_severity_seen:
        _out(f"  Severidad máxima: {record.highest_severity_seen}")
    if record.last_important_summary:
        _out(f"  Último evento: {record.last_important_summary}")


# ─── Main ─────────────────────────────────────────────────────────

async def run(orchestrator: Orchestrator, store: SessionStore, state: Optional[CliState] = None) -> None:
    state = state or CliState()
    while True:
        choice = _show_menu("Aesthetica Chat CLI", MAIN_ITEMS)
        if choice == "0":
            _out("  Hasta pronto.")
            return
        elif choice == "1":
            await chat_loop(orchestrator, state)
        elif choice == "2":
            state.toggle_mode()
            _out(f"  Modo: {'rápido' if state.quick else 'normal'}")
        elif choice == "3":
            await show_session(store, state.session_id)
        elif choice == "4":
            state.session_id = uuid.uuid4().hex
            _out(f"  Nueva sesión: {state.session_id}")
        else:
            _out("  Opción no válida.")


async def main_async() -> None:
    configure()
    knowledge = get_knowledge_base()
    llm_client = OrchestratorService.build_llm_client()
    store = await OrchestratorService.build_session_store()
    orchestrator = OrchestratorService.build(knowledge, llm_client, store=store)
    if llm_client.provider == "noop":
        _out("  Aviso: sin clave de proveedor, las preguntas abiertas no usarán el cerebro IA.")
    try:
        await run(orchestrator, store)
    finally:
        await store.close()


def main() -> None:
    try:
        asyncio.run(main_async())
    except (KeyboardInterrupt, EOFError):
        _out()


if __name__ == "__main__":
    main()
