"""Session telemetry: counters, cooldown, per-kind dedup and the in-memory store."""
from __future__ import annotations

import asyncio
import unittest
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

from sqlalchemy.dialects import postgresql

from aesthetica.core.exceptions import SessionStoreError
from aesthetica.infra.database.repositories import PostgresSessionStore
from aesthetica.infra.memory import InMemorySessionStore
from aesthetica.orchestrator.types import (
    BrainReason,
    BrainRoute,
    ComplicationEvent,
    DangerSignalEvent,
    DeterministicReason,
    DeterministicRoute,
    GeneralReason,
    GeneralRoute,
    MaterialContext,
    MaterialEvent,
    NoEvent,
    SessionDomain,
    UserProfile,
)
from aesthetica.services.session_log_service import (
    SessionLogService,
    TurnLog,
    candidate_domain,
    important_summary,
)
from aesthetica.services.session_store import SERVER_TIMESTAMP, SessionRecord

NOW = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)

TRIAGE = DeterministicRoute(DeterministicReason.TRIAGE_COMPLICATION)
EMERGENCY = DeterministicRoute(DeterministicReason.EMERGENCY)
MATERIAL = DeterministicRoute(DeterministicReason.HIGH_RISK_MATERIAL)
BRUISE = ComplicationEvent(id="moreton_post_relleno", severity=1, urgent=False)


def _run(coro):
    return asyncio.run(coro)


def _turn(route, event, user_text="me salio un moreton tras el relleno", bot_text="respuesta", **kwargs):
    return TurnLog(session_id="s1", route=route, quality_event=event,
                   user_text=user_text, bot_text=bot_text, **kwargs)


class _Clock:
    def __init__(self, ms: float = 1000.0) -> None:
        self.ms = ms

    def __call__(self) -> float:
        return self.ms


class SessionLogTestCase(unittest.TestCase):
    def setUp(self):
        self.store = InMemorySessionStore(now=lambda: NOW)
        self.clock = _Clock()
        self.svc = SessionLogService(self.store, cooldown_seconds=15, clock_ms=self.clock)

    def _record_all(self, *turns):
        async def go():
            for clock_ms, turn in turns:
                self.clock.ms = clock_ms
                await self.svc.record_turn(turn)
            return await self.store.get("s1")

        return _run(go())


class TestMessageCounters(SessionLogTestCase):
    def test_first_turn_creates_record(self):
        turn = _turn(
            BrainRoute(BrainReason.PLAN_DECISION),
            NoEvent("general"),
            user_text="puedo ponerme botox",
            profile=UserProfile(country="MX"),
        )
        record = self._record_all((1000, turn))
        self.assertEqual(record.total_messages, 1)
        self.assertEqual(record.brain_calls, 1)
        self.assertEqual(record.deterministic_responses, 0)
        self.assertEqual(record.logged_events, 0)
        self.assertEqual(record.last_route, "brain")
        self.assertEqual(record.last_route_reason, "plan_decision")
        self.assertIs(record.domain_hint, SessionDomain.ESTHETIC)
        self.assertEqual(record.profile_snapshot["country"], "MX")
        self.assertEqual(record.created_at, NOW)

    def test_definition_counts_as_deterministic(self):
        turn = _turn(DeterministicRoute(DeterministicReason.DEFINITION), NoEvent("general"), user_text="ptosis")
        record = self._record_all((1000, turn), (2000, turn))
        self.assertEqual(record.total_messages, 2)
        self.assertEqual(record.deterministic_responses, 2)
        self.assertEqual(record.definition_responses, 2)
        self.assertEqual(record.brain_calls, 0)

    def test_domain_hint_survives_small_talk(self):
        record = self._record_all(
            (1000, _turn(BrainRoute(BrainReason.GENERAL_QUESTION), NoEvent("general"), user_text="rellenos de labios")),
            (2000, _turn(GeneralRoute(GeneralReason.SMALL_TALK), NoEvent("small_talk"), user_text="gracias")),
        )
        self.assertIs(record.domain_hint, SessionDomain.ESTHETIC)
        self.assertEqual(record.last_route, "general")
        self.assertEqual(record.last_route_reason, "small_talk")
        self.assertEqual(record.last_active_at, NOW)


class TestEventLogging(SessionLogTestCase):
    def test_complication_is_logged(self):
        record = self._record_all((1000, _turn(TRIAGE, BRUISE)))
        self.assertEqual(record.logged_events, 1)
        self.assertEqual(record.triage_events, 1)
        self.assertEqual(record.urgent_events, 0)
        self.assertEqual(record.seen_complication_ids, ["moreton_post_relleno"])
        self.assertEqual(record.highest_severity_seen, 1)
        self.assertEqual(record.last_logged_at_ms, 1000)
        self.assertEqual(record.last_logged_event_key, BRUISE.event_key())
        self.assertEqual(record.last_important_summary, "Triage: moreton_post_relleno (sev 1)")
        self.assertEqual(record.last_important_at, NOW)
        self.assertEqual(record.last_user_preview, "me salio un moreton tras el relleno")

    def test_repeat_inside_cooldown_only_refreshes_timestamp(self):
        record = self._record_all((1000, _turn(TRIAGE, BRUISE)), (5000, _turn(TRIAGE, BRUISE)))
        self.assertEqual(record.total_messages, 2)
        self.assertEqual(record.logged_events, 1)
        self.assertEqual(record.triage_events, 1)
        self.assertEqual(record.last_logged_at_ms, 5000)

    def test_repeat_after_cooldown_is_deduplicated(self):
        record = self._record_all((1000, _turn(TRIAGE, BRUISE)), (30000, _turn(TRIAGE, BRUISE)))
        self.assertEqual(record.logged_events, 1)
        self.assertEqual(record.seen_complication_ids, ["moreton_post_relleno"])
        self.assertEqual(record.last_logged_at_ms, 30000)

    def test_danger_signal_and_severity(self):
        danger = DangerSignalEvent(danger_signals=("dolor intenso",))
        occlusion = ComplicationEvent(id="oclusion_vascular", severity=5, urgent=True)
        record = self._record_all(
            (1000, _turn(EMERGENCY, danger)),
            (2000, _turn(TRIAGE, occlusion)),
            (3000, _turn(TRIAGE, BRUISE)),
        )
        self.assertEqual(record.logged_events, 3)
        self.assertEqual(record.triage_events, 3)
        self.assertEqual(record.urgent_events, 2)
        self.assertEqual(record.seen_danger_keys, ["danger:dolor intenso"])
        self.assertEqual(record.urgent_signals_seen, ["dolor intenso"])
        self.assertEqual(record.highest_severity_seen, 5)
        self.assertEqual(record.seen_complication_ids, ["oclusion_vascular", "moreton_post_relleno"])

    def test_low_risk_material_needs_known_context(self):
        unknown = MaterialEvent(id="ah_reabsorbible", risk=1, blacklisted=False, urgent=False,
                                context=MaterialContext.UNKNOWN)
        record = self._record_all((1000, _turn(BrainRoute(BrainReason.GENERAL_QUESTION), unknown)))
        self.assertEqual(record.logged_events, 0)
        self.assertEqual(record.seen_material_ids, [])
        self.assertEqual(record.last_logged_event_key, unknown.event_key())

        considering = MaterialEvent(id="ah_reabsorbible", risk=1, blacklisted=False, urgent=False,
                                    context=MaterialContext.CONSIDERING)
        record = self._record_all((40000, _turn(BrainRoute(BrainReason.PLAN_DECISION), considering)))
        self.assertEqual(record.logged_events, 1)
        self.assertEqual(record.material_events, 1)
        self.assertEqual(record.seen_material_ids, ["ah_reabsorbible"])

    def test_urgent_high_risk_material(self):
        event = MaterialEvent(id="biopolimeros", risk=5, blacklisted=True, urgent=True,
                              context=MaterialContext.ALREADY, danger_signals=("alteraciones visuales",))
        record = self._record_all((1000, _turn(MATERIAL, event)))
        self.assertEqual(record.material_events, 1)
        self.assertEqual(record.urgent_events, 1)
        self.assertEqual(record.triage_events, 0)
        self.assertEqual(record.urgent_signals_seen, ["alteraciones visuales"])
        self.assertEqual(record.highest_severity_seen, 0)
        self.assertIn("[LISTA NEGRA]", record.last_important_summary)
        self.assertIn("[ALERTA: alteraciones visuales]", record.last_important_summary)

    def test_previews_are_truncated(self):
        svc = SessionLogService(self.store, preview_chars=10, clock_ms=self.clock)
        _run(svc.record_turn(_turn(TRIAGE, BRUISE, bot_text="x" * 50)))
        record = _run(self.store.get("s1"))
        self.assertEqual(record.last_user_preview, "me salio u")
        self.assertEqual(record.last_bot_preview, "x" * 10)



class TestConcurrentTurns(SessionLogTestCase):
    def test_parallel_turns_log_the_event_once(self):
        async def go():
            await asyncio.gather(*(self.svc.record_turn(_turn(TRIAGE, BRUISE)) for _ in range(20)))
            return await self.store.get("s1")

        record = _run(go())
        self.assertEqual(record.total_messages, 20)
        self.assertEqual(record.deterministic_responses, 20)
        self.assertEqual(record.logged_events, 1)
        self.assertEqual(record.triage_events, 1)
        self.assertEqual(record.seen_complication_ids, ["moreton_post_relleno"])

    def test_postgres_transaction_locks_the_session(self):
        result = MagicMock()
        result.scalar_one_or_none.return_value = None
        session = MagicMock()
        session.__aenter__.return_value = session
        session.__aexit__.return_value = False
        session.begin.return_value = session
        session.execute = AsyncMock(return_value=result)
        store = PostgresSessionStore(MagicMock(return_value=session))

        async def go():
            async with store.transaction("s1") as tx:
                self.assertIsNone(await tx.get())

        _run(go())
        lock_stmt, row_stmt = [call.args[0] for call in session.execute.await_args_list]
        dialect = postgresql.dialect()
        self.assertIn("pg_advisory_xact_lock(hashtext(", str(lock_stmt.compile(dialect=dialect)))
        self.assertTrue(str(row_stmt.compile(dialect=dialect)).rstrip().endswith("FOR UPDATE"))


class TestSessionDomainRead(unittest.TestCase):
    def test_unknown_session(self):
        svc = SessionLogService(InMemorySessionStore())
        self.assertIs(_run(svc.session_domain("nope")), SessionDomain.UNKNOWN)
        self.assertIs(_run(svc.session_domain(None)), SessionDomain.UNKNOWN)

    def test_store_failure_reads_as_unknown(self):
        store = MagicMock()
        store.get = AsyncMock(side_effect=RuntimeError("store down"))
        svc = SessionLogService(store)
        self.assertIs(_run(svc.session_domain("s1")), SessionDomain.UNKNOWN)


class TestHelpers(unittest.TestCase):
    def test_candidate_domain(self):
        self.assertIs(
            candidate_domain("botox en la frente", GeneralRoute(GeneralReason.FALLBACK)),
            SessionDomain.ESTHETIC,
        )
        self.assertIsNone(candidate_domain("botox", GeneralRoute(GeneralReason.SMALL_TALK)))
        self.assertIsNone(candidate_domain("cuanto cuesta", BrainRoute(BrainReason.GENERAL_QUESTION)))

    def test_important_summary(self):
        self.assertEqual(
            important_summary(ComplicationEvent(id="x", severity=4, urgent=True)),
            "Triage: x (sev 4) [URGENTE]",
        )
        self.assertEqual(
            important_summary(MaterialEvent(id="ah", risk=1, blacklisted=False, urgent=False,
                                            context=MaterialContext.CONSIDERING)),
            "Material: ah (risk 1) (ctx: considering)",
        )
        self.assertIsNone(important_summary(NoEvent("general")))


class TestInMemorySessionStore(unittest.TestCase):
    def test_transaction_operations(self):
        store = InMemorySessionStore(now=lambda: NOW)

        async def go():
            async with store.transaction("a") as tx:
                self.assertIsNone(await tx.get())
                await tx.create(SessionRecord(session_id="ignored", total_messages=1))
                await tx.increment("total_messages", 2)
                await tx.add_to_set("seen_material_ids", "m1", "m2", "m1")
                await tx.set_fields(last_route="brain", last_active_at=SERVER_TIMESTAMP)
            return await store.get("a")

        record = _run(go())
        self.assertEqual(record.session_id, "a")
        self.assertEqual(record.total_messages, 3)
        self.assertEqual(record.seen_material_ids, ["m1", "m2"])
        self.assertEqual(record.last_route, "brain")
        self.assertEqual(record.last_active_at, NOW)
        self.assertEqual(len(store), 1)

    def test_create_twice_fails(self):
        store = InMemorySessionStore()

        async def go():
            async with store.transaction("a") as tx:
                await tx.create(SessionRecord(session_id="a"))
            async with store.transaction("a") as tx:
                await tx.create(SessionRecord(session_id="a"))

        with self.assertRaises(SessionStoreError):
            _run(go())

    def test_update_without_record_fails(self):
        store = InMemorySessionStore()

        async def go():
            async with store.transaction("a") as tx:
                await tx.increment("total_messages")

        with self.assertRaises(SessionStoreError):
            _run(go())

    def test_unknown_fields_rejected(self):
        store = InMemorySessionStore()

        async def go(op):
            async with store.transaction("a") as tx:
                await tx.create(SessionRecord(session_id="a"))
                await op(tx)

        with self.assertRaises(ValueError):
            _run(go(lambda tx: tx.increment("nope")))
        with self.assertRaises(ValueError):
            _run(go(lambda tx: tx.add_to_set("total_messages", "x")))
        with self.assertRaises(ValueError):
            _run(go(lambda tx: tx.set_fields(total_messages=5)))
        self.assertEqual(len(store), 0)

    def test_failed_transaction_is_not_committed(self):
        store = InMemorySessionStore()

        async def go():
            async with store.transaction("a") as tx:
                await tx.create(SessionRecord(session_id="a"))
                raise RuntimeError("boom")

        with self.assertRaises(RuntimeError):
            _run(go())
        self.assertIsNone(_run(store.get("a")))

    def test_get_returns_a_copy(self):
        store = InMemorySessionStore()

        async def go():
            async with store.transaction("a") as tx:
                await tx.create(SessionRecord(session_id="a"))
            record = await store.get("a")
            record.total_messages = 99
            return await store.get("a")

        self.assertEqual(_run(go()).total_messages, 0)

    def test_locks_are_released_after_use(self):
        store = InMemorySessionStore()

        async def touch(session_id):
            async with store.transaction(session_id) as tx:
                if await tx.get() is None:
                    await tx.create(SessionRecord(session_id=session_id))
                await tx.increment("total_messages")

        async def go():
            await asyncio.gather(*(touch(f"s{i % 3}") for i in range(12)))
            with self.assertRaises(RuntimeError):
                async with store.transaction("s9"):
                    raise RuntimeError("boom")

        _run(go())
        self.assertEqual(store._locks, {})
        self.assertEqual(store._lock_users, {})
        self.assertEqual(_run(store.get("s0")).total_messages, 4)


class TestSessionRecordDict(unittest.TestCase):
    def test_to_dict_groups_counters(self):
        record = SessionRecord(session_id="a", total_messages=2, brain_calls=1, created_at=NOW)
        data = record.to_dict()
        self.assertEqual(data["sessionId"], "a")
        self.assertEqual(data["counts"]["totalMessages"], 2)
        self.assertEqual(data["counts"]["brainCalls"], 1)
        self.assertEqual(data["createdAt"], NOW.isoformat())
        self.assertEqual(data["domainHint"], "unknown")
        self.assertEqual(SessionRecord.from_dict(data), record)

    def test_from_dict_tolerates_garbage(self):
        record = SessionRecord.from_dict({
            "sessionId": "a",
            "domainHint": "legal",
            "counts": {"totalMessages": "three", "brainCalls": True},
            "seenMaterialIds": ["m1", 7, None],
            "lastLoggedAtMs": "soon",
            "createdAt": "not a date",
        })
        self.assertIs(record.domain_hint, SessionDomain.UNKNOWN)
        self.assertEqual(record.total_messages, 0)
        self.assertEqual(record.brain_calls, 0)
        self.assertEqual(record.seen_material_ids, ["m1"])
        self.assertIsNone(record.last_logged_at_ms)
        self.assertIsNone(record.created_at)


if __name__ == "__main__":
    unittest.main()
