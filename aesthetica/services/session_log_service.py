"""SessionLogService: per-session telemetry aggregation.

One ``record_turn`` call runs a single store transaction that bumps the
message counters, then logs the quality event subject to a cooldown on
identical event keys and a per-kind dedup policy.
"""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional

from aesthetica.orchestrator.classifiers.domain import has_esthetic_keyword
from aesthetica.orchestrator.types import (
    ComplicationEvent,
    DangerSignalEvent,
    DeterministicReason,
    GeneralReason,
    MaterialEvent,
    NoEvent,
    QualityEvent,
    Route,
    RouteDecision,
    SessionDomain,
    UserProfile,
)
from aesthetica.services.session_store import SERVER_TIMESTAMP, SessionRecord, SessionStore, SessionTransaction

logger = logging.getLogger(__name__)

DEFAULT_COOLDOWN_SECONDS = 15.0
DEFAULT_PREVIEW_CHARS = 220


def _wall_clock_ms() -> float:
    return time.time() * 1000.0


@dataclass(frozen=True)
class TurnLog:
    """What one answered message contributes to its session."""

    session_id: str
    route: RouteDecision
    quality_event: QualityEvent
    user_text: str
    bot_text: str
    mode: Optional[str] = None
    profile: Optional[UserProfile] = None


def candidate_domain(user_text: str, route: RouteDecision) -> Optional[SessionDomain]:
    """ESTHETIC when the message names an esthetic topic and was really answered."""
    if not has_esthetic_keyword(user_text):
        return None
    if route.route in (Route.BRAIN, Route.DETERMINISTIC):
        return SessionDomain.ESTHETIC
    if route.route is Route.GENERAL and route.reason is GeneralReason.FALLBACK:
        return SessionDomain.ESTHETIC
    return None


def is_new_event(event: QualityEvent, event_key: str, record: Optional[SessionRecord]) -> bool:
    seen_complications = record.seen_complication_ids if record else []
    seen_materials = record.seen_material_ids if record else []
    seen_danger = record.seen_danger_keys if record else []

    if isinstance(event, ComplicationEvent):
        return event.id not in seen_complications
    if isinstance(event, MaterialEvent):
        if event.id in seen_materials:
            return False
        # low-risk materials only count once the patient's relation to them is known
        return event.is_high_risk or event.context.is_known
    if isinstance(event, DangerSignalEvent):
        return event_key not in seen_danger
    return False


def important_summary(event: QualityEvent) -> Optional[str]:
    if isinstance(event, ComplicationEvent):
        return f"Triage: {event.id} (sev {event.severity})" + (" [URGENTE]" if event.urgent else "")
    if isinstance(event, MaterialEvent):
        summary = f"Material: {event.id} (risk {event.risk})"
        if event.blacklisted:
            summary += " [LISTA NEGRA]"
        if event.urgent:
            summary += f" [ALERTA: {', '.join(event.danger_signals)}]"
        return summary + f" (ctx: {event.context.value})"
    if isinstance(event, DangerSignalEvent):
        return f"Señales de alarma: {', '.join(event.danger_signals)} [URGENTE]"
    return None


class SessionLogService:
    """Writes one turn into the session aggregate."""

    def __init__(
        self,
        store: SessionStore,
        *,
        cooldown_seconds: float = DEFAULT_COOLDOWN_SECONDS,
        preview_chars: int = DEFAULT_PREVIEW_CHARS,
        clock_ms: Callable[[], float] = _wall_clock_ms,
    ) -> None:
        self._store = store
        self._cooldown_ms = cooldown_seconds * 1000.0
        self._preview_chars = preview_chars
        self._clock_ms = clock_ms

    @property
    def store(self) -> SessionStore:
        return self._store

    async def session_domain(self, session_id: Optional[str]) -> SessionDomain:
        """Stored domain hint; UNKNOWN when absent or unreadable."""
        if not session_id:
            return SessionDomain.UNKNOWN
        try:
            record = await self._store.get(session_id)
        except Exception as exc:
            logger.warning("SessionLog: could not read domain hint for %s: %s", session_id, exc)
            return SessionDomain.UNKNOWN
        return record.domain_hint if record is not None else SessionDomain.UNKNOWN

    async def record_turn(self, turn: TurnLog) -> None:
        now_ms = self._clock_ms()
        async with self._store.transaction(turn.session_id) as tx:
            record = await tx.get()
            await self._count_message(tx, record, turn)
            if isinstance(turn.quality_event, NoEvent):
                return
            await self._log_event(tx, record, turn, now_ms)

    async def _count_message(
        self,
        tx: SessionTransaction,
        record: Optional[SessionRecord],
        turn: TurnLog,
    ) -> None:
        route = turn.route
        proposed = candidate_domain(turn.user_text, route)
        previous = record.domain_hint if record is not None else SessionDomain.UNKNOWN
        domain = proposed or previous
        profile = turn.profile.to_dict() if turn.profile is not None else None

        is_brain = route.route is Route.BRAIN
        is_deterministic = route.route is Route.DETERMINISTIC
        is_definition = is_deterministic and route.reason is DeterministicReason.DEFINITION

        if record is None:
            await tx.create(
                SessionRecord(
                    session_id=turn.session_id,
                    mode=turn.mode,
                    profile_snapshot=profile,
                    domain_hint=domain,
                    last_route=route.route.value,
                    last_route_reason=route.reason.value,
                    total_messages=1,
                    brain_calls=int(is_brain),
                    deterministic_responses=int(is_deterministic),
                    definition_responses=int(is_definition),
                )
            )
            return

        await tx.increment("total_messages")
        if is_brain:
            await tx.increment("brain_calls")
        if is_deterministic:
            await tx.increment("deterministic_responses")
        if is_definition:
            await tx.increment("definition_responses")
        await tx.set_fields(
            mode=turn.mode,
            profile_snapshot=profile,
            last_active_at=SERVER_TIMESTAMP,
            last_route=route.route.value,
            last_route_reason=route.reason.value,
            domain_hint=domain,
        )

    async def _log_event(
        self,
        tx: SessionTransaction,
        record: Optional[SessionRecord],
        turn: TurnLog,
        now_ms: float,
    ) -> None:
        event = turn.quality_event
        event_key = event.event_key()

        if record is not None and record.last_logged_event_key == event_key and record.last_logged_at_ms is not None:
            if now_ms - record.last_logged_at_ms < self._cooldown_ms:
                logger.debug("SessionLog: %s inside cooldown", event_key)
                await tx.set_fields(last_logged_at_ms=now_ms)
                return

        if not is_new_event(event, event_key, record):
            await tx.set_fields(last_logged_at_ms=now_ms, last_logged_event_key=event_key)
            return

        await tx.increment("logged_events")
        previous_highest = record.highest_severity_seen if record is not None else 0

        if isinstance(event, ComplicationEvent):
            await tx.increment("triage_events")
            if event.urgent:
                await tx.increment("urgent_events")
            await tx.add_to_set("seen_complication_ids", event.id)
            await tx.set_fields(highest_severity_seen=max(previous_highest, event.severity))
        elif isinstance(event, MaterialEvent):
            await tx.increment("material_events")
            if event.urgent:
                await tx.increment("urgent_events")
            await tx.add_to_set("seen_material_ids", event.id)
            if event.urgent and event.danger_signals:
                await tx.add_to_set("urgent_signals_seen", *event.danger_signals)
        elif isinstance(event, DangerSignalEvent):
            await tx.increment("triage_events")
            await tx.increment("urgent_events")
            await tx.add_to_set("seen_danger_keys", event_key)
            if event.danger_signals:
                await tx.add_to_set("urgent_signals_seen", *event.danger_signals)
            await tx.set_fields(highest_severity_seen=max(previous_highest, event.pseudo_severity))

        await tx.set_fields(
            last_logged_at_ms=now_ms,
            last_logged_event_key=event_key,
            last_important_at=SERVER_TIMESTAMP,
            last_important_summary=important_summary(event),
            last_user_preview=turn.user_text[: self._preview_chars],
            last_bot_preview=turn.bot_text[: self._preview_chars],
        )
        logger.info("SessionLog: %s logged for %s", event_key, turn.session_id)
