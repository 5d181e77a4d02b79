"""Session telemetry record and the transactional store contract.

A store must give each ``transaction(session_id)`` exclusive access to that
session's record for the duration of the ``async with`` block. Counter and
set mutations are expressed as increments and unions, never as a read
followed by a write of the plain value.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from contextlib import AbstractAsyncContextManager
from dataclasses import dataclass, field, fields
from datetime import datetime
from typing import Any, Dict, List, Optional

from aesthetica.orchestrator.types import SessionDomain

COUNTER_FIELDS = (
    "total_messages",
    "logged_events",
    "triage_events",
    "material_events",
    "urgent_events",
    "brain_calls",
    "deterministic_responses",
    "definition_responses",
)

SET_FIELDS = (
    "seen_complication_ids",
    "seen_material_ids",
    "seen_danger_keys",
    "urgent_signals_seen",
)

_CAMEL_COUNTERS = {
    "total_messages": "totalMessages",
    "logged_events": "loggedEvents",
    "triage_events": "triageEvents",
    "material_events": "materialEvents",
    "urgent_events": "urgentEvents",
    "brain_calls": "brainCalls",
    "deterministic_responses": "deterministicResponses",
    "definition_responses": "definitionResponses",
}


class _ServerTimestamp:
    """Placeholder resolved by the store to its own current time."""

    def __repr__(self) -> str:
        return "SERVER_TIMESTAMP"


SERVER_TIMESTAMP: Any = _ServerTimestamp()


def is_server_timestamp(value: Any) -> bool:
    return isinstance(value, _ServerTimestamp)


@dataclass
class SessionRecord:
    """Per-session aggregate. Unknown or malformed stored values read as defaults."""

    session_id: str
    created_at: Optional[datetime] = None
    last_active_at: Optional[datetime] = None
    mode: Optional[str] = None
    profile_snapshot: Optional[Dict[str, Any]] = None
    domain_hint: SessionDomain = SessionDomain.UNKNOWN
    last_route: Optional[str] = None
    last_route_reason: Optional[str] = None

    total_messages: int = 0
    logged_events: int = 0
    triage_events: int = 0
    material_events: int = 0
    urgent_events: int = 0
    brain_calls: int = 0
    deterministic_responses: int = 0
    definition_responses: int = 0

    highest_severity_seen: int = 0
    seen_complication_ids: List[str] = field(default_factory=list)
    seen_material_ids: List[str] = field(default_factory=list)
    seen_danger_keys: List[str] = field(default_factory=list)
    urgent_signals_seen: List[str] = field(default_factory=list)

    last_logged_at_ms: Optional[float] = None
    last_logged_event_key: Optional[str] = None
    last_important_at: Optional[datetime] = None
    last_important_summary: Optional[str] = None
    last_user_preview: Optional[str] = None
    last_bot_preview: Optional[str] = None

    @classmethod
    def field_names(cls) -> List[str]:
        return [f.name for f in fields(cls)]

    def counts(self) -> Dict[str, int]:
        return {camel: getattr(self, name) for name, camel in _CAMEL_COUNTERS.items()}

    def to_dict(self) -> Dict[str, Any]:
        """camelCase view, counters grouped under ``counts``."""

        def _ts(value: Optional[datetime]) -> Optional[str]:
            return value.isoformat() if value else None

        return {
            "sessionId": self.session_id,
            "createdAt": _ts(self.created_at),
            "lastActiveAt": _ts(self.last_active_at),
            "mode": self.mode,
            "profileSnapshot": self.profile_snapshot,
            "domainHint": self.domain_hint.value,
            "lastRoute": self.last_route,
            "lastRouteReason": self.last_route_reason,
            "counts": self.counts(),
            "highestSeveritySeen": self.highest_severity_seen,
            "seenComplicationIds": list(self.seen_complication_ids),
            "seenMaterialIds": list(self.seen_material_ids),
            "seenDangerKeys": list(self.seen_danger_keys),
            "urgentSignalsSeen": list(self.urgent_signals_seen),
            "lastLoggedAtMs": self.last_logged_at_ms,
            "lastLoggedEventKey": self.last_logged_event_key,
            "lastImportantAt": _ts(self.last_important_at),
            "lastImportantSummary": self.last_important_summary,
            "lastUserPreview": self.last_user_preview,
            "lastBotPreview": self.last_bot_preview,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SessionRecord":
        """Inverse of ``to_dict``; tolerates missing and wrongly-typed values."""
        counts = data.get("counts") if isinstance(data.get("counts"), dict) else {}

        def _int(value: Any) -> int:
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                return 0
            return int(value)

        def _opt_str(value: Any) -> Optional[str]:
            return value if isinstance(value, str) else None

        def _str_list(value: Any) -> List[str]:
            if not isinstance(value, list):
                return []
            return [v for v in value if isinstance(v, str)]

        def _dt(value: Any) -> Optional[datetime]:
            if isinstance(value, datetime):
                return value
            if isinstance(value, str):
                try:
                    return datetime.fromisoformat(value)
                except ValueError:
                    return None
            return None

        logged_at = data.get("lastLoggedAtMs")
        if isinstance(logged_at, bool) or not isinstance(logged_at, (int, float)):
            logged_at = None
        profile = data.get("profileSnapshot")

        return cls(
            session_id=str(data.get("sessionId") or ""),
            created_at=_dt(data.get("createdAt")),
            last_active_at=_dt(data.get("lastActiveAt")),
            mode=_opt_str(data.get("mode")),
            profile_snapshot=profile if isinstance(profile, dict) else None,
            domain_hint=SessionDomain.parse(data.get("domainHint")),
            last_route=_opt_str(data.get("lastRoute")),
            last_route_reason=_opt_str(data.get("lastRouteReason")),
            **{name: _int(counts.get(camel)) for name, camel in _CAMEL_COUNTERS.items()},
            highest_severity_seen=_int(data.get("highestSeveritySeen")),
            seen_complication_ids=_str_list(data.get("seenComplicationIds")),
            seen_material_ids=_str_list(data.get("seenMaterialIds")),
            seen_danger_keys=_str_list(data.get("seenDangerKeys")),
            urgent_signals_seen=_str_list(data.get("urgentSignalsSeen")),
            last_logged_at_ms=float(logged_at) if logged_at is not None else None,
            last_logged_event_key=_opt_str(data.get("lastLoggedEventKey")),
            last_important_at=_dt(data.get("lastImportantAt")),
            last_important_summary=_opt_str(data.get("lastImportantSummary")),
            last_user_preview=_opt_str(data.get("lastUserPreview")),
            last_bot_preview=_opt_str(data.get("lastBotPreview")),
        )


class SessionTransaction(ABC):
    """Read-modify-write handle on one session, valid inside ``transaction()``."""

    @abstractmethod
    async def get(self) -> Optional[SessionRecord]:
        """Snapshot of the record as it was when the transaction started (or was created)."""

    @abstractmethod
    async def create(self, record: SessionRecord) -> None:
        ...

    @abstractmethod
    async def increment(self, counter: str, by: int = 1) -> None:
        ...

    @abstractmethod
    async def add_to_set(self, set_field: str, *values: str) -> None:
        """Union: values already present are not appended again."""

    @abstractmethod
    async def set_fields(self, **values: Any) -> None:
        """Plain assignment; ``SERVER_TIMESTAMP`` becomes the store's current time."""


class SessionStore(ABC):
    @abstractmethod
    async def get(self, session_id: str) -> Optional[SessionRecord]:
        ...

    @abstractmethod
    def transaction(self, session_id: str) -> AbstractAsyncContextManager[SessionTransaction]:
        """Exclusive transaction on one session; commits when the block exits cleanly."""

    async def close(self) -> None:
        return None


def check_counter(counter: str) -> None:
    if counter not in COUNTER_FIELDS:
        raise ValueError(f"Unknown session counter: {counter!r}")


def check_set_field(set_field: str) -> None:
    if set_field not in SET_FIELDS:
        raise ValueError(f"Unknown session set field: {set_field!r}")


def check_plain_fields(values: Dict[str, Any]) -> None:
    known = set(SessionRecord.field_names())
    for name in values:
        if name not in known or name == "session_id" or name in COUNTER_FIELDS or name in SET_FIELDS:
            raise ValueError(f"Field {name!r} cannot be assigned directly")
