"""ChatSession ORM model: one row of telemetry per chat session."""
from __future__ import annotations

from datetime import datetime
from typing import Any, List, Optional

from sqlalchemy import DateTime, Float, Index, Integer, String, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from aesthetica.infra.database.models.base import Base, TimestampMixin


def _counter() -> Mapped[int]:
    return mapped_column(Integer, nullable=False, server_default="0", default=0)


def _string_set() -> Mapped[List[str]]:
    return mapped_column(JSONB, nullable=False, server_default="[]", default=list)


class ChatSession(Base, TimestampMixin):
    """Aggregated counters, dedup sets and last-event previews for a session.

    ``id`` is the client-supplied session id, not generated here.
    """

    __tablename__ = "chat_sessions"
    __table_args__ = (
        Index("ix_chat_sessions_domain_hint", "domain_hint"),
        Index("ix_chat_sessions_last_active_at", "last_active_at"),
    )

    id: Mapped[str] = mapped_column(String(128), primary_key=True)

    last_active_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    mode: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    profile_snapshot: Mapped[Optional[dict[str, Any]]] = mapped_column(JSONB, nullable=True)

    domain_hint: Mapped[str] = mapped_column(
        String(16), nullable=False, server_default="unknown", default="unknown",
    )
    """unknown | esthetic | offtopic"""

    last_route: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    last_route_reason: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)

    total_messages: Mapped[int] = _counter()
    logged_events: Mapped[int] = _counter()
    triage_events: Mapped[int] = _counter()
    material_events: Mapped[int] = _counter()
    urgent_events: Mapped[int] = _counter()
    brain_calls: Mapped[int] = _counter()
    deterministic_responses: Mapped[int] = _counter()
    definition_responses: Mapped[int] = _counter()

    highest_severity_seen: Mapped[int] = _counter()
    seen_complication_ids: Mapped[List[str]] = _string_set()
    seen_material_ids: Mapped[List[str]] = _string_set()
    seen_danger_keys: Mapped[List[str]] = _string_set()
    urgent_signals_seen: Mapped[List[str]] = _string_set()

    last_logged_at_ms: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    last_logged_event_key: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    last_important_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    last_important_summary: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    last_user_preview: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    last_bot_preview: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    def __repr__(self) -> str:
        return (
            f"ChatSession(id={self.id!r}, domain={self.domain_hint!r}, "
            f"msgs={self.total_messages}, events={self.logged_events})"
        )
