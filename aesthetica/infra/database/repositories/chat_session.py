"""PostgreSQL-backed SessionStore on the ``chat_sessions`` table.

Each transaction takes a transaction-scoped advisory lock on the session id,
so concurrent requests for one session are serialized even before the row
exists. Counters are written as ``col = col + n`` in a single UPDATE.
"""
from __future__ import annotations

import logging
from collections import defaultdict
from contextlib import asynccontextmanager
from dataclasses import fields
from typing import TYPE_CHECKING, Any, AsyncIterator, Dict, List, Optional

from sqlalchemy import func, select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.exc import SQLAlchemyError

from aesthetica.core.exceptions import SessionStoreError
from aesthetica.infra.database.models.chat_session import ChatSession
from aesthetica.orchestrator.types import SessionDomain
from aesthetica.services.session_store import (
    SessionRecord,
    SessionStore,
    SessionTransaction,
    check_counter,
    check_plain_fields,
    check_set_field,
    is_server_timestamp,
)

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

logger = logging.getLogger(__name__)

_RECORD_ONLY = {"session_id"}


def row_to_record(row: ChatSession) -> SessionRecord:
    values: Dict[str, Any] = {}
    for f in fields(SessionRecord):
        if f.name in _RECORD_ONLY:
            continue
        values[f.name] = getattr(row, f.name)
    values["domain_hint"] = SessionDomain.parse(row.domain_hint)
    for name in ("seen_complication_ids", "seen_material_ids", "seen_danger_keys", "urgent_signals_seen"):
        values[name] = list(values[name] or [])
    return SessionRecord(session_id=row.id, **values)


def _column_value(name: str, value: Any) -> Any:
    if is_server_timestamp(value):
        return func.now()
    if name == "domain_hint" and isinstance(value, SessionDomain):
        return value.value
    return value


class _PostgresTransaction(SessionTransaction):
    def __init__(self, session: "AsyncSession", session_id: str, record: Optional[SessionRecord]) -> None:
        self._session = session
        self._session_id = session_id
        self._record = record
        self._increments: Dict[str, int] = defaultdict(int)
        self._additions: Dict[str, List[str]] = defaultdict(list)
        self._assignments: Dict[str, Any] = {}

    async def get(self) -> Optional[SessionRecord]:
        return self._record

    async def create(self, record: SessionRecord) -> None:
        if self._record is not None:
            raise SessionStoreError(f"Session {self._session_id!r} already exists")
        values = {
            f.name: _column_value(f.name, getattr(record, f.name))
            for f in fields(SessionRecord)
            if f.name not in _RECORD_ONLY and getattr(record, f.name) is not None
        }
        values["id"] = self._session_id
        values.setdefault("last_active_at", func.now())
        await self._session.execute(
            pg_insert(ChatSession).values(**values).on_conflict_do_nothing(index_elements=["id"])
        )
        self._record = record

    def _require(self) -> SessionRecord:
        if self._record is None:
            raise SessionStoreError(f"Session {self._session_id!r} does not exist")
        return self._record

    async def increment(self, counter: str, by: int = 1) -> None:
        check_counter(counter)
        self._require()
        self._increments[counter] += by

    async def add_to_set(self, set_field: str, *values: str) -> None:
        check_set_field(set_field)
        self._require()
        pending = self._additions[set_field]
        for value in values:
            if value not in pending:
                pending.append(value)

    async def set_fields(self, **values: Any) -> None:
        check_plain_fields(values)
        self._require()
        for name, value in values.items():
            self._assignments[name] = _column_value(name, value)

    async def flush(self) -> None:
        if not (self._increments or self._additions or self._assignments):
            return
        record = self._require()
        values: Dict[str, Any] = dict(self._assignments)
        for counter, by in self._increments.items():
            values[counter] = getattr(ChatSession, counter) + by
        # the row is locked for this transaction, so merging here is a union
        for set_field, additions in self._additions.items():
            current = list(getattr(record, set_field))
            values[set_field] = current + [v for v in additions if v not in current]
        values["updated_at"] = func.now()
        await self._session.execute(
            update(ChatSession).where(ChatSession.id == self._session_id).values(**values)
        )


class PostgresSessionStore(SessionStore):
    def __init__(self, session_factory: "async_sessionmaker[AsyncSession]") -> None:
        self._session_factory = session_factory

    async def get(self, session_id: str) -> Optional[SessionRecord]:
        try:
            async with self._session_factory() as session:
                row = await session.get(ChatSession, session_id)
                return row_to_record(row) if row is not None else None
        except SQLAlchemyError as exc:
            raise SessionStoreError(f"Could not read session {session_id!r}", cause=exc) from exc

    @asynccontextmanager
    async def transaction(self, session_id: str) -> AsyncIterator[SessionTransaction]:
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    await session.execute(select(func.pg_advisory_xact_lock(func.hashtext(session_id))))
                    result = await session.execute(
                        select(ChatSession).where(ChatSession.id == session_id).with_for_update()
                    )
                    row = result.scalar_one_or_none()
                    tx = _PostgresTransaction(session, session_id, row_to_record(row) if row is not None else None)
                    yield tx
                    await tx.flush()
        except SQLAlchemyError as exc:
            raise SessionStoreError(f"Session transaction failed for {session_id!r}", cause=exc) from exc

    async def close(self) -> None:
        from aesthetica.infra.database.engine import close_engine

        await close_engine()
