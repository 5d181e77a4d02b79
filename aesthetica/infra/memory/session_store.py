"""InMemorySessionStore: dict-backed SessionStore with a lock per session."""
from __future__ import annotations

import asyncio
import copy
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, AsyncIterator, Callable, Dict, Optional

from aesthetica.core.exceptions import SessionStoreError
from aesthetica.services.session_store import (
    SessionRecord,
    SessionStore,
    SessionTransaction,
    check_counter,
    check_plain_fields,
    check_set_field,
    is_server_timestamp,
)

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class _InMemoryTransaction(SessionTransaction):
    """Mutates a private copy; the store swaps it in on a clean exit."""

    def __init__(self, session_id: str, record: Optional[SessionRecord], now: Callable[[], datetime]) -> None:
        self.session_id = session_id
        self.record = record
        self._snapshot = copy.deepcopy(record)
        self._now = now

    async def get(self) -> Optional[SessionRecord]:
        return copy.deepcopy(self._snapshot)

    async def create(self, record: SessionRecord) -> None:
        if self.record is not None:
            raise SessionStoreError(f"Session {self.session_id!r} already exists")
        created = copy.deepcopy(record)
        created.session_id = self.session_id
        now = self._now()
        created.created_at = created.created_at or now
        created.last_active_at = created.last_active_at or now
        self.record = created
        self._snapshot = copy.deepcopy(created)

    def _require(self) -> SessionRecord:
        if self.record is None:
            raise SessionStoreError(f"Session {self.session_id!r} does not exist")
        return self.record

    async def increment(self, counter: str, by: int = 1) -> None:
        check_counter(counter)
        record = self._require()
        setattr(record, counter, getattr(record, counter) + by)

    async def add_to_set(self, set_field: str, *values: str) -> None:
        check_set_field(set_field)
        current = getattr(self._require(), set_field)
        for value in values:
            if value not in current:
                current.append(value)

    async def set_fields(self, **values: Any) -> None:
        check_plain_fields(values)
        record = self._require()
        for name, value in values.items():
            if is_server_timestamp(value):
                value = self._now()
            setattr(record, name, value)


class InMemorySessionStore(SessionStore):
    """Process-local store. Records do not survive a restart."""

    def __init__(self, *, now: Callable[[], datetime] = _utcnow) -> None:
        self._records: Dict[str, SessionRecord] = {}
        self._locks: Dict[str, asyncio.Lock] = {}
        self._lock_users: Dict[str, int] = {}
        self._now = now

    def __len__(self) -> int:
        return len(self._records)

    async def get(self, session_id: str) -> Optional[SessionRecord]:
        record = self._records.get(session_id)
        return copy.deepcopy(record) if record is not None else None

    @asynccontextmanager
    async def transaction(self, session_id: str) -> AsyncIterator[SessionTransaction]:
        lock = self._locks.setdefault(session_id, asyncio.Lock())
        self._lock_users[session_id] = self._lock_users.get(session_id, 0) + 1
        try:
            async with lock:
                tx = _InMemoryTransaction(session_id, copy.deepcopy(self._records.get(session_id)), self._now)
                yield tx
                if tx.record is not None:
                    self._records[session_id] = tx.record
        finally:
            # Drop the lock once no transaction holds or waits on it.
            self._lock_users[session_id] -= 1
            if not self._lock_users[session_id]:
                del self._lock_users[session_id]
                del self._locks[session_id]
