"""
aesthetica.infra.database – PostgreSQL async engine, models and the session store.

Public API
──────────
  build_engine, build_session_factory, init_db, close_engine
  Base, ChatSession (models)
  PostgresSessionStore
"""
from aesthetica.infra.database.engine import (
    build_engine,
    build_session_factory,
    close_engine,
    init_db,
)
from aesthetica.infra.database.models import Base, ChatSession
from aesthetica.infra.database.repositories import PostgresSessionStore

__all__ = [
    "build_engine",
    "build_session_factory",
    "init_db",
    "close_engine",
    "Base",
    "ChatSession",
    "PostgresSessionStore",
]
