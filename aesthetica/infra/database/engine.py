"""
aesthetica.infra.database.engine – one async engine per process for session telemetry.

The engine is created lazily from PostgresConfig (env when omitted) and disposed
by the session store on shutdown.
"""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool

import aesthetica.infra.database.models  # noqa: F401  (registers ChatSession on Base.metadata)
from aesthetica.infra.database.models.base import Base

if TYPE_CHECKING:
    from aesthetica.config import PostgresConfig

logger = logging.getLogger(__name__)

_engine: Optional[AsyncEngine] = None
_sessions: Optional[async_sessionmaker[AsyncSession]] = None


def _pool_kwargs(config: "PostgresConfig", use_null_pool: bool) -> dict:
    if use_null_pool:
        return {"poolclass": NullPool}
    return {
        "pool_size": config.pool_size,
        "max_overflow": config.max_overflow,
        "pool_timeout": config.pool_timeout,
        "pool_recycle": config.pool_recycle,
        "pool_pre_ping": True,
    }


def build_engine(
    config: Optional["PostgresConfig"] = None,
    *,
    use_null_pool: bool = False,
) -> AsyncEngine:
    """Return the process engine, creating it on first use. NullPool is for short-lived scripts."""
    global _engine
    if _engine is not None:
        return _engine
    if config is None:
        from aesthetica.config import load_postgres_config

        config = load_postgres_config()

    _engine = create_async_engine(
        config.async_url,
        echo=config.echo,
        connect_args={"server_settings": {"application_name": config.application_name}},
        **_pool_kwargs(config, use_null_pool),
    )
    logger.info(
        "Session DB engine ready (app=%s, pool=%s)",
        config.application_name,
        "null" if use_null_pool else config.pool_size,
    )
    return _engine


def build_session_factory(engine: Optional[AsyncEngine] = None) -> async_sessionmaker[AsyncSession]:
    global _sessions
    if _sessions is None:
        _sessions = async_sessionmaker(engine or build_engine(), expire_on_commit=False)
    return _sessions


async def init_db(config: Optional["PostgresConfig"] = None) -> None:
    """Create the chat_sessions table if it does not exist."""
    async with build_engine(config).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Session DB schema checked")


async def close_engine() -> None:
    global _engine, _sessions
    if _engine is None:
        return
    await _engine.dispose()
    _engine = None
    _sessions = None
    logger.info("Session DB engine disposed")
