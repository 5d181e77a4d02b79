"""OrchestratorService: build a fully-wired Orchestrator from env and static data."""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional

from aesthetica.orchestrator.orchestrator import Orchestrator
from aesthetica.orchestrator.types import AssistantConfig
from aesthetica.services.session_log_service import SessionLogService

if TYPE_CHECKING:
    from aesthetica.clients.llm.base import BaseLLMClient
    from aesthetica.config import BrainConfig, PostgresConfig
    from aesthetica.knowledge import KnowledgeBase
    from aesthetica.services.session_store import SessionStore

logger = logging.getLogger(__name__)


class OrchestratorService:
    """Factory for the orchestrator and its collaborators."""

    @staticmethod
    def build_llm_client(config: Optional["BrainConfig"] = None) -> "BaseLLMClient":
        from aesthetica.clients.llm import default_registry
        from aesthetica.config import load_brain_config

        return default_registry.build_from_config(config or load_brain_config())

    @staticmethod
    async def build_session_store(
        config: Optional["PostgresConfig"] = None,
        *,
        create_tables: bool = True,
    ) -> "SessionStore":
        """PostgreSQL when DATABASE_URL is set (or a config is given), otherwise in memory."""
        from aesthetica.config import database_configured, load_postgres_config

        if config is None and not database_configured():
            from aesthetica.infra.memory import InMemorySessionStore

            logger.warning("OrchestratorService: DATABASE_URL not set, session telemetry kept in memory")
            return InMemorySessionStore()

        from aesthetica.infra.database import (
            PostgresSessionStore,
            build_engine,
            build_session_factory,
            init_db,
        )

        config = config or load_postgres_config()
        engine = build_engine(config)
        if create_tables:
            await init_db(config)
        logger.info("OrchestratorService: session telemetry in PostgreSQL")
        return PostgresSessionStore(build_session_factory(engine))

    @staticmethod
    def build(
        knowledge: "KnowledgeBase",
        llm_client: "BaseLLMClient",
        *,
        store: Optional["SessionStore"] = None,
        config: Optional[AssistantConfig] = None,
    ) -> Orchestrator:
        config = config or AssistantConfig()
        session_log = None
        if store is not None:
            session_log = SessionLogService(
                store,
                cooldown_seconds=config.log_cooldown_seconds,
                preview_chars=config.preview_chars,
            )
        orch = Orchestrator(knowledge, llm_client, config=config, session_log=session_log)
        logger.info(
            "OrchestratorService: built orchestrator (llm=%s, complications=%d, materials=%d, "
            "definitions=%d, tracking=%s)",
            llm_client.provider,
            len(knowledge.complications),
            len(knowledge.materials),
            len(knowledge.definitions),
            store is not None,
        )
        return orch
