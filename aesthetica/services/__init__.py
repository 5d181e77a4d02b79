"""Service layer: session store contract, session telemetry and orchestrator wiring."""
from aesthetica.services.orchestrator_service import OrchestratorService
from aesthetica.services.session_log_service import SessionLogService, TurnLog
from aesthetica.services.session_store import SERVER_TIMESTAMP, SessionRecord, SessionStore, SessionTransaction

__all__ = [
    "OrchestratorService",
    "SessionLogService",
    "TurnLog",
    "SERVER_TIMESTAMP",
    "SessionRecord",
    "SessionStore",
    "SessionTransaction",
]
