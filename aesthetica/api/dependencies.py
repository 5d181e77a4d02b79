"""FastAPI dependency providers."""
from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import HTTPException, Request, status

if TYPE_CHECKING:
    from aesthetica.orchestrator.orchestrator import Orchestrator
    from aesthetica.services.session_store import SessionStore


def get_orchestrator(request: Request) -> "Orchestrator":
    """The orchestrator built at startup."""
    orch = getattr(request.app.state, "orchestrator", None)
    if orch is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Orchestrator not initialised. Check server startup logs.",
        )
    return orch


def get_session_store(request: Request) -> "SessionStore":
    store = getattr(request.app.state, "session_store", None)
    if store is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Session store not initialised. Check server startup logs.",
        )
    return store
