"""Chat router: answer a message, inspect a session's telemetry."""
import logging
import os

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.util import get_remote_address

from aesthetica.api.dependencies import get_orchestrator, get_session_store
from aesthetica.api.schemas.chat import ChatRequest, ChatResponse, ErrorResponse, SessionResponse
from aesthetica.core.exceptions import NotFoundError, ValidationError
from aesthetica.orchestrator import types as orch_types
from aesthetica.orchestrator.orchestrator import Orchestrator
from aesthetica.orchestrator.responses import EMPTY_MESSAGE_ERROR, INTERNAL_ERROR_REPLY
from aesthetica.services.session_store import SessionStore

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/chat", tags=["chat"])
limiter = Limiter(key_func=get_remote_address)

CHAT_RATE_LIMIT = os.environ.get("CHAT_RATE_LIMIT", "30/minute")


def _to_pipeline_request(body: ChatRequest, message: str) -> orch_types.ChatRequest:
    profile = None
    if body.profile is not None:
        profile = orch_types.UserProfile.from_dict(body.profile.model_dump())
    return orch_types.ChatRequest(
        message=message,
        mode=body.mode,
        profile=profile,
        session_id=(body.session_id or "").strip() or None,
    )


@router.post("", response_model=ChatResponse, responses={400: {"model": ErrorResponse}})
@limiter.limit(CHAT_RATE_LIMIT)
async def chat(
    request: Request,
    body: ChatRequest,
    orch: Orchestrator = Depends(get_orchestrator),
):
    message = (body.message or "").strip()
    if not message:
        raise ValidationError(EMPTY_MESSAGE_ERROR)

    try:
        result = await orch.process_with_tracking(_to_pipeline_request(body, message))
    except Exception as exc:
        logger.error("chat: orchestrator error: %s", exc, exc_info=True)
        return JSONResponse(status_code=500, content={"reply": INTERNAL_ERROR_REPLY})

    return ChatResponse(reply=result.reply)


@router.get("/sessions/{session_id}", response_model=SessionResponse, responses={404: {"model": ErrorResponse}})
async def get_session(
    session_id: str,
    store: SessionStore = Depends(get_session_store),
):
    record = await store.get(session_id)
    if record is None:
        raise NotFoundError(f"Sesión no encontrada: {session_id}")
    return SessionResponse(**record.to_dict())
