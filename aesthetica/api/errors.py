"""Exception handlers: assistant errors as ``{"error"}``, anything else as an apologetic reply."""
from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from aesthetica.core.exceptions import AssistantError
from aesthetica.orchestrator.responses import INTERNAL_ERROR_REPLY

logger = logging.getLogger(__name__)

INVALID_REQUEST_ERROR = "Solicitud inválida"


async def assistant_error_handler(request: Request, exc: AssistantError) -> JSONResponse:
    if exc.is_client_error:
        logger.info("API: %s on %s: %s", exc.code, request.url.path, exc.message)
    else:
        logger.error("API: %s on %s: %s", exc.code, request.url.path, exc.message, extra=exc.log_context())
    return JSONResponse(status_code=exc.http_status, content={"error": exc.message})


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.info("API: invalid request on %s: %s", request.url.path, exc.errors())
    return JSONResponse(status_code=400, content={"error": INVALID_REQUEST_ERROR})


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error("API: unhandled error on %s: %s", request.url.path, exc, exc_info=exc)
    return JSONResponse(status_code=500, content={"reply": INTERNAL_ERROR_REPLY})


def install_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AssistantError, assistant_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
