"""Concrete error types."""
from __future__ import annotations

from aesthetica.core.exceptions.base import AssistantError


class ValidationError(AssistantError):
    """Bad request payload (empty message, ...)."""

    default_code = "VALIDATION_ERROR"
    default_http_status = 400


class NotFoundError(AssistantError):
    default_code = "NOT_FOUND"
    default_http_status = 404


class KnowledgeBaseError(AssistantError):
    """A static knowledge table is malformed (bad shape, severity outside 0-5)."""

    default_code = "KNOWLEDGE_BASE_ERROR"
    default_http_status = 500


class SessionStoreError(AssistantError):
    """Reading or writing the per-session telemetry record failed."""

    default_code = "SESSION_STORE_ERROR"
    default_http_status = 503
