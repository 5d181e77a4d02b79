"""
Assistant exceptions.

    from aesthetica.core.exceptions import NotFoundError

    raise NotFoundError(f"Sesión no encontrada: {session_id}")
"""
from aesthetica.core.exceptions.base import AssistantError
from aesthetica.core.exceptions.errors import (
    KnowledgeBaseError,
    NotFoundError,
    SessionStoreError,
    ValidationError,
)

__all__ = [
    "AssistantError",
    "ValidationError",
    "NotFoundError",
    "KnowledgeBaseError",
    "SessionStoreError",
]
