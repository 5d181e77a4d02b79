"""
aesthetica.infra.database.models – SQLAlchemy 2.0 ORM models.

Exports Base, mixins, and all model classes.
"""
from aesthetica.infra.database.models.base import Base, TimestampMixin
from aesthetica.infra.database.models.chat_session import ChatSession

__all__ = [
    "Base",
    "TimestampMixin",
    "ChatSession",
]
