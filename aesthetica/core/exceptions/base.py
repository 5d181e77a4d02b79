"""
Root of the assistant's error hierarchy.

Raised errors carry a slug and the HTTP status the API answers with, so the
exception handlers never need to know concrete classes.
"""
from __future__ import annotations

from typing import Any, Optional


class AssistantError(Exception):
    """
    Base for every error raised on purpose inside the package.

    ``message`` is user-facing for 4xx statuses. ``details`` only goes to logs.
    """

    default_code: str = "ERROR"
    default_http_status: int = 500

    def __init__(
        self,
        message: str,
        *,
        code: Optional[str] = None,
        http_status: Optional[int] = None,
        details: Optional[dict[str, Any]] = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.http_status = http_status or self.default_http_status
        self.details: dict[str, Any] = details or {}
        self.cause = cause

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r}, code={self.code!r})"

    def __str__(self) -> str:
        return self.message

    @property
    def is_client_error(self) -> bool:
        return 400 <= self.http_status < 500

    def log_context(self) -> dict[str, Any]:
        """Flat dict for ``logger.*(..., extra=...)``."""
        ctx: dict[str, Any] = {"error_code": self.code, "http_status": self.http_status, **self.details}
        if self.cause is not None:
            ctx["cause"] = repr(self.cause)
        return ctx
