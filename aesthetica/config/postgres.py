"""
aesthetica.config.postgres – where session telemetry is persisted.

Env vars: DATABASE_URL, DB_POOL_SIZE, DB_MAX_OVERFLOW, DB_POOL_TIMEOUT, DB_POOL_RECYCLE,
DB_ECHO, DB_APPLICATION_NAME.
"""
from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

_SCHEMES = ("postgresql://", "postgres://", "postgresql+asyncpg://")
_TRUE_VALUES = ("1", "true", "yes")


def database_configured() -> bool:
    """True when DATABASE_URL is set; otherwise sessions live in memory."""
    return bool(os.environ.get("DATABASE_URL", "").strip())


@dataclass(frozen=True)
class PostgresConfig:
    """DSN and pool sizing for the chat_sessions store. Validated on construction."""

    url: str
    pool_size: int = 5
    max_overflow: int = 10
    pool_timeout: int = 30
    pool_recycle: int = 1800
    echo: bool = False
    application_name: str = "aesthetica"

    def __post_init__(self) -> None:
        if not self.url or not self.url.startswith(_SCHEMES):
            raise ValueError(f"DATABASE_URL must start with one of {', '.join(_SCHEMES)}")
        for name in ("pool_size", "pool_timeout", "pool_recycle"):
            if getattr(self, name) < 1:
                raise ValueError(f"{name} must be >= 1, got {getattr(self, name)!r}")
        if self.max_overflow < 0:
            raise ValueError(f"max_overflow must be >= 0, got {self.max_overflow!r}")
        if not self.application_name.strip():
            raise ValueError("application_name must be non-empty")

    @property
    def async_url(self) -> str:
        """The DSN with the asyncpg driver selected."""
        for prefix in ("postgresql://", "postgres://"):
            if self.url.startswith(prefix):
                return "postgresql+asyncpg://" + self.url[len(prefix):]
        return self.url

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None, **overrides: object) -> PostgresConfig:
        """Build from ``env`` (default os.environ); keyword overrides win."""
        env = os.environ if env is None else env

        def _pick(attr: str, var: str, default: str) -> str:
            if overrides.get(attr) is not None:
                return str(overrides[attr])
            return env.get(var, "").strip() or default

        return cls(
            url=_pick("url", "DATABASE_URL", "postgresql://localhost/aesthetica"),
            pool_size=int(_pick("pool_size", "DB_POOL_SIZE", "5")),
            max_overflow=int(_pick("max_overflow", "DB_MAX_OVERFLOW", "10")),
            pool_timeout=int(_pick("pool_timeout", "DB_POOL_TIMEOUT", "30")),
            pool_recycle=int(_pick("pool_recycle", "DB_POOL_RECYCLE", "1800")),
            echo=_pick("echo", "DB_ECHO", "false").lower() in _TRUE_VALUES,
            application_name=_pick("application_name", "DB_APPLICATION_NAME", "aesthetica"),
        )


def load_postgres_config(**overrides: object) -> PostgresConfig:
    """Raises ValueError on invalid values."""
    return PostgresConfig.from_env(**overrides)
