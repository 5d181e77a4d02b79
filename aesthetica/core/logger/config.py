"""
Logger configuration, built in code or from the environment.
"""
from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

_TRUE_VALUES = ("1", "true", "yes")


@dataclass(frozen=True)
class LoggerConfig:
    """
    Configuration for the assistant logger.

    Use LoggerConfig.from_env() for env-based config, or build explicitly.
    """

    # DEBUG, INFO, WARNING, ERROR, CRITICAL
    level: str = "INFO"
    # Directory for the rotating file (file handler is skipped when None)
    log_dir: Optional[str] = None
    # "aesthetica" -> aesthetica.log
    log_file_basename: str = "aesthetica"
    max_bytes: int = 5 * 1024 * 1024
    backup_count: int = 5
    # Logger the handlers are attached to; package loggers inherit from it
    root_name: str = "aesthetica"
    console: bool = True
    file_rotating: bool = True

    @classmethod
    def from_env(cls) -> "LoggerConfig":
        """Build config from LOG_* environment variables."""
        return cls(
            level=os.environ.get("LOG_LEVEL", "INFO").upper(),
            log_dir=os.environ.get("LOG_DIR") or None,
            log_file_basename=os.environ.get("LOG_FILE_BASENAME", "aesthetica"),
            max_bytes=int(os.environ.get("LOG_MAX_BYTES", "5242880")),
            backup_count=int(os.environ.get("LOG_BACKUP_COUNT", "5")),
            root_name=os.environ.get("LOG_ROOT_NAME", "aesthetica"),
            console=os.environ.get("LOG_CONSOLE", "true").lower() in _TRUE_VALUES,
            file_rotating=os.environ.get("LOG_FILE_ROTATING", "true").lower() in _TRUE_VALUES,
        )

    def with_overrides(self, **overrides: object) -> "LoggerConfig":
        """Return a copy with the given non-None fields replaced."""
        values = {k: v for k, v in overrides.items() if v is not None}
        return LoggerConfig(**{**self.__dict__, **values})
