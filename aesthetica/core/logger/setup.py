"""
configure(): attach the console and rotating-file handlers to the package logger.
"""
from __future__ import annotations

import logging
import os
from logging.handlers import RotatingFileHandler
from typing import List, Optional

from aesthetica.core.logger.config import LoggerConfig
from aesthetica.core.logger.formatters import ConsoleFormatter, JsonFormatter

# Client libraries that log every HTTP request at INFO.
_CHATTY_LIBRARIES = ("httpx", "httpcore", "openai", "google_genai")


def _file_handler(config: LoggerConfig) -> Optional[logging.Handler]:
    if not (config.file_rotating and config.log_dir and config.log_dir.strip()):
        return None
    try:
        os.makedirs(config.log_dir, exist_ok=True)
    except OSError as exc:
        logging.getLogger(config.root_name).warning("Log dir %s unusable (%s), file logging off", config.log_dir, exc)
        return None
    handler = RotatingFileHandler(
        os.path.join(config.log_dir, f"{config.log_file_basename}.log"),
        maxBytes=config.max_bytes,
        backupCount=config.backup_count,
        encoding="utf-8",
    )
    handler.setFormatter(JsonFormatter())
    return handler


def configure(config: Optional[LoggerConfig] = None) -> logging.Logger:
    """Configure from LoggerConfig.from_env() unless a config is given. Safe to call again."""
    config = config or LoggerConfig.from_env()
    level = logging.getLevelName(config.level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    handlers: List[logging.Handler] = []
    if config.console:
        console = logging.StreamHandler()
        console.setFormatter(ConsoleFormatter())
        handlers.append(console)
    file_handler = _file_handler(config)
    if file_handler is not None:
        handlers.append(file_handler)

    root = logging.getLogger(config.root_name)
    root.setLevel(level)
    root.handlers[:] = handlers
    root.propagate = False

    for name in _CHATTY_LIBRARIES:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))
    return root
