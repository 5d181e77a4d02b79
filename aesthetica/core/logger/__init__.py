"""
Package logging: console lines plus an optional rotating JSON Lines file.

    from aesthetica.core.logger import configure
    configure()  # LOG_LEVEL, LOG_DIR, ... from the environment

Modules keep using ``logging.getLogger(__name__)``; everything under ``aesthetica``
goes through the handlers installed here.
"""
from aesthetica.core.logger.config import LoggerConfig
from aesthetica.core.logger.formatters import ConsoleFormatter, JsonFormatter
from aesthetica.core.logger.setup import configure

__all__ = ["LoggerConfig", "ConsoleFormatter", "JsonFormatter", "configure"]
