"""Structured logging for Bullion Ledger.

Reports are printed to stdout, so log events always go to stderr (or the
stream passed in) and never interleave with command output.
"""

import logging
import sys
from typing import Literal, TextIO

import structlog

from bullion_ledger.config.settings import get_settings

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR"]

# httpx logs every request at INFO; only show it when debugging.
_CHATTY_LOGGERS = ("httpx", "httpcore")


def _renderer(log_format: str, stream: TextIO) -> structlog.types.Processor:
    if log_format == "json":
        return structlog.processors.JSONRenderer(sort_keys=True)
    return structlog.dev.ConsoleRenderer(
        colors=stream.isatty(),
        exception_formatter=structlog.dev.plain_traceback,
    )


def configure_logging(
    level: LogLevel | None = None,
    format: Literal["json", "console"] | None = None,
    stream: TextIO | None = None,
) -> None:
    """Configure structlog on top of stdlib logging.

    Args:
        level: Minimum level. Defaults to ``LOG_LEVEL``.
        format: ``json`` or ``console``. Defaults to ``LOG_FORMAT``.
        stream: Where events are written. Defaults to stderr.
    """
    settings = get_settings()
    log_level = level or settings.log_level
    out = stream or sys.stderr

    logging.basicConfig(
        format="%(message)s",
        stream=out,
        level=getattr(logging, log_level),
        force=True,
    )
    for name in _CHATTY_LOGGERS:
        logging.getLogger(name).setLevel(
            logging.DEBUG if log_level == "DEBUG" else logging.WARNING
        )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            _renderer(format or settings.log_format, out),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
