"""Structured logging for the quote engine and CLI."""

import logging
import sys
from typing import Literal, TextIO

import structlog

from service_quote.config.settings import get_settings

LogFormat = Literal["json", "console"]

_SHARED_PROCESSORS: list[structlog.types.Processor] = [
    structlog.contextvars.merge_contextvars,
    structlog.stdlib.filter_by_level,
    structlog.stdlib.add_logger_name,
    structlog.stdlib.add_log_level,
    structlog.processors.TimeStamper(fmt="iso"),
    structlog.processors.format_exc_info,
]


def _renderer(log_format: LogFormat, stream: TextIO) -> structlog.types.Processor:
    if log_format == "json":
        return structlog.processors.JSONRenderer()
    # Colors only on an interactive terminal
    return structlog.dev.ConsoleRenderer(
        colors=stream.isatty(),
        exception_formatter=structlog.dev.plain_traceback,
    )


def configure_logging(
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] | None = None,
    format: LogFormat | None = None,
    stream: TextIO | None = None,
) -> None:
    """Configure structlog on top of stdlib logging.

    Args:
        level: Log level. Defaults to ``LOG_LEVEL``.
        format: ``json`` or ``console``. Defaults to ``LOG_FORMAT``.
        stream: Where log lines go. Defaults to stderr, leaving stdout to the
            quote output.
    """
    settings = get_settings()
    stream = stream or sys.stderr

    logging.basicConfig(
        format="%(message)s",
        stream=stream,
        level=getattr(logging, level or settings.log_level),
    )

    structlog.configure(
        processors=[
            *_SHARED_PROCESSORS,
            _renderer(format or settings.log_format, stream),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
