"""
Structured logging with structlog.

Development gets a colored console renderer; staging and production emit
one JSON object per line. Every event carries the app name, version and
environment.
"""

import logging
import sys
from typing import Any

import structlog
from structlog.types import EventDict, Processor

from ventafacil.config.settings import Settings, get_settings

# Third-party loggers that are too chatty at INFO
QUIET_LOGGERS = ("httpx", "httpcore", "uvicorn.access", "aiosqlite")


def app_context_processor(settings: Settings) -> Processor:
    """Build a processor that stamps the app identity on each event."""
    context = {
        "app": settings.app_name,
        "version": settings.app_version,
        "environment": settings.environment,
    }

    def add_app_context(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
        for key, value in context.items():
            event_dict.setdefault(key, value)
        return event_dict

    return add_app_context


def _renderers(environment: str) -> list[Processor]:
    if environment == "development":
        return [structlog.dev.ConsoleRenderer(colors=True)]
    return [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]


def configure_logging(settings: Settings | None = None) -> None:
    """Configure structlog and the stdlib root logger it writes through."""
    settings = settings or get_settings()

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
        app_context_processor(settings),
        *_renderers(settings.environment),
    ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, settings.log_level),
    )
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name)
