"""
structlog setup and request-scoped log context
"""

import logging
import secrets
import sys
from typing import Any

import structlog
from structlog.contextvars import bind_contextvars, clear_contextvars, merge_contextvars

# Shared by the console and JSON pipelines
_SHARED_PROCESSORS: list[Any] = [
    merge_contextvars,
    structlog.stdlib.filter_by_level,
    structlog.stdlib.add_logger_name,
    structlog.stdlib.add_log_level,
    structlog.processors.TimeStamper(fmt="iso", utc=True),
    structlog.processors.StackInfoRenderer(),
    structlog.processors.format_exc_info,
    structlog.processors.UnicodeDecoder(),
]


def configure_logging(log_level: str = "INFO", debug: bool = False) -> None:
    """Route structlog through the stdlib root logger.

    Debug mode renders coloured console lines and forces DEBUG level;
    otherwise each event is one JSON object on stdout.
    """
    level = logging.DEBUG if debug else logging.getLevelNamesMapping().get(
        log_level.upper(), logging.INFO
    )
    logging.basicConfig(level=level, stream=sys.stdout, format="%(message)s", force=True)

    renderer: Any = (
        structlog.dev.ConsoleRenderer(colors=True) if debug else structlog.processors.JSONRenderer()
    )
    structlog.configure(
        processors=[*_SHARED_PROCESSORS, renderer],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        context_class=dict,
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


def generate_request_id() -> str:
    """Return a 14-character urlsafe request id."""
    return secrets.token_urlsafe(10)


def bind_request_context(request_id: str | None = None, query_hash: str | None = None) -> str:
    """Start a fresh log context for one request and return its id."""
    clear_contextvars()
    request_id = request_id or generate_request_id()
    bind_contextvars(request_id=request_id)
    if query_hash:
        bind_contextvars(query_hash=query_hash)
    return request_id


def bind_query_hash(query_hash: str) -> None:
    bind_contextvars(query_hash=query_hash)


def clear_request_context() -> None:
    clear_contextvars()
