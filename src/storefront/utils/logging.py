"""Logging for the storefront.

structlog renders every event; stdlib logging only routes the output. Events
carry the request context bound by the API middleware (requester, method and
path) until the request finishes.
"""

import logging
import os
import sys

import structlog

_LEVELS = {"production": "INFO", "staging": "INFO", "development": "DEBUG", "test": "WARNING"}


def current_environment() -> str:
    return (os.getenv("ENV") or os.getenv("ENVIRONMENT") or os.getenv("PROTEAN_ENV") or "development").lower()


def log_level() -> str:
    return os.getenv("LOG_LEVEL", _LEVELS.get(current_environment(), "INFO")).upper()


def _renderer(environment):
    if environment in ("production", "staging"):
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(
        colors=sys.stdout.isatty(),
        exception_formatter=structlog.dev.RichTracebackFormatter(show_locals=False, max_frames=4),
    )


def configure_logging(environment: str | None = None) -> None:
    environment = environment or current_environment()
    level = log_level()

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter("%(message)s"))
    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(level)

    # Protean logs every unit of work at INFO
    logging.getLogger("protean").setLevel(logging.WARNING)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            _renderer(environment),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


def bind_request_context(**values) -> None:
    """Attach ``values`` to every event logged until ``clear_request_context``."""
    structlog.contextvars.bind_contextvars(**{k: v for k, v in values.items() if v is not None})


def clear_request_context() -> None:
    structlog.contextvars.clear_contextvars()
