"""
Structured logging for usysconf.

All modules log through structlog bound loggers backed by stdlib logging, so
the same event can reach two places at once: the operator's terminal
(stderr, colored console or JSON) and the persistent run log file that the
dispatch engine attaches for the duration of a run and dumps on failure.

Manifesto:
    - **Structured:** Events are dotted names plus key/value fields
    - **One pipeline:** structlog processors feed stdlib handlers, so extra
      handlers (the run log) can be attached without reconfiguring
    - **Correlated:** ``trigger`` and ``path`` are bound through contextvars

Architecture:
    ::

        logger.info("handler.invoked", ...)
              │
              ▼
        structlog shared processors
        (contextvars, level, name, timestamp, stack/exc info)
              │  wrap_for_formatter
              ▼
        stdlib root logger ──► stderr handler (console / JSON renderer)
                          └──► run log FileHandler (plain renderer)

Examples:
    >>> from usysconf.core.logging import configure_logging, get_logger
    >>> configure_logging(level="DEBUG")
    >>> log = get_logger(__name__)
    >>> with LogContext(trigger="ldconfig"):
    ...     log.info("handler.started")

Tags:
    logging, structlog, observability, usysconf

Doc-Types:
    - API Reference
    - Observability Guide
"""

from __future__ import annotations

import logging
import sys
from typing import Any, Literal

import structlog
from structlog.types import Processor

_configured = False

_SHARED_PROCESSORS: list[Processor] = [
    structlog.contextvars.merge_contextvars,
    structlog.stdlib.add_log_level,
    structlog.stdlib.add_logger_name,
    structlog.processors.TimeStamper(fmt="iso", utc=True),
    structlog.processors.StackInfoRenderer(),
    structlog.processors.format_exc_info,
]


def configure_logging(
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] | None = None,
    format: Literal["json", "console"] | None = None,
    force: bool = False,
) -> None:
    """
    Configure structured logging for the application.

    Should be called once at startup (CLI entry). Subsequent calls are no-ops
    unless force=True. Level and format default to the values from
    ``UsysconfSettings``.

    Args:
        level: Log level (overrides USYSCONF_LOG_LEVEL)
        format: Output format for stderr (overrides USYSCONF_LOG_FORMAT)
        force: Reconfigure even if already configured
    """
    global _configured

    if _configured and not force:
        return

    from usysconf.core.settings import get_settings

    settings = get_settings()
    log_level = (level or settings.log_level).upper()
    log_format = (format or settings.log_format).lower()

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *_SHARED_PROCESSORS,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    if log_format == "json":
        renderer: Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(
            colors=sys.stderr.isatty(),
            exception_formatter=structlog.dev.plain_traceback,
        )

    stream_handler = logging.StreamHandler(sys.stderr)
    stream_handler.setFormatter(_make_formatter(renderer))

    root_logger = logging.getLogger()
    root_logger.handlers = [stream_handler]
    root_logger.setLevel(getattr(logging, log_level))

    _configured = True


def _make_formatter(renderer: Processor) -> structlog.stdlib.ProcessorFormatter:
    return structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=_SHARED_PROCESSORS,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )


def file_formatter() -> logging.Formatter:
    """Formatter for the run log file: plain console rendering, no colors."""
    return _make_formatter(
        structlog.dev.ConsoleRenderer(
            colors=False,
            exception_formatter=structlog.dev.plain_traceback,
        )
    )


def set_level(level: str) -> None:
    """Change the root log level after configuration (e.g. for --debug)."""
    logging.getLogger().setLevel(getattr(logging, level.upper()))


def is_configured() -> bool:
    """Check if logging has been configured."""
    return _configured


def get_logger(name: str | None = None) -> Any:
    """Get a structured logger (usually ``get_logger(__name__)``)."""
    return structlog.get_logger(name)


def bind_context(**kwargs: Any) -> None:
    """Bind context to include in all subsequent logs."""
    structlog.contextvars.bind_contextvars(**kwargs)


def unbind_context(*keys: str) -> None:
    """Remove specific keys from logging context."""
    structlog.contextvars.unbind_contextvars(*keys)


def clear_context() -> None:
    """Clear all bound context."""
    structlog.contextvars.clear_contextvars()


class LogContext:
    """Context manager for scoped logging context.

    Example:
        with LogContext(trigger="fonts", path="/usr/share/fonts"):
            log.info("handler.invoked")
        # trigger/path unbound here
    """

    def __init__(self, **kwargs: Any):
        self._context = kwargs

    def __enter__(self) -> LogContext:
        bind_context(**self._context)
        return self

    def __exit__(self, *args) -> None:
        unbind_context(*self._context.keys())


__all__ = [
    "configure_logging",
    "file_formatter",
    "set_level",
    "is_configured",
    "get_logger",
    "bind_context",
    "unbind_context",
    "clear_context",
    "LogContext",
]
