"""
Ladon -- Structured Logging

All process logging goes through structlog, rendered by the standard library
root logger. Every log entry carries the ``system`` it came from, bound at
module import time, and the ``run_id`` of the automation being run when a
runner binds one.

This is independent of the in-result message log (ladon.automator.log),
which records entries into a Result and mirrors them here.
"""

from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING, Any

import structlog

from ladon.primitives.common import LogLevel

if TYPE_CHECKING:
    from ladon.config import LoggingConfig

_HANDLER_NAME = "ladon"


def setup_logging(config: LoggingConfig, run_id: str = "") -> logging.Handler:
    """
    Configure structured logging for the process and return Ladon's handler.

    ``config.level`` accepts Ladon level names (WARN, FATAL) as well as the
    standard library ones; unknown names mean INFO. Calling this again
    replaces the handler installed by the previous call and leaves any
    other root handlers alone.
    """
    if run_id:
        structlog.contextvars.bind_contextvars(run_id=run_id)

    level = LogLevel.parse(config.level, default=LogLevel.INFO)

    timestamper = structlog.processors.TimeStamper(fmt="iso", utc=True)
    pre_chain: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        timestamper,
    ]

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *pre_chain,
            structlog.processors.StackInfoRenderer(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    renderer: Any
    if config.format == "json":
        renderer = structlog.processors.JSONRenderer()
        tail: list[Any] = [structlog.processors.format_exc_info, renderer]
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())
        tail = [renderer]

    handler = logging.StreamHandler(sys.stdout)
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=pre_chain,
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, *tail],
        )
    )

    root_logger = logging.getLogger()
    for existing in [h for h in root_logger.handlers if h.get_name() == _HANDLER_NAME]:
        root_logger.removeHandler(existing)
    root_logger.addHandler(handler)
    root_logger.setLevel(int(level))
    return handler
