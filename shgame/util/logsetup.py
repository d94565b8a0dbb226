# shgame/util/logsetup.py
from __future__ import annotations

import logging

import structlog
from structlog.typing import Processor


def configure_logging(level: str = "INFO", fmt: str = "json") -> None:
    """
    Configure structlog once at startup.
    fmt="json" for log aggregation, anything else renders for a console.
    """
    shared: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if fmt == "json":
        final: Processor = structlog.processors.JSONRenderer()
    else:
        final = structlog.dev.ConsoleRenderer(colors=True)

    structlog.configure(
        processors=shared + [final],
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, level.upper(), logging.INFO)
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )
