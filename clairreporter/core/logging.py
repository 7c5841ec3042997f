"""structlog setup for the reporter; all log output goes to stderr."""

import logging
import sys

import structlog

from clairreporter.core.config import get_settings


def _renderer(json_output: bool) -> list[structlog.types.Processor]:
    if json_output:
        return [structlog.processors.dict_tracebacks, structlog.processors.JSONRenderer()]
    return [structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())]


def configure_logging() -> None:
    """Configure structlog from ``LOG_LEVEL`` / ``LOG_JSON``."""
    settings = get_settings()
    log_level = getattr(logging, settings.log_level.upper(), logging.INFO)

    processors: list[structlog.types.Processor] = [
        # emitter / repo / package bound by the driver for each finding
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        *_renderer(settings.log_json),
    ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        # add_logger_name needs stdlib loggers
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # httpx request logs; stdout is reserved for the summary table
    logging.basicConfig(format="%(message)s", stream=sys.stderr, level=log_level)


def get_logger(name: str | None = None) -> structlog.BoundLogger:
    configure_logging()
    return structlog.get_logger(name)
