"""Structured logging setup using structlog.

One processor chain (context vars, level, timestamp, exception info) ends in
either a coloured ConsoleRenderer for local work or a JSONRenderer when
``APP_ENV=production`` or ``json_output`` is set.

Standard-library ``logging`` goes through the same chain, so httpx, openai,
anthropic and uvicorn records come out in the same shape.  The HTTP client
loggers are held at WARNING unless DEBUG is requested; at INFO they log one
line per Weaviate batch and storage call.
"""

import logging
import os
import sys

import structlog

_CHATTY_LOGGERS = ("httpx", "httpcore", "openai", "anthropic", "aiosqlite")


def _shared_processors() -> list[structlog.types.Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        structlog.processors.TimeStamper(fmt="iso"),
    ]


def _select_renderer(json_output: bool) -> structlog.types.Processor:
    if json_output or os.environ.get("APP_ENV", "development") == "production":
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())


def _route_stdlib_logging(
    level: str,
    processors: list[structlog.types.Processor],
    renderer: structlog.types.Processor,
) -> None:
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                *processors,
                renderer,
            ],
        )
    )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(level)

    client_level = level if level == "DEBUG" else "WARNING"
    for name in _CHATTY_LOGGERS:
        logging.getLogger(name).setLevel(client_level)


def configure_logging(log_level: str = "INFO", json_output: bool = False) -> structlog.BoundLogger:
    """Configure structlog and the stdlib bridge.

    Args:
        log_level: DEBUG, INFO, WARNING or ERROR.
        json_output: Force JSON output.  When False, JSON is still used if
                     ``APP_ENV`` is ``production``.

    Returns:
        The root structlog logger.
    """
    level = log_level.upper()
    processors = _shared_processors()
    renderer = _select_renderer(json_output)

    structlog.configure(
        processors=[*processors, renderer],
        wrapper_class=structlog.make_filtering_bound_logger(logging.getLevelName(level)),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )
    _route_stdlib_logging(level, processors, renderer)

    return structlog.get_logger()


def get_logger(name: str) -> structlog.BoundLogger:
    """Get a named structlog logger, configuring defaults on first use."""
    if not structlog.is_configured():
        configure_logging()

    return structlog.get_logger(logger_name=name)
