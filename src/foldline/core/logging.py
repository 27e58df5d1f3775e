# src/foldline/core/logging.py
"""Structured logging for foldline.

Engine modules log through get_logger(__name__) with snake_case events and
keyword context: stage kind, partition key, queue name, error type. Action
queues bind their queue name once so every event they emit carries it.

foldline never configures logging on import. Applications call
configure_logging() (or AccumulatorSettings.configure_logging()) to route
both structlog events and stdlib records through one ProcessorFormatter,
so foldline events and asyncio warnings share a single JSON or console
format.
"""

import logging
import sys
from typing import Any, TextIO

import structlog
from structlog.stdlib import ProcessorFormatter

# asyncio reports slow callbacks and unretrieved task exceptions at DEBUG.
# Action queues surface their own failures, so keep it at WARNING or above.
_NOISY_LOGGERS: tuple[str, ...] = ("asyncio",)


def _shared_processors() -> list[Any]:
    """Processors run for structlog events and foreign stdlib records alike."""
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
    ]


def _render_processors(json_output: bool, stream: TextIO) -> list[Any]:
    if json_output:
        return [
            ProcessorFormatter.remove_processors_meta,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    return [
        ProcessorFormatter.remove_processors_meta,
        structlog.dev.ConsoleRenderer(colors=stream.isatty()),
    ]


def configure_logging(
    *,
    json_output: bool = False,
    level: str = "INFO",
    stream: TextIO | None = None,
) -> None:
    """Route structlog and stdlib logging through one formatter.

    Replaces the root logger's handlers, so calling it again reconfigures
    cleanly.

    Args:
        json_output: Emit one JSON object per line instead of console output.
        level: Root log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
            foldline's own events are all DEBUG except queue failures.
        stream: Destination, sys.stdout by default.
    """
    log_level = getattr(logging, level.upper())
    target = stream if stream is not None else sys.stdout
    shared = _shared_processors()

    structlog.configure(
        processors=[*shared, ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        # Module-level loggers must pick up later reconfiguration
        cache_logger_on_first_use=False,
    )

    handler = logging.StreamHandler(target)
    handler.setFormatter(ProcessorFormatter(processors=_render_processors(json_output, target), foreign_pre_chain=shared))

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(log_level)

    for logger_name in _NOISY_LOGGERS:
        logging.getLogger(logger_name).setLevel(max(log_level, logging.WARNING))


def get_logger(name: str, **context: Any) -> structlog.stdlib.BoundLogger:
    """Get a logger for a foldline module, optionally with bound context.

    Args:
        name: Logger name (typically __name__).
        **context: Key-value pairs added to every event, e.g. queue="orders".
    """
    logger: structlog.stdlib.BoundLogger = structlog.get_logger(name, **context)
    return logger
