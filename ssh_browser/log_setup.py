"""
structlog configuration for the command line entry point.

Library code only calls `structlog.get_logger(__name__)`; configuring output
is left to the application.
"""

import logging
from typing import TextIO

import structlog
from structlog.typing import Processor


def level_for(verbosity: int) -> int:
    """Map the number of -v flags to a log level."""
    if verbosity >= 2:
        return logging.DEBUG
    if verbosity == 1:
        return logging.INFO
    return logging.WARNING


def configure_logging(stream: TextIO, *, verbosity: int = 0) -> None:
    """
    Route log events to `stream`.

    Terminals get the console renderer, anything else (log files, pipes) gets
    one key=value line per event.
    """
    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]
    if stream.isatty():
        processors.append(structlog.dev.ConsoleRenderer(colors=True))
    else:
        processors.append(structlog.processors.format_exc_info)
        processors.append(
            structlog.processors.KeyValueRenderer(key_order=["timestamp", "level", "event"])
        )

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level_for(verbosity)),
        logger_factory=structlog.WriteLoggerFactory(file=stream),
        cache_logger_on_first_use=False,
    )


def silence_logging() -> None:
    """Drop every log event, e.g. while a full-screen UI owns the terminal."""
    structlog.configure(processors=[_drop_event], cache_logger_on_first_use=False)


def _drop_event(_logger: object, _method: str, _event: dict) -> dict:
    raise structlog.DropEvent
