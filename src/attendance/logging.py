"""Structured logging for the attendance planner using structlog.

Console output for interactive use, JSON for machine consumption. Logs are
written to stderr by default so CLI JSON on stdout is never interleaved.
Modules obtain loggers through get_logger() instead of calling print().
"""

import logging
import sys
from typing import TextIO

import structlog

# Third-party loggers that are chatty at INFO (HTTP connection pool churn)
_NOISY_LOGGERS = ("urllib3",)


def setup_logging(
    json_output: bool = False,
    log_level: str = "WARNING",
    stream: TextIO | None = None,
) -> None:
    """Configure structlog processors, level filtering, and output stream.

    Args:
        json_output: If True, render JSON lines. If False, colored console output.
        log_level: Minimum level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        stream: Where to write; defaults to sys.stderr.
    """
    numeric_level = getattr(logging, log_level.upper(), logging.WARNING)
    out = stream if stream is not None else sys.stderr

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]
    if json_output:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=out),
        cache_logger_on_first_use=True,
    )

    # requests/urllib3 log through stdlib logging; send them to the same stream
    root = logging.getLogger()
    root.handlers = [logging.StreamHandler(out)]
    root.setLevel(numeric_level)
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(numeric_level, logging.WARNING))


def bind_command(command: str) -> None:
    """Attach the running CLI command to every subsequent log event."""
    structlog.contextvars.bind_contextvars(command=command)


def get_logger(name: str) -> structlog.BoundLogger:
    """Get a logger instance bound with the module name.

    Args:
        name: Logger name (typically __name__ from calling module).

    Returns:
        Configured structlog logger with module name context.
    """
    return structlog.get_logger(name)
