"""Structured logging for the portal using structlog.

JSON lines for deployed instances, console output for development. Both go
to stderr by default so command output on stdout stays machine readable.
Modules log through get_logger() with snake_case event names; the signed-in
user is attached to every event via bind_user().
"""

import logging
import sys
from typing import IO

import structlog

# Chatty third-party loggers held at WARNING regardless of the portal level
QUIET_LOGGERS: tuple[str, ...] = ("urllib3", "passlib")


def setup_logging(
    json_output: bool = False,
    log_level: str = "INFO",
    stream: IO[str] | None = None,
) -> None:
    """Configure structlog processors and output format.

    Args:
        json_output: If True, render JSON lines. If False, console format.
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        stream: Where log lines go. Defaults to stderr.
    """
    stream = stream or sys.stderr
    numeric_level = getattr(logging, log_level.upper(), logging.INFO)

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]
    if json_output:
        processors += [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=stream.isatty()))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=stream),
        cache_logger_on_first_use=False,
    )

    # requests/urllib3 retry chatter lands on the same stream
    handler = logging.StreamHandler(stream)
    handler.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(numeric_level)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(numeric_level, logging.WARNING))


def bind_user(username: str | None, role: str | None = None) -> None:
    """Attach the signed-in user to all later log events in this context."""
    structlog.contextvars.bind_contextvars(user=username, role=role)


def clear_user() -> None:
    structlog.contextvars.unbind_contextvars("user", "role")


def get_logger(name: str) -> structlog.BoundLogger:
    """Get a logger bound with the module name.

    Args:
        name: Logger name (typically __name__ from calling module).

    Returns:
        Configured structlog logger.
    """
    return structlog.get_logger(name)
