"""
Structured logging for imgalloc using structlog.

Events go to stderr through the ``imgalloc`` stdlib logger, so command
output on stdout stays clean and host applications embedding the package
keep control of the root logger.
"""

import logging
import sys
import time
from contextlib import contextmanager

import structlog

LOGGER_NAME = "imgalloc"

_SHARED_PROCESSORS = [
    structlog.contextvars.merge_contextvars,
    structlog.processors.add_log_level,
    structlog.processors.TimeStamper(fmt="iso"),
    structlog.processors.StackInfoRenderer(),
]


def configure_logging(level: str = "WARNING", json_output: bool = False) -> None:
    """
    Route imgalloc's structlog events to stderr.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        json_output: Render one JSON object per event instead of console lines
    """
    if json_output:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    structlog.configure(
        processors=_SHARED_PROCESSORS + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(processor=renderer, foreign_pre_chain=_SHARED_PROCESSORS)
    )

    logger = logging.getLogger(LOGGER_NAME)
    for old in list(logger.handlers):
        logger.removeHandler(old)
        old.close()
    logger.addHandler(handler)
    logger.setLevel(level.upper())
    logger.propagate = False


@contextmanager
def log_operation(logger: structlog.stdlib.BoundLogger, operation: str, **kwargs):
    """
    Bind ``operation`` and ``kwargs`` and log ``<operation>.completed`` or
    ``<operation>.failed`` with the elapsed time.

    Failures are logged at info level: the command itself reports them to
    the user, so they only show up on stderr twice when asked for.
    """
    log = logger.bind(operation=operation, **kwargs)
    started = time.monotonic()
    log.debug(f"{operation}.started")

    try:
        yield log
    except Exception as e:
        log.info(
            f"{operation}.failed",
            error=str(e),
            error_type=type(e).__name__,
            duration_ms=round((time.monotonic() - started) * 1000, 2),
        )
        raise
    log.info(f"{operation}.completed", duration_ms=round((time.monotonic() - started) * 1000, 2))
