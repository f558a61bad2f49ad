"""Logging utilities for TLB.

This module provides a standalone structlog logger factory that writes
JSON-formatted or text-formatted logs to a file or to stderr. Each logger
is self-contained and does not modify global structlog configuration.
"""

import logging
import sys
from os import getenv
from pathlib import Path
from typing import TYPE_CHECKING, Literal, cast

import structlog

if TYPE_CHECKING:
    from structlog.typing import FilteringBoundLogger

LogFormatType = Literal["json", "text"]


def _log_level_from_string(level: str | None) -> int:
    """Resolve the effective logging level.

    TLB_DEBUG forces DEBUG. Otherwise the explicit level wins over
    TLB_LOG_LEVEL, and INFO is the fallback.

    Args:
        level: Log level string (debug, info, warning, error), or None.

    Returns:
        The logging level as an integer.
    """
    if getenv("TLB_DEBUG", None):
        return logging.DEBUG

    effective = level if level is not None else getenv("TLB_LOG_LEVEL", "info")
    log_levels = logging.getLevelNamesMapping()
    return log_levels.get(effective.upper(), logging.INFO)


def create_logger(
    name: str,
    *,
    level: str | None = None,
    log_format: LogFormatType = "text",
    log_file: str | Path | None = None,
) -> "FilteringBoundLogger":  # noqa: UP037
    """Create a standalone structlog logger bound to a component name.

    Args:
        name: Component name bound to every entry as ``logger``.
        level: Log level threshold (debug, info, warning, error).
        log_format: Output format, either "json" or "text".
        log_file: File to append to. Writes to stderr when None.

    Returns:
        A configured FilteringBoundLogger instance.
    """
    if log_file is not None:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        logger_factory = structlog.WriteLoggerFactory(file=log_path.open("a"))
    else:
        logger_factory = structlog.WriteLoggerFactory(file=sys.stderr)

    processors: list[structlog.typing.Processor] = [
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    if log_format == "json":
        processors.append(structlog.processors.dict_tracebacks)
        processors.append(structlog.processors.JSONRenderer())
    else:
        # Text format: "timestamp [level] event key=value ..."
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    wrapper_class = structlog.make_filtering_bound_logger(_log_level_from_string(level))

    logger = cast(
        "FilteringBoundLogger",
        structlog.wrap_logger(
            logger_factory(),
            processors=processors,
            wrapper_class=wrapper_class,
            context_class=dict,
        ),
    )
    return logger.bind(logger=name)
