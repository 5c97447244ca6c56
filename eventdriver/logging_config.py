"""Structured logging for eventdriver.

Every module logs through structlog with snake_case event names and
key/value context (``logger.debug("event_triggered", key=..., pending=...)``).
Records are routed through stdlib logging, so the bus fits into whatever
handlers the host application already has.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from eventdriver.config import EventBusConfig


def _processors(json_output: bool, colors: bool) -> list[structlog.types.Processor]:
    renderer: structlog.types.Processor
    if json_output:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=colors)

    return [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        renderer,
    ]


def _handler(log_file: Path | None) -> logging.Handler:
    if log_file is None:
        return logging.StreamHandler(sys.stderr)
    log_file.parent.mkdir(parents=True, exist_ok=True)
    return logging.FileHandler(log_file, mode="a", encoding="utf-8")


def configure_logging(
    level: str = "INFO",
    json_output: bool = False,
    log_file: Path | None = None,
    colors: bool = True,
) -> None:
    """Route eventdriver's structlog records through stdlib logging.

    Calling it again replaces the root handlers; the previous ones,
    including an open log file, are closed.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_output: Render JSON lines instead of console output
        log_file: Append to this file instead of stderr
        colors: Colorize console output
    """
    logging.basicConfig(
        format="%(message)s",
        level=getattr(logging, level.upper()),
        handlers=[_handler(log_file)],
        force=True,
    )

    structlog.configure(
        processors=_processors(json_output, colors),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Logger for ``name`` (pass ``__name__``)."""
    return structlog.get_logger(name)


def configure_from_config(config: EventBusConfig, log_dir: Path | None = None) -> None:
    """Configure logging from an EventBusConfig.

    ``debug`` forces DEBUG level so that the bus' per-dispatch
    records become visible. With ``log_dir`` set, records go to
    ``<log_dir>/eventdriver.log``.
    """
    configure_logging(
        level="DEBUG" if config.debug else config.log_level,
        json_output=config.json_logs,
        log_file=log_dir / "eventdriver.log" if log_dir is not None else None,
        colors=not config.json_logs,
    )
