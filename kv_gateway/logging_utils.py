"""Structured logging setup using structlog."""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog
from structlog.contextvars import merge_contextvars
from structlog.typing import EventDict, Processor


_service_name = "kv-gateway"


def add_service_name(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """Add the configured service name to every event."""
    event_dict.setdefault("service", _service_name)
    return event_dict


def configure_logging(
    service_name: str = "kv-gateway",
    log_level: str = "INFO",
    log_format: str = "console",
) -> None:
    """Configure stdlib logging and structlog for the gateway.

    Parameters
    ----------
    service_name
        Value of the ``service`` field on every event.
    log_level
        Standard logging level name.
    log_format
        ``"json"`` for one JSON object per line, anything else for
        human-readable console output.
    """
    global _service_name  # noqa: PLW0603
    _service_name = service_name

    shared: list[Processor] = [
        merge_contextvars,
        add_service_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.add_log_level,
    ]
    if log_format.lower() == "json":
        processors = [*shared, structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    else:
        processors = [*shared, structlog.dev.set_exc_info, structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())]

    logging.basicConfig(
        format="%(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
        level=getattr(logging, log_level.upper()),
        force=True,
    )

    structlog.configure(
        processors=processors,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def create_logger(name: str | None = None) -> Any:
    """Return a lazy structlog logger, bound to ``logger_name`` when given.

    The logger resolves its configuration on first use, so module-level
    loggers pick up :func:`configure_logging` called later at startup.
    """
    if name:
        return structlog.get_logger(logger_name=name)
    return structlog.get_logger()
