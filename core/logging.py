"""
Structured Logging

structlog configuration for the tracker. Every event carries the service
name and, inside a refresh, the refresh cycle ID, including events logged
from worker threads (asyncio.to_thread copies the context).

Logs always go to stderr; stdout belongs to the CLI report.
"""

import logging
import sys
import uuid
from contextvars import ContextVar
from typing import Any, Optional

import structlog


cycle_id_var: ContextVar[str] = ContextVar("cycle_id", default="")

EventDict = dict[str, Any]


def set_cycle_id(cycle_id: str) -> None:
    cycle_id_var.set(cycle_id)


def new_cycle_id() -> str:
    """Start a refresh cycle: generate, set and return a short cycle ID."""
    cycle_id = uuid.uuid4().hex[:12]
    set_cycle_id(cycle_id)
    return cycle_id


def add_cycle_id(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    cycle_id = cycle_id_var.get()
    if cycle_id:
        event_dict["cycle_id"] = cycle_id
    return event_dict


def _service_stamp(service_name: str) -> structlog.typing.Processor:
    def stamp(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
        event_dict.setdefault("service", service_name)
        return event_dict

    return stamp


def _renderer(json_format: bool) -> list[structlog.typing.Processor]:
    if json_format:
        return [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    return [
        structlog.dev.ConsoleRenderer(
            colors=sys.stderr.isatty(),
            exception_formatter=structlog.dev.plain_traceback,
        )
    ]


def setup_logging(
    log_level: str = "INFO",
    json_format: bool = False,
    service_name: str = "sports-tracker",
) -> None:
    """
    Configure structlog once at startup.

    Args:
        log_level: DEBUG, INFO, WARNING, ERROR or CRITICAL
        json_format: JSON lines when True, human-readable console output otherwise
        service_name: Stamped on every event as "service"
    """
    level = getattr(logging, log_level.upper())
    # Third-party libraries (urllib3 via requests) log through the stdlib
    logging.basicConfig(format="%(message)s", stream=sys.stderr, level=level)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            _service_stamp(service_name),
            add_cycle_id,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.UnicodeDecoder(),
            *_renderer(json_format),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


def get_logger(name: Optional[str] = None) -> structlog.BoundLogger:
    """
    Logger for a component.

    Example:
        log = get_logger("big_games")
        log.info("competition_scanned", competition="nba", big_games=3)
    """
    return structlog.get_logger(name)
