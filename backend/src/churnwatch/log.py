"""
Structured logging for the dashboard pipeline.

The host application calls ``setup_logging()`` once at startup. Every event
then carries the app name and environment, plus the ``trigger`` and
``generation`` of the fetch cycle that emitted it (bound by the controller
through structlog contextvars).
"""
import logging
import sys
from typing import IO, Any

import structlog

from churnwatch.config import settings

APP_NAME = "churnwatch"

# Keys bound per fetch cycle by the dashboard controller
CYCLE_KEYS = ("trigger", "generation")


def add_app_context(logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    """Tag every event with the app name and environment."""
    event_dict.setdefault("app", APP_NAME)
    event_dict.setdefault("env", settings.app_env)
    return event_dict


def order_cycle_keys(logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    """Move cycle keys right after the event name so related lines read together."""
    cycle = {key: event_dict.pop(key) for key in CYCLE_KEYS if key in event_dict}
    if not cycle:
        return event_dict
    event = event_dict.pop("event", None)
    ordered = {"event": event} if event is not None else {}
    ordered.update(cycle)
    ordered.update(event_dict)
    return ordered


def setup_logging(
    level: str | None = None,
    json_output: bool | None = None,
    stream: IO[str] | None = None,
) -> None:
    """
    Configure structlog on top of the stdlib root logger.

    Args:
        level: Log level name (defaults to settings.log_level)
        json_output: Render JSON lines (defaults to True in production)
        stream: Output stream (defaults to stdout)
    """
    log_level = getattr(logging, (level or settings.log_level).upper(), logging.INFO)
    if json_output is None:
        json_output = settings.app_env == "production"
    stream = stream or sys.stdout

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        add_app_context,
        order_cycle_keys,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.format_exc_info,
    ]

    if json_output:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=stream.isatty()))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # force: the host may have installed handlers before us
    logging.basicConfig(format="%(message)s", stream=stream, level=log_level, force=True)
