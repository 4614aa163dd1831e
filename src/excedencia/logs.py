"""
Structured logging for the evaluator: structlog with level, ISO timestamp
and either console or JSON rendering.

Everything goes to stderr: with the stdio transport, stdout carries the
MCP protocol stream and must stay clean.
"""

from __future__ import annotations

import logging
import sys
from datetime import datetime, timezone
from typing import Any

import structlog


def _add_timestamp(logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    if "timestamp" not in event_dict:
        event_dict["timestamp"] = datetime.now(timezone.utc).isoformat()
    return event_dict


def configure_logging(level: str = "INFO", fmt: str = "console") -> None:
    """Configure structlog; safe to call again (e.g. after CLI flags are parsed)."""
    level_value = getattr(logging, (level or "INFO").upper(), logging.INFO)
    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        _add_timestamp,
    ]
    if (fmt or "").strip().lower() == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()))
    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level_value),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )


def get_logger(name: str) -> structlog.BoundLogger:
    """
    Logger bound to a module name. First argument is the event name:
        logger.info("evaluation_finished", supuesto="A", importe=725)
    """
    return structlog.get_logger(name).bind(logger=name)


if not structlog.is_configured():
    configure_logging()
