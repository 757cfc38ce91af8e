"""Log output for the Peniel API process.

Every module logs through ``logging.getLogger(__name__)``. This module only
decides how those records look: structlog's ProcessorFormatter renders them
as coloured console lines or JSON, stamped with the session the request
belongs to and, inside a span, the OTel trace ids.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import structlog
from opentelemetry import trace

from peniel.core.sessions import get_session_context

LOG_FILENAME = "peniel.log"

# Per-request chatter from the HTTP stack, capped at WARNING.
QUIET_LOGGERS = ("uvicorn.access", "uvicorn.error", "httpx", "httpcore")


def add_request_context(_logger, _method_name, event_dict: dict) -> dict:
    """Stamp the record with its session and, inside a span, its trace ids."""
    event_dict["session"] = get_session_context()
    span_context = trace.get_current_span().get_span_context()
    if span_context.is_valid:
        event_dict["trace_id"] = format(span_context.trace_id, "032x")
        event_dict["span_id"] = format(span_context.span_id, "016x")
    return event_dict


def _formatter(renderer, timestamp_fmt: str) -> structlog.stdlib.ProcessorFormatter:
    return structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=[
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt=timestamp_fmt),
            add_request_context,
        ],
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )


def peniel_handlers() -> list[logging.Handler]:
    """Root handlers installed by :func:`configure_logging`."""
    return [
        h
        for h in logging.getLogger().handlers
        if isinstance(h.formatter, structlog.stdlib.ProcessorFormatter)
    ]


def configure_logging(
    level: str = "INFO",
    fmt: str = "text",
    log_root: Path | str | None = None,
) -> None:
    """Route the root logger to stderr, and to ``log_root/peniel.log`` if given.

    ``fmt`` is ``"text"`` for a readable console or ``"json"`` for one JSON
    object per line. The file copy is always JSON. Calling this again
    replaces the previous handlers.
    """
    if fmt == "json":
        console = _formatter(structlog.processors.JSONRenderer(), "iso")
    else:
        console = _formatter(structlog.dev.ConsoleRenderer(), "%H:%M:%S")

    root = logging.getLogger()
    for handler in peniel_handlers():
        root.removeHandler(handler)
        handler.close()

    stream = logging.StreamHandler(sys.stderr)
    stream.setFormatter(console)
    root.addHandler(stream)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    if log_root is not None:
        log_dir = Path(log_root)
        log_dir.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_dir / LOG_FILENAME, encoding="utf-8")
        file_handler.setFormatter(_formatter(structlog.processors.JSONRenderer(), "iso"))
        root.addHandler(file_handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
