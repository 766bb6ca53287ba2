"""Structured JSON logger for tiptapify.

Conversion anomalies (absorbed markup, skipped elements, repaired nodes)
are never surfaced to the user; they are logged here as single-line JSON
objects so they can be picked up by whatever log pipeline the host app
ships with.

Typical structured output::

    {"ts": "2026-03-01T12:00:00.123456+00:00", "level": "WARNING",
     "logger": "tiptapify.converter", "message": "HTML element skipped",
     "op": "html_to_tiptap", "tag": "table", "error": "..."}

Usage::

    from tiptapify.observability import get_logger

    log = get_logger("tiptapify.converter")
    log.warning("element skipped", extra={"extra_fields": {"tag": "ul"}})
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any


class StructuredFormatter(logging.Formatter):
    """Format log records as single-line JSON objects.

    Guaranteed keys are ``ts`` (ISO-8601 UTC), ``level``, ``logger`` and
    ``message``.  Fields passed as ``extra={"extra_fields": {...}}`` are
    merged into the top-level object; exception and stack information is
    serialised when present.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "ts": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        extra_fields: dict[str, Any] | None = getattr(record, "extra_fields", None)
        if extra_fields is not None:
            entry.update(extra_fields)

        if record.exc_info and record.exc_info[1] is not None:
            entry["exception"] = self.formatException(record.exc_info)

        if record.stack_info:
            entry["stack_info"] = self.formatStack(record.stack_info)

        return json.dumps(entry, default=str, ensure_ascii=False)


# One handler per logger name so repeated ``get_logger`` calls stay idempotent.
_configured_loggers: set[str] = set()


def get_logger(
    name: str = "tiptapify",
    *,
    level: int | str = logging.WARNING,
    stream: Any | None = None,
) -> logging.Logger:
    """Get or create a structured JSON logger.

    Parameters
    ----------
    name:
        Logger name.  Module loggers use ``"tiptapify.<area>"``.
    level:
        Minimum log level, as an ``int`` or a case-insensitive name.
        Conversions run on every editor poll tick, so the default is
        ``WARNING``.
    stream:
        Output stream for the handler.  Defaults to ``sys.stderr``.

    Returns
    -------
    logging.Logger
        A logger with a :class:`StructuredFormatter` handler.  Repeated calls
        with the same *name* do not add duplicate handlers.
    """
    logger = logging.getLogger(name)

    if name not in _configured_loggers:
        resolved_level = (
            logging.getLevelName(level.upper())
            if isinstance(level, str)
            else level
        )
        logger.setLevel(resolved_level)

        handler = logging.StreamHandler(stream or sys.stderr)
        handler.setFormatter(StructuredFormatter())
        logger.addHandler(handler)
        logger.propagate = False

        _configured_loggers.add(name)

    return logger
