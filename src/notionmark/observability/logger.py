"""Structured JSON logger for notionmark.

Every log record is emitted as a single-line JSON object so that a
document-sync pipeline can ship conversion diagnostics straight to its log
aggregator.

Typical structured output::

    {"ts": "2026-01-01T12:00:00.123456+00:00", "level": "DEBUG",
     "logger": "notionmark.converter", "message": "markdown converted",
     "op": "markdown_to_blocks", "chars": 42, "blocks": 3, "warnings": 0}

Each :class:`ConversionWarning` of a conversion is also logged at ``INFO``
by :func:`log_conversion_warnings`, with its code and context as fields.

Usage::

    from notionmark.observability import get_logger

    log = get_logger("notionmark.converter")
    log.debug("markdown converted", extra={"extra_fields": {"blocks": 3}})
"""

from __future__ import annotations

import json
import logging
import sys
from collections.abc import Iterable
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from notionmark.models import ConversionWarning


class StructuredFormatter(logging.Formatter):
    """Format log records as single-line JSON objects.

    Guaranteed keys: ``ts`` (ISO-8601 UTC), ``level``, ``logger`` and
    ``message``.  Structured fields passed as
    ``extra={"extra_fields": {...}}`` are merged into the top-level object;
    ``exception`` and ``stack_info`` are added when present.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_entry: dict[str, Any] = {
            "ts": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        extra_fields: dict[str, Any] | None = getattr(record, "extra_fields", None)
        if extra_fields is not None:
            log_entry.update(extra_fields)

        if record.exc_info and record.exc_info[1] is not None:
            log_entry["exception"] = self.formatException(record.exc_info)

        if record.stack_info:
            log_entry["stack_info"] = self.formatStack(record.stack_info)

        return json.dumps(log_entry, default=str, ensure_ascii=False)


# One handler per logger name, so repeated get_logger calls never stack
# duplicate handlers.
_configured_loggers: set[str] = set()


def get_logger(
    name: str = "notionmark",
    *,
    level: int | str = logging.WARNING,
    stream: Any | None = None,
) -> logging.Logger:
    """Get or create a structured JSON logger.

    Parameters
    ----------
    name:
        Logger name.  Defaults to ``"notionmark"``.
    level:
        Minimum level applied the first time *name* is configured.  Accepts
        an ``int`` or a case-insensitive level name.  Defaults to
        ``WARNING`` so a library import stays quiet; raise it to ``DEBUG``
        to see per-conversion records.
    stream:
        Output stream for the handler.  Defaults to ``sys.stderr``.

    Returns
    -------
    logging.Logger
        The logger, with a :class:`StructuredFormatter` handler attached
        exactly once.
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


def log_conversion_warnings(
    logger: logging.Logger,
    warnings: Iterable[ConversionWarning],
    *,
    op: str,
) -> int:
    """Emit one ``INFO`` record per conversion warning.

    Each record carries ``op``, the warning ``code`` and its ``context``
    dict as structured fields.  Returns the number of records.
    """
    count = 0
    for warning in warnings:
        logger.info(
            warning.message,
            extra={"extra_fields": {"op": op, "code": warning.code, "context": warning.context}},
        )
        count += 1
    return count
