"""Observability: structured logging for notionmark."""

from __future__ import annotations

from .logger import StructuredFormatter, get_logger, log_conversion_warnings

__all__ = [
    "StructuredFormatter",
    "get_logger",
    "log_conversion_warnings",
]
