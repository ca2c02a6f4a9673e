"""Structured JSON logger for md2nb.

Every log record is emitted as a single-line JSON object::

    {"ts": "2026-10-18T12:00:00.123456+00:00", "level": "INFO",
     "logger": "md2nb.converter", "message": "conversion complete",
     "cells": 12, "chars": 4096}

Only the package root logger (``"md2nb"``) owns a handler.  Module loggers
such as ``"md2nb.converter"`` propagate to it, so a single
:func:`set_level` call controls the whole package.

Usage::

    from md2nb.observability import get_logger

    log = get_logger("md2nb.converter")
    log.debug("mapped blocks", extra={"extra_fields": {"cells": 3}})
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

ROOT_LOGGER = "md2nb"


class StructuredFormatter(logging.Formatter):
    """Format log records as single-line JSON objects.

    Guaranteed keys: ``ts`` (ISO-8601 UTC), ``level``, ``logger`` and
    ``message``.  Fields passed via ``extra={"extra_fields": {...}}`` are
    merged into the top-level object; ``exc_info`` and ``stack_info`` are
    serialised when present.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_entry: dict[str, Any] = {
            "ts": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        extra_fields: dict[str, Any] | None = getattr(
            record, "extra_fields", None
        )
        if extra_fields is not None:
            log_entry.update(extra_fields)

        if record.exc_info and record.exc_info[1] is not None:
            log_entry["exception"] = self.formatException(record.exc_info)

        if record.stack_info:
            log_entry["stack_info"] = self.formatStack(record.stack_info)

        return json.dumps(log_entry, default=str, ensure_ascii=False)


_handler: logging.Handler | None = None


def _resolve_level(level: int | str) -> int:
    if isinstance(level, str):
        return logging.getLevelName(level.upper())
    return level


def get_logger(
    name: str = ROOT_LOGGER,
    *,
    level: int | str | None = None,
    stream: Any | None = None,
) -> logging.Logger:
    """Get a logger in the ``md2nb`` hierarchy.

    The first call attaches a :class:`StructuredFormatter` stream handler to
    the ``"md2nb"`` root logger (level ``WARNING`` unless *level* is given).
    Repeated calls never add duplicate handlers.

    Parameters
    ----------
    name:
        Logger name.  Names outside the ``md2nb.`` namespace are rejected so
        that records always reach the package handler.
    level:
        Optional level for the package root logger.  Accepts an ``int`` or
        a case-insensitive name such as ``"DEBUG"``.
    stream:
        Output stream for the handler on first configuration.  Defaults to
        ``sys.stderr``.
    """
    global _handler

    if name != ROOT_LOGGER and not name.startswith(ROOT_LOGGER + "."):
        raise ValueError(f"logger name must live under {ROOT_LOGGER!r}, got {name!r}")

    root = logging.getLogger(ROOT_LOGGER)
    if _handler is None:
        _handler = logging.StreamHandler(stream or sys.stderr)
        _handler.setFormatter(StructuredFormatter())
        root.addHandler(_handler)
        root.setLevel(logging.WARNING)
        # Keep package records out of application root handlers.
        root.propagate = False

    if level is not None:
        root.setLevel(_resolve_level(level))

    return logging.getLogger(name)


def set_level(level: int | str) -> None:
    """Set the minimum level for every md2nb logger."""
    get_logger(level=level)
