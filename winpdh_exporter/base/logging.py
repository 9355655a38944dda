"""Structured logging for the exporter.

All exporter loggers are children of the ``winpdh`` logger, which owns the
handlers: one stderr handler and, optionally, a rotating file handler. Both
use :class:`JsonFormatter` unless plain text is requested.

Events are written with :func:`log_event`; the message body is a JSON object
with an ``event`` name, the :class:`LogContext` fields and any extra keyword
fields, so every line can be filtered by host or counter path.

Level precedence: ``WINPDH_LOG_LEVEL`` (when set) over the level passed to
:func:`configure_logger` over ``INFO``.
"""
from __future__ import annotations

import json
import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Optional, Union

from .log_support import JsonFormatter, LogContext

BASE_LOGGER_NAME = "winpdh"
LOG_LEVEL_ENV = "WINPDH_LOG_LEVEL"

_CONSOLE = "winpdh.console"
_FILE = "winpdh.file"
_PLAIN_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"
_FILE_MAX_BYTES = 10 * 1024 * 1024
_FILE_BACKUPS = 5


class _StderrHandler(logging.StreamHandler):
    """Stream handler that always writes to the current ``sys.stderr``."""

    def __init__(self) -> None:
        super().__init__()
        self.set_name(_CONSOLE)

    @property
    def stream(self):  # type: ignore[override]
        return sys.stderr

    @stream.setter
    def stream(self, _value) -> None:
        pass


def parse_level(value: Union[int, str, None], default: int = logging.INFO) -> int:
    """Map a level name (case-insensitive, ``WARN`` accepted) or number to an int."""
    if value is None:
        return default
    if isinstance(value, int):
        return value
    name = value.strip().upper()
    if name == "WARN":
        name = "WARNING"
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else default


def _formatter(json_mode: bool) -> logging.Formatter:
    return JsonFormatter() if json_mode else logging.Formatter(_PLAIN_FORMAT)


def _base_logger(json_mode: bool, level: int) -> logging.Logger:
    logger = logging.getLogger(BASE_LOGGER_NAME)
    env_level = os.getenv(LOG_LEVEL_ENV)
    if any(h.get_name() == _CONSOLE for h in logger.handlers):
        if env_level:
            _apply_level(logger, parse_level(env_level, default=logger.level))
        return logger

    console = _StderrHandler()
    console.setFormatter(_formatter(json_mode))
    logger.handlers[:] = [console]
    logger.propagate = False
    _apply_level(logger, parse_level(env_level, default=level))
    return logger


def _apply_level(logger: logging.Logger, level: int) -> None:
    logger.setLevel(level)
    for handler in logger.handlers:
        handler.setLevel(level)


def get_logger(name: str = BASE_LOGGER_NAME, json_mode: bool = True, level: int = logging.INFO) -> logging.Logger:
    """Return ``name`` as a child of the shared logger.

    ``json_mode`` and ``level`` only take effect when the shared logger is
    created; use :func:`configure_logger` to change them afterwards.
    """
    base = _base_logger(json_mode, level)
    if name == BASE_LOGGER_NAME:
        return base
    logger = logging.getLogger(name)
    logger.setLevel(logging.NOTSET)
    logger.propagate = True
    return logger


def configure_logger(
    *,
    level: Union[int, str, None] = None,
    file_path: Optional[str] = None,
    json_mode: bool = True,
) -> logging.Logger:
    """Apply runtime logging settings to the shared logger.

    Parameters
    ----------
    level:
        Level name or number. ``None`` keeps the current level.
    file_path:
        Attach a rotating file handler writing to this path (10MB x 5). ``None``
        detaches any file handler previously attached here.
    json_mode:
        JSON records (default) or plain text, applied to every handler.
    """
    logger = _base_logger(json_mode, logging.INFO)
    if level is not None:
        _apply_level(logger, parse_level(level, default=logger.level))

    target = str(Path(file_path).expanduser().resolve()) if file_path else None
    for handler in [h for h in logger.handlers if h.get_name() == _FILE]:
        if target is not None and getattr(handler, "baseFilename", None) == target:
            continue
        logger.removeHandler(handler)
        handler.close()

    if target is not None and not any(h.get_name() == _FILE for h in logger.handlers):
        Path(target).parent.mkdir(parents=True, exist_ok=True)
        handler = RotatingFileHandler(target, maxBytes=_FILE_MAX_BYTES, backupCount=_FILE_BACKUPS, encoding="utf-8")
        handler.set_name(_FILE)
        handler.setLevel(logger.level)
        logger.addHandler(handler)

    for handler in logger.handlers:
        handler.setFormatter(_formatter(json_mode))
    return logger


def log_event(
    logger: logging.Logger,
    event: str,
    ctx: LogContext | None = None,
    *,
    level: int = logging.INFO,
    **fields: Any,
) -> None:
    """Log ``event`` with its context and extra fields as one JSON object.

    Fields whose value is ``None`` are omitted.
    """
    if not logger.isEnabledFor(level):
        return
    payload: dict[str, Any] = {"event": event}
    if ctx is not None:
        payload.update(ctx.to_dict())
    payload.update((k, v) for k, v in fields.items() if v is not None)
    logger.log(level, json.dumps(payload, ensure_ascii=False, default=str))


__all__ = [
    "BASE_LOGGER_NAME",
    "LOG_LEVEL_ENV",
    "LogContext",
    "configure_logger",
    "get_logger",
    "log_event",
    "parse_level",
]
