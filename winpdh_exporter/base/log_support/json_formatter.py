"""JSON formatter for exporter log records.

A record renders as one JSON object: ``ts``, ``level``, ``logger`` and either
``msg`` or, when the message is itself a JSON object (as produced by
``log_event``), that object's keys. Values passed through ``extra=`` are
kept; standard ``LogRecord`` attributes are not.
"""
from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict

ISO = "%Y-%m-%dT%H:%M:%S.%fZ"

_STANDARD_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {"message", "asctime", "taskName"}


def _message_fields(text: str) -> Dict[str, Any]:
    if not text.startswith("{"):
        return {"msg": text}
    try:
        parsed = json.loads(text)
    except ValueError:
        return {"msg": text}
    return parsed if isinstance(parsed, dict) else {"msg": text}


class JsonFormatter(logging.Formatter):
    """Render records as single-line JSON."""

    def format(self, record: logging.LogRecord) -> str:
        out: Dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, timezone.utc).strftime(ISO),
            "level": record.levelname,
            "logger": record.name,
        }
        out.update(_message_fields(record.getMessage()))
        if record.exc_info:
            out["exc"] = self.formatException(record.exc_info)
        for key, value in vars(record).items():
            if key in _STANDARD_ATTRS or key.startswith("_"):
                continue
            out.setdefault(key, value)
        return json.dumps(out, ensure_ascii=False, default=str)


__all__ = ["JsonFormatter", "ISO"]
