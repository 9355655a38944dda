"""Structured logging context object for collector events.

:class:`LogContext` carries the fields every collector log record should
name: the target host, the counter path, the resolved instance and the
native PDH error code. ``to_dict`` merges ``extra`` and prunes ``None``.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Optional


@dataclass
class LogContext:
    """Structured context for collector logging events."""

    host: Optional[str] = None
    counter: Optional[str] = None
    instance: Optional[str] = None
    pdh_error: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        extra = data.pop("extra", {}) or {}
        data.update({k: v for k, v in extra.items() if v is not None})
        return {k: v for k, v in data.items() if v is not None}


__all__ = ["LogContext"]
