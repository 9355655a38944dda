"""Typed configuration models.

Purpose
-------
Validate the exporter configuration file (counter sets plus HTTP listener
and logging settings) and convert each configured counter set into the
immutable :class:`~winpdh_exporter.collector.CounterSet` the engine runs.

External dependencies
---------------------
- Pydantic v2 ``BaseModel`` for validation and ``model_dump()``.

Failure modes
-------------
- Pydantic raises ``ValidationError`` for malformed input; ``load_config``
  turns it into ``CollectorError(CONFIG)``.
"""
from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from ..collector.counter_set import CounterSet
from .defaults import (
    DEFAULT_HOST,
    DEFAULT_INTERVAL_SECONDS,
    DEFAULT_LISTEN_HOST,
    DEFAULT_LISTEN_PORT,
    DEFAULT_LOG_LEVEL,
)


class CounterSetConfig(BaseModel):
    """One host, one sampling interval, an ordered list of counter paths.

    Paths are host-less (``\\Processor(*)\\% Processor Time``); the host is
    prepended when the counter set resolves them.
    """

    host: str = DEFAULT_HOST
    interval: float = Field(default=DEFAULT_INTERVAL_SECONDS, gt=0)
    counters: List[str] = Field(default_factory=list)

    @field_validator("host")
    @classmethod
    def _host_not_blank(cls, value: str) -> str:
        value = value.strip().lstrip("\\")
        if not value:
            raise ValueError("host must not be empty")
        return value

    @field_validator("counters")
    @classmethod
    def _paths_are_host_less(cls, value: List[str]) -> List[str]:
        for path in value:
            if not path.startswith("\\") or path.startswith("\\\\"):
                raise ValueError(f"counter path must start with a single backslash: {path!r}")
        return value

    def to_counter_set(self) -> CounterSet:
        return CounterSet(host=self.host, interval=self.interval, counters=tuple(self.counters))


class ExporterConfig(BaseModel):
    """Top-level exporter configuration."""

    listen_host: str = DEFAULT_LISTEN_HOST
    listen_port: int = Field(default=DEFAULT_LISTEN_PORT, ge=0, le=65535)
    log_level: str = DEFAULT_LOG_LEVEL
    log_json: bool = True
    log_file: Optional[str] = None
    # Seconds between config file checks; 0 disables reloading.
    reload_interval: float = Field(default=0.0, ge=0)
    counter_sets: List[CounterSetConfig] = Field(default_factory=list)

    def to_counter_sets(self) -> List[CounterSet]:
        return [c.to_counter_set() for c in self.counter_sets]


__all__ = ["CounterSetConfig", "ExporterConfig"]
