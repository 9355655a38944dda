"""Counter set data model.

A :class:`CounterSet` is the unit of collection: one host, one sampling
interval and an ordered tuple of :class:`CounterSpec` path templates. It is
immutable once built; a configuration change produces a new set, and
:meth:`CounterSet.equivalent` tells the supervisor whether the running set
must be replaced.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Tuple

from ..base.metrics import GaugeHandle


@dataclass(frozen=True)
class CounterSpec:
    """A configured counter path such as ``\\LogicalDisk(*)\\Free Megabytes``.

    The instance segment may be ``*`` to collect every instance present at
    sample time.
    """

    path: str

    def equivalent(self, other: "CounterSpec") -> bool:
        return self.path == other.path

    def qualified(self, host: str) -> str:
        """Return the fully-qualified path ``\\\\<host><path>``."""
        return f"\\\\{host}{self.path}"


class CounterSetState(str, Enum):
    """Lifecycle: ``INITIALIZING -> ACTIVE -> STOPPING -> STOPPED``."""

    INITIALIZING = "initializing"
    ACTIVE = "active"
    STOPPING = "stopping"
    STOPPED = "stopped"


@dataclass(frozen=True)
class CounterSet:
    """Counters to collect from one host at one interval (seconds)."""

    host: str
    interval: float
    counters: Tuple[CounterSpec, ...] = ()

    def __post_init__(self) -> None:
        specs: Tuple[CounterSpec, ...] = tuple(
            c if isinstance(c, CounterSpec) else CounterSpec(c) for c in self.counters
        )
        object.__setattr__(self, "interval", float(self.interval))
        object.__setattr__(self, "counters", specs)

    def equivalent(self, other: "CounterSet") -> bool:
        """Same host, same interval, same paths in the same order."""
        if self.host != other.host or self.interval != other.interval:
            return False
        if len(self.counters) != len(other.counters):
            return False
        return all(a.equivalent(b) for a, b in zip(self.counters, other.counters))


@dataclass
class ResolvedCounterHandle:
    """A counter the provider accepted, keyed by its fully-qualified path."""

    path: str
    handle: Any
    failures: int = 0


@dataclass(frozen=True)
class MetricEntry:
    """One published metric owned by a counter set."""

    key: str
    handle: GaugeHandle = field(compare=False)


__all__ = [
    "CounterSpec",
    "CounterSet",
    "CounterSetState",
    "ResolvedCounterHandle",
    "MetricEntry",
]
