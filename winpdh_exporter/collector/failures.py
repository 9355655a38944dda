"""Consecutive-failure tracking and eviction for resolved counters."""
from __future__ import annotations

from typing import MutableMapping, Protocol

from ..config.defaults import EVICTION_THRESHOLD
from .counter_set import ResolvedCounterHandle


class _Incrementable(Protocol):
    def inc(self, amount: float = 1.0) -> None: ...


class FailureTracker:
    """Counts consecutive failed reads per handle and evicts persistent failures.

    The tracker mutates ``handles`` (the active handle map, keyed by path)
    and bumps ``diagnostic`` exactly once per evicted handle. Eviction happens
    when a handle's count reaches ``threshold``; an evicted handle is no
    longer in the map, so it is never read or counted again.
    """

    def __init__(
        self,
        handles: MutableMapping[str, ResolvedCounterHandle],
        diagnostic: _Incrementable,
        threshold: int = EVICTION_THRESHOLD,
    ) -> None:
        if threshold < 1:
            raise ValueError("threshold must be >= 1")
        self._handles = handles
        self._diagnostic = diagnostic
        self.threshold = threshold

    def record_success(self, handle: ResolvedCounterHandle) -> None:
        handle.failures = 0

    def record_failure(self, handle: ResolvedCounterHandle) -> bool:
        """Count one failed read; return ``True`` if this evicted ``handle``."""
        if self._handles.get(handle.path) is not handle:
            return False
        handle.failures += 1
        if handle.failures != self.threshold:
            return False
        self._diagnostic.inc()
        del self._handles[handle.path]
        return True


__all__ = ["FailureTracker"]
