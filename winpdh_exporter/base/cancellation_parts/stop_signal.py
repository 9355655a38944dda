"""Single-fire broadcast stop signal.

Exposes the ``StopSignal`` class a counter set uses to end its sampling loop.
The signal fires at most once: the first ``fire`` wins and later calls are
reported as no-ops instead of failing, so the owning component can call it
from both its fatal-error path and its external stop path.
"""

from __future__ import annotations

from threading import Event, Lock
from typing import List, Optional

from .state import State


class StopSignal:
    """A thread-safe, monotonic stop signal with optional cascading.

    Waiters block in :meth:`wait` until the signal fires or a timeout elapses.
    Child signals fire when their parent fires.
    """

    def __init__(self, *, parent: "StopSignal | None" = None) -> None:
        self._state = State()
        self._event = Event()
        self._lock = Lock()
        self._children: List[StopSignal] = []
        if parent is not None:
            parent.link_child(self)

    @property
    def fired(self) -> bool:  # noqa: D401 - short form
        """Whether the signal has been raised."""
        return self._state.fired

    @property
    def reason(self) -> Optional[str]:  # noqa: D401 - short form
        """Reason string supplied by the first ``fire`` call (if any)."""
        return self._state.reason

    def fire(self, reason: str | None = None) -> bool:
        """Raise the signal and cascade to children.

        Returns ``True`` for the call that actually raised it and ``False``
        for every later call.
        """
        with self._lock:
            if self._state.fired:
                return False
            self._state.fired = True
            self._state.reason = reason
            self._event.set()
            children = list(self._children)
        for child in children:
            child.fire(reason)
        return True

    def wait(self, timeout: float | None = None) -> bool:
        """Block until fired or ``timeout`` seconds pass; return ``fired``."""
        return self._event.wait(timeout)

    def link_child(self, signal: "StopSignal") -> "StopSignal":
        """Link a child signal so parent firing cascades (returns child)."""
        with self._lock:
            self._children.append(signal)
            should_fire = self._state.fired
            reason = self._state.reason
        if should_fire:
            signal.fire(reason)
        return signal

    def unlink_child(self, signal: "StopSignal") -> None:
        """Forget a child so a finished counter set is not retained."""
        with self._lock:
            if signal in self._children:
                self._children.remove(signal)

    def child(self) -> "StopSignal":
        """Create and link a child signal (shortcut)."""
        return StopSignal(parent=self)

    def __repr__(self) -> str:  # pragma: no cover - introspection aid
        return (
            f"StopSignal(fired={self._state.fired}, "
            f"reason={self._state.reason!r}, children={len(self._children)})"
        )


__all__ = ["StopSignal"]
