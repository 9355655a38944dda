"""Handle to one published gauge time series."""

from __future__ import annotations

from threading import Lock
from typing import Any, Optional

from ..models import GaugeDescriptor


class GaugeHandle:
    """One gauge identity plus its current value.

    While registered the handle is bound to a labeled ``prometheus_client``
    child and every update is forwarded to it; an unbound handle keeps its
    value locally so nothing is published.
    """

    __slots__ = ("descriptor", "_child", "_value", "_lock")

    def __init__(self, descriptor: GaugeDescriptor) -> None:
        self.descriptor = descriptor
        self._child: Optional[Any] = None
        self._value = 0.0
        self._lock = Lock()

    @property
    def value(self) -> float:
        return self._value

    @property
    def registered(self) -> bool:
        return self._child is not None

    def set(self, value: float) -> None:
        with self._lock:
            self._value = float(value)
            if self._child is not None:
                self._child.set(self._value)

    def inc(self, amount: float = 1.0) -> None:
        with self._lock:
            self._value += amount
            if self._child is not None:
                self._child.set(self._value)

    def bind(self, child: Any) -> None:
        with self._lock:
            self._child = child
            child.set(self._value)

    def unbind(self) -> None:
        with self._lock:
            self._child = None

    def __repr__(self) -> str:  # pragma: no cover - introspection aid
        return f"GaugeHandle({self.descriptor.full_name}, labels={self.descriptor.labels!r}, value={self._value})"


__all__ = ["GaugeHandle"]
