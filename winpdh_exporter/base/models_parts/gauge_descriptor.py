"""Gauge descriptor: the registry identity of one published metric."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Tuple


@dataclass(frozen=True)
class GaugeDescriptor:
    """Name, help text, namespace and const labels of a gauge.

    ``full_name`` is what appears in the exposition output
    (``<namespace>_<name>``).
    """

    name: str
    help: str
    namespace: str = ""
    labels: Dict[str, str] = field(default_factory=dict)

    @property
    def full_name(self) -> str:
        return f"{self.namespace}_{self.name}" if self.namespace else self.name

    @property
    def label_names(self) -> Tuple[str, ...]:
        return tuple(sorted(self.labels))

    @property
    def label_values(self) -> Tuple[str, ...]:
        return tuple(self.labels[name] for name in self.label_names)


__all__ = ["GaugeDescriptor"]
