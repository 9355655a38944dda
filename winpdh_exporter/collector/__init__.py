"""Collection-and-publication engine.

Public API:
    - Data model: :class:`CounterSpec`, :class:`CounterSet`,
      :class:`CounterSetState`, :class:`ResolvedCounterHandle`, :class:`MetricEntry`
    - Identity derivation: :func:`derive_gauge`, :func:`metric_key`
    - :class:`FailureTracker`, :class:`MetricRegistryAdapter`
    - :class:`CounterSetManager`
"""

from .counter_set import (
    CounterSet,
    CounterSetState,
    CounterSpec,
    MetricEntry,
    ResolvedCounterHandle,
)
from .failures import FailureTracker
from .manager import FAILED_COLLECTORS_KEY, CounterSetManager
from .names import derive_gauge, metric_key
from .registry_adapter import MetricRegistryAdapter

__all__ = [
    "CounterSpec",
    "CounterSet",
    "CounterSetState",
    "ResolvedCounterHandle",
    "MetricEntry",
    "FailureTracker",
    "MetricRegistryAdapter",
    "CounterSetManager",
    "FAILED_COLLECTORS_KEY",
    "derive_gauge",
    "metric_key",
]
