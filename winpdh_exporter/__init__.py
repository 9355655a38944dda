"""winpdh_exporter package

Bridge Windows PDH performance counters to Prometheus gauges.

Public API (re-exported):
    - Version: ``__version__``
    - Exceptions: :class:`CollectorError`, :class:`ErrorCode`
    - Engine: :class:`CounterSet`, :class:`CounterSpec`, :class:`CounterSetManager`
    - Identity derivation: :func:`derive_gauge`
    - Configuration: :func:`load_config`
"""

from .base.errors import CollectorError, ErrorCode
from .collector import CounterSet, CounterSetManager, CounterSetState, CounterSpec, derive_gauge
from .config import ExporterConfig, load_config

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "CollectorError",
    "ErrorCode",
    "CounterSet",
    "CounterSpec",
    "CounterSetState",
    "CounterSetManager",
    "derive_gauge",
    "ExporterConfig",
    "load_config",
]
