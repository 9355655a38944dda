"""
Collector domain models public surface.

Re-exports the implementations under ``winpdh_exporter.base.models_parts``.
"""

from .models_parts.array_read_result import ArrayReadResult, FormattedItem, ReadStatus
from .models_parts.gauge_descriptor import GaugeDescriptor

__all__ = [
    "ArrayReadResult",
    "FormattedItem",
    "ReadStatus",
    "GaugeDescriptor",
]
