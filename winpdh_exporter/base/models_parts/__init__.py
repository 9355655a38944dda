"""Domain model parts (one concept per module)."""

from .array_read_result import ArrayReadResult, FormattedItem, ReadStatus
from .gauge_descriptor import GaugeDescriptor

__all__ = ["ArrayReadResult", "FormattedItem", "ReadStatus", "GaugeDescriptor"]
