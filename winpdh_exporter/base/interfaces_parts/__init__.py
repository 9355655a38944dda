"""Protocol parts for the collector's external collaborators."""

from .counter_provider import CounterProvider
from .metric_registry import MetricRegistry

__all__ = ["CounterProvider", "MetricRegistry"]
