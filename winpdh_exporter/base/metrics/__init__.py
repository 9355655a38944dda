"""Metrics registry layer.

Wraps ``prometheus_client`` behind the ``MetricRegistry`` contract.
``get_default_registry()`` returns a process-wide singleton bound to the
global ``prometheus_client.REGISTRY`` so every counter set shares one
identity space, as the exposition endpoint expects.
"""
from __future__ import annotations

from .gauge_handle import GaugeHandle
from .prometheus_registry import PrometheusMetricRegistry

_DEFAULT_REGISTRY: PrometheusMetricRegistry | None = None


def get_default_registry() -> PrometheusMetricRegistry:
    """Return the process-wide registry bound to ``prometheus_client.REGISTRY``."""
    global _DEFAULT_REGISTRY
    if _DEFAULT_REGISTRY is None:
        _DEFAULT_REGISTRY = PrometheusMetricRegistry()
    return _DEFAULT_REGISTRY


__all__ = [
    "GaugeHandle",
    "PrometheusMetricRegistry",
    "get_default_registry",
]
