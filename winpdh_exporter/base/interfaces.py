"""
Interfaces (Protocols) for the collector's external collaborators.

Re-exports the Protocols under ``winpdh_exporter.base.interfaces_parts``.
"""

from __future__ import annotations

from .interfaces_parts import CounterProvider, MetricRegistry

__all__ = ["CounterProvider", "MetricRegistry"]
