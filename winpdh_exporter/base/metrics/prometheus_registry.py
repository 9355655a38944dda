"""Prometheus-backed implementation of the ``MetricRegistry`` contract.

Design
------
``prometheus_client`` keys its ``CollectorRegistry`` by metric name, so two
gauges that share a name but differ in label values cannot be registered as
separate collectors. Counters published for different hosts or instances
share names all the time, so this registry keeps one labeled ``Gauge``
family per full metric name and maps every handle to one labeled child of
that family. A family is registered when its first child appears and
unregistered when its last child goes.

Failure Modes
-------------
- A second handle with an identical name and label set raises
  :class:`AlreadyRegisteredError`.
- A name already claimed by an unrelated collector in the underlying
  ``CollectorRegistry`` also raises :class:`AlreadyRegisteredError`.
- Invalid names or a label-name mismatch within a family raise
  :class:`RegistrationError`.
- ``unregister`` reports success once the child is removed, even when the
  family was already dropped from the ``CollectorRegistry`` elsewhere.
"""
from __future__ import annotations

import contextlib
from dataclasses import dataclass, field
from threading import RLock
from typing import Dict, Optional, Tuple

from prometheus_client import REGISTRY, CollectorRegistry, Gauge

from ..errors import AlreadyRegisteredError, RegistrationError
from ..models import GaugeDescriptor
from .gauge_handle import GaugeHandle


@dataclass
class _Family:
    gauge: Gauge
    label_names: Tuple[str, ...]
    children: Dict[Tuple[str, ...], GaugeHandle] = field(default_factory=dict)


class PrometheusMetricRegistry:
    """Thread-safe gauge registry publishing into a ``CollectorRegistry``."""

    def __init__(self, registry: Optional[CollectorRegistry] = None) -> None:
        self._registry = registry if registry is not None else REGISTRY
        self._lock = RLock()
        self._families: Dict[str, _Family] = {}

    @property
    def collector_registry(self) -> CollectorRegistry:
        return self._registry

    def new_gauge(self, descriptor: GaugeDescriptor) -> GaugeHandle:
        return GaugeHandle(descriptor)

    def register(self, handle: GaugeHandle) -> None:
        d = handle.descriptor
        label_values = d.label_values
        with self._lock:
            family = self._families.get(d.full_name)
            if family is None:
                family = self._create_family(d)
            elif family.label_names != d.label_names:
                raise RegistrationError(
                    f"label names {d.label_names} differ from registered {family.label_names}",
                    metric=d.full_name,
                )
            if label_values in family.children:
                raise AlreadyRegisteredError(
                    f"{d.full_name}{d.labels} is already registered",
                    metric=d.full_name,
                )
            family.children[label_values] = handle
            handle.bind(family.gauge.labels(*label_values))

    def unregister(self, handle: GaugeHandle) -> bool:
        d = handle.descriptor
        label_values = d.label_values
        with self._lock:
            family = self._families.get(d.full_name)
            if family is None or family.children.get(label_values) is not handle:
                return False
            family.gauge.remove(*label_values)
            del family.children[label_values]
            handle.unbind()
            if not family.children:
                del self._families[d.full_name]
                # The family may already be gone from the collector registry.
                with contextlib.suppress(KeyError):
                    self._registry.unregister(family.gauge)
            return True

    def registered_count(self) -> int:
        with self._lock:
            return sum(len(f.children) for f in self._families.values())

    def _create_family(self, d: GaugeDescriptor) -> _Family:
        try:
            gauge = Gauge(d.name, d.help, labelnames=d.label_names, namespace=d.namespace, registry=None)
        except ValueError as exc:
            raise RegistrationError(f"invalid gauge {d.full_name!r}: {exc}", metric=d.full_name) from exc
        try:
            self._registry.register(gauge)
        except ValueError as exc:
            raise AlreadyRegisteredError(
                f"{d.full_name} is claimed by another collector: {exc}",
                metric=d.full_name,
            ) from exc
        family = _Family(gauge=gauge, label_names=d.label_names)
        self._families[d.full_name] = family
        return family


__all__ = ["PrometheusMetricRegistry"]
