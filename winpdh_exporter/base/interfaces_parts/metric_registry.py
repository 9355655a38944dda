"""MetricRegistry Protocol (single-class module).

The external, process-wide store of named/labeled gauges.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

from ..models import GaugeDescriptor

if TYPE_CHECKING:
    from ..metrics.gauge_handle import GaugeHandle


@runtime_checkable
class MetricRegistry(Protocol):
    """Register and unregister gauges by handle."""

    def new_gauge(self, descriptor: GaugeDescriptor) -> "GaugeHandle":
        """Create an unregistered gauge for ``descriptor``."""
        ...

    def register(self, handle: "GaugeHandle") -> None:
        """Publish ``handle``.

        Raises ``AlreadyRegisteredError`` when the identity is already
        published and ``RegistrationError`` for any other failure.
        """
        ...

    def unregister(self, handle: "GaugeHandle") -> bool:
        """Withdraw ``handle``; ``False`` when it was not published."""
        ...
