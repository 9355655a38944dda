"""CounterProvider Protocol (single-class module).

Defines the contract the collection engine consumes from the native
performance-counter subsystem.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from ..models import ArrayReadResult


@runtime_checkable
class CounterProvider(Protocol):
    """Native counter subsystem: queries, counter handles and sampling.

    Query and counter handles are opaque to the engine. Every method except
    ``read_formatted_array`` signals failure by raising
    :class:`~winpdh_exporter.base.errors.PdhError` carrying the native status.
    """

    def open_query(self, host: str) -> Any:
        """Open one query context used to collect counters from ``host``."""
        ...

    def validate_path(self, path: str) -> None:
        """Check that ``path`` names a known counter (raises on a bad name)."""
        ...

    def add_counter(self, query: Any, path: str) -> Any:
        """Add ``path`` to ``query`` and return its counter handle."""
        ...

    def collect(self, query: Any) -> None:
        """Trigger one collection tick for every counter in ``query``."""
        ...

    def read_formatted_array(self, counter: Any, capacity: int) -> ArrayReadResult:
        """Read the instance/value array of ``counter`` into ``capacity`` bytes.

        Returns ``MORE_DATA(required)`` when ``capacity`` is too small; the
        caller retries with the reported size.
        """
        ...

    def close_query(self, query: Any) -> None:
        """Release ``query`` and every counter added to it."""
        ...
