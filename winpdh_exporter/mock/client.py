"""Deterministic in-memory ``CounterProvider`` backed by JSON fixtures.

Purpose
-------
Stand in for ``pdh.dll`` so the collection engine, supervisor, HTTP service
and CLI can run and be tested on any platform. Counter values come from a
declarative fixture catalog; failures are scripted per path.

External dependencies
---------------------
Standard library only. Fixtures are loaded via ``importlib.resources``.

Scripting
---------
Counters are registered under the path as configured (``\\Object(*)\\Name``);
host-qualified paths passed by the engine match with or without the
``\\\\host`` prefix. An instance value may be a list, in which case the value
advances by one element per ``collect`` call (cycling). Read failures are
queued per path and consumed by probe reads (capacity ``0``), the same point
at which ``pdh.dll`` reports ``PDH_NO_DATA``.
"""

from __future__ import annotations

import json
from collections import deque
from dataclasses import dataclass, field
from importlib import resources
from itertools import count
from threading import Lock
from typing import Any, Deque, Dict, Iterable, List, Mapping, Optional, Set, Union

from ..base.errors import PdhError
from ..base.logging import LogContext, get_logger, log_event
from ..base.models import ArrayReadResult, FormattedItem
from ..base.pdh_status import (
    ERROR_SUCCESS,
    PDH_CSTATUS_BAD_COUNTERNAME,
    PDH_CSTATUS_NO_OBJECT,
    PDH_INVALID_HANDLE,
    PDH_NO_DATA,
)

_FIXTURE_RESOURCE = "default.json"

# Size of PDH_FMT_COUNTERVALUE_ITEM_W on 64-bit Windows.
ITEM_SIZE = 24

Value = Union[float, List[float]]


def load_fixture_catalog(resource: str = _FIXTURE_RESOURCE) -> Dict[str, Any]:
    """Load a JSON fixture catalog bundled under ``winpdh_exporter.mock.fixtures``."""
    package = "winpdh_exporter.mock.fixtures"
    data = resources.files(package).joinpath(resource).read_text(encoding="utf-8")
    return json.loads(data)


def required_size(instances: Iterable[str]) -> int:
    """Bytes ``pdh.dll`` asks for: one item struct plus the UTF-16 name per instance."""
    return sum(ITEM_SIZE + 2 * (len(name) + 1) for name in instances)


@dataclass
class MockCounterHandle:
    """Counter handle returned by :meth:`MockCounterProvider.add_counter`."""

    query: int
    path: str
    key: str


@dataclass
class _Counter:
    instances: Dict[str, Value] = field(default_factory=dict)
    queued: Deque[ArrayReadResult] = field(default_factory=deque)
    grow: int = 0


class MockCounterProvider:
    """Scripted counter provider.

    Parameters
    ----------
    counters:
        Mapping of counter path to ``{instance: value}``. Defaults to nothing;
        use :meth:`from_fixture` for the bundled catalog.
    """

    def __init__(self, counters: Optional[Mapping[str, Mapping[str, Value]]] = None) -> None:
        self._lock = Lock()
        self._counters: Dict[str, _Counter] = {}
        self._bad_paths: Dict[str, int] = {}
        self._add_failures: Dict[str, int] = {}
        self._open_failure: Optional[int] = None
        self._collect_script: Deque[int] = deque()
        self._close_failure: Optional[int] = None
        self._query_ids = count(1)
        self._logger = get_logger("winpdh.mock")
        self.collect_calls = 0
        self.read_calls: Dict[str, int] = {}
        self.open_queries: Set[int] = set()
        self.closed_queries: List[int] = []
        for path, instances in (counters or {}).items():
            self.set_instances(path, instances)

    @classmethod
    def from_fixture(cls, resource: str = _FIXTURE_RESOURCE) -> "MockCounterProvider":
        """Build a provider from a bundled catalog.

        Catalog keys: ``counters`` (path -> ``{"instances": {...}}``),
        ``missing_objects`` (paths whose object is absent) and ``bad_paths``
        (paths rejected by validation).
        """
        catalog = load_fixture_catalog(resource)
        provider = cls()
        for path, block in catalog.get("counters", {}).items():
            provider.set_instances(path, block.get("instances", {}))
        for path in catalog.get("missing_objects", ()):
            provider.missing_object(path)
        for path in catalog.get("bad_paths", ()):
            provider.reject_path(path)
        log_event(
            provider._logger,
            "mock.fixture_loaded",
            LogContext(extra={"resource": resource}),
            counters=len(provider._counters),
        )
        return provider

    # ------------------------------------------------------------------
    # Scripting

    def set_instances(self, path: str, instances: Mapping[str, Value]) -> None:
        """Replace the instances (and values) ``path`` reports from now on."""
        key = self._key(path)
        with self._lock:
            counter = self._counters.setdefault(key, _Counter())
            counter.instances = dict(instances)

    def remove_counter(self, path: str) -> None:
        with self._lock:
            self._counters.pop(self._key(path), None)

    def reject_path(self, path: str, status: int = PDH_CSTATUS_BAD_COUNTERNAME) -> None:
        """Make ``validate_path`` fail for ``path``."""
        with self._lock:
            self._bad_paths[self._key(path)] = status

    def missing_object(self, path: str) -> None:
        """Validation passes but ``add_counter`` reports the object missing."""
        self.fail_add(path, PDH_CSTATUS_NO_OBJECT)

    def fail_add(self, path: str, status: int) -> None:
        with self._lock:
            self._add_failures[self._key(path)] = status

    def fail_open(self, status: Optional[int]) -> None:
        """Make ``open_query`` fail with ``status`` (``None`` clears it)."""
        with self._lock:
            self._open_failure = status

    def fail_close(self, status: Optional[int]) -> None:
        with self._lock:
            self._close_failure = status

    def fail_collect(self, *statuses: int) -> None:
        """Queue outcomes for the next ``collect`` calls; ``0`` means success."""
        with self._lock:
            self._collect_script.extend(statuses)

    def fail_reads(self, path: str, times: int, status: int = PDH_NO_DATA) -> None:
        """Make the next ``times`` reads of ``path`` fail.

        ``PDH_NO_DATA`` yields a ``NO_DATA`` result; any other status an
        ``ERROR`` result.
        """
        if status == PDH_NO_DATA:
            result = ArrayReadResult.no_data(status)
        else:
            result = ArrayReadResult.error(status)
        with self._lock:
            counter = self._counters.setdefault(self._key(path), _Counter())
            counter.queued.extend(result for _ in range(times))

    def grow_on_read(self, path: str, times: int) -> None:
        """Make the next ``times`` sized reads report a larger buffer requirement."""
        with self._lock:
            self._counters.setdefault(self._key(path), _Counter()).grow += times

    def reads_of(self, path: str) -> int:
        with self._lock:
            return self.read_calls.get(self._key(path), 0)

    # ------------------------------------------------------------------
    # CounterProvider

    def open_query(self, host: str) -> int:
        with self._lock:
            if self._open_failure is not None:
                raise PdhError(self._open_failure, "failed PdhOpenQuery", host=host)
            query = next(self._query_ids)
            self.open_queries.add(query)
            return query

    def validate_path(self, path: str) -> None:
        key = self._key(path)
        with self._lock:
            status = self._bad_paths.get(key)
        if status is not None:
            raise PdhError(status, "failed PdhValidatePath", counter=path)

    def add_counter(self, query: int, path: str) -> MockCounterHandle:
        key = self._key(path)
        with self._lock:
            if query not in self.open_queries:
                raise PdhError(PDH_INVALID_HANDLE, "failed PdhAddEnglishCounter", counter=path)
            status = self._add_failures.get(key)
            if status is None and key not in self._counters:
                status = PDH_CSTATUS_NO_OBJECT
        if status is not None:
            raise PdhError(status, "failed PdhAddEnglishCounter", counter=path)
        return MockCounterHandle(query=query, path=path, key=key)

    def collect(self, query: int) -> None:
        with self._lock:
            if query not in self.open_queries:
                raise PdhError(PDH_INVALID_HANDLE, "failed PdhCollectQueryData")
            self.collect_calls += 1
            status = self._collect_script.popleft() if self._collect_script else ERROR_SUCCESS
        if status != ERROR_SUCCESS:
            raise PdhError(status, "failed PdhCollectQueryData")

    def read_formatted_array(self, counter: MockCounterHandle, capacity: int) -> ArrayReadResult:
        with self._lock:
            self.read_calls[counter.key] = self.read_calls.get(counter.key, 0) + 1
            state = self._counters.get(counter.key)
            if state is None or counter.query not in self.open_queries:
                return ArrayReadResult.error(PDH_INVALID_HANDLE)
            if capacity == 0 and state.queued:
                return state.queued.popleft()
            items = tuple(
                FormattedItem(name, self._current(value)) for name, value in state.instances.items()
            )
            required = required_size(item.instance for item in items)
            if capacity > 0 and state.grow > 0:
                state.grow -= 1
                return ArrayReadResult.more_data(max(capacity, required) + ITEM_SIZE)
            if capacity < required:
                return ArrayReadResult.more_data(required)
            return ArrayReadResult.ok(items)

    def close_query(self, query: int) -> None:
        with self._lock:
            if self._close_failure is not None:
                raise PdhError(self._close_failure, "failed PdhCloseQuery")
            if query not in self.open_queries:
                raise PdhError(PDH_INVALID_HANDLE, "failed PdhCloseQuery")
            self.open_queries.discard(query)
            self.closed_queries.append(query)

    # ------------------------------------------------------------------
    # Internals

    def _current(self, value: Value) -> float:
        if isinstance(value, list):
            if not value:
                return 0.0
            tick = max(self.collect_calls - 1, 0)
            return float(value[tick % len(value)])
        return float(value)

    @staticmethod
    def _key(path: str) -> str:
        if path.startswith("\\\\"):
            rest = path.find("\\", 2)
            if rest != -1:
                return path[rest:]
        return path


__all__ = [
    "MockCounterProvider",
    "MockCounterHandle",
    "load_fixture_catalog",
    "required_size",
    "ITEM_SIZE",
]
