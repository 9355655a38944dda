"""Counter set collection engine.

Purpose
-------
``CounterSetManager`` runs one :class:`CounterSet`: it opens a provider
query for the host, resolves the configured paths into counter handles,
samples them every ``interval`` seconds, publishes one gauge per observed
instance, evicts counters that keep failing, and withdraws everything it
published when it stops.

Threading
---------
``start_collect`` runs the whole loop on the calling thread and returns only
after teardown. ``stop_collect`` is meant to be called from another thread;
it fires the stop signal and blocks until every published entry is gone.
The loop only notices the signal between ticks: in-flight provider and
registry calls are never interrupted.

Failure Modes
-------------
- Setup errors (diagnostic gauge registration, first collect tick, a
  registry failure other than an already-registered conflict) are raised
  from ``start_collect`` after teardown.
- Query open failure is logged and ``start_collect`` returns normally.
- Everything else (bad paths, missing objects, failed reads, underivable
  paths, registration races) is logged and collection continues.
"""
from __future__ import annotations

import logging
import time
from threading import Event, Lock
from typing import Any, Dict, List, Optional, Tuple

from ..base.cancellation import StopSignal
from ..base.errors import AlreadyRegisteredError, CollectorError, ErrorCode, PdhError
from ..base.interfaces import CounterProvider, MetricRegistry
from ..base.logging import LogContext, get_logger, log_event
from ..base.metrics import GaugeHandle, get_default_registry
from ..base.models import FormattedItem, GaugeDescriptor, ReadStatus
from ..base.pdh_status import PDH_CSTATUS_NO_OBJECT, format_status
from ..config.defaults import (
    EVICTION_THRESHOLD,
    FAILED_COLLECTORS_HELP,
    FAILED_COLLECTORS_NAME,
    MAX_READ_ATTEMPTS,
    METRIC_NAMESPACE,
)
from .counter_set import CounterSet, CounterSetState, ResolvedCounterHandle
from .failures import FailureTracker
from .names import derive_gauge, metric_key
from .registry_adapter import MetricRegistryAdapter

FAILED_COLLECTORS_KEY = "FailedCollectors"

_LIFECYCLE = (
    CounterSetState.INITIALIZING,
    CounterSetState.ACTIVE,
    CounterSetState.STOPPING,
    CounterSetState.STOPPED,
)


def _ctx(host: str, counter: str | None = None, *, status: int | None = None, instance: str | None = None) -> LogContext:
    return LogContext(
        host=host,
        counter=counter,
        instance=instance,
        pdh_error=format_status(status) if status is not None else None,
    )


class CounterSetManager:
    """Collects one counter set and keeps its published metrics in sync."""

    def __init__(
        self,
        counter_set: CounterSet,
        provider: CounterProvider,
        registry: Optional[MetricRegistry] = None,
        *,
        stop_signal: Optional[StopSignal] = None,
        eviction_threshold: int = EVICTION_THRESHOLD,
        max_read_attempts: int = MAX_READ_ATTEMPTS,
    ) -> None:
        self.counter_set = counter_set
        self._provider = provider
        self._signal = stop_signal if stop_signal is not None else StopSignal()
        self._adapter = MetricRegistryAdapter(
            registry if registry is not None else get_default_registry(),
            host=counter_set.host,
        )
        self._eviction_threshold = eviction_threshold
        self._max_read_attempts = max_read_attempts
        self._handles: Dict[str, ResolvedCounterHandle] = {}
        self._tracker: Optional[FailureTracker] = None
        self._diagnostic: Optional[GaugeHandle] = None
        self._query: Any = None
        # Keys another counter set (or a previous cycle) already publishes.
        self._shadowed: set[str] = set()
        self._underivable: set[str] = set()
        self._state = CounterSetState.INITIALIZING
        self._state_lock = Lock()
        self._started = False
        self._exited = Event()
        self._logger = get_logger("winpdh.collector")

    # ------------------------------------------------------------------ #
    # Introspection
    # ------------------------------------------------------------------ #
    @property
    def host(self) -> str:
        return self.counter_set.host

    @property
    def state(self) -> CounterSetState:
        with self._state_lock:
            return self._state

    @property
    def stop_signal(self) -> StopSignal:
        return self._signal

    @property
    def adapter(self) -> MetricRegistryAdapter:
        return self._adapter

    @property
    def failed_collectors(self) -> float:
        return self._diagnostic.value if self._diagnostic is not None else 0.0

    def active_counters(self) -> List[str]:
        """Paths still being sampled (resolved and not evicted)."""
        return list(self._handles)

    def failure_count(self, path: str) -> Optional[int]:
        handle = self._handles.get(path)
        return handle.failures if handle is not None else None

    def metric_keys(self) -> List[str]:
        return [k for k in self._adapter.keys() if k != FAILED_COLLECTORS_KEY]

    def _set_state(self, state: CounterSetState) -> None:
        # Lifecycle only moves forward.
        with self._state_lock:
            if _LIFECYCLE.index(state) > _LIFECYCLE.index(self._state):
                self._state = state

    # ------------------------------------------------------------------ #
    # Lifecycle
    # ------------------------------------------------------------------ #
    def start_collect(self) -> None:
        """Run the sampling loop until stopped; see module docs for errors."""
        with self._state_lock:
            if self._started:
                raise CollectorError(
                    ErrorCode.INVALID_STATE,
                    "start_collect may only run once per counter set",
                    host=self.host,
                )
            self._started = True
        try:
            if self._signal.fired:
                return
            self._collect()
        finally:
            self._teardown()
            self._exited.set()

    def stop_collect(self, timeout: float | None = None) -> bool:
        """Stop collection and wait until every published entry is withdrawn.

        Returns ``False`` only when ``timeout`` elapses first. Safe to call
        more than once and after a fatal error already stopped the loop.
        """
        if self._signal.fire("stop_collect"):
            log_event(self._logger, "counterset.stop_requested", _ctx(self.host))
        with self._state_lock:
            started = self._started
            if not started:
                self._state = CounterSetState.STOPPED
        if not started:
            return True
        self._set_state(CounterSetState.STOPPING)
        deadline = None if timeout is None else time.monotonic() + timeout
        if not self._exited.wait(timeout):
            return False
        remaining = None if deadline is None else max(0.0, deadline - time.monotonic())
        return self._adapter.wait_until_released(remaining)

    # ------------------------------------------------------------------ #
    # Collection
    # ------------------------------------------------------------------ #
    def _collect(self) -> None:
        host = self.host
        log_event(self._logger, "counterset.start", _ctx(host), interval=self.counter_set.interval)

        self._diagnostic = self._register_diagnostic()
        self._tracker = FailureTracker(self._handles, self._diagnostic, self._eviction_threshold)

        try:
            self._query = self._provider.open_query(host)
        except PdhError as exc:
            log_event(self._logger, "pdh.open_query_failed", _ctx(host, status=exc.status), level=logging.ERROR)
            return

        self._resolve_counters()

        try:
            self._provider.collect(self._query)
        except PdhError as exc:
            raise CollectorError(
                exc.code,
                "failed initial collect tick",
                host=host,
                status=exc.status,
            ) from exc

        first = True
        while True:
            self._tick()
            if first:
                first = False
                self._set_state(CounterSetState.ACTIVE)
                log_event(self._logger, "counterset.initialized", _ctx(host), counters=len(self._handles))
            else:
                log_event(self._logger, "counterset.iteration", _ctx(host), level=logging.DEBUG)
            if self._signal.wait(self.counter_set.interval):
                log_event(self._logger, "counterset.stop_observed", _ctx(host), reason=self._signal.reason)
                break

    def _require_tracker(self) -> FailureTracker:
        if self._tracker is None:
            raise CollectorError(ErrorCode.INVALID_STATE, "counter set is not collecting", host=self.host)
        return self._tracker

    def _count_failed_collector(self) -> None:
        if self._diagnostic is None:
            raise CollectorError(ErrorCode.INVALID_STATE, "diagnostic gauge is not registered", host=self.host)
        self._diagnostic.inc()

    def _register_diagnostic(self) -> GaugeHandle:
        descriptor = GaugeDescriptor(
            name=FAILED_COLLECTORS_NAME,
            help=FAILED_COLLECTORS_HELP,
            namespace=METRIC_NAMESPACE,
            labels={"hostname": self.host},
        )
        try:
            return self._adapter.register(FAILED_COLLECTORS_KEY, descriptor).handle
        except CollectorError as exc:
            log_event(
                self._logger,
                "registry.diagnostic_failed",
                _ctx(self.host),
                level=logging.ERROR,
                error=str(exc),
            )
            raise

    def _resolve_counters(self) -> None:
        for spec in self.counter_set.counters:
            path = spec.qualified(self.host)
            try:
                self._provider.validate_path(path)
            except PdhError as exc:
                log_event(self._logger, "pdh.validate_failed", _ctx(self.host, path, status=exc.status), level=logging.ERROR)
                self._count_failed_collector()
                continue
            try:
                handle = self._provider.add_counter(self._query, path)
            except PdhError as exc:
                if exc.status == PDH_CSTATUS_NO_OBJECT:
                    log_event(
                        self._logger,
                        "pdh.add_counter_no_object",
                        _ctx(self.host, path, status=exc.status),
                        level=logging.WARNING,
                    )
                else:
                    log_event(
                        self._logger,
                        "pdh.add_counter_failed",
                        _ctx(self.host, path, status=exc.status),
                        level=logging.ERROR,
                    )
                self._count_failed_collector()
                continue
            self._handles[path] = ResolvedCounterHandle(path=path, handle=handle)

    def _tick(self) -> None:
        try:
            self._provider.collect(self._query)
        except PdhError as exc:
            log_event(self._logger, "pdh.collect_failed", _ctx(self.host, status=exc.status), level=logging.ERROR)
        # Eviction mutates the handle map.
        for handle in list(self._handles.values()):
            items = self._read(handle)
            if items is None:
                continue
            self._require_tracker().record_success(handle)
            for item in items:
                self._publish(handle.path, item)

    def _read(self, handle: ResolvedCounterHandle) -> Optional[Tuple[FormattedItem, ...]]:
        """Read one counter with the growable-buffer probe.

        Returns ``None`` after applying the failure policy.
        """
        result = self._provider.read_formatted_array(handle.handle, 0)
        probe = result.status
        attempts = 0
        while result.status is ReadStatus.MORE_DATA and attempts < self._max_read_attempts:
            attempts += 1
            result = self._provider.read_formatted_array(handle.handle, result.required)
        if result.status is ReadStatus.OK:
            return result.items

        ctx = _ctx(self.host, handle.path, status=result.code or None)
        if probe is ReadStatus.NO_DATA:
            log_event(self._logger, "pdh.no_data", ctx, level=logging.WARNING)
        else:
            log_event(
                self._logger,
                "pdh.read_array_failed",
                ctx,
                level=logging.ERROR,
                status=result.status.value,
                attempts=attempts,
            )
        if self._require_tracker().record_failure(handle):
            log_event(
                self._logger,
                "counter.evicted",
                ctx,
                consecutive_failures=self._eviction_threshold,
            )
        return None

    def _publish(self, path: str, item: FormattedItem) -> None:
        key = metric_key(path, item.instance)
        entry = self._adapter.get(key)
        if entry is not None:
            entry.handle.set(item.value)
            return
        if key in self._shadowed or path in self._underivable:
            return
        ctx = _ctx(self.host, path, instance=item.instance)
        try:
            descriptor = derive_gauge(path, item.instance)
        except CollectorError as exc:
            self._underivable.add(path)
            self._count_failed_collector()
            log_event(self._logger, "counter.derive_failed", ctx, level=logging.ERROR, error=exc.message)
            return
        try:
            entry = self._adapter.register(key, descriptor)
        except AlreadyRegisteredError as exc:
            self._shadowed.add(key)
            log_event(self._logger, "registry.already_registered", ctx, level=logging.WARNING, error=exc.message)
            return
        except CollectorError as exc:
            log_event(self._logger, "registry.register_failed", ctx, level=logging.ERROR, error=str(exc))
            self._signal.fire("registration failed")
            raise
        entry.handle.set(item.value)
        log_event(self._logger, "registry.collector_registered", ctx, level=logging.DEBUG)

    def _teardown(self) -> None:
        self._set_state(CounterSetState.STOPPING)
        remaining = self._adapter.unregister_all()
        if self._query is not None:
            try:
                self._provider.close_query(self._query)
            except PdhError as exc:
                log_event(self._logger, "pdh.close_query_failed", _ctx(self.host, status=exc.status), level=logging.WARNING)
            self._query = None
        self._handles.clear()
        if remaining == 0:
            self._set_state(CounterSetState.STOPPED)
        log_event(self._logger, "counterset.stopped", _ctx(self.host), held=remaining or None)


__all__ = ["CounterSetManager", "FAILED_COLLECTORS_KEY"]
