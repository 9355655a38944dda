"""Counter set supervisor.

Purpose
-------
Run one :class:`CounterSetManager` per configured counter set, each on its
own daemon thread, and reconcile the running sets against a new desired
configuration without ever letting an old and a new set publish colliding
metric identities.

Reconcile order
---------------
1. Every running set is matched (1:1) against an equivalent desired set.
   Matched sets keep running untouched.
2. Unmatched running sets are stopped and their ``stop_collect`` is awaited,
   so their entries are gone from the registry.
3. Only then are unmatched desired sets started.

Failure Modes
-------------
- An exception raised by ``start_collect`` is logged and recorded on the
  run; it shows up in :meth:`Supervisor.snapshot` and the set is restarted
  on the next reconcile.
- A stop that exceeds ``stop_timeout`` is logged at ERROR; the thread is
  left behind (its entries may still be held).
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from threading import RLock, Thread
from typing import Any, Callable, Dict, List, Optional, Sequence

from ..base.cancellation import StopSignal
from ..base.interfaces import CounterProvider, MetricRegistry
from ..base.logging import LogContext, get_logger, log_event
from ..base.metrics import get_default_registry
from ..collector import CounterSet, CounterSetManager

ManagerFactory = Callable[[CounterSet, CounterProvider, MetricRegistry, StopSignal], CounterSetManager]


def _default_factory(
    counter_set: CounterSet,
    provider: CounterProvider,
    registry: MetricRegistry,
    signal: StopSignal,
) -> CounterSetManager:
    return CounterSetManager(counter_set, provider, registry, stop_signal=signal)


@dataclass
class ManagedSet:
    """A counter set plus the manager and thread running it."""

    counter_set: CounterSet
    manager: CounterSetManager
    thread: Thread = field(init=False)
    error: Optional[BaseException] = None

    @property
    def alive(self) -> bool:
        return self.thread.is_alive()


@dataclass(frozen=True)
class ReconcileResult:
    kept: int
    stopped: int
    started: int


class Supervisor:
    """Start, stop and reconcile counter set managers."""

    def __init__(
        self,
        provider: CounterProvider,
        registry: Optional[MetricRegistry] = None,
        *,
        stop_timeout: Optional[float] = None,
        manager_factory: ManagerFactory = _default_factory,
    ) -> None:
        self._provider = provider
        self._registry = registry if registry is not None else get_default_registry()
        self._stop_timeout = stop_timeout
        self._factory = manager_factory
        self._root = StopSignal()
        self._lock = RLock()
        self._runs: List[ManagedSet] = []
        self._logger = get_logger("winpdh.supervisor")

    @property
    def runs(self) -> List[ManagedSet]:
        with self._lock:
            return list(self._runs)

    def reconcile(self, desired: Sequence[CounterSet]) -> ReconcileResult:
        """Make the running sets match ``desired``; see module docs for order."""
        with self._lock:
            pending = list(desired)
            keep: List[ManagedSet] = []
            stop: List[ManagedSet] = []
            for run in self._runs:
                idx = self._match(run, pending)
                if idx is None:
                    stop.append(run)
                else:
                    keep.append(run)
                    del pending[idx]

            for run in stop:
                self._stop(run)
            started = [self._start(cs) for cs in pending]
            self._runs = keep + started

        log_event(
            self._logger,
            "supervisor.reconciled",
            kept=len(keep),
            stopped=len(stop),
            started=len(started),
        )
        return ReconcileResult(kept=len(keep), stopped=len(stop), started=len(started))

    def stop_all(self, timeout: Optional[float] = None) -> bool:
        """Stop every running set; ``False`` if any failed to release in time."""
        if timeout is None:
            timeout = self._stop_timeout
        self._root.fire("supervisor stopping")
        with self._lock:
            runs, self._runs = self._runs, []
        return all([self._stop(run, timeout) for run in runs])

    def snapshot(self) -> List[Dict[str, Any]]:
        """Per-set status for health reporting."""
        out: List[Dict[str, Any]] = []
        for run in self.runs:
            m = run.manager
            out.append(
                {
                    "host": run.counter_set.host,
                    "interval": run.counter_set.interval,
                    "counters": len(run.counter_set.counters),
                    "state": m.state.value,
                    "alive": run.alive,
                    "active_counters": len(m.active_counters()),
                    "metrics": len(m.metric_keys()),
                    "failed_collectors": m.failed_collectors,
                    "error": str(run.error) if run.error is not None else None,
                }
            )
        return out

    # ------------------------------------------------------------------
    # Internals

    @staticmethod
    def _match(run: ManagedSet, pending: Sequence[CounterSet]) -> Optional[int]:
        if run.error is not None or not run.alive:
            return None
        for idx, cs in enumerate(pending):
            if run.counter_set.equivalent(cs):
                return idx
        return None

    def _start(self, counter_set: CounterSet) -> ManagedSet:
        signal = self._root.child()
        manager = self._factory(counter_set, self._provider, self._registry, signal)
        run = ManagedSet(counter_set=counter_set, manager=manager)
        run.thread = Thread(
            target=self._run,
            args=(run,),
            name=f"winpdh-{counter_set.host}",
            daemon=True,
        )
        run.thread.start()
        log_event(
            self._logger,
            "supervisor.started",
            LogContext(host=counter_set.host),
            interval=counter_set.interval,
            counters=len(counter_set.counters),
        )
        return run

    def _run(self, run: ManagedSet) -> None:
        try:
            run.manager.start_collect()
        except Exception as exc:  # noqa: BLE001
            run.error = exc
            log_event(
                self._logger,
                "supervisor.collect_failed",
                LogContext(host=run.counter_set.host),
                level=logging.ERROR,
                error=str(exc),
                error_type=type(exc).__name__,
            )

    def _stop(self, run: ManagedSet, timeout: Optional[float] = None) -> bool:
        if timeout is None:
            timeout = self._stop_timeout
        ctx = LogContext(host=run.counter_set.host)
        released = run.manager.stop_collect(timeout)
        run.thread.join(timeout)
        self._root.unlink_child(run.manager.stop_signal)
        if not released:
            log_event(
                self._logger,
                "supervisor.stop_timed_out",
                ctx,
                level=logging.ERROR,
                held=run.manager.adapter.keys(),
            )
        else:
            log_event(self._logger, "supervisor.stopped", ctx)
        return released


__all__ = ["Supervisor", "ManagedSet", "ReconcileResult", "ManagerFactory"]
