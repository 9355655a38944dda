"""Owned-set bookkeeping over the external metrics registry.

``MetricRegistryAdapter`` records which metric identities one counter set
has published so they can all be withdrawn at teardown. Its pending count is
the only state shared across threads: the sampling thread mutates it and the
thread calling ``stop_collect`` waits for it to reach zero.
"""
from __future__ import annotations

import logging
import time
from threading import Condition
from typing import Dict, List, Optional

from ..base.logging import LogContext, get_logger, log_event
from ..base.interfaces import MetricRegistry
from ..base.models import GaugeDescriptor
from ..config.defaults import STUCK_UNREGISTER_LOG_SECONDS
from .counter_set import MetricEntry


class MetricRegistryAdapter:
    """Register/unregister-all wrapper with exactly-once ownership tracking.

    Parameters
    ----------
    registry:
        External registry (usually the process-wide Prometheus registry).
    host:
        Host of the owning counter set; used for log context only.
    stuck_log_interval:
        Seconds between warnings while :meth:`wait_until_released` is
        blocked on entries that failed to unregister.
    """

    def __init__(
        self,
        registry: MetricRegistry,
        *,
        host: str,
        stuck_log_interval: float = STUCK_UNREGISTER_LOG_SECONDS,
    ) -> None:
        self._registry = registry
        self._host = host
        self._stuck_log_interval = stuck_log_interval
        self._owned: Dict[str, MetricEntry] = {}
        self._pending = 0
        self._cond = Condition()
        self._logger = get_logger("winpdh.registry")

    @property
    def pending(self) -> int:
        with self._cond:
            return self._pending

    def get(self, key: str) -> Optional[MetricEntry]:
        with self._cond:
            return self._owned.get(key)

    def keys(self) -> List[str]:
        with self._cond:
            return list(self._owned)

    def __contains__(self, key: object) -> bool:
        with self._cond:
            return key in self._owned

    def __len__(self) -> int:
        with self._cond:
            return len(self._owned)

    def register(self, key: str, descriptor: GaugeDescriptor) -> MetricEntry:
        """Create and publish a gauge, then take ownership of it under ``key``.

        Raises
        ------
        AlreadyRegisteredError
            The identity is already published (by a previous cycle or by
            another counter set). Nothing is recorded.
        CollectorError
            Any other registry failure, propagated unchanged.
        """
        with self._cond:
            if key in self._owned:
                return self._owned[key]
        handle = self._registry.new_gauge(descriptor)
        self._registry.register(handle)
        entry = MetricEntry(key=key, handle=handle)
        with self._cond:
            self._owned[key] = entry
            self._pending += 1
        log_event(
            self._logger,
            "registry.registered",
            LogContext(host=self._host, extra={"collector": key}),
            level=logging.DEBUG,
            metric=descriptor.full_name,
        )
        return entry

    def unregister_all(self) -> int:
        """Withdraw every owned entry; return how many are still held.

        An entry the registry refuses to drop stays owned and keeps the
        pending count up. It is not retried.
        """
        with self._cond:
            entries = list(self._owned.values())
        for entry in entries:
            ctx = LogContext(host=self._host, extra={"collector": entry.key})
            if not self._registry.unregister(entry.handle):
                log_event(self._logger, "registry.unregister_failed", ctx, level=logging.ERROR)
                continue
            with self._cond:
                del self._owned[entry.key]
                self._pending -= 1
                self._cond.notify_all()
            log_event(self._logger, "registry.unregistered", ctx, level=logging.DEBUG)
        return self.pending

    def wait_until_released(self, timeout: float | None = None) -> bool:
        """Block until no entry is owned; ``False`` if ``timeout`` expires.

        Without a timeout a stuck unregistration blocks forever; a warning
        naming the held keys is logged every ``stuck_log_interval`` seconds.
        """
        deadline = None if timeout is None else time.monotonic() + timeout
        with self._cond:
            while self._pending > 0:
                wait_for = self._stuck_log_interval
                if deadline is not None:
                    remaining = deadline - time.monotonic()
                    if remaining <= 0:
                        return False
                    wait_for = min(wait_for, remaining)
                if not self._cond.wait(wait_for) and self._pending > 0:
                    log_event(
                        self._logger,
                        "registry.release_pending",
                        LogContext(host=self._host),
                        level=logging.WARNING,
                        pending=self._pending,
                        held=sorted(self._owned),
                    )
            return True


__all__ = ["MetricRegistryAdapter"]
