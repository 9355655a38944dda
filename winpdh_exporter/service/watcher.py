"""Polling config file watcher.

Checks the config file's modification time every ``interval`` seconds and,
on change, reloads it and reconciles the supervisor. A file that fails to
load is logged and the running sets are left as they are.
"""
from __future__ import annotations

import logging
import os
from threading import Thread
from typing import Callable, Optional

from ..base.cancellation import StopSignal
from ..base.errors import CollectorError
from ..base.logging import LogContext, get_logger, log_event
from ..config import ExporterConfig, load_config
from .supervisor import Supervisor


class ConfigWatcher:
    def __init__(
        self,
        path: str,
        supervisor: Supervisor,
        interval: float,
        *,
        loader: Callable[[str], ExporterConfig] = load_config,
        stop_signal: Optional[StopSignal] = None,
    ) -> None:
        self._path = path
        self._supervisor = supervisor
        self._interval = interval
        self._loader = loader
        self._signal = stop_signal if stop_signal is not None else StopSignal()
        self._mtime = self._stat()
        self._thread: Optional[Thread] = None
        self._logger = get_logger("winpdh.config")

    def _stat(self) -> Optional[float]:
        try:
            return os.stat(self._path).st_mtime
        except OSError:
            return None

    def check(self) -> bool:
        """Reload and reconcile if the file changed; return whether it did."""
        mtime = self._stat()
        if mtime is None or mtime == self._mtime:
            return False
        self._mtime = mtime
        ctx = LogContext(extra={"path": self._path})
        try:
            config = self._loader(self._path)
        except CollectorError as exc:
            log_event(self._logger, "config.reload_failed", ctx, level=logging.ERROR, error=exc.message)
            return False
        log_event(self._logger, "config.reloaded", ctx, counter_sets=len(config.counter_sets))
        self._supervisor.reconcile(config.to_counter_sets())
        return True

    def start(self) -> None:
        self._thread = Thread(target=self._loop, name="winpdh-config-watcher", daemon=True)
        self._thread.start()

    def stop(self) -> None:
        self._signal.fire("watcher stopping")
        if self._thread is not None:
            self._thread.join()

    def _loop(self) -> None:
        while not self._signal.wait(self._interval):
            self.check()


__all__ = ["ConfigWatcher"]
