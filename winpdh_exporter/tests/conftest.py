"""Shared fixtures for the exporter test suite.

Every test gets its own ``prometheus_client.CollectorRegistry`` so published
metrics never leak into the process-wide registry or between tests.
"""

from __future__ import annotations

import json
import time
from threading import Thread
from typing import Any, Callable, Dict, Iterator, List

import pytest
from prometheus_client import CollectorRegistry

from winpdh_exporter.base.logging import LOG_LEVEL_ENV, configure_logger
from winpdh_exporter.base.metrics import PrometheusMetricRegistry
from winpdh_exporter.collector import CounterSetManager
from winpdh_exporter.mock import MockCounterProvider


@pytest.fixture(autouse=True)
def _reset_logging(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Start every test with JSON records at INFO and no file handler."""
    monkeypatch.delenv(LOG_LEVEL_ENV, raising=False)
    configure_logger(level="INFO", file_path=None, json_mode=True)
    yield
    monkeypatch.delenv(LOG_LEVEL_ENV, raising=False)
    configure_logger(level="INFO", file_path=None, json_mode=True)


@pytest.fixture()
def collector_registry() -> CollectorRegistry:
    return CollectorRegistry(auto_describe=True)


@pytest.fixture()
def registry(collector_registry: CollectorRegistry) -> PrometheusMetricRegistry:
    return PrometheusMetricRegistry(collector_registry)


@pytest.fixture()
def provider() -> MockCounterProvider:
    return MockCounterProvider()


@pytest.fixture()
def wait_for() -> Callable[..., bool]:
    """Poll ``predicate`` until true or ``timeout`` seconds pass."""

    def _wait(predicate: Callable[[], bool], timeout: float = 5.0, interval: float = 0.005) -> bool:
        deadline = time.monotonic() + timeout
        while time.monotonic() < deadline:
            if predicate():
                return True
            time.sleep(interval)
        return predicate()

    return _wait


@pytest.fixture()
def run_in_thread() -> Iterator[Callable[[CounterSetManager], Thread]]:
    """Start ``manager.start_collect`` on a daemon thread; stop leftovers on teardown."""

    started: List[CounterSetManager] = []
    threads: List[Thread] = []

    def _start(manager: CounterSetManager) -> Thread:
        t = Thread(target=manager.start_collect, daemon=True)
        started.append(manager)
        threads.append(t)
        t.start()
        return t

    yield _start
    for manager in started:
        manager.stop_collect(timeout=2)
    for t in threads:
        t.join(timeout=2)


@pytest.fixture()
def log_events(capsys: pytest.CaptureFixture[str]) -> Callable[[], List[Dict[str, Any]]]:
    """Return a reader for JSON log records written to stderr so far."""

    def _read() -> List[Dict[str, Any]]:
        records: List[Dict[str, Any]] = []
        for line in capsys.readouterr().err.splitlines():
            line = line.strip()
            if line.startswith("{"):
                records.append(json.loads(line))
        return records

    return _read
