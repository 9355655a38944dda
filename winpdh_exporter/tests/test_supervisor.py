"""Tests for counter set supervision, reconciliation and config reload."""

from __future__ import annotations

import os
import time

import pytest

from winpdh_exporter.base.pdh_status import PDH_NO_DATA
from winpdh_exporter.collector import CounterSet, CounterSetState
from winpdh_exporter.service import ConfigWatcher, Supervisor

DISK = r"\LogicalDisk(*)\Free Megabytes"
CPU = r"\Processor(*)\% Processor Time"
DISK_METRIC = "winpdh_Free_Megabytes"


@pytest.fixture()
def supervisor(provider, registry):
    provider.set_instances(DISK, {"C:": 1})
    provider.set_instances(CPU, {"_Total": 2})
    sup = Supervisor(provider, registry, stop_timeout=5)
    yield sup
    sup.stop_all()


def _all_active(sup: Supervisor) -> bool:
    return all(r.manager.state is CounterSetState.ACTIVE for r in sup.runs)


def test_reconcile_starts_desired_sets(supervisor, collector_registry, wait_for) -> None:
    result = supervisor.reconcile([CounterSet("a", 0.01, [DISK]), CounterSet("b", 0.01, [CPU])])
    assert (result.kept, result.stopped, result.started) == (0, 0, 2)
    assert wait_for(lambda: _all_active(supervisor))
    labels = {"hostname": "a", "category": "LogicalDisk", "instance": "C:"}
    assert collector_registry.get_sample_value(DISK_METRIC, labels) == 1


def test_equivalent_sets_keep_running(supervisor, wait_for) -> None:
    supervisor.reconcile([CounterSet("a", 0.01, [DISK])])
    assert wait_for(lambda: _all_active(supervisor))
    before = supervisor.runs[0]

    result = supervisor.reconcile([CounterSet("a", 0.01, [DISK])])
    assert (result.kept, result.stopped, result.started) == (1, 0, 0)
    assert supervisor.runs[0] is before


def test_changed_set_is_stopped_before_replacement_starts(supervisor, collector_registry, wait_for) -> None:
    supervisor.reconcile([CounterSet("a", 0.01, [DISK, CPU])])
    assert wait_for(lambda: _all_active(supervisor))
    old = supervisor.runs[0]

    # Same identities, different order: must be replaced without collisions.
    result = supervisor.reconcile([CounterSet("a", 0.01, [CPU, DISK])])
    assert (result.kept, result.stopped, result.started) == (0, 1, 1)
    assert old.manager.state is CounterSetState.STOPPED
    assert old.manager.adapter.pending == 0

    new = supervisor.runs[0]
    assert wait_for(lambda: new.manager.state is CounterSetState.ACTIVE)
    assert new.error is None
    assert len(new.manager.metric_keys()) == 2


def test_removed_set_withdraws_its_metrics(supervisor, collector_registry, wait_for) -> None:
    supervisor.reconcile([CounterSet("a", 0.01, [DISK])])
    assert wait_for(lambda: _all_active(supervisor))
    supervisor.reconcile([])
    labels = {"hostname": "a", "category": "LogicalDisk", "instance": "C:"}
    assert collector_registry.get_sample_value(DISK_METRIC, labels) is None
    assert supervisor.snapshot() == []


def test_failed_set_is_recorded_and_restarted(supervisor, provider, wait_for) -> None:
    provider.fail_collect(PDH_NO_DATA)
    supervisor.reconcile([CounterSet("a", 0.01, [DISK])])
    assert wait_for(lambda: supervisor.runs[0].error is not None and not supervisor.runs[0].alive)
    snap = supervisor.snapshot()[0]
    assert snap["state"] == "stopped"
    assert snap["error"]

    result = supervisor.reconcile([CounterSet("a", 0.01, [DISK])])
    assert (result.stopped, result.started) == (1, 1)
    assert wait_for(lambda: _all_active(supervisor))


def test_stop_all_stops_everything(supervisor, wait_for) -> None:
    supervisor.reconcile([CounterSet("a", 0.01, [DISK]), CounterSet("b", 0.01, [DISK])])
    assert wait_for(lambda: _all_active(supervisor))
    runs = supervisor.runs
    assert supervisor.stop_all() is True
    assert all(r.manager.state is CounterSetState.STOPPED for r in runs)
    assert supervisor.runs == []


def test_config_watcher_reconciles_on_change(supervisor, tmp_path, wait_for) -> None:
    path = tmp_path / "exporter.yaml"
    path.write_text("counter_sets: []\n", encoding="utf-8")
    watcher = ConfigWatcher(str(path), supervisor, interval=60)
    assert watcher.check() is False

    path.write_text(
        "counter_sets:\n  - host: a\n    interval: 0.01\n    counters: ['\\LogicalDisk(*)\\Free Megabytes']\n",
        encoding="utf-8",
    )
    stat = os.stat(path)
    os.utime(path, (stat.st_atime, stat.st_mtime + 5))
    assert watcher.check() is True
    assert wait_for(lambda: len(supervisor.runs) == 1 and _all_active(supervisor))


def test_config_watcher_keeps_sets_on_bad_file(supervisor, tmp_path, wait_for) -> None:
    supervisor.reconcile([CounterSet("a", 0.01, [DISK])])
    path = tmp_path / "exporter.yaml"
    path.write_text("counter_sets: []\n", encoding="utf-8")
    watcher = ConfigWatcher(str(path), supervisor, interval=60)

    path.write_text("counter_sets: [unclosed\n", encoding="utf-8")
    stat = os.stat(path)
    os.utime(path, (stat.st_atime, stat.st_mtime + 5))
    assert watcher.check() is False
    assert len(supervisor.runs) == 1


def test_config_watcher_thread_stops(supervisor, tmp_path) -> None:
    path = tmp_path / "exporter.yaml"
    path.write_text("counter_sets: []\n", encoding="utf-8")
    watcher = ConfigWatcher(str(path), supervisor, interval=0.01)
    watcher.start()
    time.sleep(0.03)
    watcher.stop()
