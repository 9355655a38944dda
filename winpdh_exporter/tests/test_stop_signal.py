"""Unit tests for the single-fire stop signal.

Covers first-fire-wins, cascade to children, late link after fire and
timed waits.
"""
from __future__ import annotations

import threading

from winpdh_exporter.base.cancellation import StopSignal


def test_fire_is_single_shot() -> None:
    signal = StopSignal()
    assert signal.fire("stop") is True
    assert signal.fire("again") is False
    assert signal.fired is True and signal.reason == "stop"  # nosec B101 - pytest assert in tests


def test_fire_cascades_to_children() -> None:
    parent = StopSignal()
    child1 = parent.child()
    child2 = parent.child()
    parent.fire("shutdown")
    assert child1.fired and child1.reason == "shutdown"  # nosec B101 - pytest assert in tests
    assert child2.fired and child2.reason == "shutdown"  # nosec B101 - pytest assert in tests


def test_child_fire_does_not_reach_parent() -> None:
    parent = StopSignal()
    child = parent.child()
    child.fire()
    assert parent.fired is False  # nosec B101 - pytest assert in tests


def test_late_child_fires_immediately() -> None:
    parent = StopSignal()
    parent.fire("done")
    late = StopSignal(parent=parent)
    assert late.fired and late.reason == "done"  # nosec B101 - pytest assert in tests


def test_unlinked_child_is_not_fired() -> None:
    parent = StopSignal()
    child = parent.child()
    parent.unlink_child(child)
    parent.fire()
    assert child.fired is False  # nosec B101 - pytest assert in tests


def test_wait_times_out_then_wakes_on_fire() -> None:
    signal = StopSignal()
    assert signal.wait(0.01) is False
    threading.Timer(0.02, signal.fire).start()
    assert signal.wait(5) is True
