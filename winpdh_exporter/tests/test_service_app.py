"""HTTP surface tests using FastAPI's TestClient."""

from __future__ import annotations

from fastapi.testclient import TestClient
from prometheus_client import CONTENT_TYPE_LATEST

from winpdh_exporter.base.pdh_status import PDH_NO_DATA
from winpdh_exporter.collector import CounterSet, CounterSetState
from winpdh_exporter.service import Supervisor
from winpdh_exporter.service.app import create_app

DISK = r"\LogicalDisk(*)\Free Megabytes"


def test_metrics_and_health(provider, registry, collector_registry, wait_for):
    provider.set_instances(DISK, {"C:": 512})
    sup = Supervisor(provider, registry, stop_timeout=5)
    try:
        sup.reconcile([CounterSet("web01", 0.01, [DISK])])
        assert wait_for(lambda: sup.runs[0].manager.state is CounterSetState.ACTIVE)
        client = TestClient(create_app(sup, collector_registry))

        r = client.get("/metrics")
        assert r.status_code == 200  # nosec B101 test assertion
        assert r.headers["content-type"] == CONTENT_TYPE_LATEST  # nosec B101 test assertion
        assert 'winpdh_Free_Megabytes{category="LogicalDisk",hostname="web01",instance="C:"} 512.0' in r.text
        assert 'winpdh_failed_collectors{hostname="web01"} 0.0' in r.text

        h = client.get("/api/health")
        assert h.status_code == 200  # nosec B101 test assertion
        body = h.json()
        assert body["ok"] is True  # nosec B101 test assertion
        assert body["counter_sets"][0]["host"] == "web01"
        assert body["counter_sets"][0]["state"] == "active"
        assert body["counter_sets"][0]["metrics"] == 1
    finally:
        sup.stop_all()

    assert "winpdh_Free_Megabytes" not in TestClient(create_app(None, collector_registry)).get("/metrics").text


def test_health_reports_failed_sets(provider, registry, wait_for):
    provider.set_instances(DISK, {"C:": 1})
    provider.fail_collect(PDH_NO_DATA)
    sup = Supervisor(provider, registry, stop_timeout=5)
    try:
        sup.reconcile([CounterSet("web01", 0.01, [DISK])])
        assert wait_for(lambda: sup.runs[0].error is not None)
        body = TestClient(create_app(sup, registry.collector_registry)).get("/api/health").json()
        assert body["ok"] is False  # nosec B101 test assertion
        assert body["counter_sets"][0]["error"]
    finally:
        sup.stop_all()


def test_health_without_supervisor():
    client = TestClient(create_app())
    body = client.get("/api/health").json()
    assert body == {"ok": True, "counter_sets": []}  # nosec B101 test assertion
