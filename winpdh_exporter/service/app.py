"""HTTP surface of the exporter.

Routes
------
- ``GET /metrics``: Prometheus text exposition of the collector registry.
- ``GET /api/health``: liveness plus per-counter-set status from the
  supervisor.
"""
from __future__ import annotations

from typing import List, Optional

from fastapi import FastAPI, Response
from prometheus_client import CONTENT_TYPE_LATEST, REGISTRY, CollectorRegistry, generate_latest
from pydantic import BaseModel

from .supervisor import Supervisor


class CounterSetStatus(BaseModel):
    """Status of one running counter set."""

    host: str
    interval: float
    counters: int
    state: str
    alive: bool
    active_counters: int
    metrics: int
    failed_collectors: float
    error: Optional[str] = None


class HealthBody(BaseModel):
    ok: bool
    counter_sets: List[CounterSetStatus]


def create_app(
    supervisor: Optional[Supervisor] = None,
    collector_registry: Optional[CollectorRegistry] = None,
) -> FastAPI:
    """Build the FastAPI app serving ``collector_registry`` (global by default)."""
    registry = collector_registry if collector_registry is not None else REGISTRY
    app = FastAPI(title="Windows PDH Exporter", version="0.1.0")

    @app.get("/metrics")
    def metrics() -> Response:
        return Response(content=generate_latest(registry), media_type=CONTENT_TYPE_LATEST)

    @app.get("/api/health", response_model=HealthBody)
    def health() -> HealthBody:
        sets = supervisor.snapshot() if supervisor is not None else []
        statuses = [CounterSetStatus(**s) for s in sets]
        return HealthBody(ok=all(s.error is None for s in statuses), counter_sets=statuses)

    return app


__all__ = ["create_app", "HealthBody", "CounterSetStatus"]
