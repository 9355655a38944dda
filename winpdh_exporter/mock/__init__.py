"""Deterministic in-memory counter provider for tests and ``--mock`` runs."""

from .client import MockCounterHandle, MockCounterProvider, load_fixture_catalog

__all__ = ["MockCounterProvider", "MockCounterHandle", "load_fixture_catalog"]
