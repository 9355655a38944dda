"""Run the exporter: supervisor, optional config reload and the HTTP server."""
from __future__ import annotations

import logging
from typing import Optional

import uvicorn

from ..base.interfaces import CounterProvider
from ..base.logging import configure_logger, get_logger, log_event
from ..base.metrics import get_default_registry
from ..config import ExporterConfig
from .app import create_app
from .supervisor import Supervisor
from .watcher import ConfigWatcher


def build_provider(mock: bool = False) -> CounterProvider:
    """Return the mock provider or the ``pdh.dll`` binding."""
    if mock:
        from ..mock import MockCounterProvider

        return MockCounterProvider.from_fixture()
    from ..pdh import PdhCounterProvider

    return PdhCounterProvider()


def serve(
    config: ExporterConfig,
    *,
    mock: bool = False,
    config_path: Optional[str] = None,
    provider: Optional[CounterProvider] = None,
) -> None:
    """Start collecting ``config`` and serve ``/metrics`` until interrupted.

    Every counter set is stopped (and its metrics withdrawn) on the way out.
    """
    logger = configure_logger(level=config.log_level, file_path=config.log_file, json_mode=config.log_json)
    registry = get_default_registry()
    supervisor = Supervisor(provider if provider is not None else build_provider(mock), registry)
    supervisor.reconcile(config.to_counter_sets())

    watcher: Optional[ConfigWatcher] = None
    if config_path and config.reload_interval > 0:
        watcher = ConfigWatcher(config_path, supervisor, config.reload_interval)
        watcher.start()

    app = create_app(supervisor, registry.collector_registry)
    log_event(
        get_logger("winpdh.service"),
        "service.listening",
        host=config.listen_host,
        port=config.listen_port,
        mock=mock,
    )
    uvicorn_level = logging.getLevelName(logger.level).lower()
    try:
        uvicorn.run(app, host=config.listen_host, port=config.listen_port, log_level=uvicorn_level)
    finally:
        if watcher is not None:
            watcher.stop()
        supervisor.stop_all()


__all__ = ["serve", "build_provider"]
