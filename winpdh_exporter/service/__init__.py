"""Service layer: supervisor, config watcher, HTTP app and CLI."""

from .supervisor import ManagedSet, ReconcileResult, Supervisor
from .watcher import ConfigWatcher

__all__ = ["Supervisor", "ManagedSet", "ReconcileResult", "ConfigWatcher"]
