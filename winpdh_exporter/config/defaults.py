"""Centralized defaults for the exporter.

Values here are the lowest-precedence layer of ``load_config`` and the
fixed constants of the collection engine.
"""
from __future__ import annotations

METRIC_NAMESPACE = "winpdh"
COUNTER_HELP = "windows performance counter"

FAILED_COLLECTORS_NAME = "failed_collectors"
FAILED_COLLECTORS_HELP = "The number of counters that failed to initialize or were evicted"

# Consecutive failed reads after which a counter is never read again.
EVICTION_THRESHOLD = 10

# Capacity re-reads allowed when a wildcard keeps growing between calls.
MAX_READ_ATTEMPTS = 3

DEFAULT_HOST = "localhost"
DEFAULT_INTERVAL_SECONDS = 15.0

DEFAULT_LISTEN_HOST = "0.0.0.0"  # nosec B104 - exporter must be scrapeable
DEFAULT_LISTEN_PORT = 9701

DEFAULT_LOG_LEVEL = "INFO"

# Seconds between warnings while stop_collect waits on held registry entries.
STUCK_UNREGISTER_LOG_SECONDS = 30.0

__all__ = [
    "METRIC_NAMESPACE",
    "COUNTER_HELP",
    "FAILED_COLLECTORS_NAME",
    "FAILED_COLLECTORS_HELP",
    "EVICTION_THRESHOLD",
    "MAX_READ_ATTEMPTS",
    "DEFAULT_HOST",
    "DEFAULT_INTERVAL_SECONDS",
    "DEFAULT_LISTEN_HOST",
    "DEFAULT_LISTEN_PORT",
    "DEFAULT_LOG_LEVEL",
    "STUCK_UNREGISTER_LOG_SECONDS",
]
