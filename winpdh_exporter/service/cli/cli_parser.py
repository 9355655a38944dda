"""CLI parser construction for winpdh-exporter.

This module wires subparsers but contains no execution logic. Subcommand
handlers live in ``cli_actions``.
"""

from __future__ import annotations

import argparse

COMMANDS = ("run", "validate", "derive")


def build_parser() -> argparse.ArgumentParser:
    """Construct the top-level CLI parser with ``run``, ``validate`` and ``derive``.

    Performs no I/O; only argument shapes are declared here.
    """
    p = argparse.ArgumentParser(
        prog="winpdh-exporter",
        description="Export Windows performance counters to Prometheus",
    )
    sub = p.add_subparsers(dest="cmd")

    run = sub.add_parser("run", help="collect counters and serve /metrics")
    run.add_argument("--config", "-c", default=None, help="config file (JSON or YAML); WINPDH_CONFIG_FILE if omitted")
    run.add_argument("--mock", action="store_true", help="serve the bundled mock counters instead of pdh.dll")
    run.add_argument("--host", dest="listen_host", default=None, help="listen address override")
    run.add_argument("--port", dest="listen_port", type=int, default=None, help="listen port override")

    validate = sub.add_parser("validate", help="parse a config file and print its counter sets")
    validate.add_argument("--config", "-c", default=None)
    validate.add_argument("--json", action="store_true", help="print the merged config as JSON")

    derive = sub.add_parser("derive", help="print the metric name and labels derived from a counter path")
    derive.add_argument("path", help="counter path, e.g. '\\\\HOST\\Processor(_Total)\\%% Processor Time'")
    derive.add_argument("--instance", default="", help="instance name reported by a wildcard read")

    return p


__all__ = ["build_parser", "COMMANDS"]
