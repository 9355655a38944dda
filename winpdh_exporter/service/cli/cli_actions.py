"""CLI action handlers.

Purpose
-------
Subcommand handlers for the exporter CLI, kept apart from parsing so they
can be called directly from tests. No top-level side effects.

Error Semantics
---------------
Configuration and derivation failures are printed as one JSON object on
stderr and turned into exit code ``2``; nothing is raised to the caller.
"""

from __future__ import annotations

import argparse
import json
import sys
from typing import Any, Dict, Optional, TextIO

from ...base.errors import CollectorError
from ...collector.names import derive_gauge
from ...config import load_config

EXIT_OK = 0
EXIT_ERROR = 2


def _emit_error(exc: CollectorError, stream: TextIO) -> int:
    payload: Dict[str, Any] = {"error": exc.code.value, "message": exc.message}
    if exc.counter:
        payload["counter"] = exc.counter
    print(json.dumps(payload), file=stream)
    return EXIT_ERROR


def handle_run(args: argparse.Namespace) -> int:
    """Load config and serve until interrupted."""
    from ..server import serve

    overrides = {"listen_host": args.listen_host, "listen_port": args.listen_port}
    try:
        config = load_config(args.config, overrides=overrides)
    except CollectorError as exc:
        return _emit_error(exc, sys.stderr)
    serve(config, mock=args.mock, config_path=args.config)
    return EXIT_OK


def handle_validate(args: argparse.Namespace, out: Optional[TextIO] = None) -> int:
    """Print the counter sets a config file defines."""
    out = out if out is not None else sys.stdout
    try:
        config = load_config(args.config)
    except CollectorError as exc:
        return _emit_error(exc, sys.stderr)
    if args.json:
        print(config.model_dump_json(indent=2), file=out)
        return EXIT_OK
    print(f"listen {config.listen_host}:{config.listen_port}", file=out)
    for cs in config.to_counter_sets():
        print(f"{cs.host} every {cs.interval:g}s ({len(cs.counters)} counters)", file=out)
        for spec in cs.counters:
            print(f"  {spec.qualified(cs.host)}", file=out)
    return EXIT_OK


def handle_derive(args: argparse.Namespace, out: Optional[TextIO] = None) -> int:
    """Print the gauge name and labels for one counter path."""
    out = out if out is not None else sys.stdout
    try:
        descriptor = derive_gauge(args.path, args.instance)
    except CollectorError as exc:
        return _emit_error(exc, sys.stderr)
    print(json.dumps({"name": descriptor.full_name, "labels": descriptor.labels}), file=out)
    return EXIT_OK


__all__ = ["handle_run", "handle_validate", "handle_derive", "EXIT_OK", "EXIT_ERROR"]
