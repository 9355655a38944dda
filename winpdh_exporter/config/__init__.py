"""Unified configuration layer for the exporter.

Merge order (later wins)
------------------------
1. Built-in defaults (:mod:`winpdh_exporter.config.defaults`)
2. Config file: the ``path`` argument, else ``WINPDH_CONFIG_FILE``. JSON is
   tried first, then YAML.
3. Environment variables: ``WINPDH_LISTEN_HOST``, ``WINPDH_LISTEN_PORT``,
   ``WINPDH_LOG_LEVEL``.
4. In-code overrides passed to :func:`load_config`.

Example file::

    listen_port: 9701
    log_level: INFO
    counter_sets:
      - host: localhost
        interval: 15
        counters:
          - \\Processor(*)\\% Processor Time
          - \\LogicalDisk(*)\\Free Megabytes

Public API
----------
* load_config(path=None, overrides=None) -> ExporterConfig
* config_file_from_env() -> str | None
"""
from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import ValidationError

from ..base.errors import CollectorError, ErrorCode
from .defaults import DEFAULT_LISTEN_HOST, DEFAULT_LISTEN_PORT, DEFAULT_LOG_LEVEL
from .models import CounterSetConfig, ExporterConfig

CONFIG_FILE_ENV = "WINPDH_CONFIG_FILE"

ENV_FIELD_MAP = {
    "listen_host": "WINPDH_LISTEN_HOST",
    "listen_port": "WINPDH_LISTEN_PORT",
    "log_level": "WINPDH_LOG_LEVEL",
}

DEFAULTS: Dict[str, Any] = {
    "listen_host": DEFAULT_LISTEN_HOST,
    "listen_port": DEFAULT_LISTEN_PORT,
    "log_level": DEFAULT_LOG_LEVEL,
}


def config_file_from_env() -> Optional[str]:
    return os.getenv(CONFIG_FILE_ENV) or None


def _parse_text(text: str, source: str) -> Dict[str, Any]:
    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise CollectorError(ErrorCode.CONFIG, f"{source}: not valid JSON or YAML: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise CollectorError(ErrorCode.CONFIG, f"{source}: top level must be a mapping")
    return data


def _load_file(path: str) -> Dict[str, Any]:
    p = Path(path).expanduser()
    try:
        text = p.read_text(encoding="utf-8")
    except OSError as exc:
        raise CollectorError(ErrorCode.CONFIG, f"cannot read config file {p}: {exc}") from exc
    return _parse_text(text, str(p))


def _env_overrides() -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    for field, var in ENV_FIELD_MAP.items():
        val = os.getenv(var)
        if val is not None and val.strip():
            out[field] = val.strip()
    return out


def load_config(path: Optional[str] = None, overrides: Optional[Dict[str, Any]] = None) -> ExporterConfig:
    """Return the merged, validated exporter configuration.

    Raises:
        CollectorError: ``ErrorCode.CONFIG`` when the file cannot be read or
            parsed, or the merged values fail validation.
    """
    cfg: Dict[str, Any] = dict(DEFAULTS)

    source = path or config_file_from_env()
    if source:
        cfg |= _load_file(source)

    cfg |= _env_overrides()

    if overrides:
        cfg |= {k: v for k, v in overrides.items() if v is not None}

    try:
        return ExporterConfig.model_validate(cfg)
    except ValidationError as exc:
        raise CollectorError(ErrorCode.CONFIG, f"invalid configuration: {exc}") from exc


__all__ = [
    "CONFIG_FILE_ENV",
    "CounterSetConfig",
    "ExporterConfig",
    "config_file_from_env",
    "load_config",
]
