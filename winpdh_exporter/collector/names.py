"""Counter path to metric identity conversion.

According to https://prometheus.io/docs/concepts/data_model/
    - Metric names must match ``[a-zA-Z_:][a-zA-Z0-9_:]*``
    - Label names must match ``[a-zA-Z_][a-zA-Z0-9_]*``
    - Label values may contain any Unicode characters

A counter path is either host-qualified,
``\\\\<host>\\<Category>(<Instance>)\\<Counter>``, or host-less,
``\\<Category>(<Instance>)\\<Counter>``. The counter becomes the metric
name; host, category and instance become labels.
"""
from __future__ import annotations

import re
from typing import Tuple

from ..base.errors import CollectorError, ErrorCode
from ..base.models import GaugeDescriptor
from ..config.defaults import COUNTER_HELP, DEFAULT_HOST, METRIC_NAMESPACE

PATH_SEPARATOR = "\\"
WILDCARD_INSTANCE = "*"

# Characters PDH commonly uses in counter and instance names.
_REPLACEMENTS = str.maketrans(
    {
        ".": "_",
        "-": "_",
        " ": "_",
        "/": "_",
        "%": "percent",
    }
)
_INVALID_CHARS = re.compile(r"[^a-zA-Z0-9_:]")


def normalize(text: str) -> str:
    """Replace the characters PDH names commonly contain with ``_``/``percent``."""
    return text.translate(_REPLACEMENTS)


def sanitize(text: str) -> str:
    """Strip every character outside ``[A-Za-z0-9_:]``."""
    return _INVALID_CHARS.sub("", text)


def split_path(path: str) -> Tuple[str, str, str]:
    """Split a counter path into ``(hostname, category segment, counter)``.

    Raises:
        CollectorError: ``DERIVATION`` when the path has neither 5 nor 3
            separator-delimited segments.
    """
    fields = path.split(PATH_SEPARATOR)
    if len(fields) == 5:
        return fields[2], fields[3], fields[4]
    if len(fields) == 3:
        return DEFAULT_HOST, fields[1], fields[2]
    raise CollectorError(
        ErrorCode.DERIVATION,
        f"unknown number of fields ({len(fields)}) in counter path",
        counter=path,
    )


def split_category(segment: str, instance: str) -> Tuple[str, str]:
    """Split ``Category(Instance)`` into category and effective instance.

    The parenthesized qualifier overrides ``instance`` unless it is the
    wildcard, in which case the sampled instance name is kept.
    """
    if "(" not in segment:
        return segment, instance
    category, _, rest = segment.partition("(")
    qualifier = rest[:-1] if rest.endswith(")") else rest
    if qualifier != WILDCARD_INSTANCE:
        instance = qualifier
    return category, instance


def derive_gauge(path: str, instance: str) -> GaugeDescriptor:
    """Derive the gauge identity for one sampled ``(path, instance)``.

    Example: ``\\\\HOST1\\Processor(_Total)\\% Processor Time`` becomes
    ``percent_Processor_Time`` with labels
    ``{hostname: HOST1, category: Processor, instance: _Total}``.
    """
    hostname, segment, counter = split_path(path)
    category, instance = split_category(segment, instance)
    return GaugeDescriptor(
        name=sanitize(normalize(counter)),
        help=COUNTER_HELP,
        namespace=METRIC_NAMESPACE,
        labels={
            "hostname": hostname,
            "category": sanitize(category),
            "instance": sanitize(normalize(instance)),
        },
    )


def metric_key(path: str, instance: str) -> str:
    """Key of the metric entry for a sampled instance of ``path``."""
    return path + instance


__all__ = [
    "PATH_SEPARATOR",
    "WILDCARD_INSTANCE",
    "normalize",
    "sanitize",
    "split_path",
    "split_category",
    "derive_gauge",
    "metric_key",
]
