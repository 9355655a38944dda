"""Unified collector error taxonomy public surface.

This module re-exports the implementations under
``winpdh_exporter.base.errors_parts`` to maintain a stable import path.
"""

from .errors_parts.error_code import ErrorCode
from .errors_parts.collector_error import (
    AlreadyRegisteredError,
    CollectorError,
    PdhError,
    RegistrationError,
)
from .errors_parts.classification import classify_exception, classify_status

__all__ = [
    "ErrorCode",
    "CollectorError",
    "PdhError",
    "AlreadyRegisteredError",
    "RegistrationError",
    "classify_exception",
    "classify_status",
]
