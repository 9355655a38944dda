"""Errors parts package public surface.

Re-exports individual error taxonomy components for optional direct imports.
Prefer importing from `winpdh_exporter.base.errors` for the stable surface.
"""

from .error_code import ErrorCode
from .collector_error import AlreadyRegisteredError, CollectorError, PdhError, RegistrationError
from .classification import classify_exception, classify_status

__all__ = [
    "ErrorCode",
    "CollectorError",
    "PdhError",
    "AlreadyRegisteredError",
    "RegistrationError",
    "classify_exception",
    "classify_status",
]
