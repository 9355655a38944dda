"""
Normalized collector error codes (taxonomy).

Defines the `ErrorCode` enumeration used across the counter provider, the
collection engine and the registry layer. Values are lowercase snake_case and
are considered a stable public contract for logging.
"""
from __future__ import annotations

from enum import Enum


class ErrorCode(str, Enum):
    """Enumerated normalized error codes representing failure categories."""

    BAD_PATH = "bad_path"
    NOT_FOUND = "not_found"
    NO_DATA = "no_data"
    MORE_DATA = "more_data"
    INVALID_HANDLE = "invalid_handle"
    INVALID_ARGUMENT = "invalid_argument"
    UNAVAILABLE = "unavailable"
    DERIVATION = "derivation"
    ALREADY_REGISTERED = "already_registered"
    REGISTRATION = "registration"
    INVALID_STATE = "invalid_state"
    CONFIG = "config"
    UNKNOWN = "unknown"


__all__ = ["ErrorCode"]
