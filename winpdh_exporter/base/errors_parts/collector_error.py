"""
Structured collector error exception types.

``CollectorError`` carries a normalized `ErrorCode` plus the host, counter
path and native status involved so log records and callers see the same
context. The subclasses single out the conditions the engine branches on.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..pdh_status import format_status
from .error_code import ErrorCode


@dataclass
class CollectorError(Exception):
    """Represents a structured collector error with a normalized error code.

    Attributes:
        code: Normalized :class:`ErrorCode` classification for the failure.
        message: Human-readable error message suitable for logging.
        host: Host the counter set targets, when known.
        counter: Fully-qualified counter path, when known.
        status: Native PDH status code, when the failure came from ``pdh.dll``.
    """

    code: ErrorCode
    message: str
    host: Optional[str] = None
    counter: Optional[str] = None
    status: Optional[int] = None

    def __str__(self) -> str:  # pragma: no cover - trivial
        where = self.counter or self.host or "-"
        text = f"{where} {self.code.value}: {self.message}"
        if self.status is not None:
            text += f" (PDH status {format_status(self.status)})"
        return text


class PdhError(CollectorError):
    """A non-success status returned by the native counter provider."""

    def __init__(
        self,
        status: int,
        message: str,
        *,
        host: Optional[str] = None,
        counter: Optional[str] = None,
    ) -> None:
        from .classification import classify_status

        super().__init__(classify_status(status), message, host=host, counter=counter, status=status)


class AlreadyRegisteredError(CollectorError):
    """The metric identity is already held in the registry.

    Raised for a benign race with a previous cycle or for the same identity
    published by another counter set; never fatal to collection.
    """

    def __init__(self, message: str, *, metric: Optional[str] = None, host: Optional[str] = None) -> None:
        super().__init__(ErrorCode.ALREADY_REGISTERED, message, host=host)
        self.metric = metric


class RegistrationError(CollectorError):
    """Any registry failure other than an already-registered conflict."""

    def __init__(self, message: str, *, metric: Optional[str] = None, host: Optional[str] = None) -> None:
        super().__init__(ErrorCode.REGISTRATION, message, host=host)
        self.metric = metric


__all__ = ["CollectorError", "PdhError", "AlreadyRegisteredError", "RegistrationError"]
