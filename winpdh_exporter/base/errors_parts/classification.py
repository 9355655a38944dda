"""
Error classification helpers mapping native PDH statuses and exceptions to
normalized ErrorCode values.
"""
from __future__ import annotations

from typing import Dict

from .. import pdh_status as st
from .error_code import ErrorCode


_STATUS_MAP: Dict[int, ErrorCode] = {
    st.PDH_CSTATUS_BAD_COUNTERNAME: ErrorCode.BAD_PATH,
    st.PDH_CSTATUS_NO_OBJECT: ErrorCode.NOT_FOUND,
    st.PDH_CSTATUS_NO_COUNTER: ErrorCode.NOT_FOUND,
    st.PDH_CSTATUS_NO_INSTANCE: ErrorCode.NOT_FOUND,
    st.PDH_CSTATUS_NO_MACHINE: ErrorCode.NOT_FOUND,
    st.PDH_NO_DATA: ErrorCode.NO_DATA,
    st.PDH_CSTATUS_INVALID_DATA: ErrorCode.NO_DATA,
    st.PDH_INVALID_DATA: ErrorCode.NO_DATA,
    st.PDH_MORE_DATA: ErrorCode.MORE_DATA,
    st.PDH_INVALID_HANDLE: ErrorCode.INVALID_HANDLE,
    st.PDH_INVALID_ARGUMENT: ErrorCode.INVALID_ARGUMENT,
}


def classify_status(status: int) -> ErrorCode:
    """Classify a native PDH status into a normalized :class:`ErrorCode`.

    Unknown statuses map to ``UNKNOWN``; the raw value stays on the error.
    """
    return _STATUS_MAP.get(status & 0xFFFFFFFF, ErrorCode.UNKNOWN)


def classify_exception(exc: Exception) -> ErrorCode:
    """Classify an exception into a normalized :class:`ErrorCode`.

    Precedence:
        1. CollectorError passthrough.
        2. ``OSError`` from loading or calling the native library.
        3. ``UNKNOWN`` fallback.
    """
    from .collector_error import CollectorError

    if isinstance(exc, CollectorError):
        return exc.code
    if isinstance(exc, OSError):
        return ErrorCode.UNAVAILABLE
    return ErrorCode.UNKNOWN


__all__ = ["classify_status", "classify_exception", "_STATUS_MAP"]
