"""Native PDH status codes consumed by the collector.

Values mirror ``pdhmsg.h``. They live in the base layer so error
classification and the mock provider can share them without importing the
ctypes binding.
"""
from __future__ import annotations

ERROR_SUCCESS = 0x00000000

PDH_CSTATUS_NO_MACHINE = 0x800007D0
PDH_CSTATUS_NO_INSTANCE = 0x800007D1
PDH_MORE_DATA = 0x800007D2
PDH_NO_DATA = 0x800007D5

PDH_CSTATUS_NO_OBJECT = 0xC0000BB8
PDH_CSTATUS_NO_COUNTER = 0xC0000BB9
PDH_CSTATUS_INVALID_DATA = 0xC0000BBA
PDH_INVALID_HANDLE = 0xC0000BBC
PDH_INVALID_ARGUMENT = 0xC0000BBD
PDH_CSTATUS_BAD_COUNTERNAME = 0xC0000BC0
PDH_INVALID_DATA = 0xC0000BC6


def format_status(status: int) -> str:
    """Render a status the way PDH documents it (unsigned hex)."""
    return f"{status & 0xFFFFFFFF:x}"


__all__ = [
    "ERROR_SUCCESS",
    "PDH_CSTATUS_NO_MACHINE",
    "PDH_CSTATUS_NO_INSTANCE",
    "PDH_MORE_DATA",
    "PDH_NO_DATA",
    "PDH_CSTATUS_NO_OBJECT",
    "PDH_CSTATUS_NO_COUNTER",
    "PDH_CSTATUS_INVALID_DATA",
    "PDH_INVALID_HANDLE",
    "PDH_INVALID_ARGUMENT",
    "PDH_CSTATUS_BAD_COUNTERNAME",
    "PDH_INVALID_DATA",
    "format_status",
]
