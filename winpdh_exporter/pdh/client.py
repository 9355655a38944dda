"""ctypes binding of the ``CounterProvider`` contract to ``pdh.dll``.

Purpose
-------
Implement the native side of collection: open a query, validate and add
English counter paths, collect ticks, and read formatted ``double`` arrays.

External dependencies
---------------------
Standard library ``ctypes`` only; ``pdh.dll`` ships with every Windows
installation. On other platforms constructing the provider raises
``CollectorError(UNAVAILABLE)`` so callers can fall back to ``--mock``.

Buffer protocol
---------------
``PdhGetFormattedCounterArrayW`` writes the item structs followed by the
instance-name strings they point at into one caller-owned byte buffer. A
probe with a zero-size buffer returns ``PDH_MORE_DATA`` and the required
byte count; the engine then calls again with that capacity.
"""

from __future__ import annotations

import ctypes
from ctypes import wintypes
from typing import Any, Optional

from ..base.errors import CollectorError, ErrorCode, PdhError
from ..base.models import ArrayReadResult, FormattedItem
from ..base.pdh_status import (
    ERROR_SUCCESS,
    PDH_CSTATUS_INVALID_DATA,
    PDH_INVALID_DATA,
    PDH_MORE_DATA,
    PDH_NO_DATA,
)

PDH_FMT_DOUBLE = 0x00000200
PDH_FMT_NOCAP100 = 0x00008000

_NO_DATA_STATUSES = frozenset((PDH_NO_DATA, PDH_CSTATUS_INVALID_DATA, PDH_INVALID_DATA))


class _FmtValueUnion(ctypes.Union):
    _fields_ = [
        ("longValue", wintypes.LONG),
        ("doubleValue", ctypes.c_double),
        ("largeValue", ctypes.c_longlong),
        ("AnsiStringValue", wintypes.LPCSTR),
        ("WideStringValue", wintypes.LPCWSTR),
    ]


class PDH_FMT_COUNTERVALUE(ctypes.Structure):
    _anonymous_ = ("u",)
    _fields_ = [("CStatus", wintypes.DWORD), ("u", _FmtValueUnion)]


class PDH_FMT_COUNTERVALUE_ITEM_W(ctypes.Structure):
    _fields_ = [("szName", wintypes.LPWSTR), ("FmtValue", PDH_FMT_COUNTERVALUE)]


def _load_pdh() -> Any:
    windll = getattr(ctypes, "windll", None)
    if windll is None:
        raise CollectorError(ErrorCode.UNAVAILABLE, "pdh.dll is only available on Windows")
    try:
        return windll.pdh
    except OSError as exc:
        raise CollectorError(ErrorCode.UNAVAILABLE, f"failed to load pdh.dll: {exc}") from exc


def _bind(dll: Any) -> Any:
    """Declare argument/return types so handles survive on 64-bit Python."""
    status = wintypes.DWORD
    dll.PdhOpenQueryW.argtypes = [wintypes.LPCWSTR, ctypes.c_size_t, ctypes.POINTER(wintypes.HANDLE)]
    dll.PdhOpenQueryW.restype = status
    dll.PdhValidatePathW.argtypes = [wintypes.LPCWSTR]
    dll.PdhValidatePathW.restype = status
    dll.PdhAddEnglishCounterW.argtypes = [
        wintypes.HANDLE,
        wintypes.LPCWSTR,
        ctypes.c_size_t,
        ctypes.POINTER(wintypes.HANDLE),
    ]
    dll.PdhAddEnglishCounterW.restype = status
    dll.PdhCollectQueryData.argtypes = [wintypes.HANDLE]
    dll.PdhCollectQueryData.restype = status
    dll.PdhGetFormattedCounterArrayW.argtypes = [
        wintypes.HANDLE,
        wintypes.DWORD,
        ctypes.POINTER(wintypes.DWORD),
        ctypes.POINTER(wintypes.DWORD),
        ctypes.c_void_p,
    ]
    dll.PdhGetFormattedCounterArrayW.restype = status
    dll.PdhCloseQuery.argtypes = [wintypes.HANDLE]
    dll.PdhCloseQuery.restype = status
    return dll


class PdhCounterProvider:
    """``CounterProvider`` backed by the Windows Performance Data Helper."""

    def __init__(self, dll: Optional[Any] = None, *, fmt: int = PDH_FMT_DOUBLE | PDH_FMT_NOCAP100) -> None:
        self._dll = _bind(dll if dll is not None else _load_pdh())
        self._fmt = fmt

    def open_query(self, host: str) -> wintypes.HANDLE:
        query = wintypes.HANDLE()
        status = self._dll.PdhOpenQueryW(None, 0, ctypes.byref(query))
        if status != ERROR_SUCCESS:
            raise PdhError(status, "failed PdhOpenQuery", host=host)
        return query

    def validate_path(self, path: str) -> None:
        status = self._dll.PdhValidatePathW(path)
        if status != ERROR_SUCCESS:
            raise PdhError(status, "failed PdhValidatePath", counter=path)

    def add_counter(self, query: wintypes.HANDLE, path: str) -> wintypes.HANDLE:
        counter = wintypes.HANDLE()
        status = self._dll.PdhAddEnglishCounterW(query, path, 0, ctypes.byref(counter))
        if status != ERROR_SUCCESS:
            raise PdhError(status, "failed PdhAddEnglishCounter", counter=path)
        return counter

    def collect(self, query: wintypes.HANDLE) -> None:
        status = self._dll.PdhCollectQueryData(query)
        if status != ERROR_SUCCESS:
            raise PdhError(status, "failed PdhCollectQueryData")

    def read_formatted_array(self, counter: wintypes.HANDLE, capacity: int) -> ArrayReadResult:
        size = wintypes.DWORD(capacity)
        count = wintypes.DWORD(0)
        buf = ctypes.create_string_buffer(capacity) if capacity > 0 else None
        status = self._dll.PdhGetFormattedCounterArrayW(
            counter, self._fmt, ctypes.byref(size), ctypes.byref(count), buf
        )
        if status == PDH_MORE_DATA:
            return ArrayReadResult.more_data(size.value)
        if status in _NO_DATA_STATUSES:
            return ArrayReadResult.no_data(status)
        if status != ERROR_SUCCESS:
            return ArrayReadResult.error(status)
        if buf is None or count.value == 0:
            return ArrayReadResult.ok(())
        array = ctypes.cast(buf, ctypes.POINTER(PDH_FMT_COUNTERVALUE_ITEM_W * count.value)).contents
        return ArrayReadResult.ok(
            FormattedItem(item.szName or "", item.FmtValue.doubleValue) for item in array
        )

    def close_query(self, query: wintypes.HANDLE) -> None:
        status = self._dll.PdhCloseQuery(query)
        if status != ERROR_SUCCESS:
            raise PdhError(status, "failed PdhCloseQuery")


__all__ = ["PdhCounterProvider", "PDH_FMT_DOUBLE", "PDH_FMT_NOCAP100"]
